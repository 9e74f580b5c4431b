"""
Core dependencies for route protection and ownership checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from headshots.database.supabase_client import get_auth_client_factory, get_supabase
from headshots.modules.auth.service import AuthService
from supabase import Client
from typing import Callable, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error disabled so a missing header is a 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    auth_client_factory: Callable[[], Client] = Depends(get_auth_client_factory)
) -> AuthService:
    return AuthService(supabase, auth_client_factory)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def check_model_access(model_id: str, user_data: dict, supabase: Client) -> Dict[str, Any]:
    """Return the models row if it belongs to the caller. Raises 404/403 otherwise."""
    result = supabase.table("models")\
        .select("*")\
        .eq("id", model_id)\
        .maybe_single()\
        .execute()
    if not result or not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Model not found"
        )
    model = result.data
    if model.get("user_id") != user_data["id"]:
        logger.warning(f"User {user_data['id']} attempted to access model {model_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized model access"
        )
    return model


def check_tune_access(tune_id: str, user_data: dict, supabase: Client) -> Dict[str, Any]:
    """
    Return the ledger row for an external tune id if it belongs to the caller.

    Both user_tunes and models are consulted; a row for the tune owned by
    anyone else in either table is a 403.
    """
    tunes = supabase.table("user_tunes")\
        .select("*")\
        .eq("tune_id", tune_id)\
        .execute()
    models = supabase.table("models")\
        .select("*")\
        .eq("modelid", tune_id)\
        .execute()
    rows = (tunes.data or []) + (models.data or [])
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tune not found"
        )
    if any(row.get("user_id") != user_data["id"] for row in rows):
        logger.warning(f"User {user_data['id']} attempted to access tune {tune_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized model access"
        )
    if tunes.data:
        return tunes.data[0]
    # Only a models row: report it in ledger wording
    model = models.data[0]
    ledger_status = {"completed": "complete", "failed": "error"}.get(model.get("status"), model.get("status"))
    return {"tune_id": tune_id, "user_id": model["user_id"], "status": ledger_status}
