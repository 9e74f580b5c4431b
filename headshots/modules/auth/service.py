import logging
from supabase import Client
from headshots.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from headshots.core.session_store import SessionStore, session_store
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        supabase: Client,
        auth_client_factory: Callable[[], Client],
        store: Optional[SessionStore] = None
    ):
        # supabase verifies tokens; sign-up and sign-in get a fresh client each
        self.supabase = supabase
        self.auth_client_factory = auth_client_factory
        self.store = store or session_store

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {}
            if register_data.first_name:
                user_metadata["first_name"] = register_data.first_name
            if register_data.last_name:
                user_metadata["last_name"] = register_data.last_name

            auth_response = self.auth_client_factory().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.auth_client_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Served from the session store while fresh."""
        try:
            cached = self.store.get(token)
            if cached is not None:
                return cached
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            self.store.put(token, user_data)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Authentication error: {e}")
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Drop the cached session and sign out of Supabase Auth"""
        self.store.invalidate(token)
        try:
            # Revokes the refresh tokens; the access JWT still runs to its expiry
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Supabase sign out failed: {e}")
            return False
