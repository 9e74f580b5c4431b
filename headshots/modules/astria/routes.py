import logging
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from headshots.config.settings import settings
from headshots.database.supabase_client import get_supabase
from headshots.modules.astria.client import AstriaClient
from headshots.modules.astria.media import encode_data_url
from headshots.modules.astria.schemas import UploadImageRequest, UploadBatchResponse
from headshots.modules.astria.service import AstriaService
from headshots.core.dependencies import get_current_user_id
from headshots.core.validation import validate_upload_batch
from supabase import Client
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/astria", tags=["astria"])


def get_astria_client() -> AstriaClient:
    if not settings.astria_api_key:
        logger.error("ASTRIA_API_KEY not configured")
        raise HTTPException(status_code=500, detail="API key not configured")
    return AstriaClient(settings.astria_api_key, settings.astria_api_base_url)


def get_astria_service(
    supabase: Client = Depends(get_supabase),
    client: AstriaClient = Depends(get_astria_client)
) -> AstriaService:
    return AstriaService(supabase, client)


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    return body


@router.post("")
async def dispatch_action(
    request: Request,
    user_data: Dict = Depends(get_current_user_id),
    service: AstriaService = Depends(get_astria_service)
):
    """Run the action named in the body: upload-images, create-tune, check-status, generate-headshots"""
    body = await _read_body(request)
    outcome = await service.dispatch(body.get("action"), user_data["id"], body)
    return outcome.to_response()


@router.post("/uploads", response_model=UploadBatchResponse)
async def upload_images(
    files: Optional[List[UploadFile]] = File(None),
    user_data: Dict = Depends(get_current_user_id),
    service: AstriaService = Depends(get_astria_service)
):
    """Upload a batch of selfies; each goes through the upload-images action"""
    files = files or []
    validate_upload_batch(files)
    image_ids = []
    simulated = 0
    for upload in files:
        content = await upload.read()
        content_type = upload.content_type or "image/jpeg"
        outcome = await service.upload_image(UploadImageRequest(
            image=encode_data_url(content, content_type),
            filename=upload.filename,
            content_type=content_type,
        ))
        image_ids.append(outcome.data["id"])
        if outcome.simulated:
            simulated += 1
    logger.info(f"User {user_data['id']} uploaded {len(image_ids)} image(s), {simulated} simulated")
    return UploadBatchResponse(image_ids=image_ids, simulated_count=simulated)


@router.post("/{action}")
async def dispatch_path_action(
    action: str,
    request: Request,
    user_data: Dict = Depends(get_current_user_id),
    service: AstriaService = Depends(get_astria_service)
):
    """Same as the body-routed form, with the action taken from the path"""
    body = await _read_body(request)
    outcome = await service.dispatch(action, user_data["id"], body)
    return outcome.to_response()
