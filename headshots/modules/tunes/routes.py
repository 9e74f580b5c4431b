from fastapi import APIRouter, Depends, Request
from headshots.config.settings import settings
from headshots.database.supabase_client import get_supabase
from headshots.modules.astria.routes import get_astria_service
from headshots.modules.astria.service import AstriaService
from headshots.modules.notifications.routes import get_notification_service
from headshots.modules.notifications.service import NotificationService
from headshots.modules.training.poller import start_training_poll
from headshots.modules.tunes.schemas import (
    ModelResponse, ImageResponse, TrainRequest, TrainResponse,
    GenerateRequest, GenerateResponse, OverviewResponse
)
from headshots.modules.tunes.service import TuneService
from headshots.core.dependencies import get_current_user_id, check_model_access
from headshots.core.rate_limit import limiter
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/tunes", tags=["tunes"])
images_router = APIRouter(prefix="/images", tags=["images"])


def get_tune_service(supabase: Client = Depends(get_supabase)) -> TuneService:
    return TuneService(supabase)


@router.get("", response_model=List[ModelResponse])
async def list_tunes(
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service)
):
    return service.list_models(user_data["id"])


@router.get("/overview", response_model=OverviewResponse)
async def get_overview(
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service)
):
    """Counts for the dashboard overview cards"""
    return service.overview(user_data["id"])


@router.post("/train", response_model=TrainResponse, status_code=201)
async def train_tune(
    request: TrainRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service),
    astria: AstriaService = Depends(get_astria_service),
    notifier: NotificationService = Depends(get_notification_service)
):
    """Start training on at least 10 uploaded images and begin polling its status"""
    model, outcome = await service.start_training(user_data["id"], request, astria)
    polling = False
    if settings.training_poll_enabled:
        start_training_poll(astria, model.modelid, user_data, notifier)
        polling = True
    return TrainResponse(model=model, tune_id=model.modelid, simulated=outcome.simulated, polling=polling)


@router.get("/{model_id}", response_model=ModelResponse)
async def get_tune(
    model_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
):
    return ModelResponse(**check_model_access(model_id, user_data, supabase))


@router.get("/{model_id}/images", response_model=List[ImageResponse])
async def list_tune_images(
    model_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service),
    supabase: Client = Depends(get_supabase)
):
    """Gallery for one model"""
    check_model_access(model_id, user_data, supabase)
    return service.list_model_images(model_id)


@router.post("/{model_id}/generate", response_model=GenerateResponse)
@limiter.limit(settings.generation_rate_limit)
async def generate_headshots(
    request: Request,
    model_id: str,
    generate_data: GenerateRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service),
    astria: AstriaService = Depends(get_astria_service)
):
    """Generate headshots from a trained model"""
    return await service.generate(user_data, model_id, generate_data, astria)


@images_router.get("", response_model=List[ImageResponse])
async def list_images(
    user_data: Dict = Depends(get_current_user_id),
    service: TuneService = Depends(get_tune_service)
):
    """Every generated image across the user's models"""
    return service.list_user_images(user_data["id"])
