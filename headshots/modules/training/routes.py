from fastapi import APIRouter, Depends, HTTPException
from headshots.database.supabase_client import get_supabase
from headshots.modules.astria.routes import get_astria_service
from headshots.modules.astria.service import AstriaService, TUNE_COMPLETE, TUNE_TRAINING
from headshots.modules.notifications.routes import get_notification_service
from headshots.modules.notifications.service import NotificationService
from headshots.modules.training import registry
from headshots.modules.training.poller import PROGRESS_STARTED, start_training_poll
from headshots.modules.training.schemas import TrainingProgress
from headshots.core.dependencies import get_current_user_id, check_tune_access
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/training", tags=["training"])


@router.get("/{tune_id}", response_model=TrainingProgress)
async def get_training_progress(
    tune_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
):
    """Progress of the poll for a tune; falls back to the ledger status when no poll ran in this process"""
    tune = check_tune_access(tune_id, user_data, supabase)
    progress = registry.get_progress(tune_id)
    if progress is not None:
        return progress
    status = tune.get("status") or TUNE_TRAINING
    if status == TUNE_COMPLETE:
        value = 100
    elif status == TUNE_TRAINING:
        value = PROGRESS_STARTED
    else:
        value = 0
    return TrainingProgress(tune_id=tune_id, user_id=user_data["id"], status=status, progress=value)


@router.post("/{tune_id}/watch", response_model=TrainingProgress, status_code=202)
async def watch_training(
    tune_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    service: AstriaService = Depends(get_astria_service),
    notifier: NotificationService = Depends(get_notification_service)
):
    """(Re)start polling for a tune, e.g. after a restart dropped the in-process poll"""
    tune = check_tune_access(tune_id, user_data, supabase)
    if tune.get("status") == TUNE_COMPLETE:
        raise HTTPException(status_code=400, detail="Training already complete")
    return start_training_poll(service, tune_id, user_data, notifier)


@router.delete("/{tune_id}", status_code=204)
async def cancel_training_poll(
    tune_id: str,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
):
    """Stop polling a tune. Training itself continues at Astria."""
    check_tune_access(tune_id, user_data, supabase)
    if not registry.cancel(tune_id):
        raise HTTPException(status_code=404, detail="No training poll running for this tune")
    return None
