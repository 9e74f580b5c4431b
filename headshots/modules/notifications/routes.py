from fastapi import APIRouter, Depends
from headshots.modules.notifications.schemas import TrainingNotificationRequest
from headshots.modules.notifications.service import NotificationService
from headshots.core.dependencies import get_current_user_id
from typing import Dict

router = APIRouter(tags=["notifications"])


def get_notification_service() -> NotificationService:
    return NotificationService()


@router.post("/send-training-notification")
async def send_training_notification(
    request: TrainingNotificationRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Send the 'model ready' email"""
    return await service.send_training_notification(request.email, request.tune_id, request.user_name)
