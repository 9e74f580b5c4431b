"""
Training status poller

Replaces the browser's setInterval loop: one asyncio task per tune calls
check-status every interval, moves a heuristic progress figure, and stops
on a terminal status. Checks are awaited one after another, so a slow
Astria response delays the next tick instead of overlapping with it.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from fastapi import HTTPException

from headshots.config.settings import settings
from headshots.modules.astria.schemas import CheckStatusRequest
from headshots.modules.astria.service import AstriaService, TUNE_COMPLETE, TUNE_ERROR, TUNE_TRAINING
from headshots.modules.notifications.service import NotificationService
from headshots.modules.training import registry
from headshots.modules.training.schemas import TrainingProgress

logger = logging.getLogger(__name__)

PROGRESS_STARTED = 15
PROGRESS_STEP = 5
PROGRESS_TRAINING_CAP = 70
FAILED_STATUSES = (TUNE_ERROR, "failed")


def advance(progress: TrainingProgress, status: str) -> TrainingProgress:
    """Apply one status reading to the progress snapshot"""
    progress.status = status
    if status == TUNE_TRAINING:
        progress.progress = min(progress.progress + PROGRESS_STEP, PROGRESS_TRAINING_CAP)
    elif status == TUNE_COMPLETE:
        progress.progress = 100
    elif status in FAILED_STATUSES:
        progress.progress = 0
    return progress


def is_finished(status: str) -> bool:
    return status == TUNE_COMPLETE or status in FAILED_STATUSES


class TrainingPoller:
    def __init__(
        self,
        service: AstriaService,
        notifier: Optional[NotificationService] = None,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.service = service
        self.notifier = notifier
        self.interval = settings.training_poll_interval_seconds if interval is None else interval
        self.max_attempts = settings.training_poll_max_attempts if max_attempts is None else max_attempts
        self._sleep = sleep

    async def run(
        self,
        progress: TrainingProgress,
        email: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> TrainingProgress:
        progress.active = True
        progress.started_at = progress.started_at or datetime.now(timezone.utc)
        try:
            while True:
                await self._sleep(self.interval)
                progress.attempts += 1
                try:
                    outcome = await self.service.check_status(
                        progress.user_id, CheckStatusRequest(tune_id=progress.tune_id)
                    )
                except Exception as e:
                    logger.error(f"Status check for tune {progress.tune_id} failed: {e}")
                else:
                    progress.simulated = outcome.simulated
                    advance(progress, outcome.data["status"])
                    logger.info(
                        f"Tune {progress.tune_id}: {progress.status} ({progress.progress}%) "
                        f"after {progress.attempts} check(s)"
                    )
                if is_finished(progress.status):
                    break
                if self.max_attempts and progress.attempts >= self.max_attempts:
                    logger.warning(f"Giving up on tune {progress.tune_id} after {progress.attempts} check(s)")
                    break
        finally:
            progress.active = False
            progress.finished_at = datetime.now(timezone.utc)
            registry.unregister(progress.tune_id)

        if progress.status == TUNE_COMPLETE and email and self.notifier is not None:
            try:
                await self.notifier.send_training_notification(email, progress.tune_id, user_name)
                progress.notified = True
            except HTTPException as e:
                logger.error(f"Training notification for tune {progress.tune_id} not sent: {e.detail}")
        return progress


def start_training_poll(
    service: AstriaService,
    tune_id: str,
    user_data: dict,
    notifier: Optional[NotificationService] = None,
) -> TrainingProgress:
    """Schedule a poll task on the running loop and register it. Reuses a poll already running for the tune."""
    existing = registry.get_progress(tune_id)
    if existing is not None and registry.is_running(tune_id):
        return existing

    progress = TrainingProgress(
        tune_id=tune_id,
        user_id=user_data["id"],
        status=TUNE_TRAINING,
        progress=PROGRESS_STARTED,
    )
    metadata = user_data.get("user_metadata") or {}
    poller = TrainingPoller(service, notifier)
    task = asyncio.get_running_loop().create_task(
        poller.run(progress, email=user_data.get("email"), user_name=metadata.get("first_name"))
    )
    registry.register(progress, task)
    logger.info(f"Started training poll for tune {tune_id}")
    return progress
