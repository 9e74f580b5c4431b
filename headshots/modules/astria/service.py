import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError
from supabase import Client

from headshots.config.settings import settings
from headshots.core.dependencies import check_tune_access
from headshots.core.outcome import Outcome
from headshots.modules.astria.client import AstriaAPIError, AstriaClient
from headshots.modules.astria.media import decode_data_url, extension_for
from headshots.modules.astria.prompts import build_prompt_text, extract_images, placeholder_images
from headshots.modules.astria.schemas import (
    UploadImageRequest, CreateTuneRequest, CheckStatusRequest, GenerateHeadshotsRequest
)

logger = logging.getLogger(__name__)

TUNE_TRAINING = "training"
TUNE_COMPLETE = "complete"
TUNE_ERROR = "error"
TERMINAL_TUNE_STATUSES = (TUNE_COMPLETE, TUNE_ERROR)

# Astria wording -> ledger wording
_STATUS_ALIASES = {"completed": TUNE_COMPLETE, "succeeded": TUNE_COMPLETE, "failed": TUNE_ERROR}
# ledger wording -> models table wording
MODEL_STATUS_FOR_TUNE = {TUNE_COMPLETE: "completed", TUNE_ERROR: "failed"}

_LOCAL_TUNE_ID = re.compile(r"^tune-(\d+)$")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_simulated_tune_id(tune_id: str) -> bool:
    return bool(_LOCAL_TUNE_ID.match(tune_id)) or "mock" in tune_id


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def tune_status(result: Dict[str, Any]) -> str:
    status = result.get("status")
    if status:
        status = str(status).lower()
        return _STATUS_ALIASES.get(status, status)
    if result.get("trained_at"):
        return TUNE_COMPLETE
    return TUNE_TRAINING


class AstriaService:
    """Routes the four Astria actions and keeps the user_tunes / user_headshots ledger."""

    def __init__(self, supabase: Client, client: AstriaClient, clock: Optional[Clock] = None):
        self.supabase = supabase
        self.client = client
        self.clock = clock or utcnow

    def _millis(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def _local_id(self, prefix: str) -> str:
        return f"{prefix}-{self._millis()}-{uuid.uuid4().hex[:8]}"

    async def dispatch(self, action: Optional[str], user_id: str, payload: Dict[str, Any]) -> Outcome:
        handlers: Dict[str, Tuple[Type[BaseModel], Callable[..., Awaitable[Outcome]]]] = {
            "upload-images": (UploadImageRequest, lambda req: self.upload_image(req)),
            "create-tune": (CreateTuneRequest, lambda req: self.create_tune(user_id, req)),
            "check-status": (CheckStatusRequest, lambda req: self.check_status(user_id, req)),
            "generate-headshots": (GenerateHeadshotsRequest, lambda req: self.generate_headshots(user_id, req)),
        }
        if action not in handlers:
            logger.error(f"Invalid action requested: {action}")
            raise HTTPException(status_code=400, detail=f"Invalid action: {action}")
        schema, handler = handlers[action]
        try:
            request = schema.model_validate(payload)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "body"
            raise HTTPException(status_code=400, detail=f"Invalid {field}: {error['msg']}")
        tune_id = getattr(request, "tune_id", None)
        if tune_id and action in ("check-status", "generate-headshots"):
            check_tune_access(tune_id, {"id": user_id}, self.supabase)
        logger.info(f"Astria action {action} for user {user_id}")
        return await handler(request)

    async def upload_image(self, request: UploadImageRequest) -> Outcome:
        """Decode the browser payload and forward it to Astria as multipart form data"""
        try:
            content, declared_type = decode_data_url(request.image)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Failed to process image data: {e}")
        if not content:
            raise HTTPException(status_code=400, detail="Image data conversion failed")

        content_type = request.content_type or declared_type or "image/jpeg"
        filename = request.filename or f"user_upload_{self._millis()}.{extension_for(content_type)}"
        logger.info(f"Uploading {filename} ({content_type}, {len(content)} bytes)")

        try:
            result = await self.client.upload_image(
                content, filename, content_type, timeout=settings.astria_upload_timeout
            )
        except AstriaAPIError as e:
            logger.warning(f"Image upload rejected, using placeholder id: {e}")
            return Outcome.fabricated({"id": self._local_id("mock")}, reason=f"Astria returned {e.status_code}")
        except Exception as e:
            logger.warning(f"Image upload failed, using placeholder id: {e}")
            return Outcome.fabricated({"id": self._local_id("error-mock")}, reason=str(e) or type(e).__name__)

        if not result.get("id"):
            logger.warning("Astria returned no image id, using placeholder id")
            return Outcome.fabricated({"id": self._local_id("mock")}, reason="No image ID returned")
        return Outcome.real({**result, "id": str(result["id"])})

    async def create_tune(self, user_id: str, request: CreateTuneRequest) -> Outcome:
        """Start training; the ledger row is written whether or not Astria accepted it"""
        if not request.image_ids:
            raise HTTPException(status_code=400, detail="imageIds are required")

        tune = AstriaClient.tune_payload(
            user_id, request.image_ids, settings.astria_base_tune_id, request.callback_url
        )
        try:
            result = await self.client.create_tune(tune, timeout=settings.astria_tune_timeout)
        except Exception as e:
            logger.warning(f"Tune creation failed, using local tune id: {e}")
            outcome = Outcome.fabricated(
                {"id": f"tune-{self._millis()}", "status": TUNE_TRAINING},
                reason=str(e) or type(e).__name__,
            )
        else:
            if result.get("id"):
                outcome = Outcome.real({**result, "id": str(result["id"]), "status": tune_status(result)})
            else:
                logger.warning("Astria returned no tune id, using local tune id")
                outcome = Outcome.fabricated(
                    {"id": f"tune-{self._millis()}", "status": TUNE_TRAINING},
                    reason="No tune ID returned",
                )

        try:
            self.supabase.table("user_tunes").upsert({
                "user_id": user_id,
                "tune_id": outcome.data["id"],
                "status": outcome.data["status"],
                "created_at": self.clock().isoformat(),
            }, on_conflict="tune_id").execute()
        except Exception as e:
            logger.error(f"Error storing tune {outcome.data['id']}: {e}")
        return outcome

    def _latest_tune(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("user_tunes")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error reading latest tune for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to read tunes")
        return result.data[0] if result.data else None

    def _find_tune(self, user_id: str, tune_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("user_tunes")\
                .select("*")\
                .eq("tune_id", tune_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Error reading tune {tune_id}: {e}")
            return None

    def _simulated_status(self, tune_id: str, stored: Optional[Dict[str, Any]]) -> str:
        stored_status = (stored or {}).get("status") or TUNE_TRAINING
        created_at = parse_timestamp((stored or {}).get("created_at"))
        if created_at is None:
            match = _LOCAL_TUNE_ID.match(tune_id)
            if match:
                created_at = datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
        if created_at is None:
            return stored_status
        elapsed = (self.clock() - created_at).total_seconds()
        if stored_status == TUNE_TRAINING and elapsed >= settings.mock_training_seconds:
            return TUNE_COMPLETE
        return stored_status

    def _record_status(self, user_id: str, tune_id: str, status: str) -> None:
        try:
            self.supabase.table("user_tunes")\
                .update({"status": status})\
                .eq("tune_id", tune_id)\
                .eq("user_id", user_id)\
                .execute()
            self.supabase.table("models")\
                .update({"status": MODEL_STATUS_FOR_TUNE.get(status, status)})\
                .eq("modelid", tune_id)\
                .eq("user_id", user_id)\
                .execute()
            logger.info(f"Tune {tune_id} status -> {status}")
        except Exception as e:
            logger.error(f"Error updating status for tune {tune_id}: {e}")

    async def check_status(self, user_id: str, request: CheckStatusRequest) -> Outcome:
        """Ask Astria for the tune status; local tune ids complete on a timer instead"""
        tune_id = request.tune_id
        if tune_id:
            stored = self._find_tune(user_id, tune_id)
        else:
            stored = self._latest_tune(user_id)
            if not stored:
                raise HTTPException(status_code=400, detail="Tune ID is required")
            tune_id = stored["tune_id"]
        previous = (stored or {}).get("status")

        if is_simulated_tune_id(tune_id):
            status = self._simulated_status(tune_id, stored)
            outcome = Outcome.fabricated({"id": tune_id, "status": status}, reason="Local tune id")
        else:
            try:
                result = await self.client.get_tune(tune_id, timeout=settings.astria_status_timeout)
            except Exception as e:
                logger.warning(f"Status check failed for tune {tune_id}, reporting stored status: {e}")
                status = previous or TUNE_TRAINING
                outcome = Outcome.fabricated({"id": tune_id, "status": status}, reason=str(e) or type(e).__name__)
            else:
                status = tune_status(result)
                outcome = Outcome.real({**result, "id": tune_id, "status": status})

        if status != previous:
            self._record_status(user_id, tune_id, status)
        return outcome

    async def generate_headshots(self, user_id: str, request: GenerateHeadshotsRequest) -> Outcome:
        """Run inference against the user's LoRA; placeholder URLs stand in when Astria fails"""
        prompt_text = build_prompt_text(request.tune_id, request.prompt, request.style_type)
        logger.info(f"Generating {request.num_images} headshot(s) with prompt: {prompt_text}")

        try:
            result = await self.client.create_prompt(
                settings.astria_base_tune_id, prompt_text, request.num_images,
                timeout=settings.astria_generation_timeout,
            )
        except Exception as e:
            logger.warning(f"Generation failed, using placeholder images: {e}")
            outcome = Outcome.fabricated(
                {"id": f"prompt-{self._millis()}", "images": placeholder_images(request.num_images)},
                reason=str(e) or type(e).__name__,
            )
        else:
            images = extract_images(result)
            if images:
                prompt_id = str(result["id"]) if result.get("id") else f"prompt-{self._millis()}"
                outcome = Outcome.real({"id": prompt_id, "images": images})
            else:
                logger.warning("Astria returned no images, using placeholder images")
                outcome = Outcome.fabricated(
                    {"id": f"prompt-{self._millis()}", "images": placeholder_images(request.num_images)},
                    reason="No images returned",
                )

        rows = [
            {
                "user_id": user_id,
                "image_url": url,
                "prompt_id": outcome.data["id"],
                "style_type": request.style_type,
                "created_at": self.clock().isoformat(),
            }
            for url in outcome.data["images"]
        ]
        try:
            self.supabase.table("user_headshots").insert(rows).execute()
        except Exception as e:
            logger.error(f"Error storing headshots: {e}")
        return outcome
