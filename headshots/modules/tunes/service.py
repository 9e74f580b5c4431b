from supabase import Client
from headshots.core.dependencies import check_model_access
from headshots.core.outcome import Outcome
from headshots.core.validation import validate_generation, validate_training_images
from headshots.modules.astria.schemas import CreateTuneRequest, GenerateHeadshotsRequest
from headshots.modules.astria.service import AstriaService, MODEL_STATUS_FOR_TUNE
from headshots.modules.tunes.schemas import (
    ModelResponse, ImageResponse, TrainRequest, GenerateRequest, GenerateResponse, OverviewResponse
)
from datetime import datetime, timezone
from typing import List, Tuple
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class TuneService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_models(self, user_id: str) -> List[ModelResponse]:
        """List the user's models, newest first"""
        try:
            result = self.supabase.table("models")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [ModelResponse(**model) for model in result.data]
        except Exception as e:
            logger.error(f"Error listing models: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_model_images(self, model_id: str) -> List[ImageResponse]:
        try:
            result = self.supabase.table("images")\
                .select("*")\
                .eq("modelid", model_id)\
                .order("created_at", desc=True)\
                .execute()
            return [ImageResponse(**image) for image in result.data]
        except Exception as e:
            logger.error(f"Error listing images: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_images(self, user_id: str) -> List[ImageResponse]:
        """All images across the user's models"""
        try:
            # 1. Get model IDs owned by the user
            models_result = self.supabase.table("models")\
                .select("id")\
                .eq("user_id", user_id)\
                .execute()
            if not models_result.data:
                return []
            model_ids = [m["id"] for m in models_result.data]
            # 2. Return images for those models
            result = self.supabase.table("images")\
                .select("*")\
                .in_("modelid", model_ids)\
                .order("created_at", desc=True)\
                .execute()
            return [ImageResponse(**image) for image in result.data]
        except Exception as e:
            logger.error(f"Error listing user images: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def overview(self, user_id: str) -> OverviewResponse:
        models = self.list_models(user_id)
        images = self.list_user_images(user_id)
        return OverviewResponse(
            total_models=len(models),
            completed_models=sum(1 for m in models if m.status == "completed"),
            training_models=sum(1 for m in models if m.status in ("pending", "training", "processing")),
            total_images=len(images),
        )

    def create_model(self, user_id: str, tune_id: str, status: str, name: str) -> ModelResponse:
        try:
            result = self.supabase.table("models").insert({
                "user_id": user_id,
                "modelid": tune_id,
                "name": name,
                "status": status,
                "type": "headshot",
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create model")

            return ModelResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating model: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def add_samples(self, model_id: str, image_ids: List[str]) -> None:
        try:
            self.supabase.table("samples")\
                .insert([{"modelid": model_id, "uri": image_id} for image_id in image_ids])\
                .execute()
        except Exception as e:
            logger.error(f"Error storing samples for model {model_id}: {str(e)}")

    def add_images(self, model_id: str, urls: List[str]) -> None:
        try:
            self.supabase.table("images")\
                .insert([{"modelid": model_id, "uri": url} for url in urls])\
                .execute()
            logger.info(f"Stored {len(urls)} image(s) for model {model_id}")
        except Exception as e:
            logger.error(f"Error storing images for model {model_id}: {str(e)}")

    async def start_training(
        self, user_id: str, request: TrainRequest, astria: AstriaService
    ) -> Tuple[ModelResponse, Outcome]:
        """Create the tune, then record the model and its training samples"""
        validate_training_images(request.image_ids)
        outcome = await astria.create_tune(user_id, CreateTuneRequest(
            image_ids=request.image_ids,
            callback_url=request.callback_url,
        ))
        tune_id = outcome.data["id"]
        status = MODEL_STATUS_FOR_TUNE.get(outcome.data["status"], outcome.data["status"])
        name = request.name or f"Headshot Model - {datetime.now(timezone.utc).date().isoformat()}"
        model = self.create_model(user_id, tune_id, status, name)
        self.add_samples(model.id, request.image_ids)
        return model, outcome

    async def generate(
        self, user_data: dict, model_id: str, request: GenerateRequest, astria: AstriaService
    ) -> GenerateResponse:
        """Validate, check ownership, then run inference and store the images against the model"""
        validate_generation(request.prompt, request.num_images)
        model = check_model_access(model_id, user_data, self.supabase)
        if not model.get("modelid"):
            raise HTTPException(status_code=400, detail="Model has no tune to generate from")

        outcome = await astria.generate_headshots(user_data["id"], GenerateHeadshotsRequest(
            prompt=request.prompt.strip(),
            tune_id=model["modelid"],
            num_images=request.num_images,
            style_type=request.style_type,
        ))
        self.add_images(model["id"], outcome.data["images"])
        return GenerateResponse(
            modelid=model["id"],
            prompt_id=outcome.data["id"],
            images=outcome.data["images"],
            simulated=outcome.simulated,
            reason=outcome.reason,
        )
