from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ModelResponse(BaseModel):
    id: str
    user_id: str
    modelid: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ImageResponse(BaseModel):
    id: str
    modelid: str
    uri: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TrainRequest(BaseModel):
    image_ids: List[str]
    name: Optional[str] = None
    callback_url: Optional[str] = None


class TrainResponse(BaseModel):
    model: ModelResponse
    tune_id: str
    simulated: bool = False
    polling: bool = False


class GenerateRequest(BaseModel):
    # Bounds are checked in core.validation so the caller gets a 400 with a readable message
    prompt: str = ""
    num_images: int = 4
    style_type: Optional[str] = Field(None, description="professional, casual or creative")


class GenerateResponse(BaseModel):
    modelid: str
    prompt_id: str
    images: List[str]
    simulated: bool = False
    reason: Optional[str] = None


class OverviewResponse(BaseModel):
    total_models: int
    completed_models: int
    training_models: int
    total_images: int
