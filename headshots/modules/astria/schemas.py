from pydantic import BaseModel, Field
from typing import Optional, List


class UploadImageRequest(BaseModel):
    image: str = Field(..., min_length=1)  # data URL or raw base64
    filename: Optional[str] = None
    content_type: Optional[str] = Field(None, alias="contentType")

    class Config:
        populate_by_name = True


class CreateTuneRequest(BaseModel):
    image_ids: List[str] = Field(..., alias="imageIds")
    callback_url: Optional[str] = Field(None, alias="callbackUrl")

    class Config:
        populate_by_name = True


class CheckStatusRequest(BaseModel):
    tune_id: Optional[str] = Field(None, alias="tuneId")

    class Config:
        populate_by_name = True


class GenerateHeadshotsRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    tune_id: str = Field(..., alias="tuneId", min_length=1)
    num_images: int = Field(4, alias="numImages", ge=1, le=8)
    style_type: Optional[str] = Field(None, alias="styleType")

    class Config:
        populate_by_name = True


class UploadBatchResponse(BaseModel):
    image_ids: List[str]
    simulated_count: int = 0
