"""
Request checks that must pass before any call to an external provider.
"""

from fastapi import HTTPException, status
from typing import Sized

MIN_UPLOAD_IMAGES = 3
MIN_TRAINING_IMAGES = 10
MIN_PROMPT_LENGTH = 10
MIN_GENERATED_IMAGES = 1
MAX_GENERATED_IMAGES = 8


def _reject(detail: str) -> None:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def validate_upload_batch(files: Sized) -> None:
    if len(files) == 0:
        _reject("Please select at least one image")
    if len(files) < MIN_UPLOAD_IMAGES:
        _reject(f"Please upload at least {MIN_UPLOAD_IMAGES} images for best results")


def validate_training_images(image_ids: Sized) -> None:
    if len(image_ids) < MIN_TRAINING_IMAGES:
        _reject(f"Please upload at least {MIN_TRAINING_IMAGES} images to train your model")


def validate_generation(prompt: str, num_images: int) -> None:
    if len((prompt or "").strip()) < MIN_PROMPT_LENGTH:
        _reject(f"Prompt must be at least {MIN_PROMPT_LENGTH} characters")
    if not MIN_GENERATED_IMAGES <= num_images <= MAX_GENERATED_IMAGES:
        _reject(f"Number of images must be between {MIN_GENERATED_IMAGES} and {MAX_GENERATED_IMAGES}")
