from fastapi import APIRouter, Depends
from headshots.database.supabase_client import get_supabase
from headshots.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from headshots.modules.profiles.service import ProfileService
from headshots.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(user_data["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Upsert first/last name for the account settings form"""
    return service.upsert_profile(user_data["id"], profile_data)
