from supabase import Client
from headshots.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by user ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting profile: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    def upsert_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Create or update the caller's profile"""
        try:
            row = {
                "id": user_id,
                "first_name": profile_data.first_name,
                "last_name": profile_data.last_name,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
            result = self.supabase.table("profiles")\
                .upsert(row)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving profile: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
