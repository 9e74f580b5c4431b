from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class TrainingNotificationRequest(BaseModel):
    email: EmailStr
    tune_id: str = Field(..., alias="tuneId", min_length=1)
    user_name: Optional[str] = Field(None, alias="userName")

    class Config:
        populate_by_name = True
