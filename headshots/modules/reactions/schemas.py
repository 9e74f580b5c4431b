from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ReactionsRequest(BaseModel):
    headshot_url: Optional[str] = Field(None, alias="headshotUrl")
    theme: str = ""
    user_profile: Optional[Dict[str, Any]] = Field(None, alias="userProfile")
    reaction_types: List[str] = Field(..., alias="reactionTypes")

    class Config:
        populate_by_name = True


class Reaction(BaseModel):
    type: str
    score: float
    feedback: str
    likelihood: str
    traits: List[str]


class ReactionsResponse(BaseModel):
    reactions: List[Reaction]
