from fastapi import APIRouter, Depends, HTTPException
from openai import AsyncOpenAI
from headshots.config.settings import settings
from headshots.modules.reactions.schemas import ReactionsRequest, ReactionsResponse
from headshots.modules.reactions.service import ReactionService
from headshots.core.dependencies import get_current_user_id
from typing import Dict

router = APIRouter(tags=["reactions"])


def get_openai_client() -> AsyncOpenAI:
    if not settings.openai_api_key:
        raise HTTPException(status_code=500, detail="OpenAI API key not configured")
    return AsyncOpenAI(api_key=settings.openai_api_key)


def get_reaction_service(client: AsyncOpenAI = Depends(get_openai_client)) -> ReactionService:
    return ReactionService(client)


@router.post("/generate-reactions", response_model=ReactionsResponse)
async def generate_reactions(
    request: ReactionsRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ReactionService = Depends(get_reaction_service)
):
    """Score a headshot as seen by recruiters, investors, dates or peers"""
    return ReactionsResponse(reactions=await service.generate(request))
