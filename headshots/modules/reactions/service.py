import logging
import random
from typing import Any, Dict, List, Optional, Union

from fastapi import HTTPException
from openai import AsyncOpenAI

from headshots.config.settings import settings
from headshots.modules.reactions.prompts import SYSTEM_PROMPT, build_reaction_prompt
from headshots.modules.reactions.schemas import Reaction, ReactionsRequest
from headshots.modules.reactions.scoring import parse_reaction

logger = logging.getLogger(__name__)


class ReactionService:
    """Asks a chat model to review a headshot from several audiences' point of view."""

    def __init__(self, client: AsyncOpenAI, model: Optional[str] = None, rng: Optional[random.Random] = None):
        self.client = client
        self.model = model or settings.openai_model
        self.rng = rng

    @staticmethod
    def _user_content(prompt: str, headshot_url: Optional[str]) -> Union[str, List[Dict[str, Any]]]:
        if not headshot_url:
            return prompt
        return [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": headshot_url}},
        ]

    async def _review(self, reaction_type: str, request: ReactionsRequest) -> str:
        prompt = build_reaction_prompt(reaction_type, request.theme)
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self._user_content(prompt, request.headshot_url)},
                ],
                temperature=0.7,
            )
        except Exception as e:
            logger.error(f"OpenAI request for {reaction_type} reaction failed: {e}")
            raise HTTPException(status_code=502, detail=f"Reaction generation failed: {e}")
        if not completion.choices:
            raise HTTPException(status_code=502, detail="Reaction generation returned no choices")
        return completion.choices[0].message.content or ""

    async def generate(self, request: ReactionsRequest) -> List[Reaction]:
        reactions = []
        for reaction_type in request.reaction_types:
            analysis = await self._review(reaction_type, request)
            reaction = parse_reaction(analysis, reaction_type, self.rng)
            logger.info(f"{reaction_type} reaction scored {reaction.score}")
            reactions.append(reaction)
        return reactions
