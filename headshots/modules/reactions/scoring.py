"""Turn free-form reviewer text into a scored reaction."""
import random
import re
from typing import List, Optional

from headshots.modules.reactions.schemas import Reaction

SCORE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:/|out of)\s*10", re.IGNORECASE)

FEEDBACK_LIMIT = 200

COMMON_TRAITS = [
    "professional", "confident", "trustworthy", "approachable",
    "competent", "innovative", "attractive", "experienced",
]
DEFAULT_TRAITS = ["Professional", "Confident", "Competent"]

_STRONG = {
    "recruiter": "Very likely to interview",
    "investor": "Would consider funding",
    "dating": "Would definitely swipe right",
    "networking": "Eager to connect",
}
_POSITIVE = {
    "recruiter": "Likely to consider",
    "investor": "Interested in learning more",
    "dating": "Would swipe right",
    "networking": "Would connect",
}


def extract_score(analysis: str, rng: Optional[random.Random] = None) -> float:
    """The first `N/10` or `N out of 10` in the text, else a random score in [7, 10)"""
    match = SCORE_PATTERN.search(analysis)
    if match:
        return float(match.group(1))
    return (rng or random).random() * 3 + 7


def likelihood(score: float, reaction_type: str) -> str:
    if score >= 8.5:
        return _STRONG.get(reaction_type, "Highly positive")
    if score >= 7:
        return _POSITIVE.get(reaction_type, "Positive")
    return "Needs improvement"


def extract_traits(feedback: str, limit: int = 3) -> List[str]:
    lowered = feedback.lower()
    found = [trait for trait in COMMON_TRAITS if trait in lowered][:limit]
    return found or list(DEFAULT_TRAITS)


def parse_reaction(analysis: str, reaction_type: str, rng: Optional[random.Random] = None) -> Reaction:
    score = extract_score(analysis, rng)
    feedback = SCORE_PATTERN.sub("", analysis).strip()
    truncated = feedback[:FEEDBACK_LIMIT] + ("..." if len(feedback) > FEEDBACK_LIMIT else "")
    return Reaction(
        type=reaction_type,
        score=round(score * 10) / 10,
        feedback=truncated,
        likelihood=likelihood(score, reaction_type),
        traits=extract_traits(feedback),
    )
