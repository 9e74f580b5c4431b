SYSTEM_PROMPT = (
    "You are an expert in professional image analysis and personal branding. "
    "Provide detailed, realistic feedback as if you were the specified professional reviewing this headshot."
)

REACTION_PROMPTS = {
    "recruiter": (
        "As an HR manager or recruiter, evaluate this headshot for professional hiring. "
        "Consider: Does this person look competent, trustworthy, and professional? Would you want to interview them? "
        "Rate 1-10 and provide specific feedback about their professional presence, including what impression "
        "they give and likelihood of getting an interview."
    ),
    "investor": (
        "As a venture capitalist or investor, evaluate this person's founder potential. "
        "Consider: Do they look like someone who could lead a company, inspire confidence, and execute on big ideas? "
        "Rate 1-10 and provide feedback about their leadership presence and whether you'd consider funding their startup."
    ),
    "dating": (
        "As a potential dating match on a dating app, evaluate this profile photo. "
        "Consider: Is this person attractive, approachable, and someone you'd want to get to know? "
        "Rate 1-10 and provide feedback about their appeal and whether you'd swipe right."
    ),
    "networking": (
        "As an industry peer at a networking event, evaluate this person's professional networking appeal. "
        "Consider: Do they look like someone you'd want to connect with professionally? "
        "Do they seem knowledgeable and influential in their field? Rate 1-10 and provide feedback."
    ),
}

DEFAULT_REACTION_PROMPT = "Provide a professional analysis of this headshot including a rating from 1-10 and detailed feedback."


def build_reaction_prompt(reaction_type: str, theme: str) -> str:
    base = f'Analyze this professional headshot with the theme "{theme}". '
    return base + REACTION_PROMPTS.get(reaction_type, DEFAULT_REACTION_PROMPT)
