from typing import Any, Dict, List, Optional

STYLE_SUFFIXES = {
    "professional": "professional studio lighting, neutral background, business attire, DSLR, high resolution",
    "casual": "natural lighting, casual attire, modern setting, Canon 5D, crisp focus",
    "creative": "artistic lighting, creative setting, high contrast, professional photography",
}

PLACEHOLDER_IMAGE_URL = "https://placehold.co/768x1024/png?text=Headshot+{index}"


def build_prompt_text(tune_id: str, prompt: str, style_type: Optional[str] = None) -> str:
    text = f"<lora:{tune_id}:1> {prompt}"
    suffix = STYLE_SUFFIXES.get(style_type or "")
    if suffix:
        text = f"{text}, {suffix}"
    return text


def extract_images(result: Dict[str, Any]) -> List[str]:
    """Image URLs from an inference response; Astria returns either `images` or `output.images`."""
    output = result.get("output")
    if isinstance(output, dict) and isinstance(output.get("images"), list):
        raw = output["images"]
    elif isinstance(result.get("images"), list):
        raw = result["images"]
    else:
        return []
    urls = []
    for item in raw:
        url = item.get("url") if isinstance(item, dict) else item
        if url:
            urls.append(str(url))
    return urls


def placeholder_images(count: int) -> List[str]:
    return [PLACEHOLDER_IMAGE_URL.format(index=i + 1) for i in range(count)]
