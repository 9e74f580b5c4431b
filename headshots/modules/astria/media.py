"""Conversion between image bytes and the base64 payloads browsers send."""
import base64
import binascii
import re
from typing import Optional, Tuple

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$", re.DOTALL)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
}


def encode_data_url(content: bytes, content_type: str = "image/jpeg") -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def decode_data_url(value: str) -> Tuple[bytes, Optional[str]]:
    """
    Decode a `data:<mime>;base64,<payload>` URL or a bare base64 string.

    Returns the raw bytes and the declared mime type (None for bare base64).
    Raises ValueError when the payload is not valid base64.
    """
    value = value.strip()
    content_type = None
    payload = value
    if value.startswith("data:"):
        match = _DATA_URL.match(value)
        if not match:
            raise ValueError("Malformed data URL")
        content_type = match.group("mime")
        payload = match.group("payload")
    payload = "".join(payload.split())
    try:
        return base64.b64decode(payload, validate=True), content_type
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}")


def extension_for(content_type: str) -> str:
    return _EXTENSIONS.get(content_type.lower(), content_type.split("/")[-1] or "jpg")
