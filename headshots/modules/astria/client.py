"""
Astria API client

Thin async wrapper over the four Astria endpoints the dispatcher uses.
Non-2xx responses and unparseable bodies raise AstriaAPIError; transport
failures (timeouts, DNS, resets) propagate as httpx exceptions.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class AstriaAPIError(Exception):
    def __init__(self, status_code: int, details: str):
        super().__init__(f"Astria API error {status_code}: {details}")
        self.status_code = status_code
        self.details = details


class AstriaClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.astria.ai",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    async def _send(self, method: str, path: str, timeout: float, **kwargs) -> Dict[str, Any]:
        async with self._client(timeout) as client:
            response = await client.request(method, path, **kwargs)
        logger.info(f"Astria {method} {path} -> {response.status_code}")
        if response.is_error:
            logger.error(f"Astria error response: {response.text[:500]}")
            raise AstriaAPIError(response.status_code, response.text[:500])
        try:
            body = response.json()
        except ValueError:
            raise AstriaAPIError(response.status_code, f"Failed to parse API response: {response.text[:500]}")
        if not isinstance(body, dict):
            raise AstriaAPIError(response.status_code, "Unexpected response shape")
        return body

    async def upload_image(self, content: bytes, filename: str, content_type: str, timeout: float = 30.0) -> Dict[str, Any]:
        return await self._send(
            "POST", "/images", timeout,
            files={"image": (filename, content, content_type)},
        )

    async def create_tune(self, tune: Dict[str, Any], timeout: float = 60.0) -> Dict[str, Any]:
        return await self._send("POST", "/tunes", timeout, json={"tune": tune})

    async def get_tune(self, tune_id: str, timeout: float = 30.0) -> Dict[str, Any]:
        return await self._send("GET", f"/tunes/{tune_id}", timeout)

    async def create_prompt(self, base_tune_id: int, text: str, num_images: int, timeout: float = 120.0) -> Dict[str, Any]:
        return await self._send(
            "POST", f"/tunes/{base_tune_id}/prompts", timeout,
            data={"prompt[text]": text, "prompt[num_images]": str(num_images)},
        )

    @staticmethod
    def tune_payload(user_id: str, image_ids: List[str], base_tune_id: int, callback_url: Optional[str] = None) -> Dict[str, Any]:
        short_id = user_id[:8]
        return {
            "title": f"headshot_user_{short_id}",
            "base_tune_id": base_tune_id,
            "model_type": "lora",
            "name": "person",
            "preset": "flux-lora-portrait",
            "instance_prompt": f"photo of sks{short_id} person",
            "class_prompt": "person",
            "images": image_ids,
            "callback": callback_url,
        }
