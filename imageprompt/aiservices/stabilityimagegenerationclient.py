# aiservices/stabilityimagegenerationclient.py
from __future__ import annotations

from typing import Any, List, Optional

import httpx

from ..config import Settings, get_settings
from .imagegenerationclient import ImageGenerationClient

# Fixed generation parameters sent with every request.
CFG_SCALE = 7
IMAGE_SIZE = 1024
STEPS = 30
SAMPLES = 1


class StabilityImageGenerationClient(ImageGenerationClient):
    """
    Text-to-image client for the Stability REST API (v1 generation endpoint).

    The API answers with ``{"artifacts": [{"base64": ..., ...}, ...]}``; only the
    base64 payloads are handed back to the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._url = self.settings.stability_url
        self._api_key = self.settings.stability_api_key.get_secret_value()
        self._client = http_client or httpx.Client(timeout=self.settings.provider_timeout)

    # --- Generation -----------------------------------------------------------

    def generate(self, prompt: str) -> List[str]:
        response = self._client.post(
            self._url,
            json=self._build_payload(prompt),
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        response.raise_for_status()
        return self._extract_images(response.json())

    def close(self) -> None:
        self._client.close()

    # --- Internals ------------------------------------------------------------

    @staticmethod
    def _build_payload(prompt: str) -> dict[str, Any]:
        return {
            "text_prompts": [{"text": prompt}],
            "cfg_scale": CFG_SCALE,
            "width": IMAGE_SIZE,
            "height": IMAGE_SIZE,
            "steps": STEPS,
            "samples": SAMPLES,
        }

    @staticmethod
    def _extract_images(data: Any) -> List[str]:
        if not isinstance(data, dict) or not isinstance(data.get("artifacts"), list):
            raise ValueError(f"No artifacts in provider response: {data!r:.200}")
        images: List[str] = []
        for artifact in data["artifacts"]:
            payload = artifact.get("base64") if isinstance(artifact, dict) else None
            if not isinstance(payload, str) or not payload:
                raise ValueError(f"Malformed artifact in provider response: {artifact!r:.200}")
            images.append(payload)
        return images
