"""Domain logic for relaying prompts to the image generation provider."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

import httpx

from .aiservices.imagegenerationclient import ImageGenerationClient
from .aiservices.stabilityimagegenerationclient import StabilityImageGenerationClient
from .config import Settings, get_settings

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Image generation failed"


class ImageGenerationError(RuntimeError):
    """Raised when the provider could not produce images for a prompt."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class ImageRelayService:
    """Stateless orchestrator between the HTTP route and the provider client."""

    def __init__(
        self,
        settings: Settings | None = None,
        image_client: ImageGenerationClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._image_client = image_client or StabilityImageGenerationClient(self.settings)

    # ------------------------------------------------------------------
    # Image Generation
    # ------------------------------------------------------------------
    def generate_images(self, prompt: str) -> List[str]:
        """Generate images for ``prompt`` and return them as base64 strings.

        Every provider problem (unreachable host, non-success status, missing
        fields) is logged here and re-raised as :class:`ImageGenerationError`.
        """
        try:
            return self._image_client.generate(prompt)
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Provider rejected image request (%s): %s",
                exc.response.status_code,
                exc.response.text,
            )
            raise ImageGenerationError() from exc
        except Exception as exc:
            logger.exception("Image generation failed: %s", exc)
            raise ImageGenerationError() from exc


@lru_cache
def get_relay_service() -> ImageRelayService:
    return ImageRelayService(get_settings())
