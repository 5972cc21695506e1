"""HTTP client the client application uses to reach the relay."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

GENERATE_PATH = "/generate-image"


class RelayError(RuntimeError):
    """Raised when the relay could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RelayClient:
    """Posts prompts to ``POST /generate-image`` and returns the decoded body."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = http_client or httpx.Client(
            base_url=self.settings.relay_url,
            timeout=self.settings.relay_timeout,
        )

    def generate(self, prompt: str) -> Any:
        try:
            response = self._client.post(GENERATE_PATH, json={"prompt": prompt})
        except httpx.HTTPError as exc:
            logger.warning("Relay request failed: %s", exc)
            raise RelayError(str(exc)) from exc

        if response.is_error:
            raise RelayError(self._error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise RelayError(f"Relay returned invalid JSON: {exc}", response.status_code) from exc

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), str) and payload["error"]:
            return payload["error"]
        return f"Relay responded with status {response.status_code}"
