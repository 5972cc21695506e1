"""Client application state: prompt text, image history, loading and error flags."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol

from pydantic import ValidationError

from .relayclient import RelayError
from .schemas import ImageRecord
from .storageservice.keyvaluestore import KeyValueStore
from .utils import decode_data_url, infer_extension, normalize_response_to_data_urls

logger = logging.getLogger(__name__)

PROMPT_KEY = "contents"
IMAGES_KEY = "Images"

EMPTY_PROMPT_MESSAGE = "Please enter a prompt first."
NO_IMAGE_MESSAGE = "No image returned from server."
GENERIC_ERROR_MESSAGE = "Something went wrong while generating."

ACCEPT_KEY = "Enter"


class Relay(Protocol):
    def generate(self, prompt: str) -> Any: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class ImagePromptApp:
    """Owns all user-facing state and orchestrates calls to the relay.

    State is loaded from ``storage`` on construction and written back on every
    change to the prompt text or the image sequence. Only one submission may
    be in flight at a time; the ``loading`` flag is the only guard.
    """

    def __init__(
        self,
        relay: Relay,
        storage: KeyValueStore,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._relay = relay
        self._storage = storage
        self._clock = clock
        self.loading = False
        self.error = ""
        self.prompt = storage.get(PROMPT_KEY) or ""
        self.images: List[ImageRecord] = self._load_images()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _load_images(self) -> List[ImageRecord]:
        raw = self._storage.get(IMAGES_KEY)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable image history: %s", exc)
            return []
        if not isinstance(parsed, list):
            return []

        records: List[ImageRecord] = []
        for position, item in enumerate(parsed):
            try:
                records.append(ImageRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping stored image %s: %s", position, exc)
        return records

    def _save_images(self) -> None:
        self._storage.set(
            IMAGES_KEY, json.dumps([record.model_dump() for record in self.images])
        )

    # ------------------------------------------------------------------
    # Prompt
    # ------------------------------------------------------------------
    def set_prompt(self, text: str) -> None:
        self.prompt = text or ""
        self._storage.set(PROMPT_KEY, self.prompt)

    @property
    def can_generate(self) -> bool:
        return bool(self.prompt.strip()) and not self.loading

    def handle_key(self, key: str) -> bool:
        """Submit on the accept key when the guard allows it."""
        if key == ACCEPT_KEY and self.can_generate:
            return self.generate()
        return False

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(self) -> bool:
        """Submit the current prompt. Returns True when new images were added."""
        if self.loading:
            return False

        prompt = self.prompt.strip()
        if not prompt:
            self.error = EMPTY_PROMPT_MESSAGE
            return False

        self.loading = True
        self.error = ""
        try:
            logger.debug("Submitting prompt %r", prompt)
            data = self._relay.generate(prompt)
            data_urls = normalize_response_to_data_urls(data)
            if not data_urls:
                self.error = NO_IMAGE_MESSAGE
                return False

            stamped = [
                ImageRecord(dataUrl=data_url, createdAt=self._clock())
                for data_url in data_urls
            ]
            self.images = stamped + self.images
            self._save_images()
            return True
        except RelayError as exc:
            logger.warning("Generation failed: %s", exc.message)
            self.error = exc.message or GENERIC_ERROR_MESSAGE
            return False
        finally:
            self.loading = False

    # ------------------------------------------------------------------
    # Image list
    # ------------------------------------------------------------------
    def delete_image(self, index: int) -> None:
        if not 0 <= index < len(self.images):
            return
        self.images = [record for i, record in enumerate(self.images) if i != index]
        self._save_images()

    def download_image(self, index: int, directory: str | Path = ".") -> Path:
        """Write the image at ``index`` to ``directory`` and return the file path.

        Raises:
            IndexError: if no image exists at ``index``.
            ValueError: if the stored payload cannot be decoded.
        """
        if not 0 <= index < len(self.images):
            raise IndexError(f"no image at position {index}")
        record = self.images[index]
        _, content = decode_data_url(record.dataUrl)
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"generated-{index + 1}.{infer_extension(record.dataUrl)}"
        target.write_bytes(content)
        return target

    def dismiss_error(self) -> None:
        self.error = ""
