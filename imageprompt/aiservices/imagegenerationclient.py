from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

class ImageGenerationClient(ABC):
    """Abstract interface for an image generation client.

    Implementations must provide a synchronous generation method
    used by the relay service.
    """


    @abstractmethod
    def generate(self, prompt: str) -> List[str]:
        """Generate images from a prompt and return them as base64 strings."""
