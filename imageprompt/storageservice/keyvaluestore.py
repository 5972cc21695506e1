from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

# Persistence capability injected into the client application. Implementations
# may be backed by a file, an embedded database or plain memory.


class KeyValueStore(ABC):
    """Abstract string key/value store with named slots."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the slot was never written."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite the slot with ``value``."""
