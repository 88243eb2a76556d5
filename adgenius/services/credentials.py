"""API key selection state shared by the Gemini client and the video service."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    """Capability injected into services that need an API key."""

    def has_credential(self) -> bool: ...

    def select_credential(self, key: Optional[str] = None) -> bool: ...

    def reset(self) -> None: ...

    def api_key(self) -> str: ...


class ApiKeyStore:
    """In-memory API key with a "selected" flag.

    A key that comes from configuration counts as selected. When the provider
    rejects it the flag is cleared and the user has to select a key again,
    either by entering a new one or confirming the current one.
    """

    def __init__(self, initial_key: Optional[str] = None) -> None:
        self._key = (initial_key or "").strip()
        self._selected = bool(self._key)

    def has_credential(self) -> bool:
        return self._selected and bool(self._key)

    def select_credential(self, key: Optional[str] = None) -> bool:
        """Select ``key`` (or re-select the current key). Returns the new state."""
        candidate = (key or "").strip()
        if candidate:
            self._key = candidate
        self._selected = bool(self._key)
        logger.info("API key selected: %s", self._selected)
        return self._selected

    def reset(self) -> None:
        if self._selected:
            logger.warning("API key marked as expired; user must select it again")
        self._selected = False

    def api_key(self) -> str:
        return self._key
