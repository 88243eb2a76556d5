"""Generation history tracking."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional
from uuid import uuid4

from adgenius.services.storage_service import StorageService

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "adgenius_history"
HISTORY_LIMIT = 10
UNNAMED_PRODUCT = "Tanpa Nama"


class GenerationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class GenerationRecord:
    """Metadata describing one finished video generation."""

    id: str
    timestamp: int  # milliseconds since epoch
    product_name: str
    prompt: str
    storyboard: str = ""
    voice_script: str = ""
    reference_images: List[str] = field(default_factory=list)
    talent_images: List[str] = field(default_factory=list)
    product_images: List[str] = field(default_factory=list)
    video_url: Optional[str] = None
    status: GenerationStatus = GenerationStatus.COMPLETED

    @classmethod
    def create(
        cls,
        *,
        product_name: str,
        prompt: str,
        storyboard: str = "",
        voice_script: str = "",
        reference_images: Iterable[str] = (),
        talent_images: Iterable[str] = (),
        product_images: Iterable[str] = (),
        video_url: Optional[str] = None,
        status: GenerationStatus = GenerationStatus.COMPLETED,
    ) -> "GenerationRecord":
        now_ms = int(time.time() * 1000)
        return cls(
            id=f"{now_ms}-{uuid4().hex[:6]}",
            timestamp=now_ms,
            product_name=product_name.strip() or UNNAMED_PRODUCT,
            prompt=prompt,
            storyboard=storyboard,
            voice_script=voice_script,
            reference_images=list(reference_images),
            talent_images=list(talent_images),
            product_images=list(product_images),
            video_url=video_url,
            status=status,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationRecord":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            product_name=str(data.get("product_name") or UNNAMED_PRODUCT),
            prompt=str(data.get("prompt") or ""),
            storyboard=str(data.get("storyboard") or ""),
            voice_script=str(data.get("voice_script") or ""),
            reference_images=list(data.get("reference_images") or []),
            talent_images=list(data.get("talent_images") or []),
            product_images=list(data.get("product_images") or []),
            video_url=data.get("video_url"),
            status=GenerationStatus(data.get("status", GenerationStatus.COMPLETED.value)),
        )


class GenerationHistoryService:
    """Most-recent-first history persisted to local storage.

    The list is capped at ``limit`` entries; inserting beyond that evicts
    the oldest ones. Storage is overwritten wholesale on every insertion.
    """

    def __init__(
        self,
        storage: StorageService,
        limit: int = HISTORY_LIMIT,
        key: str = HISTORY_STORAGE_KEY,
    ) -> None:
        self.storage = storage
        self.limit = limit
        self.key = key
        self._entries: List[GenerationRecord] = []

    @property
    def entries(self) -> List[GenerationRecord]:
        return list(self._entries)

    def load(self) -> List[GenerationRecord]:
        """Read the stored history; unreadable data yields an empty history."""
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                payload = []
            else:
                payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            entries = [GenerationRecord.from_dict(item) for item in payload]
        except (ValueError, KeyError, TypeError, OSError, RecursionError) as exc:
            logger.error("Failed to parse history: %s", exc)
            entries = []
        self._entries = entries[: self.limit]
        return self.entries

    def record(self, record: GenerationRecord) -> List[GenerationRecord]:
        """Prepend a record, evict beyond the limit and persist."""
        entries = [record, *self._entries][: self.limit]
        self.storage.set_item(
            self.key,
            json.dumps([item.to_dict() for item in entries], ensure_ascii=False),
        )
        self._entries = entries
        logger.info("Recorded generation %s (%d in history)", record.id, len(self._entries))
        return self.entries

    def list(self, limit: Optional[int] = None) -> List[GenerationRecord]:
        """Return the most recent records."""
        if limit is None:
            return self.entries
        return self._entries[: max(limit, 0)]

    def get(self, entry_id: str) -> Optional[GenerationRecord]:
        for item in self._entries:
            if item.id == entry_id:
                return item
        return None
