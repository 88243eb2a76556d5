"""File storage helpers."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _slugify(text: str, max_len: int = 30) -> str:
    slug = re.sub(r"[^a-zA-Z0-9_-]+", "_", text.strip())[:max_len]
    return slug.strip("_") or "video"


class StorageService:
    """Key/value local storage plus saved video assets."""

    def __init__(self, data_dir: Path, output_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self.output_dir = Path(output_dir)

    def _item_path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None when nothing was saved."""
        path = self._item_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        path = self._item_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def save_video(self, content: bytes, metadata: Dict[str, str]) -> Path:
        """Persist a downloaded video and return the file path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stamp = time.strftime("%Y%m%d%H%M%S")
        slug = _slugify(metadata.get("product_name") or metadata.get("model") or "video")
        path = self.output_dir / f"{stamp}_{slug}.mp4"
        suffix = 1
        while path.exists():
            path = self.output_dir / f"{stamp}_{slug}_{suffix}.mp4"
            suffix += 1
        path.write_bytes(content)
        logger.info("Saved video asset %s (%d bytes)", path, len(content))
        return path

    def cleanup(self, max_items: int = 10) -> List[Path]:
        """Keep only the newest ``max_items`` saved videos."""
        if not self.output_dir.exists():
            return []
        videos = sorted(
            self.output_dir.glob("*.mp4"),
            key=lambda item: item.stat().st_mtime,
            reverse=True,
        )
        removed: List[Path] = []
        for stale in videos[max(max_items, 0):]:
            try:
                stale.unlink()
            except OSError as exc:
                logger.warning("Failed to remove old video %s: %s", stale, exc)
                continue
            removed.append(stale)
        return removed
