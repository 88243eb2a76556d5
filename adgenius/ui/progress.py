"""Cosmetic progress feedback shown while a video is being generated."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

LOADING_MESSAGES: tuple[str, ...] = (
    "Menganalisis referensi visual Anda...",
    "Menyusun struktur sinematik...",
    "Mengoptimalkan pencahayaan digital...",
    "Memproses gerakan kamera dinamis...",
    "Finalisasi detail tekstur...",
    "Hampir selesai! Menyiapkan pratinjau...",
)


@dataclass(slots=True, frozen=True)
class VideoState:
    is_generating: bool = False
    progress: int = 0
    current_message: str = ""


class ProgressTicker:
    """Cycles status messages and creeps a counter towards ``cap``.

    The remote API reports no progress, so the counter is time driven. It
    stays below 100 until :meth:`complete` is called.
    """

    def __init__(
        self,
        messages: Sequence[str] = LOADING_MESSAGES,
        step: int = 5,
        cap: int = 95,
    ) -> None:
        if not messages:
            raise ValueError("messages must not be empty")
        self.messages = tuple(messages)
        self.step = step
        self.cap = min(cap, 99)
        self._index = 0
        self.state = VideoState()

    def start(self) -> VideoState:
        self._index = 0
        self.state = VideoState(is_generating=True, progress=0, current_message=self.messages[0])
        return self.state

    def tick(self) -> VideoState:
        self._index = (self._index + 1) % len(self.messages)
        self.state = replace(
            self.state,
            current_message=self.messages[self._index],
            progress=min(self.state.progress + self.step, self.cap),
        )
        return self.state

    def complete(self, message: str = "Video berhasil dibuat!") -> VideoState:
        self.state = replace(self.state, progress=100, current_message=message)
        return self.state

    def reset(self) -> VideoState:
        self.state = replace(self.state, is_generating=False)
        return self.state


def render_progress(state: VideoState, width: int = 20) -> str:
    """Markdown rendering of the progress bar ("" when idle)."""
    if not state.is_generating:
        return ""
    filled = round(width * state.progress / 100)
    bar = "█" * filled + "░" * (width - filled)
    return f"**{state.current_message}**\n\n`{bar}` {state.progress}%"
