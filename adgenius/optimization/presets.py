"""Style, tone and duration choices offered by the form."""

from __future__ import annotations

import re
from typing import List

STYLES: List[str] = [
    "Cinematic High-End",
    "Minimalist Modern",
    "Cyberpunk Neon",
    "Vintage Film 35mm",
    "Hyper-Realistic 8K",
    "Abstract Motion Graphics",
    "Fast-Paced Action",
    "Soft Aesthetic",
]

TONES: List[str] = [
    "Professional",
    "Energetic",
    "Calm/Zen",
    "Luxury",
    "Friendly",
    "Urgent/Salesy",
    "Inspiring",
]

DURATION_UNIT = "detik"
DEFAULT_DURATION = f"10 {DURATION_UNIT}"
CUSTOM_DURATION = "Input Manual..."
DURATION_CHOICES: List[str] = [
    f"5 {DURATION_UNIT}",
    DEFAULT_DURATION,
    f"15 {DURATION_UNIT}",
    f"30 {DURATION_UNIT}",
    CUSTOM_DURATION,
]


def normalize_duration(value: object) -> str:
    """Reduce free-form input to ``"<n> detik"``.

    Only the digits are kept (``"12s"`` -> ``"12 detik"``); input without
    any digit falls back to the default duration.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = int(value)
        return f"{seconds} {DURATION_UNIT}" if seconds > 0 else DEFAULT_DURATION
    digits = re.sub(r"[^0-9]", "", str(value or ""))
    if not digits:
        return DEFAULT_DURATION
    seconds = int(digits)
    return f"{seconds} {DURATION_UNIT}" if seconds > 0 else DEFAULT_DURATION


def resolve_duration(choice: str, custom_value: object = None) -> str:
    """Return the duration for a dropdown choice plus the manual-entry field."""
    if choice == CUSTOM_DURATION:
        return normalize_duration(custom_value)
    return normalize_duration(choice or DEFAULT_DURATION)
