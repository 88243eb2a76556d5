"""Configuration helpers for the AdGenius Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_api_key: Optional[str] = None
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    text_model: str = "gemini-3-flash-preview"
    video_model_fast: str = "veo-3.1-fast-generate-preview"
    video_model_multi: str = "veo-3.1-generate-preview"
    text_temperature: float = 0.8
    video_resolution: str = "720p"
    video_poll_interval: float = 8.0
    request_timeout: float = 60.0
    progress_interval: float = 4.0
    progress_hold: float = 2.0
    history_limit: int = 10
    openai_key: Optional[str] = None
    data_dir: Path = Path("data")
    output_dir: Path = Path("outputs")
    log_dir: Path = Path("logs")
    default_prompt_backend: str = "gemini"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: str) -> Path:
    return Path(os.getenv(name) or default).expanduser()


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    gemini_key = (
        os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY")
    )

    metadata: dict[str, Any] = {}
    openai_base_url = os.getenv("OPENAI_BASE_URL")
    openai_model = os.getenv("OPENAI_MODEL")
    if openai_base_url:
        metadata["openai_base_url"] = openai_base_url
    if openai_model:
        metadata["openai_model"] = openai_model

    defaults = AppConfig()
    return AppConfig(
        gemini_api_key=gemini_key or None,
        gemini_base_url=os.getenv("GEMINI_BASE_URL") or defaults.gemini_base_url,
        text_model=os.getenv("GEMINI_TEXT_MODEL") or defaults.text_model,
        video_model_fast=os.getenv("VEO_FAST_MODEL") or defaults.video_model_fast,
        video_model_multi=os.getenv("VEO_MODEL") or defaults.video_model_multi,
        video_poll_interval=_env_float("VIDEO_POLL_INTERVAL", defaults.video_poll_interval),
        request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
        openai_key=os.getenv("OPENAI_API_KEY") or None,
        data_dir=_env_path("ADGENIUS_DATA_DIR", "data"),
        output_dir=_env_path("ADGENIUS_OUTPUT_DIR", "outputs"),
        log_dir=_env_path("ADGENIUS_LOG_DIR", "logs"),
        metadata=metadata,
    )
