"""Logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from config.settings import AppConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: AppConfig, level: int = logging.INFO) -> logging.Logger:
    """Configure and return the application logger."""
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_dir / "application.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logging.getLogger("adgenius")
