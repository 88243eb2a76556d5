"""Application entry point for AdGenius Studio."""

from __future__ import annotations

from typing import Optional

from adgenius.ui.layout import build_app
from adgenius.utils.logging import setup_logging
from config.settings import load_config


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)
    if not config.gemini_api_key:
        logger.warning("No Gemini API key configured; select one in the UI before generating.")
    app = build_app(config)
    app.queue()
    app.launch(share=False, inbrowser=False)


if __name__ == "__main__":
    main()
