"""One-off script for debugging the prompt -> video flow without the browser."""

from adgenius.optimization.prompt_synthesizer import PromptSynthesizer
from adgenius.pipelines.video import VideoSynthesisService
from adgenius.services.credentials import ApiKeyStore
from adgenius.services.gemini_client import GeminiClient
from adgenius.services.history_service import GenerationHistoryService
from adgenius.services.storage_service import StorageService
from adgenius.ui.callbacks import build_callbacks
from adgenius.utils.logging import setup_logging
from config.settings import load_config


def main() -> None:
    # 1. real configuration and services
    config = load_config()
    setup_logging(config)

    credentials = ApiKeyStore(config.gemini_api_key)
    client = GeminiClient(credentials.api_key, base_url=config.gemini_base_url)
    storage = StorageService(config.data_dir, config.output_dir)
    history = GenerationHistoryService(storage, limit=config.history_limit)
    history.load()

    callbacks = build_callbacks(
        config,
        synthesizer=PromptSynthesizer(config, client=client),
        video_service=VideoSynthesisService(config, client, credentials, storage),
        history=history,
        credentials=credentials,
        storage=storage,
    )

    # 2. prompt first; no images so the fast text-to-video model is used
    prompt, status = callbacks["on_generate_prompt"](
        product_name="Kopi Senja",
        target_audience="Pekerja muda urban",
        style="Cinematic High-End",
        tone="Friendly",
        duration_choice="10 detik",
        custom_duration=None,
        storyboard="pour shot then sip",
        voice_script="",
        mood_images=[],
        talent_images=[],
        product_images=[],
    )
    print("Prompt status:", status)
    if not prompt:
        return
    print(prompt)

    # 3. video; every progress update is printed as it arrives
    video_path = None
    for video_path, progress, message in callbacks["on_create_video"](
        prompt=prompt,
        aspect_ratio="16:9",
        product_name="Kopi Senja",
        storyboard="pour shot then sip",
        voice_script="",
        mood_images=[],
        talent_images=[],
        product_images=[],
    ):
        print(progress.replace("\n\n", " ") or message)

    if video_path:
        print("Video tersimpan:", video_path)
    else:
        print("Tidak ada video, periksa pesan status di atas.")


if __name__ == "__main__":
    main()
