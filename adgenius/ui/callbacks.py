"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Sequence

from adgenius.errors import AdGeniusError, AuthExpiredError, ValidationError
from adgenius.optimization.presets import resolve_duration
from adgenius.optimization.prompt_synthesizer import PromptConfig, PromptSynthesizer
from adgenius.pipelines.video import AspectRatio, VideoResult, VideoSynthesisService
from adgenius.services.assets import ImageRole, ReferenceImages
from adgenius.services.credentials import CredentialProvider
from adgenius.services.history_service import GenerationHistoryService, GenerationRecord
from adgenius.services.storage_service import StorageService
from adgenius.ui.progress import ProgressTicker, render_progress
from adgenius.utils.image_utils import decode_data_uri, encode_image_file
from config.settings import AppConfig

logger = logging.getLogger(__name__)

KEY_REQUIRED_MESSAGE = "Pilih API Key terlebih dahulu untuk membuat video."
KEY_EXPIRED_MESSAGE = "Sesi API Key berakhir. Mohon pilih kembali."
VIDEO_DONE_MESSAGE = "Video berhasil dibuat!"
EMPTY_HISTORY = "_Belum ada video yang dibuat._"

VideoUpdate = tuple[Optional[str], str, str]


def _format_date(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d/%m/%Y")


def format_history(entries: Sequence[GenerationRecord]) -> str:
    """Markdown list for the "Koleksi Terakhir" section."""
    if not entries:
        return EMPTY_HISTORY
    lines = []
    for item in entries:
        assets = (
            f"{len(item.reference_images)} mood · {len(item.talent_images)} talent"
            f" · {len(item.product_images)} produk"
        )
        lines.append(f"- **{item.product_name}** · {_format_date(item.timestamp)} · {assets}")
    return "\n".join(lines)


def history_choices(entries: Sequence[GenerationRecord]) -> list[tuple[str, str]]:
    return [(f"{item.product_name} ({_format_date(item.timestamp)})", item.id) for item in entries]


def build_callbacks(
    config: AppConfig,
    synthesizer: Optional[PromptSynthesizer] = None,
    video_service: Optional[VideoSynthesisService] = None,
    history: Optional[GenerationHistoryService] = None,
    credentials: Optional[CredentialProvider] = None,
    storage: Optional[StorageService] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    # a single worker keeps video generations strictly one at a time
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="video")

    def _previews(images: Sequence[str]) -> list[Any]:
        previews = []
        for item in images:
            try:
                previews.append(decode_data_uri(item))
            except (ValueError, OSError) as exc:
                logger.warning("Cannot preview image: %s", exc)
        return previews

    def on_key_status() -> str:
        if credentials is not None and credentials.has_credential():
            return "✅ API Key aktif."
        return "⚠️ API Key belum dipilih. Pembuatan video memerlukan API Key berbayar."

    def on_select_api_key(key: str) -> str:
        if credentials is None:
            return "Gagal memilih API Key"
        if not credentials.select_credential(key):
            return "Gagal memilih API Key"
        return on_key_status()

    def on_add_images(files: Optional[Sequence[Any]], images: Optional[list[str]]) -> tuple[list[str], list[Any], str]:
        current = list(images or [])
        failed = 0
        for item in files or []:
            path = getattr(item, "name", item)
            try:
                current.append(encode_image_file(path))
            except (OSError, ValueError) as exc:
                failed += 1
                logger.warning("Skipping unreadable image %s: %s", path, exc)
        message = f"{len(current)} gambar."
        if failed:
            message += f" {failed} file tidak dapat dibaca."
        return current, _previews(current), message

    def on_remove_image(images: Optional[list[str]], index: Optional[int]) -> tuple[list[str], list[Any]]:
        current = list(images or [])
        if index is not None and 0 <= int(index) < len(current):
            del current[int(index)]
        return current, _previews(current)

    def on_clear_images() -> tuple[list[str], list[Any]]:
        return [], []

    def on_generate_prompt(
        product_name: str,
        target_audience: str,
        style: str,
        tone: str,
        duration_choice: str,
        custom_duration: Any,
        storyboard: str,
        voice_script: str,
        mood_images: Optional[list[str]],
        talent_images: Optional[list[str]],
        product_images: Optional[list[str]],
        backend_name: Optional[str] = None,
        current_prompt: str = "",
    ) -> tuple[str, str]:
        if synthesizer is None:
            return current_prompt, "Layanan prompt belum dikonfigurasi."

        prompt_config = PromptConfig(
            product_name=(product_name or "").strip(),
            target_audience=target_audience or "",
            style=style,
            tone=tone,
            duration=resolve_duration(duration_choice, custom_duration),
            storyboard=storyboard or "",
            voice_script=voice_script or "",
        )
        images = ReferenceImages.from_lists(mood_images, talent_images, product_images)
        try:
            prompt = synthesizer.synthesize(prompt_config, images, backend=backend_name or None)
        except ValidationError as exc:
            return current_prompt, str(exc)
        except AdGeniusError as exc:
            logger.error("Prompt generation failed: %s", exc)
            return current_prompt, f"Gagal generate prompt. {exc}"
        return prompt, "Prompt berhasil dibuat, silakan tinjau sebelum membuat video."

    def _record_history(
        result: VideoResult,
        prompt: str,
        product_name: str,
        storyboard: str,
        voice_script: str,
        images: ReferenceImages,
    ) -> None:
        if history is None:
            return
        record = GenerationRecord.create(
            product_name=product_name or "",
            prompt=prompt,
            storyboard=storyboard or "",
            voice_script=voice_script or "",
            reference_images=images.by_role(ImageRole.MOOD),
            talent_images=images.by_role(ImageRole.TALENT),
            product_images=images.by_role(ImageRole.PRODUCT),
            video_url=str(result.path),
        )
        try:
            history.record(record)
        except OSError as exc:
            logger.error("Failed to persist history: %s", exc)
            return
        if storage is not None:
            storage.cleanup(history.limit)

    def on_create_video(
        prompt: str,
        aspect_ratio: str,
        product_name: str,
        storyboard: str,
        voice_script: str,
        mood_images: Optional[list[str]],
        talent_images: Optional[list[str]],
        product_images: Optional[list[str]],
    ) -> Iterator[VideoUpdate]:
        if video_service is None:
            yield None, "", "Layanan video belum dikonfigurasi."
            return
        if credentials is not None and not credentials.has_credential():
            yield None, "", KEY_REQUIRED_MESSAGE
            return
        if not (prompt or "").strip():
            yield None, "", "Generate prompt terlebih dahulu"
            return

        images = ReferenceImages.from_lists(mood_images, talent_images, product_images)
        ratio = aspect_ratio or AspectRatio.LANDSCAPE.value
        ticker = ProgressTicker()
        yield None, render_progress(ticker.start()), ""

        future = executor.submit(
            video_service.create_video, prompt, images, ratio, product_name or ""
        )
        while True:
            try:
                result = future.result(timeout=config.progress_interval)
            except FutureTimeout:
                yield None, render_progress(ticker.tick()), ""
                continue
            except AuthExpiredError as exc:
                logger.warning("Video generation rejected the API key: %s", exc)
                yield None, "", KEY_EXPIRED_MESSAGE
                return
            except AdGeniusError as exc:
                logger.error("Video generation failed: %s", exc)
                yield None, "", f"Gagal membuat video. {exc}"
                return
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error during video generation")
                yield None, "", f"Gagal membuat video. {exc}"
                return
            break

        _record_history(result, prompt, product_name, storyboard, voice_script, images)
        video_path = str(result.path)
        yield video_path, render_progress(ticker.complete(VIDEO_DONE_MESSAGE)), VIDEO_DONE_MESSAGE
        sleep(config.progress_hold)
        yield video_path, render_progress(ticker.reset()), VIDEO_DONE_MESSAGE

    def on_refresh_history() -> tuple[str, list[tuple[str, str]]]:
        entries = history.list() if history is not None else []
        return format_history(entries), history_choices(entries)

    def on_select_history(entry_id: Optional[str]) -> tuple[str, Optional[str], str]:
        if history is None or not entry_id:
            return "", None, ""
        entry = history.get(entry_id)
        if entry is None:
            return "", None, "Riwayat tidak ditemukan."
        video_path = entry.video_url
        if video_path and not Path(video_path).exists():
            return entry.prompt, None, "File video sudah tidak tersedia."
        return entry.prompt, video_path, f"Menampilkan {entry.product_name}."

    return {
        "on_key_status": on_key_status,
        "on_select_api_key": on_select_api_key,
        "on_add_images": on_add_images,
        "on_remove_image": on_remove_image,
        "on_clear_images": on_clear_images,
        "on_generate_prompt": on_generate_prompt,
        "on_create_video": on_create_video,
        "on_refresh_history": on_refresh_history,
        "on_select_history": on_select_history,
    }
