"""Gradio UI callback tests."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from adgenius.errors import AuthExpiredError, ServiceError, ValidationError
from adgenius.optimization.prompt_synthesizer import PromptConfig
from adgenius.pipelines.video import VideoResult
from adgenius.services.assets import ReferenceImages
from adgenius.services.credentials import ApiKeyStore
from adgenius.services.history_service import GenerationHistoryService
from adgenius.services.storage_service import StorageService
from adgenius.ui import callbacks
from config.settings import AppConfig


class DummySynthesizer:
    """Minimal synthesizer stub returning a fixed prompt."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.calls: list[tuple[PromptConfig, ReferenceImages, Optional[str]]] = []
        self.error = error

    def synthesize(self, prompt_config, images=None, backend=None) -> str:
        if not prompt_config.product_name:
            raise ValidationError("Mohon masukkan nama produk")
        if self.error is not None:
            raise self.error
        self.calls.append((prompt_config, images, backend))
        return f"Prompt for {prompt_config.product_name}"


class DummyVideoService:
    """Stub video service writing a fake file."""

    def __init__(self, tmp_path: Path, error: Optional[Exception] = None) -> None:
        self.tmp_path = tmp_path
        self.error = error
        self.calls: list[tuple] = []

    def create_video(self, prompt, images, aspect_ratio, product_name=""):
        self.calls.append((prompt, images, aspect_ratio, product_name))
        if self.error is not None:
            raise self.error
        path = self.tmp_path / "outputs" / "video.mp4"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"mp4")
        return VideoResult(path=path, uri="uri", model="veo", operation_name="op", status_checks=1)


def build_callbacks(
    tmp_path,
    *,
    synthesizer=None,
    video_service=None,
    credentials=None,
    with_history: bool = True,
):
    config = AppConfig(progress_interval=0.01, progress_hold=0.0)
    storage = StorageService(tmp_path / "data", tmp_path / "outputs")
    history = GenerationHistoryService(storage) if with_history else None
    cb = callbacks.build_callbacks(
        config,
        synthesizer=synthesizer,
        video_service=video_service,
        history=history,
        credentials=credentials if credentials is not None else ApiKeyStore("key"),
        storage=storage,
        sleep=lambda seconds: None,
    )
    return cb, history


def prompt_args(product_name="Kopi Senja", **overrides):
    args = dict(
        product_name=product_name,
        target_audience="Gen Z",
        style="Cinematic High-End",
        tone="Friendly",
        duration_choice="Input Manual...",
        custom_duration=12,
        storyboard="pour shot then sip",
        voice_script="",
        mood_images=[],
        talent_images=["data:image/png;base64,VEFMRU5U"],
        product_images=None,
        backend_name="gemini",
        current_prompt="old prompt",
    )
    args.update(overrides)
    return args


def video_args(prompt="Prompt for Kopi Senja"):
    return dict(
        prompt=prompt,
        aspect_ratio="9:16",
        product_name="Kopi Senja",
        storyboard="pour shot then sip",
        voice_script="",
        mood_images=["data:image/png;base64,TU9PRA=="],
        talent_images=[],
        product_images=[],
    )


def test_on_generate_prompt_success(tmp_path):
    synthesizer = DummySynthesizer()
    cb, _ = build_callbacks(tmp_path, synthesizer=synthesizer)

    prompt, message = cb["on_generate_prompt"](**prompt_args())

    assert prompt == "Prompt for Kopi Senja"
    assert "berhasil" in message
    config, images, backend = synthesizer.calls[0]
    assert config.duration == "12 detik"
    assert images.talent == ["data:image/png;base64,VEFMRU5U"]
    assert backend == "gemini"


def test_on_generate_prompt_requires_product_name(tmp_path):
    synthesizer = DummySynthesizer()
    cb, _ = build_callbacks(tmp_path, synthesizer=synthesizer)

    prompt, message = cb["on_generate_prompt"](**prompt_args(product_name="  "))

    assert prompt == "old prompt"
    assert "nama produk" in message
    assert synthesizer.calls == []


def test_on_generate_prompt_handles_service_error(tmp_path):
    cb, _ = build_callbacks(tmp_path, synthesizer=DummySynthesizer(error=ServiceError("kosong")))

    prompt, message = cb["on_generate_prompt"](**prompt_args())

    assert prompt == "old prompt"
    assert "Gagal generate prompt" in message


def test_on_create_video_records_history(tmp_path):
    service = DummyVideoService(tmp_path)
    cb, history = build_callbacks(tmp_path, video_service=service)

    updates = list(cb["on_create_video"](**video_args()))

    assert "%" in updates[0][1]
    final_video, final_progress, final_status = updates[-1]
    assert final_video.endswith("video.mp4")
    assert final_progress == ""
    assert final_status == callbacks.VIDEO_DONE_MESSAGE
    assert any("100%" in update[1] for update in updates)
    _, images, ratio, product = service.calls[0]
    assert images.mood == ["data:image/png;base64,TU9PRA=="]
    assert ratio == "9:16"
    assert product == "Kopi Senja"

    entries = history.list()
    assert len(entries) == 1
    assert entries[0].product_name == "Kopi Senja"
    assert entries[0].reference_images == ["data:image/png;base64,TU9PRA=="]
    assert entries[0].talent_images == []
    assert entries[0].product_images == []
    assert entries[0].video_url == final_video


def test_on_create_video_requires_prompt(tmp_path):
    service = DummyVideoService(tmp_path)
    cb, _ = build_callbacks(tmp_path, video_service=service)

    updates = list(cb["on_create_video"](**video_args(prompt="  ")))

    assert updates == [(None, "", "Generate prompt terlebih dahulu")]
    assert service.calls == []


def test_on_create_video_requires_credential(tmp_path):
    service = DummyVideoService(tmp_path)
    cb, _ = build_callbacks(tmp_path, video_service=service, credentials=ApiKeyStore(None))

    updates = list(cb["on_create_video"](**video_args()))

    assert updates == [(None, "", callbacks.KEY_REQUIRED_MESSAGE)]
    assert service.calls == []


def test_on_create_video_auth_expired(tmp_path):
    service = DummyVideoService(tmp_path, error=AuthExpiredError("Requested entity was not found."))
    cb, history = build_callbacks(tmp_path, video_service=service)

    updates = list(cb["on_create_video"](**video_args()))

    assert updates[-1] == (None, "", callbacks.KEY_EXPIRED_MESSAGE)
    assert history.list() == []


def test_on_create_video_failure_is_not_recorded(tmp_path):
    service = DummyVideoService(tmp_path, error=ServiceError("503 unavailable"))
    cb, history = build_callbacks(tmp_path, video_service=service)

    updates = list(cb["on_create_video"](**video_args()))

    assert updates[-1][2].startswith("Gagal membuat video.")
    assert "503 unavailable" in updates[-1][2]
    assert history.list() == []


def test_history_refresh_and_select(tmp_path):
    cb, _ = build_callbacks(tmp_path, video_service=DummyVideoService(tmp_path))
    list(cb["on_create_video"](**video_args()))

    markdown, choices = cb["on_refresh_history"]()
    assert "Kopi Senja" in markdown
    assert len(choices) == 1

    prompt, video, message = cb["on_select_history"](choices[0][1])
    assert prompt == "Prompt for Kopi Senja"
    assert video.endswith("video.mp4")
    assert "Kopi Senja" in message


def test_empty_history_markdown(tmp_path):
    cb, _ = build_callbacks(tmp_path, with_history=False)

    markdown, choices = cb["on_refresh_history"]()

    assert markdown == callbacks.EMPTY_HISTORY
    assert choices == []


def test_add_and_remove_images(tmp_path):
    cb, _ = build_callbacks(tmp_path)
    first = tmp_path / "a.png"
    second = tmp_path / "b.jpg"
    Image.new("RGB", (4, 4), "red").save(first)
    Image.new("RGB", (4, 4), "blue").save(second)
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")

    images, previews, message = cb["on_add_images"]([str(first), str(second), str(broken)], [])

    assert len(images) == 2
    assert all(item.startswith("data:image/png;base64,") for item in images)
    assert len(previews) == 2
    assert "1 file" in message

    remaining, previews = cb["on_remove_image"](images, 0)
    assert remaining == images[1:]
    assert len(previews) == 1

    unchanged, _ = cb["on_remove_image"](remaining, None)
    assert unchanged == remaining


def test_select_api_key_updates_status(tmp_path):
    credentials = ApiKeyStore(None)
    cb, _ = build_callbacks(tmp_path, credentials=credentials)

    assert "belum" in cb["on_key_status"]()
    assert cb["on_select_api_key"]("") == "Gagal memilih API Key"

    message = cb["on_select_api_key"]("new-key")

    assert "aktif" in message
    assert credentials.api_key() == "new-key"


@pytest.mark.parametrize("choice,custom,expected", [("5 detik", None, "5 detik"), ("Input Manual...", "20s", "20 detik")])
def test_duration_choice_is_normalized(tmp_path, choice, custom, expected):
    synthesizer = DummySynthesizer()
    cb, _ = build_callbacks(tmp_path, synthesizer=synthesizer)

    cb["on_generate_prompt"](**prompt_args(duration_choice=choice, custom_duration=custom))

    assert synthesizer.calls[0][0].duration == expected
