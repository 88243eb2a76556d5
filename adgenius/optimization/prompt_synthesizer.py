"""Video prompt synthesis via hosted LLM APIs."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from adgenius.errors import AdGeniusError, ServiceError, ValidationError
from adgenius.optimization.presets import DEFAULT_DURATION, STYLES, TONES
from adgenius.services.assets import InlineImage, ReferenceImages
from adgenius.services.gemini_client import GeminiClient
from config.settings import AppConfig

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
Anda adalah pakar Videografi Iklan dan Prompt Engineering.
Tugas Anda adalah membuat prompt video deskriptif yang mendalam untuk model AI video (seperti Veo).

Prompt harus mencakup:
1. Pergerakan kamera (e.g., dynamic pan, slow zoom, cinematic tracking).
2. Pencahayaan (e.g., volumetric lighting, golden hour, neon cinematic).
3. Detail subjek (tekstur, warna, aksi).
4. Atmosfer/Mood (energetic, luxurious, minimalist).
5. Alur Cerita: Jika disediakan storyboard, pastikan prompt menggambarkan transisi dan urutan adegan tersebut.
6. Sinkronisasi Suara: Jika ada Voice Script, instruksikan model video untuk membuat subjek/talent melakukan lip-sync atau gerakan yang sesuai dengan durasi dan nada bicara script tersebut.

Output HANYA berupa teks prompt video dalam Bahasa Inggris yang sangat teknis dan deskriptif agar menghasilkan hasil visual terbaik.
""".strip()

DEFAULT_STORYBOARD = "Tampilkan produk secara sinematik dengan fokus pada detail."
DEFAULT_VOICE_SCRIPT = "Tidak ada dialog spesifik."

USER_PROMPT_TEMPLATE = """
Buat prompt video promosi untuk produk berikut:
Nama Produk: {product_name}
Target Audiens: {target_audience}
Gaya Visual: {style}
Nada/Tone: {tone}
Durasi Target: {duration}

Storyboard/Alur Adegan:
{storyboard}

Voice Script (Dialog/Narasi):
{voice_script}

Gunakan semua gambar yang diberikan sebagai referensi visual:
- Gambar Mood/Referensi: Memberikan tone warna dan komposisi visual.
- Gambar Talent: Foto pemeran yang harus muncul secara natural.
- Gambar Produk: Detail barang yang dipromosikan.
""".strip()


@dataclass(slots=True)
class PromptConfig:
    """Form fields describing the advert."""

    product_name: str
    target_audience: str = ""
    style: str = STYLES[0]
    tone: str = TONES[0]
    duration: str = DEFAULT_DURATION
    storyboard: str = ""
    voice_script: str = ""


@dataclass(slots=True)
class BackendRequest:
    """Information passed to synthesis backends."""

    system_instruction: str
    user_text: str
    images: List[InlineImage] = field(default_factory=list)
    temperature: float = 0.8
    metadata: Dict[str, Any] = field(default_factory=dict)


BackendCallable = Callable[[BackendRequest], Optional[str]]


class PromptSynthesizer:
    """Turns the form configuration and reference images into a Veo prompt."""

    def __init__(self, config: AppConfig, client: Optional[GeminiClient] = None) -> None:
        self.config = config
        self._client = client
        self._backends: Dict[str, BackendCallable] = {}
        self.warnings: list[str] = []
        self._auto_register_backends()

    def register_backend(self, name: str, backend: BackendCallable) -> None:
        """Register a prompt synthesis backend."""
        self._backends[name.lower()] = backend

    def clear_backends(self) -> None:
        """Remove all backends (mainly for tests)."""
        self._backends.clear()

    def has_backend(self, name: str) -> bool:
        return name.lower() in self._backends

    def available_backends(self) -> list[str]:
        """Return the registered backends ordered by preference."""
        priority = {"gemini": 0, "gpt": 1}
        return sorted(self._backends, key=lambda item: (priority.get(item, 99), item))

    def default_backend(self) -> str:
        preferred = self.config.default_prompt_backend.lower()
        if preferred in self._backends:
            return preferred
        choices = self.available_backends()
        return choices[0] if choices else preferred

    def build_request(
        self, prompt_config: PromptConfig, images: Optional[ReferenceImages] = None
    ) -> BackendRequest:
        user_text = USER_PROMPT_TEMPLATE.format(
            product_name=prompt_config.product_name,
            target_audience=prompt_config.target_audience,
            style=prompt_config.style,
            tone=prompt_config.tone,
            duration=prompt_config.duration,
            storyboard=prompt_config.storyboard or DEFAULT_STORYBOARD,
            voice_script=prompt_config.voice_script or DEFAULT_VOICE_SCRIPT,
        )
        return BackendRequest(
            system_instruction=SYSTEM_INSTRUCTION,
            user_text=user_text,
            images=images.inline() if images else [],
            temperature=self.config.text_temperature,
            metadata=self.config.metadata,
        )

    def synthesize(
        self,
        prompt_config: PromptConfig,
        images: Optional[ReferenceImages] = None,
        backend: Optional[str] = None,
    ) -> str:
        """Return the generated video prompt exactly as the service wrote it."""
        if not prompt_config.product_name.strip():
            raise ValidationError("Mohon masukkan nama produk")

        name = (backend or self.default_backend()).lower()
        if not self.has_backend(name):
            detail = "; ".join(self.warnings)
            raise ServiceError(
                f"Backend prompt '{name}' tidak tersedia." + (f" {detail}" if detail else "")
            )
        handler = self._backends[name]

        request = self.build_request(prompt_config, images)
        logger.info(
            "Synthesizing prompt for %r via %s with %d image(s)",
            prompt_config.product_name,
            name,
            len(request.images),
        )
        try:
            text = handler(request)
        except AdGeniusError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ServiceError(f"Gagal generate prompt: {exc}") from exc

        if not text or not text.strip():
            raise ServiceError("Layanan tidak mengembalikan prompt.")
        return text

    # Internal helpers ---------------------------------------------------------
    def _auto_register_backends(self) -> None:
        """Register backends automatically when credentials are available."""
        self._register_gemini_backend()
        self._register_openai_backend()

    def _register_gemini_backend(self) -> None:
        client = self._client
        if client is None:
            if not self.config.gemini_api_key:
                return
            client = GeminiClient(
                self.config.gemini_api_key,
                base_url=self.config.gemini_base_url,
                timeout=self.config.request_timeout,
            )

        def _gemini_backend(request: BackendRequest) -> str:
            return client.generate_content(
                self.config.text_model,
                request.user_text,
                images=request.images,
                system_instruction=request.system_instruction,
                temperature=request.temperature,
            )

        self.register_backend("gemini", _gemini_backend)

    def _register_openai_backend(self) -> None:
        if not self.config.openai_key:
            return
        try:
            openai_module = importlib.import_module("openai")
        except ImportError as exc:
            self.warnings.append(f"Tidak dapat mengimpor openai: {exc}")
            return

        base_url = self.config.metadata.get("openai_base_url")
        client_kwargs = {"api_key": self.config.openai_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        client = openai_module.OpenAI(**client_kwargs)

        def _gpt_backend(request: BackendRequest) -> str:
            content: list[dict[str, Any]] = [{"type": "text", "text": request.user_text}]
            for image in request.images:
                content.append(
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"},
                    }
                )
            completion = client.chat.completions.create(
                model=self.config.metadata.get("openai_model", "gpt-4o-mini"),
                messages=[
                    {"role": "system", "content": request.system_instruction},
                    {"role": "user", "content": content},
                ],
                temperature=request.temperature,
            )
            if not completion.choices:
                return ""
            return completion.choices[0].message.content or ""

        self.register_backend("gpt", _gpt_backend)
