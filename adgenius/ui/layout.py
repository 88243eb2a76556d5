"""Gradio layout composition for AdGenius Studio."""

from __future__ import annotations

from typing import Any

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from adgenius.optimization.presets import (
    CUSTOM_DURATION,
    DEFAULT_DURATION,
    DURATION_CHOICES,
    STYLES,
    TONES,
)
from adgenius.optimization.prompt_synthesizer import PromptSynthesizer
from adgenius.pipelines.video import AspectRatio, VideoSynthesisService
from adgenius.services.credentials import ApiKeyStore
from adgenius.services.gemini_client import GeminiClient
from adgenius.services.history_service import GenerationHistoryService
from adgenius.services.storage_service import StorageService
from adgenius.ui.callbacks import build_callbacks
from config.settings import AppConfig

ASSET_SECTIONS = (
    ("mood", "Referensi Mood", "Tone & komposisi visual."),
    ("talent", "Talent / Model", "Pemeran dalam video."),
    ("product", "Foto Produk", "Barang spesifik."),
)


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio belum terpasang, jalankan instalasi dependensi terlebih dahulu.")

    credentials = ApiKeyStore(config.gemini_api_key)
    client = GeminiClient(
        credentials.api_key,
        base_url=config.gemini_base_url,
        timeout=config.request_timeout,
    )
    storage = StorageService(config.data_dir, config.output_dir)
    history = GenerationHistoryService(storage, limit=config.history_limit)
    history.load()
    synthesizer = PromptSynthesizer(config, client=client)
    video_service = VideoSynthesisService(config, client, credentials, storage)

    cb = build_callbacks(
        config,
        synthesizer=synthesizer,
        video_service=video_service,
        history=history,
        credentials=credentials,
        storage=storage,
    )

    backend_choices = synthesizer.available_backends() or [synthesizer.default_backend()]

    def _history_outputs() -> tuple[str, Any]:
        markdown, choices = cb["on_refresh_history"]()
        return markdown, gr.update(choices=choices, value=None)

    def _selected_index(evt: gr.SelectData) -> int:
        return evt.index

    with gr.Blocks(title="AdGenius Studio") as demo:
        gr.Markdown("## AdGenius Studio\nPrompt & video iklan bertenaga Gemini dan Veo.")

        with gr.Row():
            key_status = gr.Markdown(cb["on_key_status"]())
            api_key = gr.Textbox(label="API Key", type="password", scale=2)
            select_key_btn = gr.Button("Pilih API Key")

        with gr.Row():
            with gr.Column(scale=5):
                product_name = gr.Textbox(label="Nama Produk", placeholder="Contoh: Kopi Senja")
                target_audience = gr.Textbox(label="Target Audiens", placeholder="Gen Z, pekerja urban")
                with gr.Row():
                    style = gr.Dropdown(label="Gaya Visual", choices=STYLES, value=STYLES[0])
                    tone = gr.Dropdown(label="Nada / Tone", choices=TONES, value=TONES[0])
                with gr.Row():
                    duration = gr.Dropdown(
                        label="Durasi", choices=DURATION_CHOICES, value=DEFAULT_DURATION
                    )
                    custom_duration = gr.Number(
                        label="Durasi manual (detik)", precision=0, minimum=1, visible=False
                    )
                storyboard = gr.Textbox(label="Storyboard / Alur Adegan", lines=4)
                voice_script = gr.Textbox(label="Voice Script (Dialog/Narasi)", lines=3)

                gr.Markdown("**Aset Visual**")
                image_states: dict[str, Any] = {}
                for role, title, subtitle in ASSET_SECTIONS:
                    with gr.Group():
                        gr.Markdown(f"**{title}** · {subtitle}")
                        images = gr.State([])
                        selected = gr.State(None)
                        uploads = gr.File(
                            label="Unggah gambar",
                            file_count="multiple",
                            file_types=["image"],
                            type="filepath",
                        )
                        gallery = gr.Gallery(label=title, columns=4, height=160)
                        asset_status = gr.Markdown()
                        with gr.Row():
                            remove_btn = gr.Button("Hapus gambar terpilih", size="sm")
                            clear_btn = gr.Button("Kosongkan", size="sm")

                    uploads.upload(
                        fn=cb["on_add_images"],
                        inputs=[uploads, images],
                        outputs=[images, gallery, asset_status],
                    ).then(fn=lambda: None, outputs=uploads)
                    gallery.select(fn=_selected_index, outputs=selected)
                    remove_btn.click(
                        fn=cb["on_remove_image"],
                        inputs=[images, selected],
                        outputs=[images, gallery],
                    ).then(fn=lambda: None, outputs=selected)
                    clear_btn.click(fn=cb["on_clear_images"], outputs=[images, gallery])
                    image_states[role] = images

                backend = gr.Dropdown(
                    label="Model prompt",
                    choices=backend_choices,
                    value=synthesizer.default_backend(),
                    visible=len(backend_choices) > 1,
                )
                prompt_btn = gr.Button("Generate Magic Prompt", variant="primary")

            with gr.Column(scale=7):
                prompt = gr.Textbox(
                    label="AI-Engineered Prompt",
                    lines=10,
                    placeholder="Siapkan aset dan konfigurasi Anda",
                    show_copy_button=True,
                )
                prompt_status = gr.Markdown()
                with gr.Row():
                    aspect_ratio = gr.Radio(
                        label="Aspect Ratio",
                        choices=[ratio.value for ratio in AspectRatio],
                        value=AspectRatio.LANDSCAPE.value,
                    )
                    video_btn = gr.Button("Generate Video", variant="primary")
                gr.Markdown(
                    "_Lebih dari satu gambar mengaktifkan mode multi-referensi "
                    "(maks. 3 aset, selalu 16:9)._"
                )
                progress = gr.Markdown()
                video_status = gr.Markdown()
                video = gr.Video(label="Hasil Video")

                gr.Markdown("### Koleksi Terakhir")
                history_md = gr.Markdown()
                history_select = gr.Dropdown(label="Buka riwayat", choices=[])
                history_status = gr.Markdown()

        image_inputs = [image_states["mood"], image_states["talent"], image_states["product"]]

        select_key_btn.click(fn=cb["on_select_api_key"], inputs=api_key, outputs=key_status)

        duration.change(
            fn=lambda choice: gr.update(visible=choice == CUSTOM_DURATION),
            inputs=duration,
            outputs=custom_duration,
        )

        prompt_btn.click(
            fn=lambda: gr.update(interactive=False), outputs=prompt_btn
        ).then(
            fn=cb["on_generate_prompt"],
            inputs=[
                product_name,
                target_audience,
                style,
                tone,
                duration,
                custom_duration,
                storyboard,
                voice_script,
                *image_inputs,
                backend,
                prompt,
            ],
            outputs=[prompt, prompt_status],
        ).then(fn=lambda: gr.update(interactive=True), outputs=prompt_btn)

        video_btn.click(
            fn=lambda: gr.update(interactive=False), outputs=video_btn
        ).then(
            fn=cb["on_create_video"],
            inputs=[
                prompt,
                aspect_ratio,
                product_name,
                storyboard,
                voice_script,
                *image_inputs,
            ],
            outputs=[video, progress, video_status],
            concurrency_limit=1,
        ).then(
            fn=lambda: gr.update(interactive=True), outputs=video_btn
        ).then(
            fn=cb["on_key_status"], outputs=key_status
        ).then(fn=_history_outputs, outputs=[history_md, history_select])

        history_select.input(
            fn=cb["on_select_history"],
            inputs=history_select,
            outputs=[prompt, video, history_status],
        )

        demo.load(fn=_history_outputs, outputs=[history_md, history_select])

    return demo
