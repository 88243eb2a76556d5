"""Veo video generation service implementation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from adgenius.errors import AuthExpiredError, NotFoundError, ServiceError
from adgenius.services.assets import InlineImage, ReferenceImages
from adgenius.services.credentials import CredentialProvider
from adgenius.services.gemini_client import GeminiClient
from adgenius.services.storage_service import StorageService
from config.settings import AppConfig

logger = logging.getLogger(__name__)

MAX_REFERENCE_IMAGES = 3


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class OperationState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class VideoRequest:
    """Request data for one Veo generation."""

    model: str
    prompt: str
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    resolution: str = "720p"
    number_of_videos: int = 1
    image: Optional[InlineImage] = None
    reference_images: List[InlineImage] = field(default_factory=list)

    def instance(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"prompt": self.prompt}
        if self.image is not None:
            payload["image"] = _image_payload(self.image)
        if self.reference_images:
            payload["referenceImages"] = [
                {"image": _image_payload(item), "referenceType": "asset"}
                for item in self.reference_images
            ]
        return payload

    def parameters(self) -> Dict[str, Any]:
        return {
            "aspectRatio": self.aspect_ratio.value,
            "resolution": self.resolution,
            "sampleCount": self.number_of_videos,
        }


@dataclass(slots=True)
class VideoResult:
    """Result payload produced by the video pipeline."""

    path: Path
    uri: str
    model: str
    operation_name: str
    status_checks: int


def _image_payload(image: InlineImage) -> Dict[str, str]:
    return {"bytesBase64Encoded": image.data, "mimeType": image.mime_type}


def extract_video_uri(operation: Dict[str, Any]) -> Optional[str]:
    """Return the first generated video URI of a finished operation."""
    response = operation.get("response") or {}
    samples = (response.get("generateVideoResponse") or {}).get("generatedSamples")
    if not samples:
        samples = response.get("generatedVideos") or []
    for sample in samples:
        uri = (sample.get("video") or {}).get("uri")
        if uri:
            return uri
    return None


class VideoSynthesisService:
    """Submits Veo jobs, polls them to completion and stores the result."""

    def __init__(
        self,
        config: AppConfig,
        client: GeminiClient,
        credentials: CredentialProvider,
        storage: StorageService,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.client = client
        self.credentials = credentials
        self.storage = storage
        self._sleep = sleep

    def build_request(
        self,
        prompt: str,
        images: Optional[ReferenceImages] = None,
        aspect_ratio: AspectRatio | str = AspectRatio.LANDSCAPE,
    ) -> VideoRequest:
        """Pick the model variant and image layout for the supplied assets.

        More than one image switches to the multi-reference model, which
        takes at most three asset references and only renders 16:9.
        A single image is sent as the starting frame of the fast model.
        """
        ratio = AspectRatio(aspect_ratio)
        all_images = images.inline() if images else []

        if len(all_images) > 1:
            return VideoRequest(
                model=self.config.video_model_multi,
                prompt=prompt,
                aspect_ratio=AspectRatio.LANDSCAPE,
                resolution=self.config.video_resolution,
                reference_images=all_images[:MAX_REFERENCE_IMAGES],
            )

        return VideoRequest(
            model=self.config.video_model_fast,
            prompt=prompt,
            aspect_ratio=ratio,
            resolution=self.config.video_resolution,
            image=all_images[0] if all_images else None,
        )

    def submit(self, request: VideoRequest) -> Dict[str, Any]:
        operation = self.client.generate_videos(
            request.model, request.instance(), request.parameters()
        )
        logger.info(
            "Video operation %s: %s (model=%s, references=%d, inline_image=%s)",
            operation.get("name", "?"),
            OperationState.SUBMITTED.value,
            request.model,
            len(request.reference_images),
            request.image is not None,
        )
        return operation

    def wait_for_completion(self, operation: Dict[str, Any]) -> tuple[Dict[str, Any], int]:
        """Poll until the operation reports done; returns it with the check count."""
        checks = 0
        name = operation.get("name", "?")
        while not operation.get("done"):
            self._sleep(self.config.video_poll_interval)
            operation = self.client.get_operation(operation)
            checks += 1
            logger.debug("Video operation %s: %s (check %d)", name, OperationState.POLLING.value, checks)

        error = operation.get("error")
        if error:
            logger.warning("Video operation %s: %s (%s)", name, OperationState.FAILED.value, error)
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ServiceError(f"Pembuatan video gagal: {message}")
        logger.info("Video operation %s: %s after %d check(s)", name, OperationState.DONE.value, checks)
        return operation, checks

    def create_video(
        self,
        prompt: str,
        images: Optional[ReferenceImages] = None,
        aspect_ratio: AspectRatio | str = AspectRatio.LANDSCAPE,
        product_name: str = "",
    ) -> VideoResult:
        """Generate a video and return the locally saved file."""
        if not self.credentials.has_credential():
            raise AuthExpiredError("API key belum dipilih.")

        request = self.build_request(prompt, images, aspect_ratio)
        try:
            operation = self.submit(request)
            operation, checks = self.wait_for_completion(operation)

            uri = extract_video_uri(operation)
            if not uri:
                raise NotFoundError("Video URI not found")

            content = self.client.download(uri)
        except AuthExpiredError:
            self.credentials.reset()
            raise

        path = self.storage.save_video(
            content, {"product_name": product_name, "model": request.model}
        )
        return VideoResult(
            path=path,
            uri=uri,
            model=request.model,
            operation_name=str(operation.get("name", "")),
            status_checks=checks,
        )
