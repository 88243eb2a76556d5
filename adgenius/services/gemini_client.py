"""Thin REST client for the Gemini API (text, Veo video, operations)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from adgenius.errors import AUTH_EXPIRED_MARKER, AuthExpiredError, ServiceError
from adgenius.services.assets import InlineImage
from config.settings import DEFAULT_GEMINI_BASE_URL

logger = logging.getLogger(__name__)

KeySource = Union[str, Callable[[], str]]


class GeminiClient:
    """Wraps the handful of Gemini endpoints this app calls.

    Every non-2xx answer becomes a ``ServiceError``. Errors whose message
    says the requested entity was not found become ``AuthExpiredError``;
    the provider returns that text when the selected key lost access, and
    callers only need to match on the type.
    """

    def __init__(
        self,
        api_key: KeySource,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def api_key(self) -> str:
        key = self._api_key() if callable(self._api_key) else self._api_key
        if not key:
            raise AuthExpiredError("API key belum dipilih.")
        return key

    # Endpoints ----------------------------------------------------------------
    def generate_content(
        self,
        model: str,
        text: str,
        images: Optional[List[InlineImage]] = None,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Return the concatenated text of the first candidate ("" if none)."""
        parts: List[Dict[str, Any]] = [{"text": text}]
        for image in images or []:
            parts.append({"inlineData": {"mimeType": image.mime_type, "data": image.data}})

        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}

        data = self._request("POST", f"{self.base_url}/models/{model}:generateContent", json=payload)
        return self._extract_text(data)

    def generate_videos(
        self,
        model: str,
        instance: Dict[str, Any],
        parameters: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Start a Veo job and return the long-running operation."""
        payload = {"instances": [instance], "parameters": parameters}
        return self._request(
            "POST", f"{self.base_url}/models/{model}:predictLongRunning", json=payload
        )

    def get_operation(self, operation: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
        name = operation if isinstance(operation, str) else operation.get("name")
        if not name:
            raise ServiceError("Operation handle tidak memiliki nama.")
        return self._request("GET", f"{self.base_url}/{name}")

    def download(self, uri: str) -> bytes:
        """Fetch a generated asset; the key goes in the query string."""
        response = self._send("GET", uri, params={"key": self.api_key()}, auth_header=False)
        return response.content

    # Internal helpers ---------------------------------------------------------
    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        response = self._send(method, url, **kwargs)
        try:
            data = response.json()
        except ValueError as exc:
            raise ServiceError(
                f"Respons tidak valid dari {url}", status_code=response.status_code
            ) from exc
        if not isinstance(data, dict):
            raise ServiceError(f"Respons tidak valid dari {url}", status_code=response.status_code)
        return data

    def _send(
        self, method: str, url: str, auth_header: bool = True, **kwargs: Any
    ) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if auth_header:
            headers["x-goog-api-key"] = self.api_key()
        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ServiceError(f"Gagal menghubungi layanan: {exc}") from exc
        self._raise_for_status(response)
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if 200 <= response.status_code < 300:
            return
        message = ""
        code = None
        try:
            error = response.json().get("error") or {}
        except (ValueError, AttributeError):
            error = {}
        if isinstance(error, dict):
            message = str(error.get("message") or "")
            code = error.get("status")
        if not message:
            message = (response.text or "")[:500]
        if AUTH_EXPIRED_MARKER in message:
            raise AuthExpiredError(message, status_code=response.status_code, code=code)
        raise ServiceError(
            f"{response.status_code} {message}".strip(),
            status_code=response.status_code,
            code=code,
        )

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(str(part.get("text", "")) for part in parts if not part.get("thought"))
