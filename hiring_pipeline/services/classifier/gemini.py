"""
Gemini generateContent adapter.

A 404 from the models endpoint means the model id is not offered to this
key/region and is reported as ProviderUnavailableError; every other failure
is terminal.
"""

import base64
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from hiring_pipeline.core.config import settings
from hiring_pipeline.errors import (
    ProviderConfigError,
    ProviderError,
    ProviderUnavailableError,
    VerificationDecodeError,
)
from hiring_pipeline.services.classifier.base import ClassificationRequest

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, dict[str, Any], dict[str, str]], Awaitable[tuple[int, dict]]]


class GeminiClassifierProvider:
    """Calls one Gemini model; the fallback order lives in VerificationService."""

    provider = "gemini"

    def __init__(
        self,
        model: str,
        *,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        self.model = model
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.api_base = (api_base or settings.VERIFICATION_API_BASE).rstrip("/")
        self.timeout = timeout or settings.VERIFICATION_TIMEOUT_SECONDS
        self.fetcher = fetcher or self._http_post

    def __repr__(self) -> str:
        return f"{self.provider}:{self.model}"

    async def _http_post(self, url: str, json_body: dict[str, Any], params: dict[str, str]) -> tuple[int, dict]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=json_body, params=params)
        try:
            payload = resp.json()
        except ValueError:
            payload = {"text": resp.text}
        return resp.status_code, payload

    def _build_request_body(self, request: ClassificationRequest) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": request.media_type,
                                "data": base64.b64encode(request.evidence).decode("ascii"),
                            }
                        },
                        {"text": request.prompt},
                    ]
                }
            ],
            "generationConfig": {
                "temperature": settings.VERIFICATION_TEMPERATURE,
                "maxOutputTokens": settings.VERIFICATION_MAX_OUTPUT_TOKENS,
            },
        }

    @staticmethod
    def _error_message(payload: dict) -> str:
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                return error.get("message") or "upstream_error"
            if error:
                return str(error)
            if payload.get("text"):
                return str(payload["text"])[:500]
        return "upstream_error"

    def _extract_text(self, payload: dict) -> str:
        candidates = (payload.get("candidates") or []) if isinstance(payload, dict) else []
        parts = []
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
        if parts:
            first = parts[0]
            if first.get("text"):
                return first["text"]
            if first.get("json") is not None:
                return json.dumps(first["json"])
        raise VerificationDecodeError(
            f"Empty response from model {self.model}",
            {"model": self.model},
        )

    async def classify(self, request: ClassificationRequest) -> str:
        if not self.api_key:
            raise ProviderConfigError(
                "Classifier API key is not configured",
                {"missing": ["GEMINI_API_KEY"]},
            )

        url = f"{self.api_base}/{self.model}:generateContent"
        logger.info("Attempting classifier model %s", self.model)
        try:
            status_code, payload = await self.fetcher(url, self._build_request_body(request), {"key": self.api_key})
        except httpx.HTTPError as exc:
            raise ProviderError(self.model, f"Transport error calling {self.model}: {exc}") from exc

        if status_code == 404:
            raise ProviderUnavailableError(self.model, f"Model {self.model} not found")
        if status_code >= 400:
            raise ProviderError(
                self.model,
                f"Classifier API error {status_code}: {self._error_message(payload)}",
                upstream_status=status_code,
            )

        text = self._extract_text(payload)
        logger.info("Classifier model %s answered", self.model)
        return text
