"""HTTP client for the Gemini ``generateContent`` REST endpoint.

One request per call: no retry, no streaming. The caller classifies
failures (see errors.py).
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from config import settings
from schemas import to_jsonable

logger = logging.getLogger(__name__)

API_VERSION = "v1beta"

# Statements and payslips routinely trip provider filters (PII, salaries).
SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
BLOCK_NONE = "BLOCK_NONE"


class GeminiServiceError(Exception):
    """Gemini call failed (connection, timeout, HTTP error, empty answer)."""


class GeminiSafetyBlocked(GeminiServiceError):
    """Gemini refused to answer on content-safety grounds."""


def build_request(
    system_instruction: str,
    schema: Mapping[str, Any],
    prompt: str,
    data_b64: str,
    mime_type: str,
) -> dict:
    """Build the ``generateContent`` request body."""
    return {
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"inlineData": {"mimeType": mime_type, "data": data_b64}},
                    {"text": prompt},
                ],
            }
        ],
        "safetySettings": [
            {"category": category, "threshold": BLOCK_NONE}
            for category in SAFETY_CATEGORIES
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": to_jsonable(schema),
        },
    }


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or f"HTTP {resp.status_code}"
    return f"HTTP {resp.status_code}"


class GeminiClient:
    """Thin httpx wrapper around a single Gemini model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model = model or settings.GEMINI_MODEL
        self._base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")

        read_timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.GEMINI_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=60.0,
                pool=30.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def generate(
        self,
        system_instruction: str,
        schema: Mapping[str, Any],
        prompt: str,
        data_b64: str,
        mime_type: str,
    ) -> str:
        """Send one ``generateContent`` request and return the raw model text.

        Raises GeminiSafetyBlocked when the provider blocks on safety grounds,
        GeminiServiceError for anything else that prevents an answer.
        """
        payload = build_request(system_instruction, schema, prompt, data_b64, mime_type)
        url = f"/{API_VERSION}/models/{self._model}:generateContent"

        try:
            resp = self._client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error("Gemini request timed out: %s", e)
            raise GeminiServiceError(f"Gemini request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Gemini HTTP error: %s", e)
            raise GeminiServiceError(f"Cannot reach Gemini: {e}") from e

        if resp.status_code != 200:
            detail = _error_detail(resp)
            logger.error("Gemini returned %d: %s", resp.status_code, detail)
            raise GeminiServiceError(detail)

        return self._response_text(resp.json())

    @staticmethod
    def _response_text(data: dict) -> str:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason == "SAFETY":
            raise GeminiSafetyBlocked("Request blocked due to SAFETY")
        if block_reason:
            raise GeminiServiceError(f"Request blocked: {block_reason}")

        candidates = data.get("candidates") or []
        if not candidates:
            raise GeminiServiceError("Gemini returned no candidates")

        candidate = candidates[0]
        if candidate.get("finishReason") == "SAFETY":
            raise GeminiSafetyBlocked("Candidate was blocked due to SAFETY")

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            reason = candidate.get("finishReason", "unknown")
            raise GeminiServiceError(f"Gemini returned an empty response (finishReason={reason})")
        return text

    def health(self) -> dict:
        """Look up the configured model. Returns a status dict, never raises."""
        try:
            resp = self._client.get(f"/{API_VERSION}/models/{self._model}", timeout=10.0)
        except httpx.HTTPError as e:
            logger.warning("Gemini health check failed: %s", e)
            return {"status": "unreachable", "error": str(e)}

        if resp.status_code != 200:
            return {"status": "error", "error": _error_detail(resp)}
        return {"status": "ok", "model": self._model}
