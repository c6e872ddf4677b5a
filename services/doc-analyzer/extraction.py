"""Extraction pipeline: encode upload, call Gemini, validate and tag the JSON.

Every failure leaves this module as an ExtractionError (see errors.py).
GDPR: only sizes and document kinds are logged, never document content or
extracted values.
"""

import base64
import json
import logging
import re
import time

from pydantic import TypeAdapter, ValidationError

from config import settings
from errors import classify_error, malformed_response, missing_credential
from gemini_client import GeminiClient
from models import AnalysisResult, DocumentKind
from prompts import PROMPTS, SYSTEM_INSTRUCTION
from schemas import schema_for

logger = logging.getLogger(__name__)

_RESULT_ADAPTER: TypeAdapter = TypeAdapter(AnalysisResult)


def _reject_constant(name: str):
    raise ValueError(f"non-finite number in JSON: {name}")


def strip_data_uri(data: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, leaving the base64 payload."""
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def encode_payload(file_data: bytes | str) -> str:
    """Return the upload as base64 text ready for an inline data part."""
    if isinstance(file_data, str):
        return strip_data_uri(file_data.strip())
    return base64.b64encode(file_data).decode()


def extract(
    kind: DocumentKind,
    file_data: bytes | str,
    mime_type: str,
    client: GeminiClient | None = None,
) -> AnalysisResult:
    """Analyze one document and return the tagged result.

    ``file_data`` is raw bytes, base64 text, or a base64 data URI.
    ``mime_type`` is sent to Gemini as given.
    """
    kind = DocumentKind(kind)
    if not file_data or (isinstance(file_data, str) and not strip_data_uri(file_data.strip())):
        raise ValueError("file_data must not be empty")

    if not settings.GEMINI_API_KEY:
        raise missing_credential()

    start = time.monotonic()
    owns_client = client is None
    if owns_client:
        client = GeminiClient()

    try:
        data_b64 = encode_payload(file_data)
        logger.info(
            "Analyzing %s: mime=%s payload=%d base64 chars",
            kind.value, mime_type, len(data_b64),
        )
        raw_text = client.generate(
            SYSTEM_INSTRUCTION,
            schema_for(kind),
            PROMPTS[kind],
            data_b64,
            mime_type,
        )
        result = validate(raw_text, kind)
    except Exception as e:
        raise classify_error(e, kind) from e
    finally:
        if owns_client:
            client.close()

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("Analysis of %s completed in %dms", kind.value, elapsed_ms)
    return result


def validate(raw_text: str, kind: DocumentKind) -> AnalysisResult:
    """Parse the model text and build the result variant for ``kind``.

    The ``kind`` tag always comes from the request, never from the model.
    Missing required fields or wrongly typed values count as a malformed
    response; values are otherwise passed through untouched.
    """
    kind = DocumentKind(kind)
    parsed = try_parse_json(raw_text)
    if parsed is None:
        logger.warning("Unparseable %s response (%d chars)", kind.value, len(raw_text or ""))
        raise malformed_response(kind, raw_text)

    try:
        return _RESULT_ADAPTER.validate_python({**parsed, "kind": kind.value})
    except ValidationError as e:
        logger.warning(
            "%s response failed validation (%d errors): %s",
            kind.value, e.error_count(), e.errors()[0]["loc"],
        )
        raise malformed_response(kind, raw_text) from e


def try_parse_json(raw: str) -> dict | None:
    """Try to extract a JSON object from the model output.

    Handles direct JSON and markdown fences. NaN/Infinity, pathologically
    deep nesting and anything else unparseable yield None.
    """
    if not raw:
        return None

    cleaned = raw.strip()

    try:
        result = json.loads(cleaned, parse_constant=_reject_constant)
        if isinstance(result, dict):
            return result
    except (ValueError, RecursionError):
        pass

    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", cleaned, re.DOTALL)
    if match:
        try:
            result = json.loads(match.group(1).strip(), parse_constant=_reject_constant)
            if isinstance(result, dict):
                return result
        except (ValueError, RecursionError):
            pass

    return None
