"""Error taxonomy for document analysis and the classifier that maps
arbitrary failures onto it."""

import logging
from enum import Enum

from models import DocumentKind

logger = logging.getLogger(__name__)

SAFETY_MARKER = "SAFETY"
DEFAULT_HINT = "Please check your API key and file format."


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    SAFETY_REJECTED = "safety_rejected"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_OR_SERVICE = "transport_or_service"


class ExtractionError(Exception):
    """Terminal failure of one extraction, safe to show to the user.

    ``raw_text`` holds the model output for MALFORMED_RESPONSE; it is for
    debugging only and is not part of the user-facing message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        document_kind: DocumentKind | None = None,
        raw_text: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.document_kind = document_kind
        self.raw_text = raw_text

    @property
    def retryable(self) -> bool:
        # A fresh request to a non-deterministic model may parse fine.
        return self.kind is ErrorKind.MALFORMED_RESPONSE


def missing_credential() -> ExtractionError:
    return ExtractionError(
        ErrorKind.MISSING_CREDENTIAL,
        "No Gemini API key configured. Set GEMINI_API_KEY to enable document analysis.",
    )


def malformed_response(document_kind: DocumentKind, raw_text: str) -> ExtractionError:
    return ExtractionError(
        ErrorKind.MALFORMED_RESPONSE,
        "Gemini returned an invalid response format. Please try again.",
        document_kind=document_kind,
        raw_text=raw_text,
    )


def classify_error(exc: BaseException, document_kind: DocumentKind) -> ExtractionError:
    """Map any failure raised during an extraction to an ExtractionError."""
    if isinstance(exc, ExtractionError):
        return exc

    message = str(exc)
    if SAFETY_MARKER in message:
        logger.warning("Analysis of %s blocked by provider safety filters", document_kind.value)
        return ExtractionError(
            ErrorKind.SAFETY_REJECTED,
            "Analysis blocked by safety filters. Payslips and bank statements contain "
            "sensitive data that some AI safety settings may restrict.",
            document_kind=document_kind,
        )

    logger.error("Analysis of %s failed: %s", document_kind.value, message or type(exc).__name__)
    return ExtractionError(
        ErrorKind.TRANSPORT_OR_SERVICE,
        f"Failed to analyze {document_kind.value}. {message or DEFAULT_HINT}",
        document_kind=document_kind,
    )
