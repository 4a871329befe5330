"""Client-facing errors raised by the assessment endpoint and failure classification."""

from __future__ import annotations

import asyncio
from typing import Any, Iterator

from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError
from fastapi import status

from app.services.retry import RetryExhaustedError

CONNECTIVITY_MESSAGE = "Network connection issue. Please check your internet connection and try again."
CREDENTIAL_MESSAGE = "AWS credential issue. Please check your configuration."
RATE_LIMIT_MESSAGE = "AWS rate limit exceeded. Please wait a moment and try again."
GENERIC_MESSAGE = "Failed to assess audio"

_RATE_LIMIT_CODES = frozenset(
    {
        "ThrottlingException",
        "TooManyRequestsException",
        "LimitExceededException",
        "ServiceQuotaExceededException",
    }
)
_CREDENTIAL_CODES = frozenset(
    {
        "UnrecognizedClientException",
        "InvalidSignatureException",
        "AccessDeniedException",
        "ExpiredTokenException",
        "MissingAuthenticationTokenException",
        "NoCredentialsError",
        "PartialCredentialsError",
    }
)
_CONNECTIVITY_CODES = frozenset(
    {
        "EndpointConnectionError",
        "ConnectionClosedError",
        "ConnectTimeoutError",
        "ReadTimeoutError",
        "ServiceUnavailableException",
    }
)


class AssessmentApiError(Exception):
    """Base class for errors rendered as a JSON body by the app-level handler."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"
    message: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class MissingAudioError(AssessmentApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "No audio file provided"
    message = "Please provide an audio file in the request"


class MissingQuestionError(AssessmentApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "No question provided"
    message = "Please provide a question in the request body"


class UnsupportedMediaTypeError(AssessmentApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid file type"
    message = "Only audio files are allowed!"


class FileTooLargeError(AssessmentApiError):
    status_code = 413
    error = "File too large"
    message = "The uploaded file exceeds the maximum allowed size"

    def __init__(self, max_size: int) -> None:
        super().__init__(self.message)
        self.max_size = max_size

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "maxSize": self.max_size}


class PipelineFailedError(AssessmentApiError):
    """Transcription or evaluation could not be completed."""

    def __init__(self, error: str, details: str) -> None:
        super().__init__(details)
        self.error = error
        self.details = details

    @classmethod
    def from_exception(cls, exc: BaseException) -> "PipelineFailedError":
        return cls(classify_failure(exc), str(exc))

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


def _walk_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    pending: list[BaseException | None] = [exc]
    while pending:
        current = pending.pop(0)
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, RetryExhaustedError):
            pending.append(current.last_error)
        pending.extend((current.__cause__, current.__context__))


def _error_code(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return type(exc).__name__


def classify_failure(exc: BaseException) -> str:
    """Map a pipeline failure to one of the user-facing error categories.

    Error codes reported by botocore and the Transcribe SDK take precedence;
    message substrings are only consulted when no code matches.
    """

    chain = list(_walk_chain(exc))

    for current in chain:
        if isinstance(current, (NoCredentialsError, PartialCredentialsError)):
            return CREDENTIAL_MESSAGE
        code = _error_code(current)
        if code in _RATE_LIMIT_CODES:
            return RATE_LIMIT_MESSAGE
        if code in _CREDENTIAL_CODES:
            return CREDENTIAL_MESSAGE
        if code in _CONNECTIVITY_CODES or isinstance(current, (ConnectionError, asyncio.TimeoutError)):
            return CONNECTIVITY_MESSAGE

    for current in chain:
        text = str(current).lower()
        if "econnreset" in text or "connection reset" in text:
            return CONNECTIVITY_MESSAGE
        if "api key" in text or "credential" in text:
            return CREDENTIAL_MESSAGE
        if "rate limit" in text or "throttl" in text:
            return RATE_LIMIT_MESSAGE

    return GENERIC_MESSAGE


__all__ = [
    "AssessmentApiError",
    "CONNECTIVITY_MESSAGE",
    "CREDENTIAL_MESSAGE",
    "FileTooLargeError",
    "GENERIC_MESSAGE",
    "MissingAudioError",
    "MissingQuestionError",
    "PipelineFailedError",
    "RATE_LIMIT_MESSAGE",
    "UnsupportedMediaTypeError",
    "classify_failure",
]
