"""Service layer helpers for external integrations."""

from .llm_client import BedrockLlmClient, LlmInvocationError
from .retry import RetryExhaustedError, retry_operation
from .transcribe import TranscribeService, TranscriptionError
from .uploads import (
    StorageError,
    TemporaryAudioFile,
    UploadManager,
    UploadTooLargeError,
)

__all__ = [
    "BedrockLlmClient",
    "LlmInvocationError",
    "RetryExhaustedError",
    "retry_operation",
    "TranscribeService",
    "TranscriptionError",
    "StorageError",
    "TemporaryAudioFile",
    "UploadManager",
    "UploadTooLargeError",
]
