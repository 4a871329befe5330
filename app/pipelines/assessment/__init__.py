"""Assessment pipeline package.

Modules follow the order in which `POST /api/assessment` executes:

1. `ingestion` – validate the upload and hold it on disk for the request.
2. `transcription` – speech-to-text with bounded retries.
3. `prompts` – build the fixed system prompt plus the question/transcript message.
4. `evaluation` – call the LLM with bounded retries and validate the assessment.

`errors` holds the client-facing error types and the failure classifier.
"""

from .errors import (
    AssessmentApiError,
    FileTooLargeError,
    MissingAudioError,
    MissingQuestionError,
    PipelineFailedError,
    UnsupportedMediaTypeError,
    classify_failure,
)
from .evaluation import evaluate_response, parse_assessment
from .ingestion import resolve_content_type, stored_upload
from .prompts import build_evaluation_request
from .transcription import transcribe_audio
from .types import EvaluationOutcome, EvaluationRequest

__all__ = [
    "AssessmentApiError",
    "EvaluationOutcome",
    "EvaluationRequest",
    "FileTooLargeError",
    "MissingAudioError",
    "MissingQuestionError",
    "PipelineFailedError",
    "UnsupportedMediaTypeError",
    "build_evaluation_request",
    "classify_failure",
    "evaluate_response",
    "parse_assessment",
    "resolve_content_type",
    "stored_upload",
    "transcribe_audio",
]
