"""Audio assessment endpoint.

`POST /api/assessment` runs a strictly linear pipeline per request:

1. Validation of the multipart form (audio file present and of an audio type).
2. Storage of the upload in a uniquely named temporary file.
3. Question check; the stored file is removed if the question is missing.
4. Transcription of the file (retried).
5. Evaluation of the transcript against the question (retried, falls back on bad JSON).
6. Removal of the temporary file, then the response.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile, status

from app.controllers.dependencies import (
    SettingsDep,
    SpeechToTextDep,
    TextGeneratorDep,
    UploadManagerDep,
)
from app.pipelines.assessment import (
    MissingQuestionError,
    PipelineFailedError,
    build_evaluation_request,
    evaluate_response,
    resolve_content_type,
    stored_upload,
    transcribe_audio,
)
from app.views import AssessmentMetadata, AssessmentResponse, ErrorResponse

router = APIRouter(prefix="/api", tags=["assessment"])

logger = logging.getLogger(__name__)

ASSESSMENT_ENDPOINT = "POST /api/assessment"

_QUESTION_FORM = Form(None)
_AUDIO_FILE_UPLOAD = File(None)


@router.post(
    "/assessment",
    response_model=AssessmentResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def create_assessment(
    settings: SettingsDep,
    uploads: UploadManagerDep,
    speech_to_text: SpeechToTextDep,
    text_generator: TextGeneratorDep,
    question: Optional[str] = _QUESTION_FORM,
    audio: Optional[UploadFile] = _AUDIO_FILE_UPLOAD,
) -> AssessmentResponse:
    """Transcribe a recorded answer and return structured feedback with a rubric score."""

    content_type = resolve_content_type(audio)

    async with stored_upload(uploads, audio, content_type) as audio_file:
        if question is None or not question.strip():
            raise MissingQuestionError()

        try:
            transcript = await transcribe_audio(speech_to_text, audio_file, settings.retry)
            outcome = await evaluate_response(
                text_generator,
                build_evaluation_request(question.strip(), transcript),
                settings.retry,
            )
        except Exception as exc:
            logger.exception("Error assessing audio file=%s", audio_file.filename)
            raise PipelineFailedError.from_exception(exc) from exc

    logger.info(
        "Assessment complete file=%s total=%s fallback=%s",
        audio_file.filename,
        outcome.assessment.score.total,
        outcome.used_fallback,
    )

    return AssessmentResponse(
        success=True,
        question=question,
        transcription=transcript,
        assessment=outcome.assessment,
        metadata=AssessmentMetadata(
            audio_file=audio_file.filename,
            original_name=audio_file.original_name,
            file_size=audio_file.size,
            model=text_generator.model_name,
            transcription_model=speech_to_text.model_name,
            evaluated_at=datetime.now(timezone.utc),
        ),
    )


__all__ = ["router", "ASSESSMENT_ENDPOINT", "create_assessment"]
