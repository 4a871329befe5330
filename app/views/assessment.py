"""Response schemas for the assessment endpoint."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.services.response_contract import Assessment


class AssessmentMetadata(BaseModel):
    audio_file: str = Field(alias="audioFile")
    original_name: str = Field(alias="originalName")
    file_size: int = Field(alias="fileSize")
    model: str
    transcription_model: str = Field(alias="transcriptionModel")
    evaluated_at: datetime = Field(alias="evaluatedAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AssessmentResponse(BaseModel):
    success: bool = True
    question: str
    transcription: str
    assessment: Assessment
    metadata: AssessmentMetadata

    model_config = ConfigDict(populate_by_name=True, frozen=True)
