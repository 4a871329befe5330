"""Pydantic models for validating the assessment JSON returned by the LLM.

Decoding is all-or-nothing: a reply that is not valid JSON, or whose shape
differs from :class:`Assessment` in any way, is rejected as a whole and the
caller substitutes :data:`FALLBACK_ASSESSMENT`.
"""

from __future__ import annotations

import json
from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

MAX_CRITERION_SCORE = 5
MAX_TOTAL_SCORE = 3 * MAX_CRITERION_SCORE


class AssessmentScore(BaseModel):
    content: StrictInt = Field(ge=0, le=MAX_CRITERION_SCORE)
    clarity: StrictInt = Field(ge=0, le=MAX_CRITERION_SCORE)
    completeness: StrictInt = Field(ge=0, le=MAX_CRITERION_SCORE)
    total: StrictInt = Field(ge=0, le=MAX_TOTAL_SCORE)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def check_total(self) -> "AssessmentScore":
        expected = self.content + self.clarity + self.completeness
        if self.total != expected:
            raise ValueError(f"total must equal content + clarity + completeness ({expected})")
        return self


class Assessment(BaseModel):
    strengths: List[StrictStr] = Field(min_length=2, max_length=4)
    areas_to_improve: List[StrictStr] = Field(
        alias="areasToImprove",
        min_length=2,
        max_length=4,
    )
    perfect_definition: StrictStr = Field(alias="perfectDefinition")
    encouragement: StrictStr
    score: AssessmentScore

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json(cls, payload: str) -> "Assessment":
        cleaned = _clean_json_payload(payload)
        try:
            data = json.loads(cleaned)
        except (ValueError, RecursionError) as exc:
            raise ValidationError.from_exception_data(
                "Assessment",
                line_errors=[{"type": "value_error", "loc": ("__root__",), "input": payload, "ctx": {"error": str(exc)}}],
            ) from exc
        return cls.model_validate(data)


FALLBACK_ASSESSMENT = Assessment(
    strengths=["Good effort", "Attempted to answer the question"],
    areasToImprove=["Could improve structure", "Add more specific detail and examples"],
    perfectDefinition="A comprehensive answer with clear examples",
    encouragement="Keep practicing!",
    score=AssessmentScore(content=3, clarity=2, completeness=1, total=6),
)


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "Assessment",
    "AssessmentScore",
    "FALLBACK_ASSESSMENT",
    "MAX_CRITERION_SCORE",
    "MAX_TOTAL_SCORE",
]
