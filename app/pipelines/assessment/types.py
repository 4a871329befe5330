"""Typed containers shared across the assessment pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from app.services.response_contract import Assessment


@dataclass(frozen=True)
class EvaluationRequest:
    """Prompts handed to the generation capability."""

    question: str
    transcript: str
    system_prompt: str
    user_prompt: str


@dataclass(frozen=True)
class EvaluationOutcome:
    """Result of the evaluation stage."""

    assessment: Assessment
    raw_response: str
    used_fallback: bool = False
