"""Evaluation stage: ask the LLM for an assessment and validate its reply."""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from app.application.interfaces import TextGenerationInterface
from app.config.settings import RetryConfig
from app.services.response_contract import FALLBACK_ASSESSMENT, Assessment
from app.services.retry import Sleep, retry_operation
from app.telemetry import increment_fallback

from .types import EvaluationOutcome, EvaluationRequest

logger = logging.getLogger("app.services.assessment_pipeline")


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def parse_assessment(raw_response: str) -> tuple[Assessment, bool]:
    """Decode the reply, returning ``(assessment, used_fallback)``."""

    try:
        return Assessment.from_json(raw_response), False
    except (ValidationError, RecursionError) as exc:
        increment_fallback()
        logger.warning(
            "LLM produced an invalid assessment, using fallback: %s | raw=%s",
            exc,
            _truncate(raw_response or ""),
        )
        return FALLBACK_ASSESSMENT, True


async def evaluate_response(
    generator: TextGenerationInterface,
    request: EvaluationRequest,
    retry: RetryConfig,
    *,
    sleep: Sleep = asyncio.sleep,
) -> EvaluationOutcome:
    """Invoke the LLM with retries; a malformed reply degrades to the fallback assessment."""

    raw_response = await retry_operation(
        lambda: generator.generate(
            system_prompt=request.system_prompt,
            user_prompt=request.user_prompt,
        ),
        retry.max_attempts,
        "Evaluation",
        base_delay=retry.base_delay_seconds,
        sleep=sleep,
    )
    logger.debug("Raw LLM response: %s", _truncate(raw_response or ""))

    assessment, used_fallback = parse_assessment(raw_response)
    return EvaluationOutcome(
        assessment=assessment,
        raw_response=raw_response,
        used_fallback=used_fallback,
    )


__all__ = ["evaluate_response", "parse_assessment"]
