"""Prompt construction for the evaluation stage."""

from __future__ import annotations

from .types import EvaluationRequest

SYSTEM_PROMPT = """You are an expert educational assessor. Analyze the student's transcribed audio response and provide a structured JSON response with the following format:

{
  "strengths": ["point1", "point2", "point3"],
  "areasToImprove": ["point1", "point2", "point3"],
  "perfectDefinition": "A clear, comprehensive model answer for the question/topic",
  "encouragement": "A short, positive message to motivate the student",
  "score": {
    "content": 4,
    "clarity": 3,
    "completeness": 5,
    "total": 12
  }
}

Rules:
- strengths: Array of 2-4 positive points about the response
- areasToImprove: Array of 2-4 points that need improvement
- perfectDefinition: A model answer that shows what a perfect response would look like
- encouragement: A motivating message (1-2 sentences)
- score: content, clarity, and completeness are each an integer from 0 to 5; total is their sum (maximum 15)
- Return ONLY a single valid JSON object, no additional text or formatting."""

USER_PROMPT_TEMPLATE = (
    "Question: {question}\n\n"
    'Student\'s Audio Response (Transcribed): "{transcript}"\n\n'
    "Please evaluate this response and provide feedback in the required JSON format."
)


def build_evaluation_request(question: str, transcript: str) -> EvaluationRequest:
    """Embed the question and transcript verbatim in the fixed prompt pair."""

    return EvaluationRequest(
        question=question,
        transcript=transcript,
        system_prompt=SYSTEM_PROMPT,
        user_prompt=USER_PROMPT_TEMPLATE.format(question=question, transcript=transcript),
    )


__all__ = ["SYSTEM_PROMPT", "USER_PROMPT_TEMPLATE", "build_evaluation_request"]
