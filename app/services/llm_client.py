"""Thin Bedrock client wrapper for assessment generation."""

from __future__ import annotations

import logging
from typing import Any

from botocore.config import Config
from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import TextGenerationInterface
from app.config.settings import AwsConfig, BedrockConfig
from app.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


class BedrockLlmClient(TextGenerationInterface):
    """Invoke Amazon Bedrock models with standard configuration."""

    def __init__(self, aws: AwsConfig, config: BedrockConfig) -> None:
        self._aws = aws
        self._config = config
        self._client: Any | None = None

    @property
    def model_name(self) -> str:
        return self._config.model_id

    def _get_client(self) -> Any:
        if self._client is None:
            # Retries are handled by the assessment pipeline.
            client_config = Config(
                connect_timeout=self._config.timeout_seconds,
                read_timeout=self._config.timeout_seconds,
                retries={"max_attempts": 1, "mode": "standard"},
            )
            self._client = create_boto3_client(
                "bedrock-runtime",
                self._aws,
                client_config=client_config,
            )
        return self._client

    async def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        """Run a Bedrock `converse` call and return the aggregate text output."""

        inference_cfg = {
            "maxTokens": self._config.max_tokens,
            "temperature": self._config.temperature,
        }

        def _call() -> str:
            response = self._get_client().converse(
                modelId=self._config.model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig=inference_cfg,
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except Exception as exc:
            raise LlmInvocationError(str(exc)) from exc

        if not result:
            logger.warning("Bedrock returned no text for model=%s", self._config.model_id)
        return result


__all__ = ["BedrockLlmClient", "LlmInvocationError"]
