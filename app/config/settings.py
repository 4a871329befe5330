from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class UploadConfig(BaseSettings):
    """Temporary upload storage configuration"""

    path: Path = Field(default=Path("./uploads"), validation_alias="UPLOAD_PATH")
    max_file_size: int = Field(
        default=10 * 1024 * 1024,
        validation_alias="MAX_FILE_SIZE",
        ge=1,
    )
    chunk_size: int = Field(default=1024 * 1024, validation_alias="UPLOAD_CHUNK_SIZE", ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class AwsConfig(BaseSettings):
    """AWS credentials shared by Transcribe and Bedrock."""

    access_key: Optional[str] = Field(default=None, validation_alias="AWS_ACCESS_KEY_ID")
    secret_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias="AWS_SECRET_ACCESS_KEY",
    )
    region: str = Field(default="us-east-1", validation_alias="AWS_REGION")

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key and self.secret_key)

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class TranscribeConfig(BaseSettings):
    """Amazon Transcribe Streaming configuration."""

    language_code: str = Field(default="en-US", validation_alias="TRANSCRIBE_LANGUAGE_CODE")
    sample_rate_hz: int = Field(default=16000, validation_alias="TRANSCRIBE_SAMPLE_RATE", ge=8000)
    timeout_seconds: float = Field(
        default=60.0,
        validation_alias="TRANSCRIBE_TIMEOUT_SECONDS",
        gt=0,
    )

    @property
    def model_name(self) -> str:
        return f"amazon-transcribe-streaming:{self.language_code}"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    model_id: str = Field(
        default="amazon.nova-micro-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    max_tokens: int = Field(
        default=800,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    temperature: float = Field(
        default=0.7,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    timeout_seconds: float = Field(
        default=60.0,
        validation_alias="BEDROCK_TIMEOUT_SECONDS",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class RetryConfig(BaseSettings):
    """Retry policy applied to each external call."""

    max_attempts: int = Field(default=3, validation_alias="RETRY_MAX_ATTEMPTS", ge=1)
    base_delay_seconds: float = Field(
        default=1.0,
        validation_alias="RETRY_BASE_DELAY_SECONDS",
        ge=0.0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Audio Assessment API"
    app_version: str = "1.0.0"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"

    # Uploads
    upload: UploadConfig = Field(default_factory=UploadConfig)

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # Transcribe
    transcribe: TranscribeConfig = Field(default_factory=TranscribeConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Retries
    retry: RetryConfig = Field(default_factory=RetryConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @property
    def debug(self) -> bool:
        """Development mode only raises logging verbosity."""
        return self.environment.lower() != "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


# Global settings instance
settings = Settings()
