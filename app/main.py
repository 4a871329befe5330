"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from .application.interfaces import SpeechToTextInterface, TextGenerationInterface
from .config.settings import Settings, settings as default_settings
from .controllers import assessment
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .pipelines.assessment import AssessmentApiError, MissingAudioError, MissingQuestionError
from .services import BedrockLlmClient, TranscribeService, UploadManager
from .views import HealthResponse, ServiceStatusResponse

logger = logging.getLogger(__name__)


def _configure_logging(app_settings: Settings) -> None:
    """Stream application logs to stdout and a rotating file."""

    logging.getLogger().handlers.clear()

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)

    log_path = Path(app_settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if app_settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("app.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    noisy_loggers = [
        "botocore",
        "boto3",
        "urllib3",
        "awscrt",
        "python_multipart",
        "multipart",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(
    app_settings: Settings | None = None,
    *,
    speech_to_text: SpeechToTextInterface | None = None,
    text_generator: TextGenerationInterface | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app_settings = app_settings or default_settings
    _configure_logging(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
        description="Transcribes a recorded answer and returns structured educational feedback",
    )

    app.state.settings = app_settings
    app.state.upload_manager = UploadManager(app_settings.upload)
    app.state.speech_to_text = speech_to_text or TranscribeService(
        app_settings.aws, app_settings.transcribe
    )
    app.state.text_generator = text_generator or BedrockLlmClient(
        app_settings.aws, app_settings.bedrock
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    app.include_router(assessment.router)

    @app.get("/", include_in_schema=False)
    async def root() -> ServiceStatusResponse:
        """Root endpoint."""

        return ServiceStatusResponse(
            message=f"Welcome to {app_settings.app_name}",
            version=app_settings.app_version,
            status="operational",
            endpoint=assessment.ASSESSMENT_ENDPOINT,
        )

    @app.get("/health", include_in_schema=False)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""

        return HealthResponse(
            status="healthy",
            service=app_settings.app_name,
            version=app_settings.app_version,
        )

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(AssessmentApiError)
    async def assessment_exception_handler(request: Request, exc: AssessmentApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # A form field of the wrong kind counts as not provided.
        invalid_fields = {tuple(error.get("loc", ()))[:2] for error in exc.errors()}
        if ("body", "audio") in invalid_fields:
            return await assessment_exception_handler(request, MissingAudioError())
        if ("body", "question") in invalid_fields:
            return await assessment_exception_handler(request, MissingQuestionError())
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown routes and unsupported methods share the 404 contract.
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "message": f"The endpoint {request.method} {request.url.path} does not exist",
                    "availableEndpoint": assessment.ASSESSMENT_ENDPOINT,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Request failed", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Server error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc),
                "details": str(exc),
            },
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        logger.info("%s running on port %s", app_settings.app_name, app_settings.port)
        logger.info("Single endpoint: %s", assessment.ASSESSMENT_ENDPOINT)
        logger.info("AWS credentials configured: %s", "yes" if app_settings.aws.has_credentials else "no (default chain)")
        logger.info("Environment: %s", app_settings.environment)
        logger.info("Upload directory: %s", app_settings.upload.path)
        logger.info("Max file size: %s bytes", app_settings.upload.max_file_size)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
