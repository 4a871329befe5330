"""Common FastAPI dependencies reused across controllers.

Every component is built once in ``create_app`` and stored on
``app.state``; tests swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.application.interfaces import SpeechToTextInterface, TextGenerationInterface
from app.config.settings import Settings
from app.services.uploads import UploadManager


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upload_manager(request: Request) -> UploadManager:
    return request.app.state.upload_manager


def get_speech_to_text(request: Request) -> SpeechToTextInterface:
    return request.app.state.speech_to_text


def get_text_generator(request: Request) -> TextGenerationInterface:
    return request.app.state.text_generator


SettingsDep = Annotated[Settings, Depends(get_settings)]
UploadManagerDep = Annotated[UploadManager, Depends(get_upload_manager)]
SpeechToTextDep = Annotated[SpeechToTextInterface, Depends(get_speech_to_text)]
TextGeneratorDep = Annotated[TextGenerationInterface, Depends(get_text_generator)]


__all__ = [
    "get_settings",
    "get_speech_to_text",
    "get_text_generator",
    "get_upload_manager",
    "SettingsDep",
    "SpeechToTextDep",
    "TextGeneratorDep",
    "UploadManagerDep",
]
