"""Request ingestion helpers: upload validation and temporary storage."""

from __future__ import annotations

import mimetypes
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import UploadFile

from app.services.uploads import TemporaryAudioFile, UploadManager, UploadTooLargeError

from .errors import FileTooLargeError, MissingAudioError, UnsupportedMediaTypeError


def resolve_content_type(audio_file: UploadFile | None) -> str:
    """Require an audio upload, guessing the media type from the filename when unset."""

    if audio_file is None or not audio_file.filename:
        raise MissingAudioError()

    content_type = audio_file.content_type
    if not content_type or content_type == "application/octet-stream":
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type

    if not content_type or not content_type.startswith("audio/"):
        raise UnsupportedMediaTypeError()
    return content_type


@asynccontextmanager
async def stored_upload(
    uploads: UploadManager,
    audio_file: UploadFile,
    content_type: str,
) -> AsyncIterator[TemporaryAudioFile]:
    """Keep the upload on disk for the duration of the block."""

    try:
        async with uploads.scoped(audio_file, audio_file.filename, content_type) as temporary:
            yield temporary
    except UploadTooLargeError as exc:
        raise FileTooLargeError(exc.max_size) from exc
    finally:
        await audio_file.close()


__all__ = ["resolve_content_type", "stored_upload"]
