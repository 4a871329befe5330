"""Temporary on-disk storage for uploaded audio.

Each request writes its upload to a uniquely named file in the configured
directory and removes it again when the request finishes. Names are never
reused, so concurrent requests share the directory without locking.
"""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Protocol

from fastapi.concurrency import run_in_threadpool

from app.config.settings import UploadConfig
from app.telemetry import increment_cleanup_failure

logger = logging.getLogger("app.services.assessment_pipeline")


class AsyncByteSource(Protocol):
    async def read(self, size: int = -1) -> bytes:
        ...


class StorageError(RuntimeError):
    """Raised when an upload cannot be written to the upload directory."""


class UploadTooLargeError(StorageError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        super().__init__(f"Upload exceeds the maximum allowed size of {max_size} bytes")


@dataclass(frozen=True)
class TemporaryAudioFile:
    """On-disk copy of one uploaded recording."""

    path: Path
    original_name: str
    content_type: str
    size: int

    @property
    def filename(self) -> str:
        return self.path.name


def build_temporary_filename(original_name: str | None) -> str:
    """Return ``audio-<millis>-<random><ext>`` keeping the upload's extension."""

    suffix = Path(original_name or "").suffix.lower()
    return f"audio-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


class UploadManager:
    """Create and remove per-request temporary audio files."""

    def __init__(self, config: UploadConfig) -> None:
        self._directory = Path(config.path)
        self._max_size = config.max_file_size
        self._chunk_size = config.chunk_size
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def max_size(self) -> int:
        return self._max_size

    async def acquire(
        self,
        source: AsyncByteSource,
        original_name: str,
        content_type: str,
    ) -> TemporaryAudioFile:
        """Copy ``source`` into a fresh file, enforcing the size limit while streaming."""

        handle, path = await run_in_threadpool(self._open_unique, original_name)
        size = 0
        try:
            while True:
                chunk = await source.read(self._chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > self._max_size:
                    raise UploadTooLargeError(self._max_size)
                await run_in_threadpool(handle.write, chunk)
        except BaseException:
            handle.close()
            self._remove(path)
            raise
        await run_in_threadpool(handle.close)

        logger.debug("Stored upload %s as %s (%s bytes)", original_name, path.name, size)
        return TemporaryAudioFile(
            path=path,
            original_name=original_name,
            content_type=content_type,
            size=size,
        )

    def release(self, audio_file: TemporaryAudioFile | None) -> None:
        """Delete the file. Missing files are ignored and other failures are only logged."""

        if audio_file is None:
            return
        self._remove(audio_file.path)

    @asynccontextmanager
    async def scoped(
        self,
        source: AsyncByteSource,
        original_name: str,
        content_type: str,
    ) -> AsyncIterator[TemporaryAudioFile]:
        """Acquire a file for the duration of the ``async with`` block."""

        audio_file = await self.acquire(source, original_name, content_type)
        try:
            yield audio_file
        finally:
            self.release(audio_file)

    def _open_unique(self, original_name: str) -> tuple[BinaryIO, Path]:
        while True:
            path = self._directory / build_temporary_filename(original_name)
            try:
                return path.open("xb"), path
            except FileExistsError:
                continue
            except OSError as exc:
                raise StorageError(f"Could not create upload file in {self._directory}: {exc}") from exc

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            increment_cleanup_failure()
            logger.exception("Error cleaning up file %s", path)


__all__ = [
    "StorageError",
    "TemporaryAudioFile",
    "UploadManager",
    "UploadTooLargeError",
    "build_temporary_filename",
]
