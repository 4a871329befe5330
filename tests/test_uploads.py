"""Tests for the temporary audio file lifecycle."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

import pytest

from app.config.settings import UploadConfig
from app.services.uploads import UploadManager, UploadTooLargeError, build_temporary_filename
from app.telemetry import CLEANUP_FAILURE_COUNTER
from tests.conftest import ByteSource


@pytest.fixture
def manager(tmp_path: Path) -> UploadManager:
    return UploadManager(UploadConfig(path=tmp_path / "nested" / "uploads", max_file_size=4096, chunk_size=512))


def test_directory_is_created_on_startup(manager):
    assert manager.directory.is_dir()


def test_temporary_filename_keeps_extension():
    assert re.fullmatch(r"audio-\d+-\d+\.m4a", build_temporary_filename("Lecture Answer.M4A"))
    assert re.fullmatch(r"audio-\d+-\d+", build_temporary_filename("recording"))
    assert re.fullmatch(r"audio-\d+-\d+", build_temporary_filename(None))


def test_acquire_writes_the_payload(manager):
    payload = b"RIFF" + bytes(range(256)) * 8

    audio_file = asyncio.run(manager.acquire(ByteSource(payload), "answer.wav", "audio/wav"))

    assert audio_file.path.parent == manager.directory
    assert audio_file.path.read_bytes() == payload
    assert audio_file.size == len(payload)
    assert audio_file.original_name == "answer.wav"
    assert audio_file.content_type == "audio/wav"
    assert audio_file.filename.endswith(".wav")


def test_oversized_upload_leaves_nothing_behind(manager):
    with pytest.raises(UploadTooLargeError) as excinfo:
        asyncio.run(manager.acquire(ByteSource(b"x" * 5000), "big.mp3", "audio/mpeg"))

    assert excinfo.value.max_size == 4096
    assert list(manager.directory.iterdir()) == []


def test_release_is_idempotent(manager):
    audio_file = asyncio.run(manager.acquire(ByteSource(b"abc"), "a.mp3", "audio/mpeg"))

    manager.release(audio_file)
    manager.release(audio_file)
    manager.release(None)

    assert not audio_file.path.exists()


def test_release_failure_is_logged_and_swallowed(manager, monkeypatch):
    audio_file = asyncio.run(manager.acquire(ByteSource(b"abc"), "a.mp3", "audio/mpeg"))
    before = CLEANUP_FAILURE_COUNTER._value.get()

    def refuse_unlink(self, missing_ok=False):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(Path, "unlink", refuse_unlink)
    manager.release(audio_file)

    assert CLEANUP_FAILURE_COUNTER._value.get() == before + 1


def test_scoped_file_is_released_when_the_block_raises(manager):
    seen: list[Path] = []

    async def run() -> None:
        async with manager.scoped(ByteSource(b"abc"), "a.ogg", "audio/ogg") as audio_file:
            seen.append(audio_file.path)
            assert audio_file.path.exists()
            raise RuntimeError("transcription blew up")

    with pytest.raises(RuntimeError):
        asyncio.run(run())

    assert seen and not seen[0].exists()
    assert list(manager.directory.iterdir()) == []


def test_scoped_file_is_released_on_cancellation(manager):
    seen: list[Path] = []

    async def run() -> None:
        async with manager.scoped(ByteSource(b"abc"), "a.ogg", "audio/ogg") as audio_file:
            seen.append(audio_file.path)
            await asyncio.sleep(3600)

    async def main() -> None:
        task = asyncio.create_task(run())
        while not seen:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(main())

    assert not seen[0].exists()
