"""Endpoint tests for POST /api/assessment and the catch-all error contract."""

from __future__ import annotations

from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from app.pipelines.assessment.errors import (
    GENERIC_MESSAGE,
    RATE_LIMIT_MESSAGE,
)
from app.services.uploads import StorageError
from tests.conftest import AUDIO_BYTES, VALID_ASSESSMENT


def _leftover_files(upload_dir):
    return sorted(path.name for path in upload_dir.iterdir())


def test_assessment_happy_path(post_assessment, speech_to_text, text_generator, upload_dir):
    """A valid upload is transcribed, evaluated and echoed back with metadata."""

    response = post_assessment()

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["question"] == "What is photosynthesis?"
    assert payload["transcription"] == "Plants use sunlight to make food."
    assert payload["assessment"] == VALID_ASSESSMENT

    metadata = payload["metadata"]
    assert metadata["originalName"] == "answer.mp3"
    assert metadata["fileSize"] == len(AUDIO_BYTES)
    assert metadata["audioFile"].startswith("audio-")
    assert metadata["audioFile"].endswith(".mp3")
    assert metadata["model"] == "fake-llm"
    assert metadata["transcriptionModel"] == "fake-transcriber"
    assert metadata["evaluatedAt"]

    assert speech_to_text.file_existed == [True]
    assert speech_to_text.calls[0].name == metadata["audioFile"]
    _, user_prompt = text_generator.prompts[0]
    assert "What is photosynthesis?" in user_prompt
    assert "Plants use sunlight to make food." in user_prompt
    assert _leftover_files(upload_dir) == []


def test_malformed_llm_reply_returns_fallback(post_assessment, text_generator, upload_dir):
    text_generator.reply = "Sure! Here is some feedback, but not JSON."

    response = post_assessment()

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["assessment"]["score"] == {
        "content": 3,
        "clarity": 2,
        "completeness": 1,
        "total": 6,
    }
    assert _leftover_files(upload_dir) == []


def test_inconsistent_total_returns_fallback(post_assessment, text_generator):
    text_generator.reply = (
        '{"strengths": ["a", "b"], "areasToImprove": ["c", "d"], '
        '"perfectDefinition": "e", "encouragement": "f", '
        '"score": {"content": 5, "clarity": 5, "completeness": 5, "total": 12}}'
    )

    response = post_assessment()

    assert response.status_code == 200
    score = response.json()["assessment"]["score"]
    assert score["total"] == score["content"] + score["clarity"] + score["completeness"] == 6


def test_missing_audio_is_rejected_without_creating_a_file(post_assessment, app, speech_to_text, upload_dir):
    response = post_assessment(audio=None)

    assert response.status_code == 400
    assert response.json() == {
        "error": "No audio file provided",
        "message": "Please provide an audio file in the request",
    }
    assert app.state.upload_manager.acquired == []
    assert speech_to_text.calls == []
    assert _leftover_files(upload_dir) == []


def test_audio_sent_as_text_field_counts_as_missing(client, app, speech_to_text, upload_dir):
    response = client.post(
        "/api/assessment",
        data={"question": "What is photosynthesis?", "audio": "not-a-file"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "No audio file provided",
        "message": "Please provide an audio file in the request",
    }
    assert app.state.upload_manager.acquired == []
    assert speech_to_text.calls == []
    assert _leftover_files(upload_dir) == []


def test_missing_audio_takes_precedence_over_missing_question(post_assessment):
    response = post_assessment(audio=None, question=None)

    assert response.status_code == 400
    assert response.json()["error"] == "No audio file provided"


def test_missing_question_removes_the_stored_upload(post_assessment, app, speech_to_text, upload_dir):
    response = post_assessment(question=None)

    assert response.status_code == 400
    assert response.json() == {
        "error": "No question provided",
        "message": "Please provide a question in the request body",
    }
    manager = app.state.upload_manager
    assert len(manager.acquired) == 1
    assert manager.released == manager.acquired
    assert not manager.acquired[0].path.exists()
    assert speech_to_text.calls == []
    assert _leftover_files(upload_dir) == []


def test_question_is_echoed_as_submitted(post_assessment, text_generator):
    response = post_assessment(question="  What is photosynthesis?  ")

    assert response.status_code == 200
    assert response.json()["question"] == "  What is photosynthesis?  "
    _, user_prompt = text_generator.prompts[0]
    assert "Question: What is photosynthesis?\n\nStudent" in user_prompt


def test_blank_question_counts_as_missing(post_assessment, upload_dir):
    response = post_assessment(question="   ")

    assert response.status_code == 400
    assert response.json()["error"] == "No question provided"
    assert _leftover_files(upload_dir) == []


def test_oversized_upload_returns_413(post_assessment, test_settings, speech_to_text, upload_dir):
    limit = test_settings.upload.max_file_size

    response = post_assessment(audio=b"\x01" * (limit + 1))

    assert response.status_code == 413
    payload = response.json()
    assert payload["error"] == "File too large"
    assert payload["maxSize"] == limit
    assert speech_to_text.calls == []
    assert _leftover_files(upload_dir) == []


def test_upload_at_the_limit_is_accepted(post_assessment, test_settings):
    response = post_assessment(audio=b"\x01" * test_settings.upload.max_file_size)

    assert response.status_code == 200
    assert response.json()["metadata"]["fileSize"] == test_settings.upload.max_file_size


def test_non_audio_upload_is_rejected(post_assessment, upload_dir):
    response = post_assessment(filename="notes.txt", content_type="text/plain")

    assert response.status_code == 400
    assert response.json() == {
        "error": "Invalid file type",
        "message": "Only audio files are allowed!",
    }
    assert _leftover_files(upload_dir) == []


def test_transient_transcription_failures_are_retried(post_assessment, speech_to_text, upload_dir):
    speech_to_text.errors = [RuntimeError("blip"), RuntimeError("blip again")]

    response = post_assessment()

    assert response.status_code == 200
    assert len(speech_to_text.calls) == 3
    assert _leftover_files(upload_dir) == []


def test_exhausted_transcription_returns_500_and_cleans_up(
    post_assessment, speech_to_text, text_generator, upload_dir
):
    speech_to_text.errors = [RuntimeError("decoder crashed")] * 3

    response = post_assessment()

    assert response.status_code == 500
    assert response.json() == {
        "error": GENERIC_MESSAGE,
        "details": "Failed to complete transcription after 3 attempts: decoder crashed",
    }
    assert len(speech_to_text.calls) == 3
    assert text_generator.prompts == []
    assert _leftover_files(upload_dir) == []


def test_exhausted_evaluation_is_classified_by_error_code(post_assessment, text_generator, upload_dir):
    throttled = ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "Too many tokens"}},
        "Converse",
    )
    text_generator.errors = [throttled] * 3

    response = post_assessment()

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == RATE_LIMIT_MESSAGE
    assert payload["details"].startswith("Failed to complete evaluation after 3 attempts")
    assert len(text_generator.prompts) == 3
    assert _leftover_files(upload_dir) == []


def test_repeated_uploads_get_distinct_files(client, app, upload_dir):
    for _ in range(3):
        response = client.post(
            "/api/assessment",
            data={"question": "Define osmosis."},
            files={"audio": ("clip.wav", AUDIO_BYTES, "audio/wav")},
        )
        assert response.status_code == 200

    names = [audio_file.filename for audio_file in app.state.upload_manager.acquired]
    assert len(set(names)) == 3
    assert all(name.endswith(".wav") for name in names)
    assert _leftover_files(upload_dir) == []


def test_unknown_route_returns_404_hint(client):
    response = client.get("/api/assess")

    assert response.status_code == 404
    assert response.json() == {
        "error": "Endpoint not found",
        "message": "The endpoint GET /api/assess does not exist",
        "availableEndpoint": "POST /api/assessment",
    }


def test_wrong_method_on_assessment_returns_404(client):
    response = client.get("/api/assessment")

    assert response.status_code == 404
    assert response.json()["availableEndpoint"] == "POST /api/assessment"


def test_operational_endpoints(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["endpoint"] == "POST /api/assessment"

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "assessment_fallback_total" in metrics.text


def test_storage_failure_returns_500_with_details(app, upload_dir, monkeypatch):
    def _fail(original_name):
        raise StorageError("Could not create upload file in uploads: disk full")

    monkeypatch.setattr(app.state.upload_manager, "_open_unique", _fail)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post(
        "/api/assessment",
        data={"question": "What is photosynthesis?"},
        files={"audio": ("answer.mp3", AUDIO_BYTES, "audio/mpeg")},
    )

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "Internal server error"
    assert payload["details"] == "Could not create upload file in uploads: disk full"
    assert _leftover_files(upload_dir) == []
