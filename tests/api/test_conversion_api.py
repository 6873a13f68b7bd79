from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tests.mocks.extraction import AUDIO_BYTES, VIDEO_BYTES, StubInvoker
from tubeconv.config import AppConfig
from tubeconv.exceptions import (
    AgeRestrictedError,
    CopyrightRestrictedError,
    ExtractionTimeoutError,
    UnknownExtractionError,
    VideoNotFoundError,
    VideoUnavailableError,
)
from tubeconv.main import create_app

pytestmark = pytest.mark.unit

WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def make_client(config: AppConfig, invoker: StubInvoker) -> TestClient:
    return TestClient(create_app(config, invoker=invoker))


def test_mp3_conversion_then_single_download(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/download", json={"url": WATCH_URL, "format": "mp3"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["format"] == "mp3"
    assert body["fileSize"].endswith(" MB")
    assert body["processingTime"].endswith(" seconds")
    job_id = stub_invoker.calls[0][2].name.split(".")[0]
    assert body["downloadLink"] == f"http://testserver/downloads/{job_id}.mp3"

    download = client.get(body["downloadLink"])
    assert download.status_code == 200
    assert download.content == AUDIO_BYTES
    assert download.headers["content-type"] == "audio/mpeg"
    assert download.headers["content-length"] == str(len(AUDIO_BYTES))
    assert download.headers["content-disposition"] == f'attachment; filename="{job_id}.mp3"'
    assert not (app_config.downloads_dir / f"{job_id}.mp3").exists()

    again = client.get(body["downloadLink"])
    assert again.status_code == 404
    assert again.json() == {"error": "File not found"}


def test_api_prefixed_routes_behave_the_same(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/api/download", json={"url": "https://youtu.be/dQw4w9WgXcQ", "format": "mp4"})

    assert response.status_code == 200
    filename = response.json()["downloadLink"].rsplit("/", 1)[-1]
    assert filename.endswith(".mp4")
    download = client.get(f"/api/download-file/{filename}")
    assert download.status_code == 200
    assert download.content == VIDEO_BYTES
    assert download.headers["content-type"] == "video/mp4"


def test_unsupported_format_is_rejected(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/download", json={"url": WATCH_URL, "format": "wav"})

    assert response.status_code == 400
    assert response.json() == {"error": "Format must be mp3 or mp4"}
    assert stub_invoker.calls == []


def test_non_youtube_url_never_spawns_extraction(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/download", json={"url": "https://example.com/video", "format": "mp3"})

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a valid YouTube URL"}
    assert stub_invoker.calls == []
    assert list(app_config.downloads_dir.iterdir()) == []


@pytest.mark.parametrize(
    "payload",
    [None, {}, {"format": "mp3"}, {"url": 12345, "format": "mp3"}, {"url": "", "format": "mp3"}],
)
def test_missing_url_is_rejected(app_config: AppConfig, stub_invoker: StubInvoker, payload) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/download", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "A valid YouTube URL is required"}


def test_malformed_body_is_rejected(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.post("/download", content=b"{not json", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


@pytest.mark.parametrize(
    ("error", "status_code", "message"),
    [
        (VideoUnavailableError("private"), 500, "This video is unavailable or private. Please try another video."),
        (CopyrightRestrictedError("blocked"), 500, "This video cannot be downloaded due to copyright restrictions."),
        (AgeRestrictedError("age"), 500, "Age-restricted videos cannot be downloaded."),
        (VideoNotFoundError("404"), 500, "Video not found. Please check the URL and try again."),
        (UnknownExtractionError("boom"), 500, "Failed to process your download. Please try again later."),
        (ExtractionTimeoutError("slow"), 504, "The conversion took too long. Please try again later."),
    ],
)
def test_extraction_failures_map_to_user_messages(
    app_config: AppConfig, error: Exception, status_code: int, message: str
) -> None:
    client = make_client(app_config, StubInvoker(error=error))

    response = client.post("/download", json={"url": WATCH_URL, "format": "mp4"})

    assert response.status_code == status_code
    assert response.json() == {"error": message}


def test_missing_artifact_is_a_processing_failure(app_config: AppConfig) -> None:
    client = make_client(app_config, StubInvoker(produce_file=False))

    response = client.post("/download", json={"url": WATCH_URL, "format": "mp3"})

    assert response.status_code == 500
    assert response.json() == {"error": "Could not process your download. Please try again."}


@pytest.mark.parametrize(
    "path",
    ["/downloads/evil..mp3", "/downloads/sub/dir.mp3", "/api/download-file/..%2Fsecret.txt"],
)
def test_traversal_attempts_are_rejected(
    tmp_path: Path, app_config: AppConfig, stub_invoker: StubInvoker, path: str
) -> None:
    (tmp_path / "secret.txt").write_text("top secret")
    client = make_client(app_config, stub_invoker)

    response = client.get(path)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid filename"}


def test_empty_filename_is_rejected(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.get("/downloads/")

    assert response.status_code == 400
    assert response.json() == {"error": "No filename provided"}


def test_keep_after_download_when_deletion_disabled(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    config = app_config.model_copy(update={"delete_after_download": False})
    artifact = config.downloads_dir / "abc.mp3"
    artifact.write_bytes(AUDIO_BYTES)
    client = make_client(config, stub_invoker)

    assert client.get("/downloads/abc.mp3").status_code == 200
    assert client.get("/downloads/abc.mp3").status_code == 200
    assert artifact.exists()


def test_health(app_config: AppConfig, stub_invoker: StubInvoker) -> None:
    client = make_client(app_config, stub_invoker)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "timestamp" in response.json()
