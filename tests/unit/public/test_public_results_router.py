import logging
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tubeconv.media.media_service import ArtifactStore
from tubeconv.media.public_result_service import PublicResultService, _ArtifactStream
from tubeconv.public.public_results_router import build_public_results_router

pytestmark = pytest.mark.unit


def create_app(service: PublicResultService) -> TestClient:
    app = FastAPI()
    app.include_router(build_public_results_router(service))
    return TestClient(app)


@pytest.mark.parametrize(
    ("name", "mime"),
    [
        ("a.mp3", "audio/mpeg"),
        ("a.m4a", "audio/mp4"),
        ("a.mp4", "video/mp4"),
        ("a.webm", "video/webm"),
        ("a.mkv", "video/x-matroska"),
        ("a.bin", "application/octet-stream"),
    ],
)
def test_content_type_follows_extension(downloads_dir: Path, name: str, mime: str) -> None:
    (downloads_dir / name).write_bytes(b"bytes")
    client = create_app(PublicResultService(store=ArtifactStore(downloads_dir)))

    response = client.get(f"/downloads/{name}")

    assert response.status_code == 200
    assert response.headers["content-type"] == mime
    assert response.headers["content-disposition"] == f'attachment; filename="{name}"'


def test_large_file_is_streamed_in_chunks(downloads_dir: Path) -> None:
    payload = bytes(range(256)) * 40
    (downloads_dir / "big.mp4").write_bytes(payload)
    client = create_app(PublicResultService(store=ArtifactStore(downloads_dir), chunk_size=1000))

    response = client.get("/downloads/big.mp4")

    assert response.content == payload
    assert response.headers["content-length"] == str(len(payload))
    assert not (downloads_dir / "big.mp4").exists()


def test_unreadable_file_returns_502(downloads_dir: Path, monkeypatch) -> None:
    target = downloads_dir / "locked.mp3"
    target.write_bytes(b"bytes")
    real_open = Path.open

    def failing_open(self: Path, *args, **kwargs):
        if self == target:
            raise PermissionError("denied")
        return real_open(self, *args, **kwargs)

    monkeypatch.setattr(Path, "open", failing_open)
    client = create_app(PublicResultService(store=ArtifactStore(downloads_dir)))

    response = client.get("/downloads/locked.mp3")

    assert response.status_code == 502
    assert response.json() == {"error": "An error occurred while serving the file"}
    assert target.exists()


def test_directory_name_is_not_found(downloads_dir: Path) -> None:
    (downloads_dir / "folder").mkdir()
    client = create_app(PublicResultService(store=ArtifactStore(downloads_dir)))

    response = client.get("/downloads/folder")

    assert response.status_code == 404


def test_interrupted_transfer_keeps_the_file(downloads_dir: Path) -> None:
    target = downloads_dir / "half.mp4"
    target.write_bytes(b"0123456789")
    service = PublicResultService(store=ArtifactStore(downloads_dir))
    stream = _ArtifactStream(target.open("rb"), chunk_size=4)

    chunks = iter(stream)
    next(chunks)
    chunks.close()
    service._after_stream(stream, target)

    assert stream.completed is False
    assert target.exists()


def test_delete_after_sweep_already_removed_it(downloads_dir: Path, caplog) -> None:
    service = PublicResultService(store=ArtifactStore(downloads_dir))
    target = downloads_dir / "swept.mp3"

    with caplog.at_level(logging.INFO, logger="tubeconv.media.public_result_service"):
        service.delete_served(target)

    assert not target.exists()
    assert "public.result.already_gone" in [record.getMessage() for record in caplog.records]


def test_failed_delete_still_serves_full_body(downloads_dir: Path, monkeypatch, caplog) -> None:
    target = downloads_dir / "pinned.mp4"
    payload = b"complete-video-bytes" * 100
    target.write_bytes(payload)
    real_unlink = Path.unlink

    def failing_unlink(self: Path, *args, **kwargs):
        if self == target:
            raise PermissionError("read-only volume")
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", failing_unlink)
    client = create_app(PublicResultService(store=ArtifactStore(downloads_dir), chunk_size=256))

    with caplog.at_level(logging.ERROR, logger="tubeconv.media.public_result_service"):
        response = client.get("/downloads/pinned.mp4")

    assert response.status_code == 200
    assert response.content == payload
    assert target.exists()
    failures = [record for record in caplog.records if record.getMessage() == "public.result.delete_failed"]
    assert len(failures) == 1
    assert "read-only volume" in failures[0].error
