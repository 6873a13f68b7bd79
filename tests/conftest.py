from __future__ import annotations

from pathlib import Path

import pytest

from tests.mocks.extraction import StubInvoker
from tubeconv.config import AppConfig


@pytest.fixture
def downloads_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "downloads"
    directory.mkdir()
    return directory


@pytest.fixture
def app_config(downloads_dir: Path) -> AppConfig:
    return AppConfig(
        downloads_dir=downloads_dir,
        sweeper_enabled=False,
        extraction_timeout_seconds=5,
        max_concurrent_extractions=2,
    )


@pytest.fixture
def stub_invoker() -> StubInvoker:
    return StubInvoker()
