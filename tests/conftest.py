"""
Pytest configuration and fixtures for the news-shorts tests.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from fakes import write_wav
from news_shorts import config


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    """Retries happen immediately in tests."""
    monkeypatch.setattr(config, "RETRY_BACKOFF", 0.0)


@pytest.fixture
def make_wav(temp_dir: Path):
    """Factory writing silent PCM WAV files into temp_dir."""

    def _make(name: str, seconds: float, frame_rate: int = 16000,
              channels: int = 1, sample_width: int = 2) -> Path:
        return write_wav(temp_dir / name, seconds, frame_rate, channels, sample_width)

    return _make
