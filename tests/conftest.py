"""Shared fixtures: isolated configuration and in-memory databases."""

import io
import os
import tempfile
from pathlib import Path

# Point configuration at a throwaway file before any tripkeeper module loads it
_config_dir = Path(tempfile.mkdtemp(prefix="tripkeeper-tests-"))
_config_file = _config_dir / "config.toml"
_config_file.write_text(
    f"""
[storage]
backend = "memory"
quota_bytes = 0

[media]
max_dimension = 800
jpeg_quality = 70

[logging]
level = "DEBUG"
logs_dir = '{_config_dir / "logs"}'
to_file = false
""",
    encoding="utf-8",
)
os.environ["TRIPKEEPER_CONFIG"] = str(_config_file)

import pytest
from PIL import Image

from tripkeeper.core.db import TravelDatabase
from tripkeeper.core.storage import MemoryKeyValueStore, StorageQuotaExceeded
from tripkeeper.processing.media_pipeline import IncomingFile, MediaPipeline


class FlakyStore(MemoryKeyValueStore):
    """Memory store that rejects writes to keys starting with a failing prefix"""

    def __init__(self):
        super().__init__()
        self.failing = set()

    def set_item(self, key, value):
        if any(key.startswith(prefix) for prefix in self.failing):
            raise StorageQuotaExceeded(key, len(value), 0)
        super().set_item(key, value)


@pytest.fixture
def db():
    return TravelDatabase.in_memory()


@pytest.fixture
def flaky_store():
    return FlakyStore()


@pytest.fixture
def flaky_db(flaky_store):
    return TravelDatabase(flaky_store)


@pytest.fixture
def pipeline():
    return MediaPipeline(max_dimension=800, jpeg_quality=70, video_thumbnail="/video-thumbnail.jpg")


def make_image_bytes(width, height, fmt="PNG", color=(200, 40, 40)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def photo(name="photo.png", width=32, height=24):
    return IncomingFile(name=name, mime_type="image/png", data=make_image_bytes(width, height))


def corrupt_photo(name="broken.jpg"):
    return IncomingFile(name=name, mime_type="image/jpeg", data=b"definitely not a jpeg")


def sample_trip(**overrides):
    data = dict(
        title="Kyoto in autumn",
        destination="Kyoto",
        country="Japan",
        startDate="2025-11-01",
        endDate="2025-11-05",
        status="upcoming",
    )
    data.update(overrides)
    return data
