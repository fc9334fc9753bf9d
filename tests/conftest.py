import os
import logging
from datetime import datetime
from pathlib import Path

import pytest

from media_organizer.models import MediaFile
from media_organizer.organization.resolver import DateResolver


def write_media(path: Path, data: bytes, mtime: datetime = None) -> Path:
    """Writes a file and optionally pins its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    if mtime is not None:
        ts = mtime.timestamp()
        os.utime(path, (ts, ts))
    return path


@pytest.fixture
def make_media(tmp_path):
    """Factory returning a MediaFile for a freshly written source file."""
    def _make(rel: str, data: bytes = b"data", mtime: datetime = None) -> MediaFile:
        p = write_media(tmp_path / "src" / rel, data, mtime)
        return MediaFile.from_path(p)
    return _make


@pytest.fixture
def metadata_dates():
    """File name -> capture date, served by the stub lookups below."""
    return {}


@pytest.fixture
def resolver(metadata_dates):
    """A DateResolver whose metadata backends are a plain dict lookup."""
    lookup = lambda p: metadata_dates.get(Path(p).name)
    return DateResolver(photo_lookup=lookup, video_lookup=lookup)


@pytest.fixture
def logger():
    return logging.getLogger("media_organizer.tests")
