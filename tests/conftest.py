"""Shared fixtures for exifmv tests."""
# pylint: disable=redefined-outer-name

import os
from datetime import datetime
from pathlib import Path

import piexif
import pytest
from PIL import Image

from exifmv.values import Timestamp, ValueFormatter


@pytest.fixture
def formatter():
    return ValueFormatter("%Y%m%d_%H%M%S", r"[^\w\+\-]+", "_")


@pytest.fixture
def make_jpeg():
    """Write a tiny JPEG carrying a DateTimeOriginal tag."""

    def _make(path: Path, taken: str = "2024:01:01 12:00:00", model: bytes = b"TestCam") -> Path:
        exif_bytes = piexif.dump({
            "0th": {piexif.ImageIFD.Model: model},
            "Exif": {piexif.ExifIFD.DateTimeOriginal: taken.encode()},
        })
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (8, 8), (200, 10, 10)).save(path, "JPEG", exif=exif_bytes)
        return path

    return _make


@pytest.fixture
def fixed_exif():
    """Fake EXIF reader returning the same timestamp for every file."""

    def _reader(path):
        return {"DateTimeOriginal": Timestamp(datetime(2024, 1, 1, 12, 0, 0))}

    return _reader


@pytest.fixture
def snapshot():
    """Relative path -> (kind, bytes or link target) for a whole tree."""

    def _snapshot(root: Path) -> dict:
        state = {}
        for p in sorted(root.rglob("*")):
            rel = str(p.relative_to(root))
            if p.is_symlink():
                state[rel] = ("link", os.readlink(p))
            elif p.is_file():
                state[rel] = ("file", p.read_bytes())
            else:
                state[rel] = ("dir", None)
        return state

    return _snapshot
