"""
sources.py - Metadata source adapters.

Wraps filesystem stat calls, path decomposition, content hashing and the
EXIF decoder (piexif, with Pillow as container fallback), normalizing
everything into typed property values.
"""

import hashlib
import logging
import os
import struct
import uuid
from datetime import datetime
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, Optional

import piexif
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from exifmv.errors import ExtractionError
from exifmv.values import (
    EXIF_DATETIME_FORMAT,
    Bytes,
    Integer,
    PathValue,
    PropertyValue,
    Rational,
    Real,
    Text,
    Timestamp,
)

register_heif_opener()

# ============================================================================
# Configuration
# ============================================================================

HASH_CHUNK_SIZE = 65536

# piexif IFD name -> tag table name
MAIN_IFDS = {"0th": "Image", "Exif": "Exif", "GPS": "GPS", "Interop": "Interop"}
THUMBNAIL_IFDS = {"1st": "Image"}

THUMBNAIL_PREFIX = "Tn"

# ASCII tags carrying an EXIF date/time
DATETIME_TAGS = {"DateTime", "DateTimeOriginal", "DateTimeDigitized"}

INTEGER_TYPES = {
    piexif.TYPES.Byte, piexif.TYPES.Short, piexif.TYPES.Long,
    piexif.TYPES.SByte, piexif.TYPES.SShort, piexif.TYPES.SLong,
}
RATIONAL_TYPES = {piexif.TYPES.Rational, piexif.TYPES.SRational}
REAL_TYPES = {piexif.TYPES.Float, piexif.TYPES.DFloat}

ExifReader = Callable[[Path], Dict[str, PropertyValue]]
Hasher = Callable[[Path], str]


# ============================================================================
# Filesystem
# ============================================================================

def path_properties(path: Path) -> Dict[str, PropertyValue]:
    """
    Decompose a path into Sys* properties without touching the filesystem.

    Args:
        path: Source path as enumerated

    Returns:
        Dictionary of un-prefixed property names to PathValue
    """
    path = PurePath(path)
    suffix = path.suffix
    props: Dict[str, PropertyValue] = {
        "Path": PathValue(str(path.parent)),
        "Name": PathValue(path.stem),
        "FullName": PathValue(path.name),
        "Ext": PathValue(suffix[1:]),
        "DotExt": PathValue(suffix),
        "Cwd": PathValue(os.getcwd()),
    }

    absolute = PurePath(os.path.abspath(path))
    for i, ancestor in enumerate([absolute, *absolute.parents]):
        props[f"PathAncestor{i}"] = PathValue(str(ancestor))

    parts = path.parts
    for i, elem in enumerate(parts):
        props[f"PathElem{i}"] = PathValue(elem)
        props[f"PathHead{i}"] = PathValue(str(PurePath(*parts[:i + 1])))
        props[f"PathTail{i}"] = PathValue(str(PurePath(*parts[len(parts) - i - 1:])))

    return props


def creation_time(stat: os.stat_result) -> float:
    # Birth time on macOS/BSD, inode change time elsewhere
    return getattr(stat, "st_birthtime", stat.st_ctime)


def stat_properties(path: Path) -> Dict[str, PropertyValue]:
    """Timestamps, size, uuid and 'now' for a file."""
    try:
        stat = os.stat(path)
    except OSError as e:
        raise ExtractionError(f"Unable to read fs metadata: {e}", path) from e

    return {
        "DateTimeAccessed": Timestamp(datetime.fromtimestamp(stat.st_atime)),
        "DateTimeModified": Timestamp(datetime.fromtimestamp(stat.st_mtime)),
        "DateTimeCreated": Timestamp(datetime.fromtimestamp(creation_time(stat))),
        "DateTimeNow": Timestamp(datetime.now()),
        "Size": Integer(stat.st_size),
        "Uuid": Text(str(uuid.uuid4())),
    }


def sha1_digest(path: Path) -> str:
    """Hex SHA-1 of the file content, read in chunks."""
    hasher = hashlib.sha1()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                hasher.update(chunk)
    except OSError as e:
        raise ExtractionError(f"Unable to compute hash: {e}", path) from e
    return hasher.hexdigest()


# ============================================================================
# EXIF
# ============================================================================

def _decode_ascii(raw: bytes) -> str:
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")


def convert_exif_value(name: str, raw: Any, tag_type: Optional[int]) -> Optional[PropertyValue]:
    """
    Normalize one decoded tag into a property value.

    Args:
        name: Tag name
        raw: Value as returned by piexif
        tag_type: EXIF field type, None when the tag is unknown

    Returns:
        PropertyValue, or None if the value cannot be represented
    """
    if tag_type == piexif.TYPES.Ascii:
        text = _decode_ascii(raw) if isinstance(raw, bytes) else str(raw)
        if name in DATETIME_TAGS:
            try:
                return Timestamp(datetime.strptime(text, EXIF_DATETIME_FORMAT))
            except ValueError as e:
                logging.warning(f"Unable to parse '{text}' as date: {e}")
        return Text(text)

    if tag_type in RATIONAL_TYPES:
        value = raw[0] if raw and isinstance(raw[0], tuple) else raw
        if isinstance(value, tuple) and len(value) == 2:
            return Rational(int(value[0]), int(value[1]))
        return None

    if tag_type in INTEGER_TYPES:
        value = raw[0] if isinstance(raw, tuple) and raw else raw
        if isinstance(raw, bytes):
            value = raw[0] if raw else None
        return Integer(int(value)) if value is not None else None

    if tag_type in REAL_TYPES:
        value = raw[0] if isinstance(raw, tuple) and raw else raw
        return Real(float(value))

    # Undefined, or a tag the decoder has no table entry for
    if isinstance(raw, bytes):
        return Bytes(raw)
    value = raw[0] if isinstance(raw, tuple) and raw else raw
    if isinstance(value, tuple) and len(value) == 2:
        return Rational(int(value[0]), int(value[1]))
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Real(value)
    return None


def exif_to_properties(exif_dict: Dict[str, Any]) -> Dict[str, PropertyValue]:
    """
    Flatten a piexif IFD dictionary into tag-name keyed values.

    Thumbnail IFD tags are prefixed with "Tn". When two main IFDs share a
    tag name the first one wins.
    """
    props: Dict[str, PropertyValue] = {}
    for ifd_groups, prefix in ((MAIN_IFDS, ""), (THUMBNAIL_IFDS, THUMBNAIL_PREFIX)):
        for ifd_name, table_name in ifd_groups.items():
            ifd = exif_dict.get(ifd_name)
            if not isinstance(ifd, dict):
                continue
            table = piexif.TAGS.get(table_name, {})
            for tag, raw in ifd.items():
                info = table.get(tag)
                if info:
                    name, tag_type = info["name"], info["type"]
                else:
                    name, tag_type = f"Tag{ifd_name}{tag}", None
                try:
                    value = convert_exif_value(name, raw, tag_type)
                except (TypeError, ValueError, IndexError) as e:
                    logging.debug(f"Skipping tag {name}: {e}")
                    continue
                key = f"{prefix}{name}"
                if value is not None and key not in props:
                    props[key] = value
    return props


def _load_with_pillow(path: Path) -> Dict[str, Any]:
    """Extract raw EXIF bytes via Pillow for containers piexif cannot parse."""
    with Image.open(path) as img:
        exif_bytes = img.info.get("exif")
        if not exif_bytes:
            exif = img.getexif()
            if not exif:
                return {}
            exif_bytes = exif.tobytes()
    return piexif.load(exif_bytes)


def read_exif(path: Path) -> Dict[str, PropertyValue]:
    """
    Decode EXIF tags of a file.

    Unsupported or corrupt files yield an empty mapping; decoding problems
    are never fatal for the file.

    Args:
        path: File to decode

    Returns:
        Dictionary of tag name (Tn-prefixed for thumbnail IFD) to value
    """
    try:
        exif_dict = piexif.load(str(path))
    except piexif.InvalidImageDataError:
        try:
            exif_dict = _load_with_pillow(path)
        except (UnidentifiedImageError, Image.DecompressionBombError, piexif.InvalidImageDataError,
                ValueError, struct.error, OSError) as e:
            logging.debug(f"No EXIF data in {path}: {e}")
            return {}
    except (ValueError, IndexError, struct.error, OSError) as e:
        logging.debug(f"Unable to read EXIF from {path}: {e}")
        return {}

    return exif_to_properties(exif_dict)
