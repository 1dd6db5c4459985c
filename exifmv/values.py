"""
values.py - Typed property values and their display-string rendering.

A property value is one of Text, PathValue, Integer, Real, Rational,
Timestamp or Bytes. ValueFormatter turns values into display-strings using
one shared timestamp format and applies the invalid-sequence filter.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Pattern, Union

from exifmv.errors import ConfigurationError

# Non-word characters are dropped from property names (EXIF tag names).
KEY_SANITIZE_PATTERN = re.compile(r"\W+")

# EXIF ASCII date/time layout
EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class PathValue:
    """Path-derived value; exempt from sanitization."""
    value: str


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Real:
    value: float


@dataclass(frozen=True)
class Rational:
    num: int
    den: int


@dataclass(frozen=True)
class Timestamp:
    value: datetime


@dataclass(frozen=True)
class Bytes:
    value: bytes


PropertyValue = Union[Text, PathValue, Integer, Real, Rational, Timestamp, Bytes]


# ============================================================================
# Formatting
# ============================================================================

class ValueFormatter:
    """Render property values to display-strings."""

    def __init__(self, timestamp_format: str, sanitize_pattern: str, replacement: str):
        self.timestamp_format = timestamp_format
        self.replacement = replacement
        try:
            self.sanitize_pattern: Pattern[str] = re.compile(sanitize_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid sanitize pattern '{sanitize_pattern}': {e}") from e

    def format(self, value: PropertyValue) -> str:
        """Display-string of a value, before sanitization."""
        if isinstance(value, (Text, PathValue)):
            return value.value
        if isinstance(value, Timestamp):
            return value.value.strftime(self.timestamp_format)
        if isinstance(value, Integer):
            return str(value.value)
        if isinstance(value, Rational):
            return f"{value.num}_{value.den}"
        if isinstance(value, Real):
            # Integral reals print without a fractional part
            if value.value.is_integer():
                return str(int(value.value))
            return repr(value.value)
        if isinstance(value, Bytes):
            return value.value.hex()
        raise TypeError(f"Unsupported property value: {value!r}")

    def sanitize(self, text: str) -> str:
        """Replace each maximal invalid sequence with the replacement string."""
        return self.sanitize_pattern.sub(self.replacement, text)

    def as_string(self, value: PropertyValue) -> str:
        """Display-string as used inside destination templates."""
        text = self.format(value)
        if isinstance(value, PathValue):
            return text
        return self.sanitize(text)


def sanitize_key(key: str) -> str:
    return KEY_SANITIZE_PATTERN.sub("", key)


def truncate_for_display(text: str, max_len: int) -> str:
    """
    Quote a value for info output, eliding the middle past max_len.

    Args:
        text: Untruncated display-string
        max_len: Display cap, 0 for no cap

    Returns:
        '"value"' or '"head ... tail" (N chars total)'
    """
    length = len(text)
    if max_len > 0 and length > max_len:
        half = max_len // 2
        return f'"{text[:half]} ... {text[length - half:]}" ({length} chars total)'
    return f'"{text}"'
