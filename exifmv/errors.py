"""
errors.py - Exception taxonomy for exifmv.

Every per-file failure derives from ExifmvError and is caught by the batch
driver; ConfigurationError is raised before any file is touched.
"""

from pathlib import Path
from typing import Optional


class ExifmvError(Exception):
    """Base class for all exifmv errors."""

    kind = "Error"

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(ExifmvError):
    """Invalid regex, template syntax, timestamp format or index option."""

    kind = "ConfigurationError"


class ExtractionError(ExifmvError):
    """Unreadable file or stat failure while building the property bag."""

    kind = "ExtractionError"


class MissingPropertyError(ExifmvError):
    """Strict-mode template referenced an undefined property."""

    kind = "MissingPropertyError"


class TemplateRenderError(ExifmvError):
    """Template evaluation failed for one file (bad operand, filter error)."""

    kind = "TemplateRenderError"


class DestinationExistsError(ExifmvError):
    """Destination already exists and force-overwrite is not set."""

    kind = "DestinationExistsError"


class FilesystemActionError(ExifmvError):
    """The filesystem action itself failed."""

    kind = "FilesystemActionError"


class PermissionDeniedError(FilesystemActionError):
    kind = "PermissionDenied"


class CrossDeviceLinkUnsupportedError(FilesystemActionError):
    kind = "CrossDeviceLinkUnsupported"


class SourceMissingError(FilesystemActionError):
    kind = "SourceMissing"


class CollisionLimitError(FilesystemActionError):
    """No free destination found within the attempt cap."""

    kind = "CollisionLimit"
