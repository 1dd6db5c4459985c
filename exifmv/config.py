"""
config.py - Run configuration for exifmv.
"""

import re
from dataclasses import dataclass
from datetime import datetime

from exifmv.actions import MODE_MOVE, MODES
from exifmv.errors import ConfigurationError

# ============================================================================
# Configuration
# ============================================================================

DEFAULT_DESTINATION = "{{SysPath}}/{{SysName}}_{{SysSha1}}.{{SysExt}}"
DEFAULT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_SANITIZE_PATTERN = r"[^\w\+\-]+"
DEFAULT_REPLACEMENT = "_"
DEFAULT_MAX_DISPLAY_LEN = 100
DEFAULT_IDX_START = 0
DEFAULT_IDX_WIDTH = 4


@dataclass
class RenameConfig:
    """All options of one exifmv invocation."""
    destination: str = DEFAULT_DESTINATION
    mode: str = MODE_MOVE
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    verbose: bool = False
    dry_run: bool = True
    force: bool = False
    strict: bool = True
    use_hash: bool = True
    use_exif: bool = True
    delete_empty_dirs: bool = False
    absolute_symlinks: bool = False
    max_display_len: int = DEFAULT_MAX_DISPLAY_LEN
    info_referenced_only: bool = False
    idx_start: int = DEFAULT_IDX_START
    idx_width: int = DEFAULT_IDX_WIDTH
    sanitize_pattern: str = DEFAULT_SANITIZE_PATTERN
    replacement: str = DEFAULT_REPLACEMENT

    def validate(self) -> None:
        """
        Check options that would otherwise fail identically for every file.

        Raises:
            ConfigurationError: on the first invalid option
        """
        if self.mode not in MODES:
            raise ConfigurationError(f"Unknown mode '{self.mode}', expected one of {', '.join(MODES)}")
        try:
            re.compile(self.sanitize_pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid sanitize pattern '{self.sanitize_pattern}': {e}") from e
        try:
            datetime.now().strftime(self.timestamp_format)
        except ValueError as e:
            raise ConfigurationError(f"Invalid timestamp format '{self.timestamp_format}': {e}") from e
        if self.idx_start < 0:
            raise ConfigurationError(f"Index start must be >= 0, got {self.idx_start}")
        if self.idx_width < 0:
            raise ConfigurationError(f"Index width must be >= 0, got {self.idx_width}")
        if self.max_display_len < 0:
            raise ConfigurationError(f"Max display length must be >= 0, got {self.max_display_len}")
