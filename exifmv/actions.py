"""
actions.py - Perform (or report) the filesystem action for one file.
"""

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Set

from exifmv.errors import (
    CrossDeviceLinkUnsupportedError,
    DestinationExistsError,
    FilesystemActionError,
    PermissionDeniedError,
    SourceMissingError,
)
from exifmv.properties import PropertyBag
from exifmv.resolver import normalize
from exifmv.values import truncate_for_display

# ============================================================================
# Configuration
# ============================================================================

MODE_MOVE = "mv"
MODE_COPY = "cp"
MODE_SYMLINK = "symlink"
MODE_HARDLINK = "ln"
MODE_INFO = "info"

MODES = (MODE_MOVE, MODE_COPY, MODE_SYMLINK, MODE_HARDLINK, MODE_INFO)

STATUS_APPLIED = "applied"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

Sink = Callable[[str], None]


@dataclass(frozen=True)
class OperationRecord:
    """One planned file operation."""
    source: Path
    destination: Path
    mode: str
    dry_run: bool


# ============================================================================
# Info output
# ============================================================================

def info_lines(bag: PropertyBag, max_display_len: int = 0,
               names: Optional[Iterable[str]] = None) -> Iterable[str]:
    """
    Lines of the form {{Name}} "value" for a property bag.

    Args:
        bag: Property bag of the file
        max_display_len: Display cap, 0 for no cap
        names: Restrict output to these property names (bag order kept)
    """
    wanted = set(names) if names is not None else None
    for key, value in bag.raw.items():
        if wanted is not None and key not in wanted:
            continue
        yield f"{{{{{key}}}}} {truncate_for_display(value, max_display_len)}"


# ============================================================================
# File Operations
# ============================================================================

class ActionExecutor:
    """Apply operation records to the filesystem."""

    def __init__(
        self,
        force: bool = False,
        delete_empty_dirs: bool = False,
        absolute_symlinks: bool = False,
        sink: Sink = print,
        vacated: Optional[Set[str]] = None,
    ):
        self.force = force
        # Paths emptied by earlier moves of this run
        self.vacated = vacated if vacated is not None else set()
        self.delete_empty_dirs = delete_empty_dirs
        self.absolute_symlinks = absolute_symlinks
        self.sink = sink

    def execute(self, record: OperationRecord) -> str:
        """
        Perform or report one operation.

        Returns:
            STATUS_APPLIED or STATUS_SKIPPED

        Raises:
            DestinationExistsError: destination exists and force is not set
            FilesystemActionError: the action failed
        """
        src, dest = record.source, record.destination
        action = record.mode.upper()

        if os.path.abspath(src) == os.path.abspath(dest):
            logging.info(f"Skipping {src}: already at destination")
            return STATUS_SKIPPED

        if not os.path.lexists(src):
            raise SourceMissingError(f"Source {src} no longer exists", src)
        if os.path.isdir(dest) and not os.path.islink(dest):
            raise DestinationExistsError(f"Destination {dest} is a directory", src)
        if self.occupied(dest) and not self.force:
            raise DestinationExistsError(f"Destination {dest} already exists", src)

        if record.dry_run:
            self.sink(f"[DRY] {action}: '{src}' -> '{dest}'")
            return STATUS_APPLIED

        try:
            self.ensure_directory(dest.parent)
            if record.mode == MODE_MOVE:
                shutil.move(str(src), str(dest))
            elif record.mode == MODE_COPY:
                self._remove_existing(dest)
                shutil.copy2(src, dest)
            elif record.mode == MODE_SYMLINK:
                self._remove_existing(dest)
                os.symlink(self.link_target(src, dest), dest)
            elif record.mode == MODE_HARDLINK:
                self._remove_existing(dest)
                os.link(src, dest)
            else:
                raise FilesystemActionError(f"Unsupported mode '{record.mode}'", src)
        except PermissionError as e:
            raise PermissionDeniedError(f"Failed to {record.mode} {src} to {dest}: {e}", src) from e
        except FileNotFoundError as e:
            if not os.path.lexists(src):
                raise SourceMissingError(f"Source {src} vanished: {e}", src) from e
            raise FilesystemActionError(f"Failed to {record.mode} {src} to {dest}: {e}", src) from e
        except OSError as e:
            if e.errno == errno.EXDEV and record.mode == MODE_HARDLINK:
                raise CrossDeviceLinkUnsupportedError(
                    f"Cannot hard link {src} to {dest} across filesystems", src
                ) from e
            raise FilesystemActionError(f"Failed to {record.mode} {src} to {dest}: {e}", src) from e

        self.sink(f"{action}: '{src}' -> '{dest}'")
        logging.debug(f"{action}: {src} -> {dest}")

        if record.mode == MODE_MOVE and self.delete_empty_dirs:
            self.remove_if_empty(src.parent)

        return STATUS_APPLIED

    def occupied(self, path: Path) -> bool:
        return normalize(path) not in self.vacated and os.path.lexists(path)

    def link_target(self, src: Path, dest: Path) -> str:
        """Symlink target: relative to the link's directory unless forced absolute."""
        absolute = os.path.abspath(src)
        if self.absolute_symlinks:
            return absolute
        try:
            return os.path.relpath(absolute, os.path.abspath(dest.parent))
        except ValueError:
            # No relative path between drives
            return absolute

    def _remove_existing(self, dest: Path) -> None:
        if self.force and os.path.lexists(dest):
            os.unlink(dest)

    @staticmethod
    def ensure_directory(path: Path) -> None:
        if str(path):
            path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def remove_if_empty(directory: Path) -> None:
        """Remove a now-empty source directory, one level only."""
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                logging.info(f"Removed empty directory {directory}")
        except OSError as e:
            logging.warning(f"Failed to remove empty directory {directory}: {e}")
