"""
batch.py - Drive one batch of files through extraction, rendering,
collision resolution and action execution.

Files are processed sequentially in enumeration order; a failure of one
file is recorded and never stops the rest of the batch.
"""

import glob
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from exifmv.actions import (
    MODE_INFO,
    MODE_MOVE,
    STATUS_APPLIED,
    STATUS_FAILED,
    STATUS_SKIPPED,
    ActionExecutor,
    OperationRecord,
    Sink,
    info_lines,
)
from exifmv.config import RenameConfig
from exifmv.errors import ExifmvError
from exifmv.properties import PropertyBagBuilder
from exifmv.resolver import CollisionResolver, IndexCounter
from exifmv.sources import ExifReader, Hasher
from exifmv.template import TemplateRenderer
from exifmv.values import ValueFormatter


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class FileOutcome:
    """Result of processing one file."""
    source: Path
    status: str
    destination: Optional[Path] = None
    error: Optional[ExifmvError] = None


@dataclass
class ProcessingStats:
    """Statistics for one batch run."""
    total: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0
    error_details: List[str] = field(default_factory=list)

    def add(self, outcome: FileOutcome) -> None:
        self.total += 1
        if outcome.status == STATUS_APPLIED:
            self.applied += 1
        elif outcome.status == STATUS_SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.error_details.append(f"{outcome.source}: {outcome.error.kind}: {outcome.error}")

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def __str__(self) -> str:
        return (
            f"\n{'='*60}\n"
            f"Processing Statistics:\n"
            f"{'='*60}\n"
            f"Total files found:    {self.total}\n"
            f"Applied:             {self.applied}\n"
            f"Skipped:             {self.skipped}\n"
            f"Failed:              {self.failed}\n"
            f"{'='*60}"
        )


# ============================================================================
# Source enumeration
# ============================================================================

def find_matches(patterns: Iterable[str]) -> List[Path]:
    """
    Expand glob patterns into an ordered, de-duplicated list of files.

    Each pattern's matches are sorted; patterns keep their given order.
    """
    files: List[Path] = []
    seen = set()
    for pattern in patterns:
        logging.info(f"Matching pattern '{pattern}'")
        matches = sorted(glob.glob(pattern, recursive=True))
        if not matches:
            logging.warning(f"No files match '{pattern}'")
        for match in matches:
            key = os.path.abspath(match)
            if key in seen or not os.path.isfile(match):
                continue
            seen.add(key)
            files.append(Path(match))
    return files


# ============================================================================
# Main Processing Logic
# ============================================================================

class BatchDriver:
    """Run one batch; owns the batch state through its resolver."""

    def __init__(
        self,
        config: RenameConfig,
        exif_reader: Optional[ExifReader] = None,
        hasher: Optional[Hasher] = None,
        sink: Sink = print,
    ):
        config.validate()
        self.config = config
        self.sink = sink
        formatter = ValueFormatter(config.timestamp_format, config.sanitize_pattern, config.replacement)
        self.builder = PropertyBagBuilder(
            formatter,
            use_hash=config.use_hash,
            use_exif=config.use_exif,
            exif_reader=exif_reader,
            hasher=hasher,
        )
        self.renderer = TemplateRenderer(config.destination, strict=config.strict)
        self.resolver = CollisionResolver(
            self.renderer,
            IndexCounter(config.idx_start, config.idx_width),
            force=config.force,
        )
        self.executor = ActionExecutor(
            force=config.force,
            delete_empty_dirs=config.delete_empty_dirs,
            absolute_symlinks=config.absolute_symlinks,
            sink=sink,
            vacated=self.resolver.released,
        )
        self.outcomes: List[FileOutcome] = []

    def process_file(self, source: Path) -> FileOutcome:
        """
        Extract, render, resolve and execute for one file.

        Raises:
            ExifmvError: any per-file failure
        """
        bag = self.builder.build(source)

        if self.config.mode == MODE_INFO:
            names = self.renderer.referenced if self.config.info_referenced_only else None
            logging.info(f"Properties of {source}")
            for line in info_lines(bag, self.config.max_display_len, names):
                self.sink(line)
            return FileOutcome(source, STATUS_APPLIED)

        destination = self.resolver.resolve(source, bag)
        record = OperationRecord(source, destination, self.config.mode, self.config.dry_run)
        status = self.executor.execute(record)
        if record.mode == MODE_MOVE and status == STATUS_APPLIED:
            self.resolver.release(source)
        return FileOutcome(source, status, destination)

    def run(self, files: List[Path]) -> ProcessingStats:
        """
        Process every file, recording one outcome each.

        Args:
            files: Candidate files in enumeration order

        Returns:
            ProcessingStats of the batch
        """
        stats = ProcessingStats()
        progress = tqdm(
            files,
            desc="Processing files",
            unit="file",
            disable=True if self.config.mode == MODE_INFO else None,
        )
        for source in progress:
            try:
                outcome = self.process_file(source)
            except ExifmvError as e:
                logging.error(f"{source}: {e.kind}: {e}")
                outcome = FileOutcome(source, STATUS_FAILED, error=e)
            except Exception as e:
                logging.error(f"{source}: unexpected error: {e}")
                outcome = FileOutcome(source, STATUS_FAILED, error=ExifmvError(f"Unexpected error: {e}", source))
            self.outcomes.append(outcome)
            stats.add(outcome)
        return stats
