"""
resolver.py - Batch index counter and destination collision resolution.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Mapping, Set

from exifmv.errors import CollisionLimitError, DestinationExistsError
from exifmv.template import render_context

Render = Callable[[Mapping[str, str]], str]


def normalize(path) -> str:
    return os.path.normpath(os.path.abspath(path))


class IndexCounter:
    """Monotonic SysIdx value for one batch run."""

    def __init__(self, start: int = 0, width: int = 4):
        self.value = start
        self.width = width

    def advance_past(self, idx: int) -> None:
        self.value = idx + 1


class CollisionResolver:
    """
    Pick a free destination for each file of a batch.

    Owns the batch state: the index counter, the destinations claimed so
    far in this run, and the paths vacated by earlier moves.
    """

    def __init__(self, render: Render, counter: IndexCounter, force: bool = False):
        self.render = render
        self.counter = counter
        self.force = force
        self.claimed: Set[str] = set()
        self.released: Set[str] = set()
        # Attempts per file before giving up
        self.max_attempts = 10 ** max(counter.width, 1)

    def exists_on_disk(self, key: str) -> bool:
        return key not in self.released and os.path.lexists(key)

    def release(self, path: Path) -> None:
        """Mark a path as vacated (source of a move) for the rest of the run."""
        key = normalize(path)
        self.released.add(key)
        self.claimed.discard(key)

    def resolve(self, source: Path, bag: Mapping[str, str]) -> Path:
        """
        Render and disambiguate the destination of one file.

        Args:
            source: Source file path
            bag: Property bag of the file

        Returns:
            Destination path, claimed for this run

        Raises:
            MissingPropertyError: strict template references an undefined name
            DestinationExistsError: the destination does not depend on SysIdx and is taken
            CollisionLimitError: no free destination within max_attempts
        """
        source_key = normalize(source)
        idx = self.counter.value
        previous = None

        for _ in range(self.max_attempts):
            destination = self.render(render_context(bag, idx, self.counter.width))
            key = normalize(destination)

            if key in self.claimed:
                reason = "already claimed in this run"
            elif key == source_key:
                return self._accept(destination, key, idx)
            elif self.exists_on_disk(key):
                if self.force:
                    logging.debug(f"Overwriting existing destination {destination}")
                    return self._accept(destination, key, idx)
                reason = "already exists"
            else:
                return self._accept(destination, key, idx)

            if key == previous:
                raise DestinationExistsError(f"Destination {destination} {reason}", source)
            logging.debug(f"Destination {destination} {reason}, retrying with index {idx + 1}")
            previous = key
            idx += 1

        raise CollisionLimitError(
            f"No free destination after {self.max_attempts} attempts (last: {destination})", source
        )

    def _accept(self, destination: str, key: str, idx: int) -> Path:
        self.claimed.add(key)
        self.counter.advance_past(idx)
        return Path(destination)
