"""
properties.py - Build the per-file property bag.

The bag maps property names (Sys*, Exif*, ExifTn*) to sanitized
display-strings in a fixed order: filesystem properties, then main-IFD
EXIF tags, then thumbnail tags, each group sorted by name.
"""

import logging
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional

from exifmv.sources import (
    THUMBNAIL_PREFIX,
    ExifReader,
    Hasher,
    path_properties,
    read_exif,
    sha1_digest,
    stat_properties,
)
from exifmv.values import PropertyValue, Text, ValueFormatter, sanitize_key

SYS_PREFIX = "Sys"
EXIF_PREFIX = "Exif"


class PropertyBag(Mapping[str, str]):
    """
    Ordered, read-only mapping of property name to template display-string.

    `raw` keeps the unsanitized display-strings for info output.
    """

    def __init__(self, values: "OrderedDict[str, str]", raw: "OrderedDict[str, str]"):
        self._values = values
        self.raw = raw

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PropertyBag({dict(self._values)!r})"


class PropertyBagBuilder:
    """Assemble property bags from the metadata source adapters."""

    def __init__(
        self,
        formatter: ValueFormatter,
        use_hash: bool = True,
        use_exif: bool = True,
        exif_reader: Optional[ExifReader] = None,
        hasher: Optional[Hasher] = None,
    ):
        self.formatter = formatter
        self.use_hash = use_hash
        self.use_exif = use_exif
        self.exif_reader = exif_reader or read_exif
        self.hasher = hasher or sha1_digest

    def extract(self, path: Path) -> List[Dict[str, PropertyValue]]:
        """
        Collect typed values for a file, grouped as Sys / Exif / ExifTn.

        Raises:
            ExtractionError: stat or content read failed
        """
        sys_props: Dict[str, PropertyValue] = {}
        sys_props.update(path_properties(path))
        sys_props.update(stat_properties(path))
        if self.use_hash:
            sys_props["Sha1"] = Text(self.hasher(path))

        exif_props: Dict[str, PropertyValue] = {}
        thumb_props: Dict[str, PropertyValue] = {}
        if self.use_exif:
            for tag, value in self.exif_reader(path).items():
                key = EXIF_PREFIX + sanitize_key(tag)
                if tag.startswith(THUMBNAIL_PREFIX):
                    thumb_props[key] = value
                else:
                    exif_props[key] = value
            logging.debug(f"{path}: {len(exif_props)} EXIF and {len(thumb_props)} thumbnail tags")

        return [
            {SYS_PREFIX + name: value for name, value in sys_props.items()},
            exif_props,
            thumb_props,
        ]

    def build(self, path: Path) -> PropertyBag:
        """
        Build the property bag for one file.

        Args:
            path: Source file

        Returns:
            PropertyBag with sanitized values and raw display-strings

        Raises:
            ExtractionError: stat or content read failed
        """
        values: "OrderedDict[str, str]" = OrderedDict()
        raw: "OrderedDict[str, str]" = OrderedDict()
        for group in self.extract(path):
            for key in sorted(group):
                if key in values:
                    continue
                value = group[key]
                raw[key] = self.formatter.format(value)
                values[key] = self.formatter.as_string(value)
        return PropertyBag(values, raw)
