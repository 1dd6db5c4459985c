"""
cli.py - Command line interface for exifmv.

Rename, copy or link files to destinations rendered from a template of
file properties (filesystem attributes and EXIF tags).
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from exifmv.actions import MODE_INFO, MODES
from exifmv.batch import BatchDriver, find_matches
from exifmv.config import (
    DEFAULT_DESTINATION,
    DEFAULT_IDX_START,
    DEFAULT_IDX_WIDTH,
    DEFAULT_MAX_DISPLAY_LEN,
    DEFAULT_REPLACEMENT,
    DEFAULT_SANITIZE_PATTERN,
    DEFAULT_TIMESTAMP_FORMAT,
    RenameConfig,
)
from exifmv.errors import ConfigurationError

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG = 2


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
        )
        logging.getLogger().addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exifmv",
        description="Rename, copy or link files using a template of EXIF and filesystem properties",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show every property of a file
  exifmv -i 'photos/IMG_0001.jpg'

  # Dry run (preview)
  exifmv 'photos/*.jpg' -d '{{SysPath}}/{{ExifDateTimeOriginal}}_{{SysIdx}}{{SysDotExt}}'

  # Actually move files
  exifmv 'photos/*.jpg' -d 'sorted/{{ExifModel}}/{{SysFullName}}' --no-dry-run

  # Hard link into a date tree, recursively
  exifmv 'photos/**/*.jpg' -M ln -t '%Y/%m' -d 'by-date/{{ExifDateTimeOriginal}}/{{SysFullName}}' --no-dry-run

Property names:
  SysCwd SysDateTimeAccessed SysDateTimeCreated SysDateTimeModified
  SysDateTimeNow SysDotExt SysExt SysFullName SysIdx SysName SysPath
  SysPathAncestorN SysPathElemN SysPathHeadN SysPathTailN SysSha1 SysSize
  SysUuid, Exif<TagName> and ExifTn<TagName> (thumbnail IFD)
        """
    )

    parser.add_argument("sources", nargs="+", help="Source glob patterns")
    parser.add_argument(
        "-d", "--destination",
        default=DEFAULT_DESTINATION,
        help=f"Destination template (default: {DEFAULT_DESTINATION})"
    )
    parser.add_argument(
        "-M", "--mode",
        choices=MODES,
        default="mv",
        help="Action to perform (default: mv)"
    )
    parser.add_argument(
        "-i", "--info",
        dest="mode",
        action="store_const",
        const=MODE_INFO,
        help="Print file properties instead of acting (same as --mode info)"
    )
    parser.add_argument(
        "--info-referenced",
        action="store_true",
        help="In info mode, print only properties the template references"
    )
    parser.add_argument(
        "-t", "--timestamp-format",
        default=DEFAULT_TIMESTAMP_FORMAT,
        help="strftime format for every timestamp property (default: %(default)s)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Write log to file")
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        default=True,
        help="Show what would be done without touching files (default: ON)"
    )
    parser.add_argument(
        "--no-dry-run",
        dest="dry_run",
        action="store_false",
        help="Actually perform actions (disables dry-run)"
    )
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing destinations")
    parser.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        help="Render undefined properties as empty strings instead of failing"
    )
    parser.add_argument("--no-hash", dest="use_hash", action="store_false", help="Do not compute SysSha1")
    parser.add_argument("--no-exif", dest="use_exif", action="store_false", help="Do not decode EXIF tags")
    parser.add_argument(
        "--delete-empty-dirs",
        action="store_true",
        help="Remove source directories left empty by mv"
    )
    parser.add_argument(
        "--absolute-symlinks",
        action="store_true",
        help="Always point symlinks at the absolute source path"
    )
    parser.add_argument(
        "-m", "--max-display-len",
        type=int,
        default=DEFAULT_MAX_DISPLAY_LEN,
        help="Elide info values longer than this, 0 for no limit (default: %(default)s)"
    )
    parser.add_argument(
        "--idx-start",
        type=int,
        default=DEFAULT_IDX_START,
        help="First SysIdx value (default: %(default)s)"
    )
    parser.add_argument(
        "--idx-width",
        type=int,
        default=DEFAULT_IDX_WIDTH,
        help="Zero-pad width of SysIdx (default: %(default)s)"
    )
    parser.add_argument(
        "-s", "--sanitize",
        default=DEFAULT_SANITIZE_PATTERN,
        help="Regex of invalid sequences in property values (default: %(default)s)"
    )
    parser.add_argument(
        "-r", "--replacement",
        default=DEFAULT_REPLACEMENT,
        help="Replacement for each invalid sequence (default: %(default)s)"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RenameConfig:
    return RenameConfig(
        destination=args.destination,
        mode=args.mode,
        timestamp_format=args.timestamp_format,
        verbose=args.verbose,
        dry_run=args.dry_run,
        force=args.force,
        strict=args.strict,
        use_hash=args.use_hash,
        use_exif=args.use_exif,
        delete_empty_dirs=args.delete_empty_dirs,
        absolute_symlinks=args.absolute_symlinks,
        max_display_len=args.max_display_len,
        info_referenced_only=args.info_referenced,
        idx_start=args.idx_start,
        idx_width=args.idx_width,
        sanitize_pattern=args.sanitize,
        replacement=args.replacement,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    config = config_from_args(args)
    try:
        driver = BatchDriver(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    files = find_matches(args.sources)
    if not files:
        print("No files found.", file=sys.stderr)
        return EXIT_OK

    if config.dry_run and config.mode != MODE_INFO:
        print("\nDRY RUN MODE - No files will be modified")
        print("Use --no-dry-run to actually apply changes\n")

    stats = driver.run(files)

    print(stats)

    if stats.failed > 0 and args.verbose:
        print("\nErrors encountered:")
        for error in stats.error_details[:10]:
            print(f"  • {error}")
        if len(stats.error_details) > 10:
            print(f"  ... and {len(stats.error_details) - 10} more")

    return EXIT_OK if stats.ok else EXIT_FAILURES


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
