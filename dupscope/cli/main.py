#!/usr/bin/env python3
"""
dupscope - Hard-link aware duplicate file finder

Features:
- Nested and repeated scan roots are collapsed so every file is visited once
- Hard links are reported as one file, symlinks as aliases of their target
- Size bucketing before hashing, so only candidates are ever read
- Multiple hash algorithms (SHA256, BLAKE2b, SHA1, MD5, xxHash)
- Export to CSV/JSON
"""

import argparse
import csv
import json
import logging
import sys
from datetime import datetime, timedelta
from typing import List, Optional

from .. import __version__
from ..core.errors import DupscopeError
from ..core.grouping import HASH_ALGORITHMS, READ_ERROR_POLICIES
from ..core.pipeline import Config, DuplicateScanner, ScanResult, ScanStats
from ..core.records import DuplicateGroup

# ---------------------------
# Logging Configuration
# ---------------------------
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# ---------------------------
# Utility Functions
# ---------------------------

def format_size(bytes_val: float) -> str:
    """Format bytes as human readable"""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_val < 1024.0:
            return f"{bytes_val:.1f} {unit}"
        bytes_val /= 1024.0
    return f"{bytes_val:.1f} PB"


def parse_size(size_str: str) -> int:
    """Parse human-readable size"""
    size_str = size_str.strip().upper()

    # Order matters: longer suffixes first to avoid 'B' matching 'MB'
    multipliers = [
        ('TB', 1024**4),
        ('GB', 1024**3),
        ('MB', 1024**2),
        ('KB', 1024),
        ('B', 1),
    ]

    for suffix, multiplier in multipliers:
        if size_str.endswith(suffix):
            number = size_str[:-len(suffix)].strip()
            return int(float(number) * multiplier)

    return int(size_str)

# ---------------------------
# Output
# ---------------------------

def log_groups(groups: List[DuplicateGroup]) -> None:
    """Write every duplicate set, aliases included, to the log"""
    for i, group in enumerate(groups, 1):
        logger.info(
            f"Duplicate set {i}: {group.count} files of {format_size(group.size)} "
            f"(digest {group.digest[:16]})"
        )
        for record in group.records:
            logger.info(f"  {record.path}")
            for path in record.hard_links:
                logger.info(f"    [hardlink] {path}")
            for path in record.symbolic_links:
                logger.info(f"    [symlink]  {path}")


def print_groups(groups: List[DuplicateGroup]) -> None:
    """Plain listing for quiet mode: one path per line, blank line between sets"""
    for i, group in enumerate(groups):
        if i:
            print()
        for path in group.paths:
            print(path)


def export_csv(result: ScanResult, output_path: str) -> None:
    """Export one row per known path"""
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(["group", "size", "digest", "path", "kind"])

        for i, group in enumerate(result.groups, 1):
            for record in group.records:
                rows = [(record.path, "file")]
                rows += [(p, "hardlink") for p in record.hard_links]
                rows += [(p, "symlink") for p in record.symbolic_links]
                for path, kind in rows:
                    writer.writerow([i, group.size, group.digest, str(path), kind])


def export_json(result: ScanResult, output_path: str) -> None:
    """Export duplicate groups with scan summary"""
    stats = result.stats
    data = {
        "version": __version__,
        "generated": datetime.now().isoformat(),
        "roots": [str(root) for root in stats.roots],
        "files_discovered": stats.files_discovered,
        "duplicate_sets": stats.duplicate_sets,
        "wasted_space": stats.wasted_space,
        "groups": [group.to_dict() for group in result.groups],
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def export_results(config: Config, result: ScanResult) -> str:
    output_path = config.export_path or f"duplicates.{config.export_format}"
    if config.export_format == "csv":
        export_csv(result, output_path)
    elif config.export_format == "json":
        export_json(result, output_path)
    logger.info(f"Results exported to: {output_path}")
    return output_path

# ---------------------------
# Report Generator
# ---------------------------

def generate_report(config: Config, stats: ScanStats) -> None:
    """Print scan summary"""
    duration = stats.get_duration()

    print("\n" + "="*70)
    print("DUPSCOPE REPORT")
    print("="*70)

    print(f"\nScan Summary:")
    print(f"  Duration: {timedelta(seconds=int(duration))}")
    print(f"  Roots: {', '.join(str(r) for r in stats.roots)}")
    print(f"  Files discovered: {stats.files_discovered:,}")
    print(f"  Files hashed: {stats.files_hashed:,}")

    skipped = [
        ("Nested roots", stats.roots_skipped),
        ("Unreadable directories", stats.unreadable_dirs),
        ("Dangling symlinks", stats.dangling_symlinks),
        ("Symlinks out of scope", stats.unresolved_symlinks),
        ("Special files", stats.special_files),
        ("Empty files", stats.empty_files),
        ("Hard links collapsed", stats.hard_links_collapsed),
        ("Unique size", stats.unique_size),
        ("Unique digest", stats.unique_digest),
        ("Unreadable files", stats.unreadable_files),
    ]
    skipped = [(label, count) for label, count in skipped if count]
    if skipped:
        print(f"\nSkipped:")
        for label, count in skipped:
            print(f"  {label}: {count:,}")

    if stats.bytes_read > 0:
        mb_read = stats.bytes_read / (1024 * 1024)
        mb_rate = mb_read / duration if duration > 0 else 0
        print(f"\nData read: {mb_read:.1f} MB ({mb_rate:.1f} MB/sec)")

    print(f"\nPhase Timing:")
    for phase in ["discovery", "grouping", "hashing"]:
        key = f"{phase}_duration"
        if key in stats.phase_times:
            print(f"  {phase.title()}: {stats.phase_times[key]:.2f}s")

    if stats.duplicate_sets:
        print(f"\nDuplicates found: {stats.duplicate_sets} sets")
        print(f"Total files involved: {stats.duplicate_files}")
        print(f"Wasted space: {format_size(stats.wasted_space)}")
    else:
        print("\nNo duplicates found!")

    if config.export_format:
        print(f"\nResults exported to: {config.export_path or f'duplicates.{config.export_format}'}")

# ---------------------------
# CLI Interface
# ---------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dupscope",
        description="Find duplicate files, treating hard links as one file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("paths", nargs="+", help="Paths to scan (can specify multiple)")

    parser.add_argument("--algorithm", choices=HASH_ALGORITHMS, default="sha256", help="Hash algorithm")
    parser.add_argument("--chunk-size", type=parse_size, default="1MB", help="Hash chunk size")
    parser.add_argument("--retry-attempts", type=int, default=3, help="Read attempts per file")
    parser.add_argument("--retry-backoff", type=float, default=0.2, help="Retry backoff")
    parser.add_argument(
        "--on-read-error",
        choices=READ_ERROR_POLICIES,
        default="skip",
        help="Skip unreadable files with a warning, or abort the scan"
    )

    parser.add_argument("--export", choices=["csv", "json"], help="Export format")
    parser.add_argument("--export-path", help="Export file path")

    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config(
        scan_paths=args.paths,
        hash_algorithm=args.algorithm,
        chunk_size=args.chunk_size,
        retry_attempts=args.retry_attempts,
        retry_backoff=args.retry_backoff,
        on_read_error=args.on_read_error,
        export_format=args.export,
        export_path=args.export_path,
        quiet=args.quiet,
        verbose=args.verbose,
    )

    package_logger = logging.getLogger("dupscope")
    if config.quiet:
        package_logger.setLevel(logging.WARNING)
    elif config.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    try:
        scanner = DuplicateScanner(config)
        result = scanner.scan()

        if config.quiet:
            print_groups(result.groups)
        else:
            log_groups(result.groups)
        if config.export_format:
            export_results(config, result)
        if not config.quiet:
            generate_report(config, result.stats)

    except ValueError as e:
        parser.error(str(e))
    except DupscopeError as e:
        logger.error(f"Fatal error: {type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nScan interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
