#!/usr/bin/env python3
"""
Duplicate detection pipeline

Runs the stages strictly in sequence:

1. normalize scan roots
2. walk the trees and resolve symlinks
3. drop empty files and collapse hard links
4. bucket by size
5. confirm by content digest
"""

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .filesystem import FilesystemProvider, LocalFilesystem
from .grouping import (
    HASH_ALGORITHMS, READ_ERROR_POLICIES, XXHASH_AVAILABLE,
    HashComputer, bucket_by_size, verify_contents,
)
from .hardlinks import collapse_hard_links, drop_empty
from .records import DuplicateGroup
from .scope import normalize_roots
from .walker import TreeWalker

logger = logging.getLogger(__name__)

# ---------------------------
# Configuration
# ---------------------------

@dataclass
class Config:
    """Scanner configuration"""
    scan_paths: List[str] = field(default_factory=list)

    # Hashing
    hash_algorithm: str = "sha256"  # md5, sha1, sha256, blake2b, xxhash
    chunk_size: int = 1024 * 1024  # 1 MB
    retry_attempts: int = 3
    retry_backoff: float = 0.2
    on_read_error: str = "skip"  # skip, abort

    # Output
    progress_interval: float = 2.0
    quiet: bool = False
    verbose: bool = False
    export_format: Optional[str] = None  # csv, json
    export_path: Optional[str] = None

    def validate(self) -> None:
        """Validate configuration"""
        if not self.scan_paths:
            raise ValueError("At least one path to scan is required")
        if self.chunk_size < 1024:
            raise ValueError("Chunk size must be >= 1KB")
        if self.retry_attempts < 1:
            raise ValueError("Retry attempts must be >= 1")
        if self.retry_backoff < 0:
            raise ValueError("Retry backoff cannot be negative")
        if self.hash_algorithm not in HASH_ALGORITHMS:
            raise ValueError(f"Unknown hash algorithm: {self.hash_algorithm}")
        if self.on_read_error not in READ_ERROR_POLICIES:
            raise ValueError(f"Unknown read error policy: {self.on_read_error}")
        if self.export_format not in (None, "csv", "json"):
            raise ValueError(f"Unknown export format: {self.export_format}")
        if self.hash_algorithm == "xxhash" and not XXHASH_AVAILABLE:
            logger.warning("xxhash not available, falling back to sha256")
            self.hash_algorithm = "sha256"

# ---------------------------
# Statistics
# ---------------------------

@dataclass
class ScanStats:
    """Counts gathered across all stages"""
    # Scope and traversal
    roots: List[Path] = field(default_factory=list)
    roots_skipped: int = 0
    files_discovered: int = 0
    unreadable_dirs: int = 0
    dangling_symlinks: int = 0
    unresolved_symlinks: int = 0
    special_files: int = 0

    # Filtering
    empty_files: int = 0
    hard_links_collapsed: int = 0
    unique_size: int = 0
    unique_digest: int = 0
    unreadable_files: int = 0

    # Hashing
    files_hashed: int = 0
    bytes_read: int = 0

    # Results
    duplicate_sets: int = 0
    duplicate_files: int = 0
    wasted_space: int = 0

    # Performance
    start_time: float = field(default_factory=time.time)
    phase_times: Dict[str, float] = field(default_factory=dict)

    def get_duration(self) -> float:
        """Get elapsed time"""
        return time.time() - self.start_time

    def start_phase(self, phase: str) -> None:
        self.phase_times[f"{phase}_start"] = time.time()

    def end_phase(self, phase: str) -> None:
        start_key = f"{phase}_start"
        if start_key in self.phase_times:
            self.phase_times[f"{phase}_duration"] = time.time() - self.phase_times[start_key]

# ---------------------------
# Progress Tracker
# ---------------------------

class ProgressTracker:
    """Periodically log hashing progress"""

    def __init__(self, config: Config, hasher: HashComputer, total: int):
        self.config = config
        self.hasher = hasher
        self.total = total
        self.started = time.time()
        self.last_update = self.started

    def update(self, hashed: int, force: bool = False) -> None:
        now = time.time()
        if not force and now - self.last_update < self.config.progress_interval:
            return

        elapsed = now - self.started
        rate = hashed / elapsed if elapsed > 0 else 0
        parts = [
            f"Hashed: {hashed:,}/{self.total:,}",
            f"Rate: {rate:.1f}/s",
            f"Time: {timedelta(seconds=int(elapsed))}",
        ]
        if self.hasher.bytes_read > 0:
            mb_read = self.hasher.bytes_read / (1024 * 1024)
            mb_rate = mb_read / elapsed if elapsed > 0 else 0
            parts.append(f"Read: {mb_read:.1f}MB ({mb_rate:.1f}MB/s)")

        logger.info(" | ".join(parts))
        self.last_update = now

# ---------------------------
# Scanner
# ---------------------------

@dataclass
class ScanResult:
    groups: List[DuplicateGroup]
    stats: ScanStats


class DuplicateScanner:
    """Runs the duplicate detection stages over a set of roots"""

    def __init__(self, config: Config, fs: Optional[FilesystemProvider] = None):
        config.validate()
        self.config = config
        self.fs = fs or LocalFilesystem()
        self.stats = ScanStats()
        self.hasher = HashComputer(
            config.hash_algorithm,
            config.chunk_size,
            config.retry_attempts,
            config.retry_backoff,
            fs=self.fs,
        )

    def scan(self) -> ScanResult:
        """Execute the complete scan.

        Fatal errors (PathResolutionError, MetadataError, and FileReadError
        under the "abort" policy) propagate to the caller.
        """
        self.stats = stats = ScanStats()
        self.hasher.bytes_read = 0
        logger.info(f"Now scanning {self.config.scan_paths} ...")

        stats.start_phase("discovery")
        roots, scope_stats = normalize_roots(self.config.scan_paths, self.fs)
        stats.roots = roots
        stats.roots_skipped = len(scope_stats.skipped)

        files, walk_stats = TreeWalker(self.fs).walk(roots)
        stats.files_discovered = walk_stats.files_found
        stats.unreadable_dirs = len(walk_stats.unreadable_dirs)
        stats.dangling_symlinks = len(walk_stats.dangling_symlinks)
        stats.unresolved_symlinks = len(walk_stats.unresolved_symlinks)
        stats.special_files = len(walk_stats.special_files)
        stats.end_phase("discovery")

        logger.info(f"Found {stats.files_discovered:,} files")
        if stats.unreadable_dirs:
            logger.warning(f"Skipped {stats.unreadable_dirs:,} unreadable directories")

        stats.start_phase("grouping")
        files, stats.empty_files = drop_empty(files)
        logger.info(f"Skipped {stats.empty_files:,} files with zero size")

        files, collapse_stats = collapse_hard_links(files)
        stats.hard_links_collapsed = collapse_stats.links_collapsed
        if stats.hard_links_collapsed:
            logger.info(f"Collapsed {stats.hard_links_collapsed:,} hard links")

        buckets, stats.unique_size = bucket_by_size(files)
        logger.info(f"Skipped {stats.unique_size:,} files with unique size")
        stats.end_phase("grouping")

        stats.start_phase("hashing")
        candidates = sum(len(members) for members in buckets.values())
        tracker = None
        if not self.config.quiet:
            tracker = ProgressTracker(self.config, self.hasher, candidates)
        groups, verify_stats = verify_contents(
            buckets, self.hasher, self.config.on_read_error,
            tracker.update if tracker else None
        )
        if tracker and verify_stats.files_hashed:
            tracker.update(verify_stats.files_hashed, force=True)
        stats.files_hashed = verify_stats.files_hashed
        stats.unique_digest = verify_stats.unique_digest
        stats.unreadable_files = len(verify_stats.unreadable_files)
        stats.bytes_read = self.hasher.bytes_read
        stats.end_phase("hashing")

        logger.info(f"Skipped {stats.unique_digest:,} files with unique digest")
        if stats.unreadable_files:
            logger.warning(f"Skipped {stats.unreadable_files:,} unreadable files")

        stats.duplicate_sets = len(groups)
        stats.duplicate_files = sum(group.count for group in groups)
        stats.wasted_space = sum(group.wasted_space for group in groups)
        return ScanResult(groups=groups, stats=stats)


def find_duplicates(paths: Sequence[Union[str, Path]],
                    config: Optional[Config] = None,
                    fs: Optional[FilesystemProvider] = None) -> ScanResult:
    """Convenience wrapper: scan ``paths`` and return the duplicate groups"""
    config = replace(config or Config(), scan_paths=[str(p) for p in paths])
    return DuplicateScanner(config, fs).scan()
