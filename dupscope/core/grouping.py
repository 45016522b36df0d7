#!/usr/bin/env python3
"""
Size bucketing and content verification

Files can only be duplicates if they share a size, so records are first
partitioned by size and only members of shared-size buckets are hashed.
"""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .errors import FileReadError
from .filesystem import FilesystemProvider, LocalFilesystem
from .records import DuplicateGroup, RegularFileRecord

# Optional imports
try:
    import xxhash
    XXHASH_AVAILABLE = True
except ImportError:
    XXHASH_AVAILABLE = False

logger = logging.getLogger(__name__)

HASH_ALGORITHMS = ("md5", "sha1", "sha256", "blake2b", "xxhash")
READ_ERROR_POLICIES = ("skip", "abort")

# ---------------------------
# Hash Computer
# ---------------------------

class HashComputer:
    """Compute whole-file digests with retries"""

    def __init__(self, algorithm: str = "sha256", chunk_size: int = 1024 * 1024,
                 retry_attempts: int = 3, retry_backoff: float = 0.2,
                 fs: Optional[FilesystemProvider] = None):
        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff
        self.fs = fs or LocalFilesystem()
        self.bytes_read = 0

    def _get_hasher(self):
        """Get hasher for algorithm"""
        if self.algorithm == "md5":
            return hashlib.md5()
        elif self.algorithm == "sha1":
            return hashlib.sha1()
        elif self.algorithm == "blake2b":
            return hashlib.blake2b()
        elif self.algorithm == "xxhash" and XXHASH_AVAILABLE:
            return xxhash.xxh3_128()
        else:
            return hashlib.sha256()

    def compute_full_hash(self, path: Path, expected_size: Optional[int] = None) -> str:
        """Hash the whole file.

        Raises FileReadError when the file cannot be opened or read, or when
        fewer/more bytes than ``expected_size`` were read, after all retries.
        """
        error = None
        for attempt in range(self.retry_attempts):
            bytes_read = 0
            try:
                hasher = self._get_hasher()
                with self.fs.open_binary(path) as f:
                    while chunk := f.read(self.chunk_size):
                        hasher.update(chunk)
                        bytes_read += len(chunk)
                if expected_size is not None and bytes_read != expected_size:
                    error = f"read {bytes_read} bytes, expected {expected_size}"
                else:
                    self.bytes_read += bytes_read
                    return hasher.hexdigest()
            except OSError as e:
                error = str(e)

            if attempt < self.retry_attempts - 1:
                time.sleep(self.retry_backoff * (2 ** attempt))

        raise FileReadError(path, error)


# ---------------------------
# Size Bucketer
# ---------------------------

def bucket_by_size(
    records: List[RegularFileRecord],
) -> Tuple[Dict[int, List[RegularFileRecord]], int]:
    """Partition records by size, keeping buckets with at least two members.

    Returns the buckets (largest size first) and the number of records
    dropped because no other record shares their size.
    """
    buckets: Dict[int, List[RegularFileRecord]] = {}
    for record in records:
        buckets.setdefault(record.size, []).append(record)

    kept = {size: buckets[size] for size in sorted(buckets, reverse=True)
            if len(buckets[size]) >= 2}
    dropped = len(records) - sum(len(members) for members in kept.values())
    return kept, dropped


# ---------------------------
# Content Verifier
# ---------------------------

@dataclass
class VerifyStats:
    files_hashed: int = 0
    unique_digest: int = 0
    unreadable_files: List[Tuple[Path, str]] = field(default_factory=list)


def verify_contents(
    buckets: Dict[int, List[RegularFileRecord]],
    hasher: Optional[HashComputer] = None,
    on_read_error: str = "skip",
    progress: Optional[Callable[[int], None]] = None,
) -> Tuple[List[DuplicateGroup], VerifyStats]:
    """Confirm duplicates within each size bucket by content digest.

    ``on_read_error`` decides what a FileReadError does: "skip" excludes the
    file from its bucket with a warning, "abort" re-raises it.
    """
    if on_read_error not in READ_ERROR_POLICIES:
        raise ValueError(f"Unknown read error policy: {on_read_error}")

    hasher = hasher or HashComputer()
    stats = VerifyStats()
    groups: List[DuplicateGroup] = []

    for size, members in buckets.items():
        by_digest: Dict[str, List[RegularFileRecord]] = {}
        for record in members:
            try:
                digest = hasher.compute_full_hash(record.path, expected_size=size)
            except FileReadError as e:
                if on_read_error == "abort":
                    raise
                logger.warning(f"Excluding unreadable file {e}")
                stats.unreadable_files.append((record.path, e.reason or ""))
                continue
            stats.files_hashed += 1
            by_digest.setdefault(digest, []).append(record)
            if progress:
                progress(stats.files_hashed)

        for digest, same in by_digest.items():
            if len(same) >= 2:
                groups.append(DuplicateGroup(size=size, digest=digest, records=same))
            else:
                stats.unique_digest += len(same)

    return groups, stats
