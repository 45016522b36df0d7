#!/usr/bin/env python3
"""
Scan root normalization

Resolves user supplied roots and removes any root that lies inside (or is
equal to) another one, so that no file is visited twice.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .errors import PathResolutionError
from .filesystem import FilesystemProvider, LocalFilesystem

logger = logging.getLogger(__name__)


@dataclass
class ScopeStats:
    """Roots dropped during normalization, paired with the root covering them"""
    skipped: List[Tuple[Path, Path]] = field(default_factory=list)


def is_within(path: Path, root: Path) -> bool:
    """Component-wise prefix test, true for equal paths"""
    return path == root or root in path.parents


def normalize_roots(
    paths: Sequence[Union[str, Path]],
    fs: Optional[FilesystemProvider] = None,
) -> Tuple[List[Path], ScopeStats]:
    """Canonicalize roots and drop the ones nested in an accepted root.

    Shorter paths are considered first, so a parent directory always wins
    over its descendants regardless of the order they were given in.

    Raises:
        ValueError: if no paths were given
        PathResolutionError: if a path cannot be resolved
    """
    if not paths:
        raise ValueError("At least one path to scan is required")

    fs = fs or LocalFilesystem()
    resolved = []
    for raw in paths:
        try:
            resolved.append(fs.canonicalize(Path(raw)))
        except (OSError, RuntimeError) as e:
            raise PathResolutionError(raw, str(e)) from e

    resolved.sort(key=lambda p: len(str(p)))
    logger.debug(f"Resolved roots: {[str(p) for p in resolved]}")

    stats = ScopeStats()
    accepted: List[Path] = []
    for candidate in resolved:
        covering = next((root for root in accepted if is_within(candidate, root)), None)
        if covering is not None:
            logger.warning(f'Skip path: "{candidate}" starts with "{covering}"')
            stats.skipped.append((candidate, covering))
            continue
        accepted.append(candidate)

    logger.debug(f"Scan roots: {[str(p) for p in accepted]}")
    return accepted, stats
