#!/usr/bin/env python3
"""
Empty file filtering and hard link collapsing
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from .records import RegularFileRecord

logger = logging.getLogger(__name__)


@dataclass
class CollapseStats:
    records_in: int = 0
    records_out: int = 0

    @property
    def links_collapsed(self) -> int:
        return self.records_in - self.records_out


def drop_empty(records: List[RegularFileRecord]) -> Tuple[List[RegularFileRecord], int]:
    """Remove zero byte files; they are never considered duplicates"""
    kept = [r for r in records if r.size > 0]
    return kept, len(records) - len(kept)


def collapse_hard_links(
    records: List[RegularFileRecord],
) -> Tuple[List[RegularFileRecord], CollapseStats]:
    """Merge records sharing a (device, inode) pair into a single record.

    The surviving record's primary path is the lexicographically smallest
    path of the group; every other path goes to ``hard_links`` (sorted) and
    symlink aliases of all members are merged. Output keeps the order in
    which each inode was first seen. Collapsing twice gives the same result.
    """
    groups: Dict[Tuple[int, int], List[RegularFileRecord]] = {}
    for record in records:
        groups.setdefault(record.identity, []).append(record)

    collapsed = []
    for members in groups.values():
        if len(members) == 1:
            collapsed.append(members[0])
            continue

        paths = sorted({p for m in members for p in (m.path, *m.hard_links)}, key=str)
        symlinks = [s for m in members for s in m.symbolic_links]
        survivor = replace(
            members[0],
            path=paths[0],
            hard_links=paths[1:],
            symbolic_links=symlinks,
        )
        logger.debug(f"Hard links of {survivor.path}: {[str(p) for p in survivor.hard_links]}")
        collapsed.append(survivor)

    return collapsed, CollapseStats(records_in=len(records), records_out=len(collapsed))
