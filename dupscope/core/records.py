#!/usr/bin/env python3
"""
Records passed between pipeline stages
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, NamedTuple


class SymlinkRecord(NamedTuple):
    """A symbolic link and its resolved target, pending a match"""
    path: Path
    target: Path


@dataclass
class RegularFileRecord:
    """One inode discovered during traversal"""
    path: Path
    size: int
    device: int
    inode: int
    hard_links: List[Path] = field(default_factory=list)
    symbolic_links: List[Path] = field(default_factory=list)

    @property
    def identity(self):
        return (self.device, self.inode)

    @property
    def all_paths(self) -> List[Path]:
        """Primary path followed by hard link and symlink aliases"""
        return [self.path, *self.hard_links, *self.symbolic_links]

    def to_dict(self) -> Dict:
        return {
            'path': str(self.path),
            'size': self.size,
            'device': self.device,
            'inode': self.inode,
            'hard_links': [str(p) for p in self.hard_links],
            'symbolic_links': [str(p) for p in self.symbolic_links],
        }


@dataclass
class DuplicateGroup:
    """Records confirmed to share size and content digest"""
    size: int
    digest: str
    records: List[RegularFileRecord]

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def wasted_space(self) -> int:
        return self.size * (self.count - 1)

    @property
    def paths(self) -> List[Path]:
        """Every known path of every member, aliases included"""
        return [p for record in self.records for p in record.all_paths]

    def to_dict(self) -> Dict:
        return {
            'size': self.size,
            'digest': self.digest,
            'count': self.count,
            'wasted_space': self.wasted_space,
            'files': [record.to_dict() for record in self.records],
        }
