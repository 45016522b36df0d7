#!/usr/bin/env python3
"""
Tree Walker - recursive discovery of regular files

Traverses every scan root depth-first using an explicit work list. Symbolic
links are never followed; instead their resolved target is remembered and,
once traversal is complete, attached as an alias to the regular file it
points at (if that file was discovered).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import MetadataError
from .filesystem import FilesystemProvider, LocalFilesystem
from .records import RegularFileRecord, SymlinkRecord

logger = logging.getLogger(__name__)


@dataclass
class WalkStats:
    """Recoverable conditions met while walking"""
    files_found: int = 0
    directories_listed: int = 0
    unreadable_dirs: List[Path] = field(default_factory=list)
    dangling_symlinks: List[Path] = field(default_factory=list)
    unresolved_symlinks: List[SymlinkRecord] = field(default_factory=list)
    resolved_symlinks: int = 0
    special_files: List[Path] = field(default_factory=list)


class TreeWalker:
    """Depth-first filesystem walker"""

    def __init__(self, fs: Optional[FilesystemProvider] = None):
        self.fs = fs or LocalFilesystem()

    def walk(self, roots: Sequence[Path]) -> Tuple[List[RegularFileRecord], WalkStats]:
        """Discover all regular files below the given roots"""
        stats = WalkStats()
        files: List[RegularFileRecord] = []
        pending: List[SymlinkRecord] = []
        work: List[Path] = list(roots)

        while work:
            path = work.pop()

            if self.fs.is_symlink(path):
                link = self._resolve_symlink(path, stats)
                if link is not None:
                    pending.append(link)
            elif self.fs.is_dir(path):
                try:
                    entries = list(self.fs.read_dir(path))
                except OSError as e:
                    logger.debug(f"Cannot list directory {path}: {e}")
                    stats.unreadable_dirs.append(path)
                    continue
                stats.directories_listed += 1
                work.extend(entries)
            else:
                record = self._make_record(path, stats)
                if record is not None:
                    files.append(record)

        stats.files_found = len(files)
        self._attach_symlinks(files, pending, stats)
        return files, stats

    def _resolve_symlink(self, path: Path, stats: WalkStats) -> Optional[SymlinkRecord]:
        try:
            return SymlinkRecord(path, self.fs.canonicalize(path))
        except (OSError, RuntimeError) as e:
            try:
                raw_target = self.fs.read_link_target(path)
            except OSError:
                raw_target = "?"
            logger.warning(f"Failed to canonicalize symlink: {path} -> {raw_target}, error: {e}")
            stats.dangling_symlinks.append(path)
            return None

    def _make_record(self, path: Path, stats: WalkStats) -> Optional[RegularFileRecord]:
        try:
            meta = self.fs.metadata(path)
        except OSError as e:
            raise MetadataError(path, str(e)) from e

        if not meta.is_regular:
            logger.debug(f"Ignoring special file {path}")
            stats.special_files.append(path)
            return None

        return RegularFileRecord(
            path=path,
            size=meta.size,
            device=meta.device,
            inode=meta.inode,
        )

    def _attach_symlinks(self, files: List[RegularFileRecord],
                         pending: List[SymlinkRecord], stats: WalkStats) -> None:
        """Attach symlinks to the record whose primary path is their target"""
        by_path: Dict[Path, RegularFileRecord] = {f.path: f for f in files}

        for link in pending:
            record = by_path.get(link.target)
            if record is None:
                stats.unresolved_symlinks.append(link)
                continue
            record.symbolic_links.append(link.path)
            stats.resolved_symlinks += 1

        if stats.unresolved_symlinks:
            logger.warning(
                f"Skipped {len(stats.unresolved_symlinks)} symbolic links "
                f"not pointing to files in scope"
            )
            for link in stats.unresolved_symlinks:
                logger.debug(f"Symbolic link: {link.path} -> {link.target}")


def walk(roots: Sequence[Path],
         fs: Optional[FilesystemProvider] = None) -> Tuple[List[RegularFileRecord], WalkStats]:
    return TreeWalker(fs).walk(roots)
