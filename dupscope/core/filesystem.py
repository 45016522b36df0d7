#!/usr/bin/env python3
"""
Filesystem access used by the scanner

All I/O performed by the pipeline goes through a FilesystemProvider.
"""

import os
import stat
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple


class FileMetadata(NamedTuple):
    """Identity and size of a filesystem node"""
    size: int
    device: int
    inode: int
    is_regular: bool


class FilesystemProvider(ABC):
    """Abstract filesystem interface"""

    @abstractmethod
    def canonicalize(self, path: Path) -> Path:
        """Return the absolute path with every symlink resolved.

        Raises OSError if the path (or a link target) does not exist.
        """

    @abstractmethod
    def is_symlink(self, path: Path) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        pass

    @abstractmethod
    def read_dir(self, path: Path) -> Iterator[Path]:
        """Yield the entries of a directory, raising OSError if it can't be listed"""

    @abstractmethod
    def metadata(self, path: Path) -> FileMetadata:
        pass

    @abstractmethod
    def read_link_target(self, path: Path) -> Path:
        pass

    @abstractmethod
    def open_binary(self, path: Path) -> BinaryIO:
        pass

    def read_file_fully(self, path: Path) -> bytes:
        with self.open_binary(path) as f:
            return f.read()


class LocalFilesystem(FilesystemProvider):
    """FilesystemProvider backed by os and pathlib"""

    def canonicalize(self, path: Path) -> Path:
        return Path(path).resolve(strict=True)

    def is_symlink(self, path: Path) -> bool:
        return Path(path).is_symlink()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def read_dir(self, path: Path) -> Iterator[Path]:
        # Materialize the listing so permission errors surface here
        with os.scandir(path) as it:
            entries = [Path(entry.path) for entry in it]
        return iter(entries)

    def metadata(self, path: Path) -> FileMetadata:
        st = os.lstat(path)
        return FileMetadata(
            size=st.st_size,
            device=st.st_dev,
            inode=st.st_ino,
            is_regular=stat.S_ISREG(st.st_mode),
        )

    def read_link_target(self, path: Path) -> Path:
        return Path(os.readlink(path))

    def open_binary(self, path: Path) -> BinaryIO:
        return open(path, "rb")
