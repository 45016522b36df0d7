"""
dupscope - Hard-link aware duplicate file finder

Walks one or more directory trees and reports groups of byte-identical
files, treating hard links and symlinks to the same file as one file.
"""

__version__ = "1.0.0"
__author__ = "dupscope Team"
__license__ = "MIT"

from .core.errors import DupscopeError, FileReadError, MetadataError, PathResolutionError
from .core.pipeline import Config, DuplicateScanner, ScanResult, ScanStats, find_duplicates
from .core.records import DuplicateGroup, RegularFileRecord

__all__ = [
    "Config",
    "DuplicateGroup",
    "DuplicateScanner",
    "DupscopeError",
    "FileReadError",
    "MetadataError",
    "PathResolutionError",
    "RegularFileRecord",
    "ScanResult",
    "ScanStats",
    "find_duplicates",
]
