#!/usr/bin/env python3
"""
Exceptions raised by the duplicate detection pipeline
"""

from pathlib import Path
from typing import Optional, Union


class DupscopeError(Exception):
    """Base error carrying the path that caused it"""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"{path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PathResolutionError(DupscopeError):
    """A scan root does not exist or cannot be resolved"""


class MetadataError(DupscopeError):
    """Size/device/inode of a discovered file cannot be fetched"""


class FileReadError(DupscopeError):
    """A file could not be read in full while hashing"""
