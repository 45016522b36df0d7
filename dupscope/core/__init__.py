"""
dupscope Core Modules

Scope normalization, tree walking, hard link collapsing, size bucketing
and content verification.
"""

from . import errors
from . import filesystem
from . import grouping
from . import hardlinks
from . import pipeline
from . import records
from . import scope
from . import walker

__all__ = [
    "errors",
    "filesystem",
    "grouping",
    "hardlinks",
    "pipeline",
    "records",
    "scope",
    "walker",
]
