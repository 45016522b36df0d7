#!/usr/bin/env python3
"""
Tests for scan root normalization
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from dupscope.core.errors import PathResolutionError
from dupscope.core.scope import is_within, normalize_roots


@pytest.fixture
def temp_dir():
    dir_path = Path(tempfile.mkdtemp()).resolve()
    yield dir_path
    shutil.rmtree(dir_path)


@pytest.fixture
def tree(temp_dir):
    (temp_dir / "data" / "sub" / "deep").mkdir(parents=True)
    (temp_dir / "data2").mkdir()
    return temp_dir


def test_single_root_is_canonicalized(tree):
    roots, stats = normalize_roots([str(tree / "data" / "sub" / "..")])

    assert roots == [tree / "data"]
    assert stats.skipped == []


def test_nested_root_is_skipped(tree, caplog):
    roots, stats = normalize_roots([str(tree / "data"), str(tree / "data" / "sub")])

    assert roots == [tree / "data"]
    assert stats.skipped == [(tree / "data" / "sub", tree / "data")]
    assert "Skip path" in caplog.text


def test_parent_wins_regardless_of_order(tree):
    roots, _ = normalize_roots([str(tree / "data" / "sub" / "deep"), str(tree / "data")])

    assert roots == [tree / "data"]


def test_equal_roots_collapse_to_one(tree):
    roots, stats = normalize_roots([str(tree / "data"), str(tree / "data"), str(tree / "data" / ".")])

    assert roots == [tree / "data"]
    assert len(stats.skipped) == 2


def test_sibling_with_common_string_prefix_is_kept(tree):
    # "data2" starts with the characters "data" but is not inside it
    roots, stats = normalize_roots([str(tree / "data"), str(tree / "data2")])

    assert roots == [tree / "data", tree / "data2"]
    assert stats.skipped == []


def test_symlinked_root_resolves_to_target(tree):
    link = tree / "alias"
    os.symlink(tree / "data", link)

    roots, stats = normalize_roots([str(tree / "data"), str(link)])

    assert roots == [tree / "data"]
    assert len(stats.skipped) == 1


def test_missing_root_is_fatal(tree):
    with pytest.raises(PathResolutionError) as excinfo:
        normalize_roots([str(tree / "data"), str(tree / "nope")])

    assert str(tree / "nope") in str(excinfo.value)


def test_empty_input_rejected():
    with pytest.raises(ValueError):
        normalize_roots([])


@pytest.mark.parametrize("path,root,expected", [
    ("/a/b", "/a", True),
    ("/a", "/a", True),
    ("/ab", "/a", False),
    ("/a", "/a/b", False),
])
def test_is_within(path, root, expected):
    assert is_within(Path(path), Path(root)) is expected
