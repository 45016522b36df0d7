#!/usr/bin/env python3
"""
Tests for the command line interface
"""

import csv
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from dupscope.cli.main import format_size, main, parse_size


@pytest.fixture
def temp_dir():
    dir_path = Path(tempfile.mkdtemp()).resolve()
    yield dir_path
    shutil.rmtree(dir_path)


@pytest.fixture(autouse=True)
def restore_log_level():
    package_logger = logging.getLogger("dupscope")
    level = package_logger.level
    yield
    package_logger.setLevel(level)


@pytest.fixture
def duplicate_tree(temp_dir):
    data = temp_dir / "data"
    (data / "sub").mkdir(parents=True)
    (data / "a.txt").write_text("hello")
    (data / "sub" / "b.txt").write_text("hello")
    os.link(data / "a.txt", data / "hard.txt")
    os.symlink(data / "sub" / "b.txt", data / "soft")
    (data / "unique.txt").write_text("nothing like it")
    (data / "empty.txt").touch()
    return data


def test_quiet_prints_plain_groups(duplicate_tree, capsys):
    main(["-q", str(duplicate_tree)])

    out = capsys.readouterr().out.splitlines()
    assert set(out) == {
        str(duplicate_tree / "a.txt"),
        str(duplicate_tree / "hard.txt"),
        str(duplicate_tree / "sub" / "b.txt"),
        str(duplicate_tree / "soft"),
    }


def test_report_and_logged_groups(duplicate_tree, capsys, caplog):
    caplog.set_level(logging.INFO, logger="dupscope")

    main([str(duplicate_tree)])

    out = capsys.readouterr().out
    assert "DUPSCOPE REPORT" in out
    assert "Duplicates found: 1 sets" in out
    assert "Empty files: 1" in out
    assert "Duplicate set 1: 2 files" in caplog.text
    assert f"[hardlink] {duplicate_tree / 'hard.txt'}" in caplog.text
    assert f"[symlink]  {duplicate_tree / 'soft'}" in caplog.text


def test_no_duplicates(temp_dir, capsys):
    (temp_dir / "a.txt").write_text("one")
    (temp_dir / "b.txt").write_text("two!")

    main([str(temp_dir)])

    assert "No duplicates found!" in capsys.readouterr().out


def test_missing_path_exits_with_error(temp_dir, caplog):
    missing = temp_dir / "missing"

    with pytest.raises(SystemExit) as excinfo:
        main([str(temp_dir), str(missing)])

    assert excinfo.value.code == 1
    assert "PathResolutionError" in caplog.text
    assert str(missing) in caplog.text


def test_paths_are_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 2


def test_invalid_chunk_size_is_usage_error(temp_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--chunk-size", "10", str(temp_dir)])

    assert excinfo.value.code == 2
    assert "Chunk size" in capsys.readouterr().err


def test_export_json(duplicate_tree, temp_dir):
    output = temp_dir / "out.json"

    main(["-q", "--export", "json", "--export-path", str(output), str(duplicate_tree)])

    data = json.loads(output.read_text())
    assert {"version", "generated", "groups"} <= set(data)
    assert data["duplicate_sets"] == 1
    assert data["roots"] == [str(duplicate_tree)]
    (group,) = data["groups"]
    assert group["size"] == 5
    assert group["count"] == 2
    files = {f["path"]: f for f in group["files"]}
    assert files[str(duplicate_tree / "a.txt")]["hard_links"] == [str(duplicate_tree / "hard.txt")]
    assert files[str(duplicate_tree / "sub" / "b.txt")]["symbolic_links"] == [str(duplicate_tree / "soft")]


def test_export_csv(duplicate_tree, temp_dir):
    output = temp_dir / "out.csv"

    main(["-q", "--export", "csv", "--export-path", str(output), str(duplicate_tree)])

    with open(output, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0]) == ["group", "size", "digest", "path", "kind"]
    kinds = {row["path"]: row["kind"] for row in rows}
    assert kinds == {
        str(duplicate_tree / "a.txt"): "file",
        str(duplicate_tree / "hard.txt"): "hardlink",
        str(duplicate_tree / "sub" / "b.txt"): "file",
        str(duplicate_tree / "soft"): "symlink",
    }
    assert {row["group"] for row in rows} == {"1"}
    assert {row["size"] for row in rows} == {"5"}


def test_algorithm_option(duplicate_tree, temp_dir):
    output = temp_dir / "out.json"

    main(["-q", "--algorithm", "md5", "--export", "json", "--export-path", str(output),
          str(duplicate_tree)])

    (group,) = json.loads(output.read_text())["groups"]
    assert group["digest"] == "5d41402abc4b2a76b9719d911017c592"


@pytest.mark.parametrize("text,expected", [
    ("1024", 1024),
    ("64KB", 64 * 1024),
    ("1MB", 1024 * 1024),
    ("1.5 GB", int(1.5 * 1024**3)),
    ("10b", 10),
])
def test_parse_size(text, expected):
    assert parse_size(text) == expected


@pytest.mark.parametrize("value,expected", [
    (0, "0.0 B"),
    (1536, "1.5 KB"),
    (1048576, "1.0 MB"),
])
def test_format_size(value, expected):
    assert format_size(value) == expected
