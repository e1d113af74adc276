"""Tests for IO operations: BOM-tolerant reads, atomic write, backup, storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from orgdir.io.fileops import atomic_write, backup, read_lines, write_lines
from orgdir.io.storage import FileStorage, MemoryStorage


def test_read_lines_strips_bom(tmp_path: Path):
    p = tmp_path / "teams.csv"
    p.write_bytes(b"\xef\xbb\xbfid (id),name\r\neng,Engineering\r\n")
    assert read_lines(p) == ["id (id),name", "eng,Engineering"]


def test_write_lines_ends_with_newline(tmp_path: Path):
    p = tmp_path / "t.csv"
    write_lines(p, ["a", "b"])
    assert p.read_text(encoding="utf-8") == "a\nb\n"


def test_atomic_write_overwrites(tmp_path: Path):
    target = tmp_path / "members.csv"
    target.write_bytes(b"old content")
    atomic_write(target, b"new content")
    assert target.read_bytes() == b"new content"
    assert [p.name for p in tmp_path.iterdir()] == ["members.csv"]


def test_atomic_write_failure_leaves_target(tmp_path: Path, monkeypatch):
    target = tmp_path / "members.csv"
    target.write_bytes(b"keep me")

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("orgdir.io.fileops.shutil.move", boom)
    with pytest.raises(OSError, match="disk full"):
        atomic_write(target, b"new")
    assert target.read_bytes() == b"keep me"
    assert [p.name for p in tmp_path.iterdir()] == ["members.csv"]


def test_backup(tmp_path: Path):
    p = tmp_path / "members.csv"
    p.write_text("id (id)\n1\n")
    bak_path = backup(p)
    assert Path(bak_path).exists()
    assert ".bak" in bak_path
    assert Path(bak_path).read_text() == "id (id)\n1\n"


def test_file_storage(tmp_path: Path):
    storage = FileStorage(tmp_path)
    storage.persist("x.csv", ["id (id)", "1"])
    assert storage.load("x.csv") == ["id (id)", "1"]
    assert storage.locate("x.csv") == str(tmp_path / "x.csv")
    with pytest.raises(FileNotFoundError):
        storage.load("missing.csv")


def test_memory_storage_copies():
    lines = ["id (id)", "1"]
    storage = MemoryStorage({"x.csv": lines})
    loaded = storage.load("x.csv")
    loaded.append("2")
    assert storage.load("x.csv") == ["id (id)", "1"]
    storage.persist("x.csv", ["id (id)"])
    assert storage.writes == ["x.csv"]
    with pytest.raises(FileNotFoundError):
        storage.load("y.csv")
