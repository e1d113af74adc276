"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from orgdir.io.storage import MemoryStorage
from orgdir.model.table import Table

MEMBERS = [
    "id (id),name,team (team),title (title),manager (member),skills (multi)",
    "alice,Alice Smith,eng,staff,alice,python|go",
    "bob,Bob Jones,eng,senior,alice,java",
    "carol,Carol White,sales,junior,bob,",
]

TEAMS = [
    "id (id),name,lead (member)",
    "eng,Engineering,alice",
    "sales,Sales,bob",
]

TITLES = [
    "id (id),name",
    "staff,Staff Engineer",
    "senior,Senior Engineer",
    "junior,Junior Engineer",
]


def _write(path: Path, lines: list[str]) -> None:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


@pytest.fixture()
def members_table() -> Table:
    return Table.parse(MEMBERS)


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage({
        "members.csv": MEMBERS,
        "teams.csv": TEAMS,
        "titles.csv": TITLES,
    })


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """A directory holding consistent members/teams/titles CSV files."""
    _write(tmp_path / "members.csv", MEMBERS)
    _write(tmp_path / "teams.csv", TEAMS)
    _write(tmp_path / "titles.csv", TITLES)
    return tmp_path


@pytest.fixture()
def minimal_dir(tmp_path: Path) -> Path:
    """The smallest consistent dataset: one member on one team, no titles."""
    _write(tmp_path / "members.csv", ["id (id),name,team (team)", "1,Alice,eng"])
    _write(tmp_path / "teams.csv", ["id (id),name", "eng,Engineering"])
    _write(tmp_path / "titles.csv", ["id (id),name"])
    return tmp_path
