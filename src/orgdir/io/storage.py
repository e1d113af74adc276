"""Storage boundary: load and persist a table's text lines by file name.

No locking is done. Two processes writing the same file race, and the last
writer wins.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from orgdir.io.fileops import backup, read_lines, write_lines


class Storage(Protocol):
    def load(self, name: str) -> list[str]: ...

    def persist(self, name: str, lines: list[str]) -> None: ...

    def locate(self, name: str) -> str: ...

    def backup(self, name: str) -> str | None: ...


class FileStorage:
    """Tables stored as files in one directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path(self, name: str) -> Path:
        return self.directory / name

    def locate(self, name: str) -> str:
        return str(self.path(name))

    def load(self, name: str) -> list[str]:
        return read_lines(self.path(name))

    def persist(self, name: str, lines: list[str]) -> None:
        write_lines(self.path(name), lines)

    def backup(self, name: str) -> str | None:
        return backup(self.path(name))


class MemoryStorage:
    """Dict-backed storage, mainly for tests."""

    def __init__(self, files: dict[str, list[str]] | None = None) -> None:
        self.files: dict[str, list[str]] = {k: list(v) for k, v in (files or {}).items()}
        self.writes: list[str] = []

    def locate(self, name: str) -> str:
        return f"memory:{name}"

    def load(self, name: str) -> list[str]:
        if name not in self.files:
            raise FileNotFoundError(name)
        return list(self.files[name])

    def persist(self, name: str, lines: list[str]) -> None:
        self.files[name] = list(lines)
        self.writes.append(name)

    def backup(self, name: str) -> str | None:
        return None
