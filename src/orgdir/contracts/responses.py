"""Command-specific result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TableMeta(BaseModel):
    """Summary of a loaded table."""

    name: str
    file: str
    id_field: str
    fields: list[str] = Field(default_factory=list)
    row_count: int = 0


class MemberRecord(BaseModel):
    """A single row rendered as field name -> value."""

    id: str
    row_index: int
    values: dict[str, str] = Field(default_factory=dict)


class FindResult(BaseModel):
    """Result of ``find member``."""

    field: str
    query: str
    ids: list[str] = Field(default_factory=list)
    count: int = 0


class MutationResult(BaseModel):
    """Result of a mutating command."""

    id: str
    dry_run: bool = False
    backup_path: str | None = None
    row_count: int = 0


class ValidationResult(BaseModel):
    """Result of a validation command."""

    valid: bool = True
    tables: list[TableMeta] = Field(default_factory=list)
    checks: list[dict[str, Any]] = Field(default_factory=list)
