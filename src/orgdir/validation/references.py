"""Cross-table reference validation for members, teams and titles."""

from __future__ import annotations

from collections.abc import Collection, Iterator
from typing import Any

from orgdir.contracts.errors import InvalidReferenceError
from orgdir.contracts.responses import TableMeta, ValidationResult
from orgdir.model.fields import Field
from orgdir.model.table import Table


def reference_violations(
    table: Table,
    member_ids: Collection[str],
    team_ids: Collection[str],
    title_ids: Collection[str],
    *,
    table_name: str | None = None,
) -> Iterator[InvalidReferenceError]:
    """Yield an error for every reference cell not found in its id set.

    Rows are visited in order; within a row member refs come first, then
    team refs, then title refs.
    """
    header = table.header
    groups: tuple[tuple[tuple[Field, ...], Collection[str]], ...] = (
        (header.member_ref_fields, member_ids),
        (header.team_ref_fields, team_ids),
        (header.title_ref_fields, title_ids),
    )
    for row in table.rows:
        for fields, valid in groups:
            for field in fields:
                value = row.value(field.index)
                if value not in valid:
                    yield InvalidReferenceError(row.index, field.name, value, table=table_name)


def validate_references(
    table: Table,
    member_ids: Collection[str],
    team_ids: Collection[str],
    title_ids: Collection[str],
    *,
    table_name: str | None = None,
) -> None:
    """Raise :class:`InvalidReferenceError` for the first bad reference."""
    for violation in reference_violations(
        table, member_ids, team_ids, title_ids, table_name=table_name
    ):
        raise violation


def is_valid_reference(field: Field, value: str, ids_by_kind: dict[str, Collection[str]]) -> bool:
    """Whether ``value`` is acceptable for ``field`` given the live id sets.

    ``ids_by_kind`` maps ``member``/``team``/``title`` to id collections.
    Non-reference fields accept anything.
    """
    kind = reference_kind(field)
    if kind is None:
        return True
    return value in ids_by_kind.get(kind, ())


def reference_kind(field: Field) -> str | None:
    if field.is_member_ref:
        return "member"
    if field.is_team_ref:
        return "team"
    if field.is_title_ref:
        return "title"
    return None


def validate_dataset(tables: dict[str, tuple[str, Table]]) -> ValidationResult:
    """Validate structure and references of the members, teams and titles tables.

    ``tables`` maps ``members``/``teams``/``titles`` to ``(file, table)``.
    All three must already be loaded: each table is checked against the id
    sets of every table, including its own. The first failure is raised.
    """
    members = tables["members"][1]
    teams = tables["teams"][1]
    titles = tables["titles"][1]

    for _, table in tables.values():
        table.validate_structure()

    member_ids = set(members.ids)
    team_ids = set(teams.ids)
    title_ids = set(titles.ids)

    checks: list[dict[str, Any]] = []
    metas: list[TableMeta] = []
    for name, (file, table) in tables.items():
        validate_references(table, member_ids, team_ids, title_ids, table_name=name)
        ref_fields = [f.name for f in table.header.fields if f.is_ref]
        checks.append({
            "type": "references",
            "table": name,
            "passed": True,
            "fields": ref_fields,
            "message": f"{len(table.rows)} row(s) checked",
        })
        metas.append(TableMeta(
            name=name,
            file=file,
            id_field=table.header.id_field.name,
            fields=table.header.names,
            row_count=len(table.rows),
        ))
    return ValidationResult(valid=True, tables=metas, checks=checks)
