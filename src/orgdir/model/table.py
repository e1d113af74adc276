"""In-memory table model: header, rows, lookups and copy-on-write mutations.

A :class:`Table` is a value. ``add_row``, ``remove_row_by_id`` and
``update_field_value`` all return a new table and leave the receiver as it
was; persisting the new value is the repository's job.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from orgdir.contracts.errors import (
    IdFieldError,
    InvalidValueError,
    MissingHeaderError,
    RowWidthError,
    UnknownFieldError,
    UnknownIdError,
)
from orgdir.model.actions import FieldAction
from orgdir.model.fields import Field, parse_field

SEPARATOR = ","


def parse_line(line: str) -> list[str]:
    # Embedded commas are not supported: there is no quoting in this format.
    return [cell.strip() for cell in line.split(SEPARATOR)]


class Row(BaseModel):
    """A data row. ``values`` is not checked against the header width here."""

    model_config = ConfigDict(frozen=True)

    index: int
    values: tuple[str, ...]

    def value(self, field_index: int) -> str:
        return self.values[field_index]


class Header:
    """Ordered fields of a table with exactly one id field."""

    def __init__(self, fields: Sequence[Field]) -> None:
        self.fields: tuple[Field, ...] = tuple(fields)
        id_fields = [f for f in self.fields if f.is_id]
        if len(id_fields) != 1:
            raise IdFieldError([f.name for f in id_fields])
        self.id_field: Field = id_fields[0]
        self.member_ref_fields = tuple(f for f in self.fields if f.is_member_ref)
        self.team_ref_fields = tuple(f for f in self.fields if f.is_team_ref)
        self.title_ref_fields = tuple(f for f in self.fields if f.is_title_ref)

    @classmethod
    def parse(cls, line: str) -> "Header":
        return cls([parse_field(i, cell) for i, cell in enumerate(parse_line(line))])

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise UnknownFieldError(name, self.names)

    def __len__(self) -> int:
        return len(self.fields)

    def to_line(self) -> str:
        return SEPARATOR.join(f.header_cell() for f in self.fields)


class Table:
    """Header plus ordered rows, loaded from and persisted to one file."""

    def __init__(self, header: Header, rows: Iterable[Row] = ()) -> None:
        self.header = header
        self.rows: tuple[Row, ...] = tuple(rows)

    @classmethod
    def parse(cls, lines: Iterable[str], source: str | None = None) -> "Table":
        """Build a table from text lines. The first line is the header.

        Trailing blank lines are dropped; any other line becomes a row, so a
        blank line in the middle of a file surfaces as a width error. Rows are
        indexed from zero in file order.
        """
        lines = list(lines)
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            raise MissingHeaderError(source)
        header = Header.parse(lines[0])
        rows = [
            Row(index=i, values=tuple(parse_line(line)))
            for i, line in enumerate(lines[1:])
        ]
        return cls(header, rows)

    def to_lines(self) -> list[str]:
        """Serialize back to text lines, rejecting values the format cannot hold."""
        lines = [self.header.to_line()]
        for row in self.rows:
            for value in row.values:
                if SEPARATOR in value:
                    raise InvalidValueError(value, "values may not contain ','")
                if value and value.splitlines() != [value]:
                    raise InvalidValueError(value, "values may not contain line breaks")
            lines.append(SEPARATOR.join(row.values))
        return lines

    # -- queries ---------------------------------------------------------

    def row_id(self, row: Row) -> str:
        return row.value(self.header.id_field.index)

    @property
    def ids(self) -> list[str]:
        return [self.row_id(r) for r in self.rows]

    def validate_structure(self) -> None:
        """Fail on the first row whose width differs from the header."""
        expected = len(self.header)
        for row in self.rows:
            if len(row.values) != expected:
                raise RowWidthError(row.index, expected, len(row.values))

    def find_row_by_id(self, row_id: str) -> Row:
        """Return the first row with ``row_id``."""
        for row in self.rows:
            if self.row_id(row) == row_id:
                return row
        raise UnknownIdError(row_id)

    def find_field(self, name: str) -> Field:
        return self.header.field(name)

    def find_row_ids_by(self, field_name: str, substring: str) -> list[str]:
        """Ids of rows whose value at ``field_name`` contains ``substring``.

        Matching is case-sensitive and keeps row order.
        """
        index = self.find_field(field_name).index
        return [self.row_id(r) for r in self.rows if substring in r.value(index)]

    def record(self, row: Row) -> dict[str, str]:
        return {f.name: row.value(f.index) for f in self.header.fields}

    # -- mutations (copy-on-write) ----------------------------------------

    def add_row(self, values: Sequence[str]) -> "Table":
        row = Row(index=len(self.rows), values=tuple(values))
        return Table(self.header, [*self.rows, row])

    def remove_row_by_id(self, row_id: str) -> "Table":
        """Drop every row with ``row_id``; a missing id is a no-op.

        Remaining rows are re-indexed so that index matches position.
        """
        kept = [r for r in self.rows if self.row_id(r) != row_id]
        return Table(
            self.header,
            [r if r.index == i else Row(index=i, values=r.values) for i, r in enumerate(kept)],
        )

    def update_field_value(
        self,
        row_id: str,
        action: FieldAction,
        field_name: str,
        change: str,
    ) -> "Table":
        """Replace one cell with ``action.update(current, change)``."""
        old_row = self.find_row_by_id(row_id)
        field = self.find_field(field_name)
        values = list(old_row.values)
        values[field.index] = action.update(old_row.value(field.index), change)
        new_row = Row(index=old_row.index, values=tuple(values))
        return Table(
            self.header,
            [new_row if r is old_row else r for r in self.rows],
        )
