"""Error taxonomy for table parsing, lookup, mutation and validation.

Every error carries a stable ``code`` used for the response envelope and
exit-code mapping, plus a ``details`` mapping with the offending context.
"""

from __future__ import annotations

from typing import Any


class OrgDataError(Exception):
    """Base class for all directory data errors."""

    code = "ERR_ORG_DATA"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details


class MissingHeaderError(OrgDataError):
    """Raised when a table source has no lines at all."""

    code = "ERR_MISSING_HEADER"

    def __init__(self, source: str | None = None) -> None:
        where = f"File [{source}]" if source else "Table"
        super().__init__(f"{where} is missing a header", source=source)


class IdFieldError(OrgDataError):
    """Raised when a header declares zero or several id fields."""

    code = "ERR_ID_FIELD_INVALID"

    def __init__(self, id_fields: list[str]) -> None:
        if not id_fields:
            message = "Header has no id field"
        else:
            message = f"Header has more than one id field [{','.join(id_fields)}]"
        super().__init__(message, id_fields=id_fields)


class RowWidthError(OrgDataError):
    code = "ERR_ROW_WIDTH"

    def __init__(self, row_index: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Row [{row_index}] has {actual} fields but the header has [{expected}]",
            row_index=row_index,
            expected=expected,
            actual=actual,
        )
        self.row_index = row_index


class UnknownIdError(OrgDataError):
    code = "ERR_UNKNOWN_ID"

    def __init__(self, row_id: str) -> None:
        super().__init__(f"Unknown id [{row_id}]", id=row_id)
        self.id = row_id


class DuplicateIdError(OrgDataError):
    code = "ERR_DUPLICATE_ID"

    def __init__(self, row_id: str) -> None:
        super().__init__(f"Id [{row_id}] already exists", id=row_id)
        self.id = row_id


class UnknownFieldError(OrgDataError):
    """Raised on a field lookup miss; lists every valid field name."""

    code = "ERR_UNKNOWN_FIELD"

    def __init__(self, name: str, valid_names: list[str]) -> None:
        super().__init__(
            f"No such field [{name}]. Choose from [{', '.join(valid_names)}]",
            field=name,
            valid_fields=valid_names,
        )
        self.name = name
        self.valid_names = valid_names


class UnknownActionError(OrgDataError):
    code = "ERR_UNKNOWN_ACTION"

    def __init__(self, token: str) -> None:
        super().__init__(
            f"Unknown action [{token}]. Use 'add' or 'remove'", action=token
        )
        self.token = token


class InvalidReferenceError(OrgDataError):
    """Raised when a reference field value is not an id of the referenced table."""

    code = "ERR_INVALID_REFERENCE"

    def __init__(
        self,
        row_index: int,
        field_name: str,
        value: str,
        table: str | None = None,
    ) -> None:
        where = f" in table [{table}]" if table else ""
        super().__init__(
            f"Invalid ref [{value}] for field [{field_name}] in row [{row_index}]{where}",
            table=table,
            row_index=row_index,
            field=field_name,
            value=value,
        )
        self.row_index = row_index
        self.field_name = field_name
        self.value = value
        self.table = table


class InvalidValueError(OrgDataError):
    """Raised when a cell value cannot be represented in the CSV format."""

    code = "ERR_INVALID_VALUE"

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Invalid value [{value}]: {reason}", value=value)
        self.value = value
