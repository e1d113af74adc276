"""Field update actions: overwrite, and add/remove on multi-value fields."""

from __future__ import annotations

from enum import Enum

from orgdir.contracts.errors import UnknownActionError

MULTI_VALUE_DELIMITER = "|"


def split_values(value: str) -> list[str]:
    """Split a packed multi-value string. The empty string holds no values."""
    if value == "":
        return []
    return value.split(MULTI_VALUE_DELIMITER)


def join_values(values: list[str]) -> str:
    return MULTI_VALUE_DELIMITER.join(values)


class FieldAction(str, Enum):
    OVERWRITE = "overwrite"
    ADD = "add"
    REMOVE = "remove"

    @classmethod
    def from_token(cls, token: str) -> "FieldAction":
        """Map a command token to a multi-value action.

        Only ``add`` and ``remove`` are valid tokens; overwrite is chosen by
        argument count, never by name.
        """
        try:
            return _TOKENS[token]
        except KeyError:
            raise UnknownActionError(token) from None

    def update(self, current: str, change: str) -> str:
        if self is FieldAction.OVERWRITE:
            return change
        values = split_values(current)
        if self is FieldAction.ADD:
            return join_values([*values, change])
        return join_values([v for v in values if v != change])


_TOKENS = {
    "add": FieldAction.ADD,
    "remove": FieldAction.REMOVE,
}
