"""Field descriptors parsed from header cells.

A header cell is ``<name>[ (marker)]*`` where each marker is one of
``(multi)``, ``(id)``, ``(member)``, ``(team)`` or ``(title)``. Markers are
matched case-insensitively and anywhere in the cell.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MULTI_VALUE_MARKER = "(multi)"
ID_MARKER = "(id)"
MEMBER_REF_MARKER = "(member)"
TEAM_REF_MARKER = "(team)"
TITLE_REF_MARKER = "(title)"


class Field(BaseModel):
    """One named, flag-annotated column of a table header."""

    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    raw: str = ""
    multi_value: bool = False
    is_id: bool = False
    is_member_ref: bool = False
    is_team_ref: bool = False
    is_title_ref: bool = False

    @property
    def is_ref(self) -> bool:
        return self.is_member_ref or self.is_team_ref or self.is_title_ref

    def header_cell(self) -> str:
        """Header text for the field: the cell as it was read, if any, else the
        name followed by one marker per flag."""
        if self.raw:
            return self.raw
        markers = [
            marker
            for flag, marker in (
                (self.is_id, ID_MARKER),
                (self.multi_value, MULTI_VALUE_MARKER),
                (self.is_member_ref, MEMBER_REF_MARKER),
                (self.is_team_ref, TEAM_REF_MARKER),
                (self.is_title_ref, TITLE_REF_MARKER),
            )
            if flag
        ]
        return " ".join([self.name, *markers])


def parse_field(index: int, raw: str) -> Field:
    """Parse a raw header cell into a :class:`Field`. Never fails."""
    lowered = raw.lower()
    return Field(
        index=index,
        name=raw.split("(", 1)[0].strip(),
        raw=raw.strip(),
        multi_value=MULTI_VALUE_MARKER in lowered,
        is_id=ID_MARKER in lowered,
        is_member_ref=MEMBER_REF_MARKER in lowered,
        is_team_ref=TEAM_REF_MARKER in lowered,
        is_title_ref=TITLE_REF_MARKER in lowered,
    )
