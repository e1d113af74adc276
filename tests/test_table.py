"""Tests for the table model: parsing, lookups, copy-on-write mutations."""

from __future__ import annotations

import pytest

from orgdir.contracts.errors import (
    IdFieldError,
    InvalidValueError,
    MissingHeaderError,
    RowWidthError,
    UnknownFieldError,
    UnknownIdError,
)
from orgdir.model.actions import FieldAction
from orgdir.model.table import Header, Table


def test_parse_header_and_rows(members_table: Table):
    t = members_table
    assert t.header.names == ["id", "name", "team", "title", "manager", "skills"]
    assert t.header.id_field.name == "id"
    assert [f.name for f in t.header.team_ref_fields] == ["team"]
    assert [f.name for f in t.header.title_ref_fields] == ["title"]
    assert [f.name for f in t.header.member_ref_fields] == ["manager"]
    assert [r.index for r in t.rows] == [0, 1, 2]
    assert t.ids == ["alice", "bob", "carol"]


def test_parse_trims_cells():
    t = Table.parse(["id (id) , name ", " 1 ,  Alice  "])
    assert t.header.names == ["id", "name"]
    assert t.rows[0].values == ("1", "Alice")


def test_parse_empty_input_fails():
    with pytest.raises(MissingHeaderError):
        Table.parse([])
    with pytest.raises(MissingHeaderError) as exc:
        Table.parse(["", "  "], source="members.csv")
    assert "members.csv" in str(exc.value)


def test_trailing_blank_lines_ignored():
    t = Table.parse(["id (id),name", "1,A", "", ""])
    assert len(t.rows) == 1


def test_blank_line_inside_is_a_row():
    t = Table.parse(["id (id),name", "", "1,A"])
    assert len(t.rows) == 2
    with pytest.raises(RowWidthError) as exc:
        t.validate_structure()
    assert exc.value.row_index == 0


def test_header_without_id_fails():
    with pytest.raises(IdFieldError, match="no id field"):
        Table.parse(["name,team (team)"])


def test_header_with_two_ids_fails():
    with pytest.raises(IdFieldError) as exc:
        Header.parse("a (id),b (ID)")
    assert exc.value.details["id_fields"] == ["a", "b"]


def test_validate_structure_reports_row_index():
    t = Table.parse(["id (id),name,team", "1,A,x", "2,B", "3,C,z,extra"])
    with pytest.raises(RowWidthError) as exc:
        t.validate_structure()
    assert exc.value.row_index == 1
    assert exc.value.details == {"row_index": 1, "expected": 3, "actual": 2}


def test_validate_structure_passes(members_table: Table):
    members_table.validate_structure()


def test_find_row_by_id(members_table: Table):
    row = members_table.find_row_by_id("bob")
    assert row.index == 1
    assert row.value(1) == "Bob Jones"


def test_find_row_by_id_returns_first_match():
    t = Table.parse(["id (id),name", "1,first", "1,second"])
    assert t.find_row_by_id("1").value(1) == "first"


def test_find_row_by_unknown_id(members_table: Table):
    with pytest.raises(UnknownIdError) as exc:
        members_table.find_row_by_id("zed")
    assert exc.value.id == "zed"


def test_find_field_lists_valid_names(members_table: Table):
    with pytest.raises(UnknownFieldError) as exc:
        members_table.find_field("Team")
    assert exc.value.valid_names == ["id", "name", "team", "title", "manager", "skills"]
    assert "id, name, team, title, manager, skills" in str(exc.value)


def test_find_row_ids_by_substring():
    t = Table.parse(["id (id),dept", "1,Engineering", "2,Sales", "3,Reverse Engineering"])
    assert t.find_row_ids_by("dept", "Engin") == ["1", "3"]
    assert t.find_row_ids_by("dept", "engin") == []
    assert t.find_row_ids_by("dept", "") == ["1", "2", "3"]


def test_add_row_returns_new_table(members_table: Table):
    new = members_table.add_row(["dave", "Dave", "eng", "junior", "bob", ""])
    assert len(members_table.rows) == 3
    assert len(new.rows) == 4
    assert new.rows[-1].index == 3
    assert new.ids[-1] == "dave"


def test_add_row_does_not_check_width(members_table: Table):
    new = members_table.add_row(["short"])
    with pytest.raises(RowWidthError) as exc:
        new.validate_structure()
    assert exc.value.row_index == 3


def test_remove_row_by_id(members_table: Table):
    new = members_table.remove_row_by_id("bob")
    assert new.ids == ["alice", "carol"]
    assert [r.index for r in new.rows] == [0, 1]
    assert members_table.ids == ["alice", "bob", "carol"]


def test_remove_unknown_id_is_noop(members_table: Table):
    new = members_table.remove_row_by_id("zed")
    assert new.ids == members_table.ids
    assert new.rows == members_table.rows


def test_update_overwrite(members_table: Table):
    new = members_table.update_field_value("bob", FieldAction.OVERWRITE, "title", "staff")
    assert new.find_row_by_id("bob").value(3) == "staff"
    assert members_table.find_row_by_id("bob").value(3) == "senior"


def test_update_multi_value(members_table: Table):
    added = members_table.update_field_value("alice", FieldAction.ADD, "skills", "rust")
    assert added.find_row_by_id("alice").value(5) == "python|go|rust"
    removed = added.update_field_value("alice", FieldAction.REMOVE, "skills", "python")
    assert removed.find_row_by_id("alice").value(5) == "go|rust"


def test_update_touches_one_cell(members_table: Table):
    new = members_table.update_field_value("carol", FieldAction.ADD, "skills", "excel")
    for before, after in zip(members_table.rows, new.rows):
        for i, (b, a) in enumerate(zip(before.values, after.values)):
            if before.index == 2 and i == 5:
                assert (b, a) == ("", "excel")
            else:
                assert a == b


def test_update_unknown_id_and_field(members_table: Table):
    with pytest.raises(UnknownIdError):
        members_table.update_field_value("zed", FieldAction.OVERWRITE, "name", "x")
    with pytest.raises(UnknownFieldError):
        members_table.update_field_value("bob", FieldAction.OVERWRITE, "nope", "x")


def test_update_after_remove_keeps_positions(members_table: Table):
    new = members_table.remove_row_by_id("alice").update_field_value(
        "carol", FieldAction.OVERWRITE, "name", "Caroline"
    )
    assert new.ids == ["bob", "carol"]
    assert new.find_row_by_id("carol").value(1) == "Caroline"
    assert new.find_row_by_id("bob").value(1) == "Bob Jones"


def test_to_lines_round_trip(members_table: Table):
    lines = members_table.to_lines()
    assert lines[0] == "id (id),name,team (team),title (title),manager (member),skills (multi)"
    assert lines[3] == "carol,Carol White,sales,junior,bob,"
    assert Table.parse(lines).ids == members_table.ids


def test_to_lines_rejects_commas(members_table: Table):
    bad = members_table.update_field_value("bob", FieldAction.OVERWRITE, "name", "Jones, Bob")
    with pytest.raises(InvalidValueError) as exc:
        bad.to_lines()
    assert exc.value.code == "ERR_INVALID_VALUE"


def test_to_lines_rejects_line_breaks(members_table: Table):
    bad = members_table.update_field_value("bob", FieldAction.OVERWRITE, "name", "Bob\nJones")
    with pytest.raises(InvalidValueError):
        bad.to_lines()


@pytest.mark.parametrize("sep", ["\r", "\x0b", "\x0c", "\x1c", "\x85", "\u2028", "\u2029"])
def test_to_lines_rejects_every_line_boundary(members_table: Table, sep: str):
    bad = members_table.update_field_value("bob", FieldAction.OVERWRITE, "name", f"Bob{sep}Jones")
    with pytest.raises(InvalidValueError):
        bad.to_lines()


def test_to_lines_keeps_header_text():
    lines = ["id (id),start (yyyy-mm-dd),Lead (MEMBER)", "1,2024-01-01,1"]
    assert Table.parse(lines).to_lines() == lines


def test_record(members_table: Table):
    row = members_table.find_row_by_id("alice")
    assert members_table.record(row)["skills"] == "python|go"
