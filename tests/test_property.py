"""Property-based tests using Hypothesis for the table model.

These tests verify invariants that must hold for *any* valid input:
- header marker parsing ignores case and marker order
- an update changes exactly one cell
- add-then-remove of a row restores the table
- multi-value add-then-remove restores the packed string
- reference validation accepts known ids and rejects unknown ones
"""

from __future__ import annotations

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from orgdir.contracts.errors import InvalidReferenceError
from orgdir.model.actions import FieldAction
from orgdir.model.fields import parse_field
from orgdir.model.table import Table
from orgdir.validation.references import validate_references

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

MARKERS = ["(multi)", "(id)", "(member)", "(team)", "(title)"]

field_names = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,11}", fullmatch=True)

# Cell values the CSV format can hold: no separator, no line breaks, no
# surrounding whitespace (cells are trimmed on load).
cell_text = st.text(
    alphabet=st.characters(min_codepoint=33, max_codepoint=126, blacklist_characters=",|"),
    min_size=1,
    max_size=12,
)


def _mixed_case(draw, text: str) -> str:
    flips = draw(st.lists(st.booleans(), min_size=len(text), max_size=len(text)))
    return "".join(c.upper() if f else c.lower() for c, f in zip(text, flips))


@st.composite
def tables(draw):
    """A table with an id column, a team ref column and a multi-value column."""
    ids = draw(st.lists(cell_text, min_size=1, max_size=6, unique=True))
    lines = ["id (id),team (team),tags (multi)"]
    for row_id in ids:
        tags = draw(st.lists(cell_text, max_size=3))
        lines.append(f"{row_id},{draw(cell_text)},{'|'.join(tags)}")
    return Table.parse(lines)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@given(name=field_names, markers=st.lists(st.sampled_from(MARKERS), unique=True), data=st.data())
def test_parse_field_ignores_case_and_order(name, markers, data):
    shuffled = data.draw(st.permutations(markers))
    cased = [_mixed_case(data.draw, m) for m in shuffled]
    a = parse_field(0, " ".join([name, *markers]))
    b = parse_field(0, " ".join([name, *cased]))
    assert a.model_dump(exclude={"raw"}) == b.model_dump(exclude={"raw"})
    assert a.name == name


@given(table=tables(), data=st.data())
def test_update_touches_exactly_one_cell(table, data):
    row_id = data.draw(st.sampled_from(table.ids))
    field = data.draw(st.sampled_from(table.header.names))
    action = data.draw(st.sampled_from(list(FieldAction)))
    change = data.draw(cell_text)

    new = table.update_field_value(row_id, action, field, change)
    target_row = table.find_row_by_id(row_id).index
    target_col = table.find_field(field).index

    assert len(new.rows) == len(table.rows)
    for before, after in zip(table.rows, new.rows):
        for col, (b, a) in enumerate(zip(before.values, after.values)):
            if (before.index, col) != (target_row, target_col):
                assert a == b


@given(table=tables(), row_id=cell_text, team=cell_text, tags=cell_text)
def test_add_then_remove_round_trip(table, row_id, team, tags):
    assume(row_id not in table.ids)
    new = table.add_row([row_id, team, tags]).remove_row_by_id(row_id)
    assert new.ids == table.ids
    assert len(new.rows) == len(table.rows)
    assert new.to_lines() == table.to_lines()


@given(values=st.lists(cell_text, max_size=5), change=cell_text)
def test_multi_value_add_then_remove_restores(values, change):
    assume(change not in values)
    current = "|".join(values)
    added = FieldAction.ADD.update(current, change)
    assert FieldAction.REMOVE.update(added, change) == current


@pytest.mark.parametrize("kind", ["member", "team", "title"])
@given(ids=st.lists(cell_text, min_size=1, max_size=5, unique=True), data=st.data())
def test_reference_validation_per_kind(kind, ids, data):
    value = data.draw(cell_text)
    table = Table.parse([f"id (id),ref ({kind})", f"r,{value}"])
    id_sets = {"member": set(), "team": set(), "title": set()}
    id_sets[kind] = set(ids)
    args = (id_sets["member"], id_sets["team"], id_sets["title"])
    if value in ids:
        validate_references(table, *args)
    else:
        with pytest.raises(InvalidReferenceError):
            validate_references(table, *args)
