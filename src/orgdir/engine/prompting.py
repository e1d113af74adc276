"""Interactive value entry for ``add member``.

Prompts are written to stderr so stdout carries only the JSON response.
End of input aborts the command.
"""

from __future__ import annotations

import click

from orgdir.engine.repository import Directory, ValueSource
from orgdir.model.fields import Field
from orgdir.validation.references import reference_kind


def value_prompt(field: Field) -> str:
    if field.multi_value:
        return f"Please enter '|' separated values for {field.name}: "
    return f"Please enter a value for {field.name}: "


def menu_prompt(choices: list[str]) -> str:
    lines = [f"  {i}: {value}" for i, value in enumerate(choices, start=1)]
    return "Invalid value. Choose from:\n" + "\n".join(lines) + "\n"


def ask_value(field: Field) -> str:
    # An empty answer is allowed: multi-value fields may hold no values.
    value = click.prompt(
        value_prompt(field),
        default="",
        show_default=False,
        prompt_suffix="",
        err=True,
    )
    return value.strip()


def choose_from_menu(choices: list[str]) -> str:
    """Ask for a 1-based menu number until a listed one is entered."""
    number = click.prompt(
        menu_prompt(choices),
        type=click.IntRange(1, len(choices)),
        prompt_suffix="",
        err=True,
    )
    return choices[number - 1]


def prompt_for_value(field: Field, valid_ids: list[str]) -> str:
    """Read one value; reference fields fall back to a numbered menu.

    When the referenced table has no ids there is nothing to choose from and
    the typed value is taken as is.
    """
    value = ask_value(field)
    if valid_ids and value not in valid_ids:
        return choose_from_menu(valid_ids)
    return value


def directory_prompter(directory: Directory) -> ValueSource:
    """Value source for :meth:`MemberRepository.add` backed by live id sets."""

    def value_for(field: Field) -> str:
        kind = reference_kind(field)
        valid_ids = directory.reference_ids(kind) if kind else []
        return prompt_for_value(field, valid_ids)

    return value_for
