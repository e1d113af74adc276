"""Typer CLI application: member commands and dataset validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, NoReturn, Optional

import typer

from orgdir.help.usage import USAGE, patch_typer_errors, usage_error

patch_typer_errors()

import orgdir
from orgdir.config import ConfigError, OrgConfig
from orgdir.contracts.common import Target, WarningDetail
from orgdir.contracts.errors import OrgDataError
from orgdir.contracts.responses import FindResult, MutationResult
from orgdir.engine.dispatcher import (
    envelope_for_exception,
    error_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from orgdir.engine.prompting import directory_prompter
from orgdir.engine.repository import Directory, Mutation
from orgdir.model.actions import FieldAction
from orgdir.observe.events import EventEmitter, Timer

# ---------------------------------------------------------------------------
# App & subcommand groups
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Manage a small organizational directory kept in three CSV files:
`members.csv`, `teams.csv` and `titles.csv`.

**Header cells** are `name [(marker)]...` with markers `(id)`, `(multi)`,
`(member)`, `(team)`, `(title)`. Exactly one field per table is the id.
Multi-value fields pack values joined by `|`. Values may not contain commas.

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**Exit codes:** 0=success, 10=validation/usage, 50=io, 90=internal
"""

_UPDATE_EPILOG = """\
**Examples:**

`org update member alice title staff-engineer`: overwrite a field

`org update member alice add skills python`: add to a multi-value field

`org update member alice remove skills cobol`: remove from a multi-value field
"""


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(orgdir.__version__)
        raise typer.Exit()


app = typer.Typer(
    name="org",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

add_app = typer.Typer(
    name="add", help="Add records (interactive).",
    no_args_is_help=True, rich_markup_mode="markdown",
)
update_app = typer.Typer(
    name="update", help="Overwrite a field, or add/remove a multi-value entry.",
    epilog=_UPDATE_EPILOG,
    no_args_is_help=True, rich_markup_mode="markdown",
)
remove_app = typer.Typer(
    name="remove", help="Remove records.",
    no_args_is_help=True, rich_markup_mode="markdown",
)
get_app = typer.Typer(
    name="get", help="Show a single record.",
    no_args_is_help=True, rich_markup_mode="markdown",
)
find_app = typer.Typer(
    name="find", help="Find record ids by substring match on a field.",
    no_args_is_help=True, rich_markup_mode="markdown",
)

app.add_typer(add_app)
app.add_typer(update_app)
app.add_typer(remove_app)
app.add_typer(get_app)
app.add_typer(find_app)


@dataclass
class State:
    data_dir: str | None = None
    config_path: str | None = None
    events: EventEmitter = field(default_factory=EventEmitter)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Optional[str],
        typer.Option("--dir", "-d", envvar="ORG_DATA_DIR", help="Directory holding the CSV files"),
    ] = None,
    config: Annotated[
        Optional[str], typer.Option("--config", help="Path to an org.yaml config file")
    ] = None,
    events: Annotated[
        bool, typer.Option("--events", help="Emit NDJSON lifecycle events on stderr")
    ] = False,
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
) -> None:
    if version:
        _version_callback(True)
    ctx.obj = State(data_dir=data_dir, config_path=config, events=EventEmitter(enabled=events))


# Type aliases for common options
MemberId = Annotated[str, typer.Argument(help="Member id (value of the id field)")]
DryRunOpt = Annotated[bool, typer.Option("--dry-run", help="Preview changes without writing to disk")]
BackupOpt = Annotated[bool, typer.Option("--backup", help="Create timestamped .bak copy before writing")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, code=None) -> NoReturn:
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _state(ctx: typer.Context) -> State:
    return ctx.find_object(State) or State()


def _emit_error(envelope) -> NoReturn:
    """Emit an error envelope on stdout and its message on stderr."""
    typer.echo(f"Error: {envelope.errors[0].message}", err=True)
    _emit(envelope)


def _fail(state: State, command: str, exc: Exception, target: Target) -> NoReturn:
    env = envelope_for_exception(command, exc, target=target)
    state.events.emit("command.failed", {"code": env.errors[0].code})
    _emit_error(env)


def _directory(state: State, command: str) -> Directory:
    """Resolve config and open the directory, or emit an error envelope."""
    state.events.command = command
    try:
        config = OrgConfig.resolve(data_dir=state.data_dir, config_path=state.config_path)
    except ConfigError as e:
        _emit_error(error_envelope(command, "ERR_CONFIG_INVALID", str(e)))
    return Directory.from_config(config, events=state.events)


def _mutation_envelope(
    command: str,
    row_id: str,
    mutation: Mutation,
    target: Target,
    duration_ms: int,
):
    result = MutationResult(
        id=row_id,
        dry_run=not mutation.persisted,
        backup_path=mutation.backup_path,
        row_count=len(mutation.table.rows),
    )
    return success_envelope(
        command,
        result.model_dump(),
        target=target,
        changes=[mutation.change],
        duration_ms=duration_ms,
    )


# ---------------------------------------------------------------------------
# org version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the org CLI version.

    Example: `org version`
    """
    _emit(success_envelope("version", {"version": orgdir.__version__}))


# ---------------------------------------------------------------------------
# org add member
# ---------------------------------------------------------------------------
@add_app.command("member")
def add_member(
    ctx: typer.Context,
    member_id: MemberId,
    dry_run: DryRunOpt = False,
    backup: BackupOpt = False,
):
    """Add a member, prompting for every other field. Mutating.

    Reference fields are checked against the live ids of the referenced
    table; an unknown value brings up a numbered menu.

    Example: `org add member alice`
    """
    state = _state(ctx)
    with Timer() as t:
        directory = _directory(state, "add.member")
        target = Target(file=directory.members.file, table="members", id=member_id)
        try:
            mutation = directory.members.add(
                member_id, directory_prompter(directory), dry_run=dry_run, backup=backup
            )
        except (OrgDataError, OSError) as e:
            _fail(state, "add.member", e, target)

    _emit(_mutation_envelope("add.member", member_id, mutation, target, t.elapsed_ms))


# ---------------------------------------------------------------------------
# org update member
# ---------------------------------------------------------------------------
@update_app.command("member")
def update_member(
    ctx: typer.Context,
    member_id: MemberId,
    args: Annotated[
        list[str],
        typer.Argument(metavar="[add|remove] FIELD VALUE", help="FIELD VALUE to overwrite, or add|remove FIELD VALUE"),
    ],
    dry_run: DryRunOpt = False,
    backup: BackupOpt = False,
):
    """Update one field of a member. Mutating.

    Two arguments overwrite the field. Three arguments apply `add` or
    `remove` to a `|`-separated multi-value field.

    Example: `org update member alice team platform`

    Example: `org update member alice add skills python`
    """
    state = _state(ctx)
    if len(args) == 2:
        action = FieldAction.OVERWRITE
        field_name, value = args
    elif len(args) == 3:
        token, field_name, value = args
        try:
            action = FieldAction.from_token(token)
        except OrgDataError as e:
            _fail(state, "update.member", e, Target(table="members", id=member_id))
    else:
        raise usage_error(f"update member takes 2 or 3 arguments after the id, got {len(args)}")

    with Timer() as t:
        directory = _directory(state, "update.member")
        target = Target(file=directory.members.file, table="members", id=member_id, field=field_name)
        try:
            mutation = directory.members.update(
                member_id, action, field_name, value, dry_run=dry_run, backup=backup
            )
        except (OrgDataError, OSError) as e:
            _fail(state, "update.member", e, target)

    _emit(_mutation_envelope("update.member", member_id, mutation, target, t.elapsed_ms))


# ---------------------------------------------------------------------------
# org remove member
# ---------------------------------------------------------------------------
@remove_app.command("member")
def remove_member(
    ctx: typer.Context,
    member_id: MemberId,
    dry_run: DryRunOpt = False,
    backup: BackupOpt = False,
):
    """Remove a member. Mutating. Removing an unknown id is a no-op.

    Example: `org remove member alice`
    """
    state = _state(ctx)
    with Timer() as t:
        directory = _directory(state, "remove.member")
        target = Target(file=directory.members.file, table="members", id=member_id)
        try:
            mutation = directory.members.remove(member_id, dry_run=dry_run, backup=backup)
        except (OrgDataError, OSError) as e:
            _fail(state, "remove.member", e, target)

    env = _mutation_envelope("remove.member", member_id, mutation, target, t.elapsed_ms)
    if mutation.change.before is None:
        env.warnings = [WarningDetail(code="ID_NOT_FOUND", message=f"No member with id [{member_id}]; nothing removed")]
    _emit(env)


# ---------------------------------------------------------------------------
# org get member
# ---------------------------------------------------------------------------
@get_app.command("member")
def get_member(
    ctx: typer.Context,
    member_id: MemberId,
):
    """Show one member as a field -> value record.

    Example: `org get member alice`
    """
    state = _state(ctx)
    with Timer() as t:
        directory = _directory(state, "get.member")
        target = Target(file=directory.members.file, table="members", id=member_id)
        try:
            record = directory.members.get(member_id)
        except (OrgDataError, OSError) as e:
            _fail(state, "get.member", e, target)

    _emit(success_envelope("get.member", record.model_dump(), target=target, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# org find member
# ---------------------------------------------------------------------------
@find_app.command("member")
def find_member(
    ctx: typer.Context,
    field_name: Annotated[str, typer.Argument(metavar="FIELD", help="Field name to search")],
    value: Annotated[str, typer.Argument(help="Case-sensitive substring to look for")],
):
    """List ids of members whose field contains a substring.

    Example: `org find member team Engin`
    """
    state = _state(ctx)
    with Timer() as t:
        directory = _directory(state, "find.member")
        target = Target(file=directory.members.file, table="members", field=field_name)
        try:
            ids = directory.members.find(field_name, value)
        except (OrgDataError, OSError) as e:
            _fail(state, "find.member", e, target)

    result = FindResult(field=field_name, query=value, ids=ids, count=len(ids))
    _emit(success_envelope("find.member", result.model_dump(), target=target, duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# org validate
# ---------------------------------------------------------------------------
@app.command("validate")
def validate_cmd(ctx: typer.Context):
    """Validate row widths and cross-table references of all three tables.

    Members, teams and titles are all loaded before any of them is checked,
    and each table is checked against every table's ids.

    Example: `org validate`
    """
    state = _state(ctx)
    with Timer() as t:
        directory = _directory(state, "validate")
        try:
            result = directory.validate()
        except (OrgDataError, OSError) as e:
            _fail(state, "validate", e, Target())

    _emit(success_envelope("validate", result.model_dump(), duration_ms=t.elapsed_ms))


# ---------------------------------------------------------------------------
# org usage
# ---------------------------------------------------------------------------
@app.command("usage")
def usage_cmd():
    """Print the command summary as plain text."""
    typer.echo(USAGE)


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m orgdir`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Catch-all: any unhandled exception gets wrapped in a proper JSON
        # error envelope so machine consumers never see raw tracebacks.
        env = error_envelope(
            "unknown",
            "ERR_INTERNAL",
            str(exc),
        )
        typer.echo(f"Error: {exc}", err=True)
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
