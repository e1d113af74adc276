"""Usage text and JSON envelopes for CLI usage errors."""

from __future__ import annotations

import click

USAGE = """\
Usage:
  org add member [id]
  org update member [id] [field] [value]
  org update member [id] add|remove [field] [value]   # for multi-value fields
  org remove member [id]
  org get member [id]
  org find member [field] [value]
  org validate
"""


def usage_error(message: str) -> click.exceptions.UsageError:
    return click.exceptions.UsageError(message)


def patch_typer_errors() -> None:
    """Patch TyperGroup.invoke to emit JSON envelopes for CLI usage errors."""
    import typer.core

    _orig_invoke = typer.core.TyperGroup.invoke

    def _json_invoke(self, ctx):
        try:
            return _orig_invoke(self, ctx)
        except click.exceptions.UsageError as e:
            from orgdir.engine.dispatcher import error_envelope, exit_code_for, print_response
            env = error_envelope(
                "unknown",
                "ERR_USAGE",
                str(e.format_message()),
                details={"usage": USAGE},
            )
            click.echo(f"Error: {e.format_message()}", err=True)
            print_response(env)
            raise SystemExit(exit_code_for(env)) from e

    typer.core.TyperGroup.invoke = _json_invoke
