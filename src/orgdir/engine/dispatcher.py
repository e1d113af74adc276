"""Command dispatch and response envelope helpers."""

from __future__ import annotations

import sys
from typing import Any

import orjson

from orgdir.contracts.common import (
    ErrorDetail,
    Metrics,
    ResponseEnvelope,
    Target,
)
from orgdir.contracts.errors import OrgDataError

# Exit code mapping
EXIT_CODES = {
    "success": 0,
    "validation": 10,
    "io": 50,
    "internal": 90,
}

VALIDATION_CODE_MARKERS = (
    "USAGE",
    "MISSING_HEADER",
    "ID_FIELD",
    "ROW_WIDTH",
    "UNKNOWN_ID",
    "DUPLICATE_ID",
    "UNKNOWN_FIELD",
    "UNKNOWN_ACTION",
    "INVALID_REFERENCE",
    "INVALID_VALUE",
    "CONFIG",
)


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    changes: list | None = None,
    warnings: list | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=True,
        command=command,
        target=target or Target(),
        result=result,
        changes=changes or [],
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
        metrics=Metrics(duration_ms=duration_ms),
    )


def envelope_for_exception(
    command: str,
    exc: Exception,
    *,
    target: Target | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    """Map a raised error to an error envelope with a stable code."""
    if isinstance(exc, OrgDataError):
        code, details = exc.code, exc.details or None
    elif isinstance(exc, FileNotFoundError):
        code = "ERR_TABLE_NOT_FOUND"
        details = {"path": exc.filename or str(exc)}
    elif isinstance(exc, OSError):
        code, details = "ERR_IO", {"path": exc.filename} if exc.filename else None
    else:
        code, details = "ERR_INTERNAL", None
    message = str(exc)
    if isinstance(exc, FileNotFoundError):
        message = f"Table file not found: {exc.filename or exc}"
    return error_envelope(
        command, code, message, target=target, details=details, duration_ms=duration_ms
    )


def output_json(envelope: ResponseEnvelope) -> str:
    """Serialize envelope to JSON string using orjson."""
    data = envelope.model_dump(mode="json")
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    """Print response as JSON to stdout."""
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Determine exit code from envelope errors."""
    if envelope.ok:
        return 0
    if not envelope.errors:
        return EXIT_CODES["internal"]
    code = envelope.errors[0].code.upper()
    if any(marker in code for marker in VALIDATION_CODE_MARKERS):
        return EXIT_CODES["validation"]
    if code.startswith("ERR_IO") or code.endswith("NOT_FOUND"):
        return EXIT_CODES["io"]
    return EXIT_CODES["internal"]
