"""Pydantic models for responses plus the error taxonomy."""

from orgdir.contracts.common import (
    ChangeRecord,
    ErrorDetail,
    Metrics,
    ResponseEnvelope,
    Target,
    WarningDetail,
)
from orgdir.contracts.errors import (
    DuplicateIdError,
    IdFieldError,
    InvalidReferenceError,
    InvalidValueError,
    MissingHeaderError,
    OrgDataError,
    RowWidthError,
    UnknownActionError,
    UnknownFieldError,
    UnknownIdError,
)
from orgdir.contracts.responses import (
    FindResult,
    MemberRecord,
    MutationResult,
    TableMeta,
    ValidationResult,
)

__all__ = [
    "ChangeRecord",
    "DuplicateIdError",
    "ErrorDetail",
    "FindResult",
    "IdFieldError",
    "InvalidReferenceError",
    "InvalidValueError",
    "MemberRecord",
    "Metrics",
    "MissingHeaderError",
    "MutationResult",
    "OrgDataError",
    "ResponseEnvelope",
    "RowWidthError",
    "TableMeta",
    "Target",
    "UnknownActionError",
    "UnknownFieldError",
    "UnknownIdError",
    "ValidationResult",
    "WarningDetail",
]
