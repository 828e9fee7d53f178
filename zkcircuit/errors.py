"""Errors raised while building circuits and generating witnesses."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """The kinds of errors a circuit can report."""

    MISSING_RETURN = "the function is expected to return a value"
    PRIVATE_INPUT_NOT_USED = "a private input is not used in the circuit"
    INVALID_WITNESS = "the witness does not satisfy the constraint at row"
    UNEXPECTED_ERROR = "unexpected error"


class CircuitError(Exception):
    """An error reported to the user, tied to a location in the source."""

    def __init__(self, label: str, kind: ErrorKind, span: Any, detail: Any = None):
        self.label = label
        self.kind = kind
        self.span = span
        self.detail = detail
        message = f"{label} error: {kind.value}"
        if detail is not None:
            message += f" ({detail})"
        super().__init__(message)


class CircuitBug(RuntimeError):
    """An internal inconsistency: a bug in the compiler, not in the user's code."""