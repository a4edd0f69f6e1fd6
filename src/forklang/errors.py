"""Structured error types for the evaluation core."""

from __future__ import annotations

from dataclasses import dataclass


class ForkError(Exception):
    """Base class for structured forklang errors."""


class InvariantViolation(ForkError):
    """A state the static checker should have excluded.

    Not user-recoverable: the interpreter never catches it.
    """


class ForkRuntimeError(ForkError):
    """User-visible runtime failure."""

    kind = "runtime"

    def __init__(self, message: str, *, node: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.node = node

    def __str__(self) -> str:
        if self.node is None:
            return self.message
        return f"{self.message} (while evaluating {self.node})"


class LengthMismatchError(ForkRuntimeError):
    """Array-array operator applied to arrays of different lengths."""

    kind = "length"


class NullDereferenceError(ForkRuntimeError):
    """Field access, indexing or call through null."""

    kind = "null"


class IndexOutOfRangeError(ForkRuntimeError):
    """Negative or overflowing array index."""

    kind = "index"


class DivisionByZeroError(ForkRuntimeError):
    """Integer division or remainder by zero."""

    kind = "arithmetic"


class EmptyArrayError(ForkRuntimeError):
    """Reduction with no identity element applied to an empty array."""

    kind = "empty"


@dataclass(frozen=True)
class RuntimeReport:
    """User-facing summary of a runtime error, for top-level drivers."""

    kind: str
    message: str
    node: str | None = None

    def __str__(self) -> str:
        where = "" if self.node is None else f" at {self.node}"
        return f"{self.kind} error{where}: {self.message}"


def report_runtime_error(err: ForkRuntimeError) -> RuntimeReport:
    return RuntimeReport(kind=err.kind, message=err.message, node=err.node)
