"""forklang public API."""

import logging

from .broadcast import apply_diadic, numeric_or_relational
from .environment import Environment
from .errors import (
    DivisionByZeroError,
    EmptyArrayError,
    ForkError,
    ForkRuntimeError,
    IndexOutOfRangeError,
    InvariantViolation,
    LengthMismatchError,
    NullDereferenceError,
    RuntimeReport,
    report_runtime_error,
)
from .forks import diadic_fork, monadic_fork
from .interpreter import Control, Interpreter, Normal, Returned
from .truthiness import truthy
from .types import TypeResolver, TypeTable
from .values import runtime_type, to_display_string
from .verbs import apply_monadic

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "apply_diadic",
    "apply_monadic",
    "numeric_or_relational",
    "monadic_fork",
    "diadic_fork",
    "runtime_type",
    "to_display_string",
    "truthy",
    "Environment",
    "Interpreter",
    "Control",
    "Normal",
    "Returned",
    "TypeResolver",
    "TypeTable",
    "ForkError",
    "ForkRuntimeError",
    "InvariantViolation",
    "LengthMismatchError",
    "NullDereferenceError",
    "IndexOutOfRangeError",
    "DivisionByZeroError",
    "EmptyArrayError",
    "RuntimeReport",
    "report_runtime_error",
]
