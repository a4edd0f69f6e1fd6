"""Runtime value model.

Runtime value representation:

- ``Int``, ``Float``: ``int`` (kept in the signed 64-bit range), ``float``
- ``String``: ``str``
- ``null``: ``None``
- arrays: ``list`` (mutable, shared by reference)
- structs: ``dict[str, value]`` (mutable, shared by reference)
- functions: the ``FunDeclaration`` node, or a ``Builtin``
- types: the ``StructDeclaration`` node
- constructors: ``StructConstructor`` wrapping the ``StructDeclaration``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .ast import FunDeclaration, StructDeclaration
from .errors import InvariantViolation
from .types import FLOAT, INT, ArrayType, Type

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


@dataclass(frozen=True, eq=False)
class Builtin:
    name: str
    fn: Callable[..., object]


@dataclass(frozen=True, eq=False)
class StructConstructor:
    declaration: StructDeclaration


def wrap_int(value: int) -> int:
    """Reduce ``value`` to two's-complement 64-bit range."""
    value &= (1 << 64) - 1
    return value - (1 << 64) if value > INT64_MAX else value


def is_int_value(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_float_value(value: object) -> bool:
    return isinstance(value, float)


def runtime_type(value: object) -> Type:
    """Recover the type of a fork intermediate.

    Only scalars and non-empty numeric (possibly nested) arrays are supported;
    anything else is a contract violation.
    """
    if is_int_value(value):
        return INT
    if is_float_value(value):
        return FLOAT
    if isinstance(value, list):
        if not value:
            raise InvariantViolation("cannot recover the runtime type of an empty array")
        first = value[0]
        if is_int_value(first) or is_float_value(first) or isinstance(first, list):
            return ArrayType(runtime_type(first))
        raise InvariantViolation(f"unsupported array element for runtime typing: {type(first).__name__}")
    raise InvariantViolation(f"unsupported value for runtime typing: {type(value).__name__}")


def to_display_string(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return "[" + ", ".join(to_display_string(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(f"{key}={to_display_string(item)}" for key, item in value.items()) + "}"
    if isinstance(value, (FunDeclaration, StructDeclaration, Builtin)):
        return value.name
    if isinstance(value, StructConstructor):
        return "$" + value.declaration.name
    if is_float_value(value):
        return repr(value)
    return str(value)
