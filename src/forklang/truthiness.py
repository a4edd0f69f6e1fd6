"""Control-flow truthiness for ``if`` and ``while`` conditions."""

from __future__ import annotations

from .errors import InvariantViolation
from .types import ArrayType, Type, is_numeric


def truthy(value, type_: Type) -> bool:
    """Numbers are truthy when nonzero.

    Arrays look only at their first element, never at an aggregate; an empty
    array is falsy.
    """
    if is_numeric(type_):
        return value != 0
    if isinstance(type_, ArrayType) and is_numeric(type_.component):
        return bool(value) and value[0] != 0
    raise InvariantViolation(f"values of type {type_} cannot be used as a condition")
