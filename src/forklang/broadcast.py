"""Diadic operators over scalars and arrays."""

from __future__ import annotations

import jax.numpy as jnp

from .ast import DiadicOperator
from .coercion import CoercedPair, coerce_operands, floating_for
from .errors import DivisionByZeroError, InvariantViolation, LengthMismatchError
from .kernels import NUMERIC_OPERATORS, binary_kernel, to_python
from .types import ArrayType, StringType, Type, is_numeric, is_primitive
from .values import to_display_string

_INT_DIVISIONS = (DiadicOperator.DIVIDE, DiadicOperator.REMAINDER)


def _is_numeric_shape(type_: Type) -> bool:
    if isinstance(type_, ArrayType):
        return is_numeric(type_.component)
    return is_numeric(type_)


def _check_integer_traps(op: DiadicOperator, pair: CoercedPair) -> None:
    if pair.floating:
        return
    if op in _INT_DIVISIONS and bool(jnp.any(pair.right.buffer == 0)):
        raise DivisionByZeroError(f"integer {op.name.lower()} by zero")
    if op is DiadicOperator.EXPONENT:
        if bool(jnp.any((pair.left.buffer == 0) & (pair.right.buffer < 0))):
            raise DivisionByZeroError("zero raised to a negative power")


def numeric_or_relational(op: DiadicOperator, pair: CoercedPair):
    """Apply one entry of the numeric table to an already coerced pair.

    Relational, equality and logical operators yield ``1``/``0`` in the
    pair's domain (``1.0``/``0.0`` when floating). Array shapes broadcast.
    """
    if op not in NUMERIC_OPERATORS:
        raise InvariantViolation(f"operator {op.value!r} has no numeric form")
    _check_integer_traps(op, pair)
    return to_python(binary_kernel(op)(pair.left.buffer, pair.right.buffer))


def concat(left_type: Type, right_type: Type, left, right) -> list:
    items = list(left) if isinstance(left_type, ArrayType) else [left]
    items.extend(right if isinstance(right_type, ArrayType) else [right])
    if _is_numeric_shape(left_type) and _is_numeric_shape(right_type) and floating_for(left_type, right_type):
        return [float(item) for item in items]
    return items


def _array_op(op: DiadicOperator, left_type: Type, right_type: Type, left, right) -> list:
    pair = coerce_operands(left_type, right_type, left, right)
    if pair.left.is_array and pair.right.is_array and pair.left.length != pair.right.length:
        raise LengthMismatchError(
            f"tried to process two arrays of different length ({pair.left.length} and {pair.right.length})"
        )
    return numeric_or_relational(op, pair)


def apply_diadic(op: DiadicOperator, left_type: Type, right_type: Type, left, right):
    if op is DiadicOperator.ADD and (isinstance(left_type, StringType) or isinstance(right_type, StringType)):
        return to_display_string(left) + to_display_string(right)

    if op is DiadicOperator.CONCAT:
        return concat(left_type, right_type, left, right)

    if isinstance(left_type, ArrayType) or isinstance(right_type, ArrayType):
        return _array_op(op, left_type, right_type, left, right)

    if is_numeric(left_type) and is_numeric(right_type):
        return numeric_or_relational(op, coerce_operands(left_type, right_type, left, right))

    if op is DiadicOperator.EQUALITY or op is DiadicOperator.NOT_EQUALS:
        same = left == right if is_primitive(left_type) else left is right
        return int(same == (op is DiadicOperator.EQUALITY))

    raise InvariantViolation(f"operator {op.value!r} does not apply to {left_type} and {right_type}")
