"""Monadic verbs: reductions, count, last element, self-combination, factorial."""

from __future__ import annotations

import jax.numpy as jnp

from .ast import MonadicOperator
from .coercion import numeric_dtype, to_operand
from .errors import DivisionByZeroError, EmptyArrayError, InvariantViolation
from .kernels import FOLD_VERBS, MAP_VERBS, TRUTH_VERBS, fold_kernel, map_kernel, to_python, truth_kernel
from .types import ArrayType, FloatType, Type, is_floatish, is_numeric

# A single scalar is a one-element reduction.
_SCALAR_IDENTITY_VERBS = frozenset(
    {
        MonadicOperator.GRAB_LAST,
        MonadicOperator.SUM_SLASH,
        MonadicOperator.MULT_SLASH,
        MonadicOperator.DIV_SLASH,
        MonadicOperator.MIN_SLASH,
    }
)

_EMPTY_IDENTITY: dict[MonadicOperator, int] = {
    MonadicOperator.SUM_SLASH: 0,
    MonadicOperator.MULT_SLASH: 1,
    MonadicOperator.AND_SLASH: 1,
    MonadicOperator.OR_SLASH: 0,
}


def _apply_to_scalar(op: MonadicOperator, operand_type: Type, value):
    floating = isinstance(operand_type, FloatType)
    if floating:
        value = float(value)
    if op in _SCALAR_IDENTITY_VERBS:
        return value
    if op is MonadicOperator.HASHTAG:
        return 1.0 if floating else 1
    buf = jnp.asarray(value, dtype=numeric_dtype(floating))
    if op in MAP_VERBS:
        return to_python(map_kernel(op)(buf))
    if op in TRUTH_VERBS:
        return to_python(truth_kernel(op)(buf))
    raise InvariantViolation(f"unknown monadic operator {op!r}")


def _apply_to_empty(op: MonadicOperator, floating: bool):
    if op in MAP_VERBS:
        return []
    if op in _EMPTY_IDENTITY:
        identity = _EMPTY_IDENTITY[op]
        return float(identity) if floating else identity
    raise EmptyArrayError(f"{op.value} has no identity element for an empty array")


def _apply_to_array(op: MonadicOperator, operand_type: ArrayType, value: list):
    n = len(value)
    if op is MonadicOperator.HASHTAG:
        return n
    if op is MonadicOperator.GRAB_LAST:
        if n == 0:
            raise EmptyArrayError("cannot grab the last element of an empty array")
        return value[n - 1]

    floating = is_floatish(operand_type)
    if n == 0:
        return _apply_to_empty(op, floating)

    # Private buffer: folds never touch the caller's list.
    buf = to_operand(operand_type, value, floating).buffer
    if op in MAP_VERBS:
        return to_python(map_kernel(op)(buf))
    if op in FOLD_VERBS:
        result, hit_zero = fold_kernel(op)(buf)
        if op is MonadicOperator.DIV_SLASH and not floating and bool(hit_zero):
            raise DivisionByZeroError("integer division by zero during :/ reduction")
        return to_python(result)
    if op in TRUTH_VERBS:
        return to_python(truth_kernel(op)(buf))
    raise InvariantViolation(f"unknown monadic operator {op!r}")


def apply_monadic(op: MonadicOperator, operand_type: Type, operand):
    if isinstance(operand_type, ArrayType):
        return _apply_to_array(op, operand_type, operand)
    if is_numeric(operand_type):
        return _apply_to_scalar(op, operand_type, operand)
    raise InvariantViolation(f"monadic operator {op.value!r} does not apply to {operand_type}")
