"""Numeric coercion: int/float promotion for a pair of operands.

A float anywhere in the pair poisons the whole expression: when either
operand type is ``Float`` or ``Float[]``, every int operand (scalar or
element) is widened to ``float64``. Otherwise both operands stay ``int64``.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp

from . import kernels  # noqa: F401  (enables 64-bit mode before any buffer is built)
from .errors import InvariantViolation
from .types import ArrayType, Type, is_floatish, is_numeric


@dataclass(frozen=True)
class NumericOperand:
    buffer: jnp.ndarray
    is_array: bool

    @property
    def length(self) -> int:
        return int(self.buffer.shape[0]) if self.is_array else 1


@dataclass(frozen=True)
class CoercedPair:
    floating: bool
    left: NumericOperand
    right: NumericOperand


def floating_for(left_type: Type, right_type: Type) -> bool:
    return is_floatish(left_type) or is_floatish(right_type)


def numeric_dtype(floating: bool):
    return jnp.float64 if floating else jnp.int64


def to_operand(type_: Type, value, floating: bool) -> NumericOperand:
    dtype = numeric_dtype(floating)
    if isinstance(type_, ArrayType):
        if not is_numeric(type_.component):
            raise InvariantViolation(f"non-numeric array operand of type {type_}")
        items = [float(item) for item in value] if floating else list(value)
        return NumericOperand(jnp.asarray(items, dtype=dtype), is_array=True)
    if not is_numeric(type_):
        raise InvariantViolation(f"non-numeric operand of type {type_}")
    return NumericOperand(jnp.asarray(float(value) if floating else value, dtype=dtype), is_array=False)


def coerce_operands(left_type: Type, right_type: Type, left, right) -> CoercedPair:
    floating = floating_for(left_type, right_type)
    return CoercedPair(
        floating=floating,
        left=to_operand(left_type, left, floating),
        right=to_operand(right_type, right, floating),
    )
