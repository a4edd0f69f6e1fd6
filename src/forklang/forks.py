"""Monadic and diadic forks.

The static checker cannot type the two intermediate results of a fork, so
their types are recovered from the values themselves before the middle
operator combines them.
"""

from __future__ import annotations

from .ast import DiadicOperator, MonadicOperator
from .broadcast import apply_diadic
from .types import Type
from .values import runtime_type
from .verbs import apply_monadic


def monadic_fork(
    left: MonadicOperator,
    middle: DiadicOperator,
    right: MonadicOperator,
    operand_type: Type,
    operand,
):
    """``(left middle right) operand``."""
    a = apply_monadic(left, operand_type, operand)
    b = apply_monadic(right, operand_type, operand)
    return apply_diadic(middle, runtime_type(a), runtime_type(b), a, b)


def diadic_fork(
    left: DiadicOperator,
    middle: DiadicOperator,
    right: DiadicOperator,
    left_type: Type,
    right_type: Type,
    lhs,
    rhs,
):
    """``lhs (left middle right) rhs``."""
    a = apply_diadic(left, left_type, right_type, lhs, rhs)
    b = apply_diadic(right, left_type, right_type, lhs, rhs)
    return apply_diadic(middle, runtime_type(a), runtime_type(b), a, b)
