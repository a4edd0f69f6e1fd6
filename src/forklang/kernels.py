"""JAX numeric kernels for diadic operators and monadic verbs.

Every kernel takes buffers already unified to one dtype (``int64`` or
``float64``) by the coercion unit, so the kernels never branch on operand
types beyond the static dtype check done at trace time.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Final

import jax
from jax import lax
import jax.numpy as jnp

from .ast import DiadicOperator, MonadicOperator

jax.config.update("jax_enable_x64", True)

logger = logging.getLogger(__name__)

_DISABLE_JIT: Final[bool] = os.environ.get("FORKLANG_DISABLE_JIT", "0") == "1"

# n! is divisible by 2**64 from n = 66 on.
_INT64_FACTORIAL_ZERO_FROM: Final[int] = 66

_LANCZOS_G: Final[float] = 7.0
_LANCZOS_COEFFS: Final[tuple[float, ...]] = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)


def _numeric_bool(mask: jnp.ndarray, like: jnp.ndarray) -> jnp.ndarray:
    return lax.convert_element_type(mask, like.dtype)


def _broadcast(left: jnp.ndarray, right: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    if left.shape == right.shape:
        return left, right
    return jnp.broadcast_arrays(left, right)


def _lifted(op: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]):
    def kernel(left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
        ll, rr = _broadcast(left, right)
        return op(ll, rr)

    return kernel


def _compare(cmp_op: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]):
    def kernel(left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
        ll, rr = _broadcast(left, right)
        return _numeric_bool(cmp_op(ll, rr), ll)

    return kernel


def _logical_and(left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
    ll, rr = _broadcast(left, right)
    return _numeric_bool((ll != 0) & (rr != 0), ll)


def _logical_or(left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
    ll, rr = _broadcast(left, right)
    return _numeric_bool((ll != 0) | (rr != 0), ll)


def _int_power(base: jnp.ndarray, exponent: jnp.ndarray) -> jnp.ndarray:
    """Square-and-multiply over all 64 exponent bits, wrapping like int64."""

    def body(_, state):
        acc, b, e = state
        acc = jnp.where((e & 1) == 1, acc * b, acc)
        return acc, b * b, lax.shift_right_logical(e, jnp.ones_like(e))

    acc, _, _ = lax.fori_loop(0, 64, body, (jnp.ones_like(base), base, exponent))
    return acc


def _power(left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
    ll, rr = _broadcast(left, right)
    if jnp.issubdtype(ll.dtype, jnp.floating):
        return lax.pow(ll, rr)
    magnitude = _int_power(ll, jnp.maximum(rr, 0))
    # b^-e truncated toward zero: only |b| == 1 survives.
    odd = (rr % 2) != 0
    fractional = jnp.where(ll == 1, 1, jnp.where(ll == -1, jnp.where(odd, -1, 1), 0))
    return jnp.where(rr < 0, fractional.astype(ll.dtype), magnitude)


_BASE_BINARY_OPS: Final[dict[DiadicOperator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    DiadicOperator.MULTIPLY: _lifted(lax.mul),
    DiadicOperator.DIVIDE: _lifted(lax.div),
    DiadicOperator.REMAINDER: _lifted(lax.rem),
    DiadicOperator.ADD: _lifted(lax.add),
    DiadicOperator.SUBTRACT: _lifted(lax.sub),
    DiadicOperator.EXPONENT: _power,
    DiadicOperator.EQUALITY: _compare(lax.eq),
    DiadicOperator.NOT_EQUALS: _compare(lax.ne),
    DiadicOperator.GREATER: _compare(lax.gt),
    DiadicOperator.LOWER: _compare(lax.lt),
    DiadicOperator.GREATER_EQUAL: _compare(lax.ge),
    DiadicOperator.LOWER_EQUAL: _compare(lax.le),
    DiadicOperator.AND: _logical_and,
    DiadicOperator.OR: _logical_or,
}

NUMERIC_OPERATORS: Final[frozenset[DiadicOperator]] = frozenset(_BASE_BINARY_OPS)


def _int_factorial(x: jnp.ndarray) -> jnp.ndarray:
    limit = jnp.minimum(jnp.max(x), _INT64_FACTORIAL_ZERO_FROM)

    def cond(state):
        i, _ = state
        return i <= limit

    def body(state):
        i, acc = state
        return i + 1, jnp.where(i <= x, acc * i, acc)

    _, acc = lax.while_loop(cond, body, (jnp.asarray(2, dtype=x.dtype), jnp.ones_like(x)))
    return jnp.where(x >= _INT64_FACTORIAL_ZERO_FROM, jnp.zeros_like(x), acc)


def _lanczos_gamma(z: jnp.ndarray) -> jnp.ndarray:
    reflect = z < 0.5
    w = jnp.where(reflect, 1.0 - z, z) - 1.0
    series = jnp.full_like(w, _LANCZOS_COEFFS[0])
    for i, coeff in enumerate(_LANCZOS_COEFFS[1:], start=1):
        series = series + coeff / (w + i)
    t = w + _LANCZOS_G + 0.5
    gamma = jnp.sqrt(2 * jnp.pi) * jnp.power(t, w + 0.5) * jnp.exp(-t) * series
    return jnp.where(reflect, jnp.pi / (jnp.sin(jnp.pi * z) * gamma), gamma)


def _factorial(x: jnp.ndarray) -> jnp.ndarray:
    if jnp.issubdtype(x.dtype, jnp.floating):
        return _lanczos_gamma(x + 1.0)
    return _int_factorial(x)


_BASE_MAP_OPS: Final[dict[MonadicOperator, Callable[[jnp.ndarray], jnp.ndarray]]] = {
    MonadicOperator.NOT: _factorial,
    MonadicOperator.SELF_ADD: lambda x: x + x,
    MonadicOperator.SELF_MULT: lambda x: x * x,
}

_FOLD_COMBINE: Final[dict[MonadicOperator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    MonadicOperator.SUM_SLASH: lax.add,
    MonadicOperator.MULT_SLASH: lax.mul,
    MonadicOperator.DIV_SLASH: lax.div,
    MonadicOperator.MIN_SLASH: lax.sub,
}

FOLD_VERBS: Final[frozenset[MonadicOperator]] = frozenset(_FOLD_COMBINE)
MAP_VERBS: Final[frozenset[MonadicOperator]] = frozenset(_BASE_MAP_OPS)


def _fold_right_kernel(combine: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]):
    def kernel(buf: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
        n = buf.shape[0]

        def body(k, carry):
            acc, hit_zero = carry
            return combine(buf[n - 2 - k], acc), hit_zero | (acc == 0)

        return lax.fori_loop(0, n - 1, body, (buf[n - 1], jnp.asarray(False)))

    return kernel


def _all_nonzero(buf: jnp.ndarray) -> jnp.ndarray:
    return _numeric_bool(jnp.all(buf != 0), buf)


def _any_nonzero(buf: jnp.ndarray) -> jnp.ndarray:
    return _numeric_bool(jnp.any(buf != 0), buf)


_BASE_TRUTH_OPS: Final[dict[MonadicOperator, Callable[[jnp.ndarray], jnp.ndarray]]] = {
    MonadicOperator.AND_SLASH: _all_nonzero,
    MonadicOperator.OR_SLASH: _any_nonzero,
}

TRUTH_VERBS: Final[frozenset[MonadicOperator]] = frozenset(_BASE_TRUTH_OPS)

_JITTED_BINARY_OPS: dict[DiadicOperator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}
_JITTED_MAP_OPS: dict[MonadicOperator, Callable[[jnp.ndarray], jnp.ndarray]] = {}
_JITTED_FOLD_OPS: dict[MonadicOperator, Callable[[jnp.ndarray], tuple[jnp.ndarray, jnp.ndarray]]] = {}
_JITTED_TRUTH_OPS: dict[MonadicOperator, Callable[[jnp.ndarray], jnp.ndarray]] = {}


def _compiled(fn):
    return fn if _DISABLE_JIT else jax.jit(fn)


def binary_kernel(op: DiadicOperator) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    fn = _JITTED_BINARY_OPS.get(op)
    if fn is None:
        fn = _compiled(_BASE_BINARY_OPS[op])
        _JITTED_BINARY_OPS[op] = fn
        logger.debug("built binary kernel for %s", op.name)
    return fn


def map_kernel(op: MonadicOperator) -> Callable[[jnp.ndarray], jnp.ndarray]:
    fn = _JITTED_MAP_OPS.get(op)
    if fn is None:
        fn = _compiled(_BASE_MAP_OPS[op])
        _JITTED_MAP_OPS[op] = fn
        logger.debug("built map kernel for %s", op.name)
    return fn


def fold_kernel(op: MonadicOperator) -> Callable[[jnp.ndarray], tuple[jnp.ndarray, jnp.ndarray]]:
    """Right fold of a non-empty 1-d buffer.

    Returns the folded scalar and whether any intermediate accumulator used as
    a right operand was zero (integer division by zero).
    """
    fn = _JITTED_FOLD_OPS.get(op)
    if fn is None:
        fn = _compiled(_fold_right_kernel(_FOLD_COMBINE[op]))
        _JITTED_FOLD_OPS[op] = fn
        logger.debug("built fold kernel for %s", op.name)
    return fn


def truth_kernel(op: MonadicOperator) -> Callable[[jnp.ndarray], jnp.ndarray]:
    fn = _JITTED_TRUTH_OPS.get(op)
    if fn is None:
        fn = _compiled(_BASE_TRUTH_OPS[op])
        _JITTED_TRUTH_OPS[op] = fn
        logger.debug("built truth kernel for %s", op.name)
    return fn


def to_python(buf: jnp.ndarray):
    """Convert a kernel result back into runtime values (scalar or list)."""
    return buf.tolist()
