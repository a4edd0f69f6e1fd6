"""Tree-walking interpreter over type-annotated forklang trees.

Expressions evaluate to runtime values (see ``values``); statements execute
to a ``Control`` result, so ``return`` propagates as an ordinary value rather
than as an exception. The environment is threaded explicitly through every
call: nothing about the current frame is stored on the interpreter.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Final, TextIO, Union

from .ast import (
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    Block,
    Constructor,
    DiadicExpression,
    DiadicFork,
    DiadicOperator,
    ExpressionStatement,
    FieldAccess,
    FloatLiteral,
    FunCall,
    FunDeclaration,
    If,
    IntLiteral,
    MonadicExpression,
    MonadicFork,
    NullLiteral,
    Parenthesized,
    Reference,
    Return,
    Root,
    StringLiteral,
    StructDeclaration,
    VarDeclaration,
    While,
)
from .broadcast import apply_diadic
from .coercion import floating_for
from .environment import Environment
from .errors import (
    ForkRuntimeError,
    IndexOutOfRangeError,
    InvariantViolation,
    NullDereferenceError,
    RuntimeReport,
    report_runtime_error,
)
from .forks import diadic_fork, monadic_fork
from .truthiness import truthy
from .types import ArrayType, FloatType, Type, TypeResolver, is_numeric
from .values import Builtin, StructConstructor, is_int_value, to_display_string, wrap_int
from .verbs import apply_monadic

logger = logging.getLogger(__name__)

_TRACE: Final[bool] = os.environ.get("FORKLANG_TRACE", "0") == "1"

_SHORT_CIRCUIT_OPERATORS = (DiadicOperator.AND, DiadicOperator.OR)


@dataclass(frozen=True)
class Normal:
    """Statement completed; execution continues with the next one."""


@dataclass(frozen=True)
class Returned:
    value: object


Control = Union[Normal, Returned]

NORMAL: Final = Normal()


def _widen(target_type: Type, value: object) -> object:
    if isinstance(target_type, FloatType) and is_int_value(value):
        return float(value)
    return value


class Interpreter:
    def __init__(self, types: TypeResolver, *, out: TextIO | None = None) -> None:
        self.types = types
        self.out = out

    # ------------------------------------------------------------------ entry points

    def root_environment(self) -> Environment:
        return Environment({"print": Builtin("print", self._print)})

    def run(self, root: Root) -> object:
        """Run a program; a top-level ``return`` ends it and yields its value."""
        env = self.root_environment()
        for statement in root.statements:
            control = self.execute(statement, env)
            if isinstance(control, Returned):
                return control.value
        return None

    def run_with_report(self, root: Root) -> tuple[object, RuntimeReport | None]:
        try:
            return self.run(root), None
        except ForkRuntimeError as err:
            report = report_runtime_error(err)
            logger.debug("program stopped: %s", report)
            return None, report

    def truthy(self, value: object, type_: Type) -> bool:
        return truthy(value, type_)

    def evaluate(self, node, env: Environment) -> object:
        if _TRACE:
            logger.debug("evaluating %s", node.contents())
        try:
            return self._evaluate(node, env)
        except ForkRuntimeError as err:
            if err.node is None:
                err.node = node.contents()
            raise

    # ------------------------------------------------------------------ expressions

    def _evaluate(self, node, env: Environment) -> object:
        if isinstance(node, IntLiteral):
            return wrap_int(node.value)

        if isinstance(node, FloatLiteral):
            return float(node.value)

        if isinstance(node, StringLiteral):
            return node.value

        if isinstance(node, NullLiteral):
            return None

        if isinstance(node, Reference):
            # Functions and structs resolve statically, wherever they were declared.
            declaration = self.types.decl_of(node)
            if declaration is not None:
                return declaration
            return env.lookup(node.name)

        if isinstance(node, Constructor):
            # The analyzer guarantees the reference names a struct.
            return StructConstructor(self.evaluate(node.ref, env))

        if isinstance(node, ArrayLiteral):
            type_ = self.types.type_of(node)
            component = type_.component if isinstance(type_, ArrayType) else type_
            return [_widen(component, self.evaluate(item, env)) for item in node.components]

        if isinstance(node, Parenthesized):
            return self.evaluate(node.expression, env)

        if isinstance(node, FieldAccess):
            return self._field_access(node, env)

        if isinstance(node, ArrayAccess):
            array = self._non_null_array(node.array, env)
            index = self._checked_index(node.index, env, len(array))
            return array[index]

        if isinstance(node, FunCall):
            return self._call(node, env)

        if isinstance(node, DiadicExpression):
            return self._diadic(node, env)

        if isinstance(node, MonadicExpression):
            operand = self.evaluate(node.operand, env)
            return apply_monadic(node.operator, self.types.type_of(node.operand), operand)

        if isinstance(node, MonadicFork):
            operand = self.evaluate(node.operand, env)
            return monadic_fork(node.left, node.middle, node.right, self.types.type_of(node.operand), operand)

        if isinstance(node, DiadicFork):
            lhs = self.evaluate(node.left_operand, env)
            rhs = self.evaluate(node.right_operand, env)
            return diadic_fork(
                node.left,
                node.middle,
                node.right,
                self.types.type_of(node.left_operand),
                self.types.type_of(node.right_operand),
                lhs,
                rhs,
            )

        if isinstance(node, Assignment):
            return self._assign(node, env)

        raise InvariantViolation(f"cannot evaluate {type(node).__name__} as an expression")

    def _diadic(self, node: DiadicExpression, env: Environment) -> object:
        left_type = self.types.type_of(node.left)
        right_type = self.types.type_of(node.right)

        if node.operator in _SHORT_CIRCUIT_OPERATORS and is_numeric(left_type) and is_numeric(right_type):
            left = self.evaluate(node.left, env)
            is_and = node.operator is DiadicOperator.AND
            if (left == 0) if is_and else (left != 0):
                decided = 0 if is_and else 1
                return float(decided) if floating_for(left_type, right_type) else decided
            right = self.evaluate(node.right, env)
            return apply_diadic(node.operator, left_type, right_type, left, right)

        left = self.evaluate(node.left, env)
        right = self.evaluate(node.right, env)
        return apply_diadic(node.operator, left_type, right_type, left, right)

    def _field_access(self, node: FieldAccess, env: Environment) -> object:
        stem = self.evaluate(node.stem, env)
        if stem is None:
            raise NullDereferenceError("accessing field of null object")
        if isinstance(stem, dict):
            return stem[node.field_name]
        # length is the only field on arrays
        return len(stem)

    def _non_null_array(self, node, env: Environment) -> list:
        array = self.evaluate(node, env)
        if array is None:
            raise NullDereferenceError("indexing null array")
        return array

    def _checked_index(self, node, env: Environment, length: int) -> int:
        index = self.evaluate(node, env)
        if index < 0:
            raise IndexOutOfRangeError(f"negative index: {index}")
        if index >= length:
            raise IndexOutOfRangeError(f"index {index} out of bounds for length {length}")
        return index

    def _assign(self, node: Assignment, env: Environment) -> object:
        target_type = self.types.type_of(node)
        target = node.left

        if isinstance(target, Reference):
            value = _widen(target_type, self.evaluate(node.right, env))
            env.set_existing(target.name, value)
            return value

        if isinstance(target, ArrayAccess):
            array = self._non_null_array(target.array, env)
            index = self._checked_index(target.index, env, len(array))
            value = _widen(target_type, self.evaluate(node.right, env))
            array[index] = value
            return value

        if isinstance(target, FieldAccess):
            stem = self.evaluate(target.stem, env)
            if stem is None:
                raise NullDereferenceError("accessing field of null object")
            value = _widen(target_type, self.evaluate(node.right, env))
            stem[target.field_name] = value
            return value

        raise InvariantViolation(f"cannot assign to {target.contents()}")

    def _call(self, node: FunCall, env: Environment) -> object:
        callee = self.evaluate(node.function, env)
        args = [self.evaluate(arg, env) for arg in node.arguments]

        if callee is None:
            raise NullDereferenceError("calling a null function")

        if isinstance(callee, Builtin):
            return callee.fn(*args)

        if isinstance(callee, StructConstructor):
            fields = callee.declaration.fields
            return {field.name: arg for field, arg in zip(fields, args, strict=True)}

        if isinstance(callee, FunDeclaration):
            logger.debug("calling %s with %d argument(s)", callee.name, len(args))
            frame = env.call_frame()
            for param, arg in zip(callee.parameters, args, strict=True):
                frame.define(param.name, arg)
            control = self.execute(callee.block, frame)
            return control.value if isinstance(control, Returned) else None

        raise InvariantViolation(f"{to_display_string(callee)} is not callable")

    def _print(self, value: object) -> str:
        text = to_display_string(value)
        print(text, file=self.out if self.out is not None else sys.stdout)
        return text

    # ------------------------------------------------------------------ statements

    def execute(self, node, env: Environment) -> Control:
        if isinstance(node, Block):
            scope = env.child()
            for statement in node.statements:
                control = self.execute(statement, scope)
                if isinstance(control, Returned):
                    return control
            return NORMAL

        if isinstance(node, VarDeclaration):
            value = self.evaluate(node.initializer, env)
            env.define(node.name, _widen(self.types.type_of(node), value))
            return NORMAL

        if isinstance(node, ExpressionStatement):
            self.evaluate(node.expression, env)
            return NORMAL

        if isinstance(node, If):
            if self._condition(node.condition, env):
                return self.execute(node.true_statement, env)
            if node.false_statement is not None:
                return self.execute(node.false_statement, env)
            return NORMAL

        if isinstance(node, While):
            while self._condition(node.condition, env):
                control = self.execute(node.body, env)
                if isinstance(control, Returned):
                    return control
            return NORMAL

        if isinstance(node, Return):
            return Returned(None if node.expression is None else self.evaluate(node.expression, env))

        if isinstance(node, (FunDeclaration, StructDeclaration)):
            env.define(node.name, node)
            return NORMAL

        raise InvariantViolation(f"cannot execute {type(node).__name__} as a statement")

    def _condition(self, node, env: Environment) -> bool:
        return truthy(self.evaluate(node, env), self.types.type_of(node))
