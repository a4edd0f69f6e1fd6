"""AST nodes for the forklang expression language.

Nodes compare by identity so they can key a type table: two ``IntLiteral(1)``
nodes at different source positions may carry different annotations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

_CONTENTS_BUDGET = 50


class DiadicOperator(str, Enum):
    MULTIPLY = "*"
    DIVIDE = "/"
    REMAINDER = "%"
    ADD = "+"
    SUBTRACT = "-"
    EXPONENT = "^"
    CONCAT = ","
    EQUALITY = "=="
    NOT_EQUALS = "!="
    GREATER = ">"
    LOWER = "<"
    GREATER_EQUAL = ">="
    LOWER_EQUAL = "<="
    AND = "&&"
    OR = "||"


class MonadicOperator(str, Enum):
    NOT = "!"
    GRAB_LAST = "{:"
    SUM_SLASH = "+/"
    MULT_SLASH = "./"
    DIV_SLASH = ":/"
    MIN_SLASH = "-/"
    AND_SLASH = "&/"
    OR_SLASH = "|/"
    HASHTAG = "#"
    SELF_ADD = "+:"
    SELF_MULT = "*:"


def _budgeted(candidate: str, fallback: str) -> str:
    return candidate if len(candidate) <= _CONTENTS_BUDGET else fallback


@dataclass(frozen=True, eq=False)
class IntLiteral:
    value: int

    def contents(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class FloatLiteral:
    value: float

    def contents(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, eq=False)
class StringLiteral:
    value: str

    def contents(self) -> str:
        return _budgeted(f'"{self.value}"', '"(?)"')


@dataclass(frozen=True, eq=False)
class NullLiteral:
    def contents(self) -> str:
        return "null"


@dataclass(frozen=True, eq=False)
class Reference:
    name: str

    def contents(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Constructor:
    ref: Reference

    def contents(self) -> str:
        return "$" + self.ref.name


@dataclass(frozen=True, eq=False)
class ArrayLiteral:
    components: tuple["Expr", ...]

    def contents(self) -> str:
        inner = ", ".join(item.contents() for item in self.components)
        return _budgeted(f"[{inner}]", "[(?)]")


@dataclass(frozen=True, eq=False)
class Parenthesized:
    expression: "Expr"

    def contents(self) -> str:
        return _budgeted(f"({self.expression.contents()})", "(?)")


@dataclass(frozen=True, eq=False)
class FieldAccess:
    stem: "Expr"
    field_name: str

    def contents(self) -> str:
        return _budgeted(f"{self.stem.contents()}.{self.field_name}", f"(?).{self.field_name}")


@dataclass(frozen=True, eq=False)
class ArrayAccess:
    array: "Expr"
    index: "Expr"

    def contents(self) -> str:
        return _budgeted(f"{self.array.contents()}[{self.index.contents()}]", "(?)[(?)]")


@dataclass(frozen=True, eq=False)
class FunCall:
    function: "Expr"
    arguments: tuple["Expr", ...] = ()

    def contents(self) -> str:
        args = ", ".join(arg.contents() for arg in self.arguments)
        return _budgeted(f"{self.function.contents()}({args})", f"{self.function.contents()}(?)")


@dataclass(frozen=True, eq=False)
class DiadicExpression:
    left: "Expr"
    operator: DiadicOperator
    right: "Expr"

    def contents(self) -> str:
        return _budgeted(
            f"{self.left.contents()} {self.operator.value} {self.right.contents()}",
            f"(?) {self.operator.value} (?)",
        )


@dataclass(frozen=True, eq=False)
class MonadicExpression:
    operator: MonadicOperator
    operand: "Expr"

    def contents(self) -> str:
        return _budgeted(f"{self.operator.value} {self.operand.contents()}", f"{self.operator.value} (?)")


@dataclass(frozen=True, eq=False)
class MonadicFork:
    left: MonadicOperator
    middle: DiadicOperator
    right: MonadicOperator
    operand: "Expr"

    def contents(self) -> str:
        fork = f"({self.left.value} {self.middle.value} {self.right.value})"
        return _budgeted(f"{fork} {self.operand.contents()}", f"{fork} (?)")


@dataclass(frozen=True, eq=False)
class DiadicFork:
    left_operand: "Expr"
    left: DiadicOperator
    middle: DiadicOperator
    right: DiadicOperator
    right_operand: "Expr"

    def contents(self) -> str:
        fork = f"({self.left.value} {self.middle.value} {self.right.value})"
        return _budgeted(
            f"{self.left_operand.contents()} {fork} {self.right_operand.contents()}",
            f"(?) {fork} (?)",
        )


@dataclass(frozen=True, eq=False)
class Assignment:
    left: "Expr"
    right: "Expr"

    def contents(self) -> str:
        return _budgeted(f"{self.left.contents()} = {self.right.contents()}", "(?) = (?)")


@dataclass(frozen=True, eq=False)
class Block:
    statements: tuple["Stmt", ...]

    def contents(self) -> str:
        return "{ ... }" if self.statements else "{}"


@dataclass(frozen=True, eq=False)
class VarDeclaration:
    name: str
    initializer: "Expr"

    def contents(self) -> str:
        return _budgeted(f"var {self.name} = {self.initializer.contents()}", f"var {self.name} = (?)")


@dataclass(frozen=True, eq=False)
class ExpressionStatement:
    expression: "Expr"

    def contents(self) -> str:
        return self.expression.contents()


@dataclass(frozen=True, eq=False)
class If:
    condition: "Expr"
    true_statement: "Stmt"
    false_statement: "Stmt | None" = None

    def contents(self) -> str:
        return _budgeted(f"if {self.condition.contents()} ...", "if (?) ...")


@dataclass(frozen=True, eq=False)
class While:
    condition: "Expr"
    body: "Stmt"

    def contents(self) -> str:
        return _budgeted(f"while {self.condition.contents()} ...", "while (?) ...")


@dataclass(frozen=True, eq=False)
class Return:
    expression: "Expr | None" = None

    def contents(self) -> str:
        if self.expression is None:
            return "return"
        return _budgeted(f"return {self.expression.contents()}", "return (?)")


@dataclass(frozen=True, eq=False)
class Parameter:
    name: str

    def contents(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class FunDeclaration:
    name: str
    parameters: tuple[Parameter, ...]
    block: Block

    def contents(self) -> str:
        params = ", ".join(param.name for param in self.parameters)
        return f"fun {self.name}({params})"


@dataclass(frozen=True, eq=False)
class FieldDeclaration:
    name: str

    def contents(self) -> str:
        return f"var {self.name}"


@dataclass(frozen=True, eq=False)
class StructDeclaration:
    name: str
    fields: tuple[FieldDeclaration, ...]

    def contents(self) -> str:
        return f"struct {self.name}"


@dataclass(frozen=True, eq=False)
class Root:
    statements: tuple["Stmt", ...]

    def contents(self) -> str:
        return "<root>"


Expr = Union[
    IntLiteral,
    FloatLiteral,
    StringLiteral,
    NullLiteral,
    Reference,
    Constructor,
    ArrayLiteral,
    Parenthesized,
    FieldAccess,
    ArrayAccess,
    FunCall,
    DiadicExpression,
    MonadicExpression,
    MonadicFork,
    DiadicFork,
    Assignment,
]
Stmt = Union[Block, VarDeclaration, ExpressionStatement, If, While, Return, FunDeclaration, StructDeclaration]
Node = Union[Expr, Stmt, Parameter, FieldDeclaration, Root]
