"""Static types as resolved by the semantic analyzer, and the resolver seam."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from .errors import InvariantViolation


@dataclass(frozen=True)
class IntType:
    def __str__(self) -> str:
        return "Int"


@dataclass(frozen=True)
class FloatType:
    def __str__(self) -> str:
        return "Float"


@dataclass(frozen=True)
class StringType:
    def __str__(self) -> str:
        return "String"


@dataclass(frozen=True)
class NullType:
    def __str__(self) -> str:
        return "Null"


@dataclass(frozen=True)
class VoidType:
    def __str__(self) -> str:
        return "Void"


@dataclass(frozen=True)
class ArrayType:
    component: "Type"

    def __str__(self) -> str:
        return f"{self.component}[]"


@dataclass(frozen=True)
class StructType:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FunType:
    parameters: tuple["Type", ...]
    return_type: "Type"

    def __str__(self) -> str:
        params = ",".join(str(p) for p in self.parameters)
        return f"({params}) -> {self.return_type}"


@dataclass(frozen=True)
class TypeType:
    type: "Type"

    def __str__(self) -> str:
        return f"Type<{self.type}>"


Type = Union[IntType, FloatType, StringType, NullType, VoidType, ArrayType, StructType, FunType, TypeType]

INT = IntType()
FLOAT = FloatType()
STRING = StringType()
NULL = NullType()
VOID = VoidType()


def is_primitive(type_: Type) -> bool:
    return isinstance(type_, (IntType, FloatType, StringType, NullType))


def is_numeric(type_: Type) -> bool:
    return isinstance(type_, (IntType, FloatType))


def is_floatish(type_: Type) -> bool:
    """``Float`` itself, or an array whose component is ``Float``."""
    if isinstance(type_, FloatType):
        return True
    return isinstance(type_, ArrayType) and isinstance(type_.component, FloatType)


class TypeResolver(Protocol):
    def type_of(self, node: object) -> Type:
        ...

    def decl_of(self, reference: object) -> object | None:
        ...


class TypeTable:
    """Node-identity keyed type annotations, as filled in by the analyzer."""

    def __init__(self) -> None:
        self._types: dict[int, tuple[object, Type]] = {}
        self._declarations: dict[int, tuple[object, object]] = {}

    def annotate(self, node, type_: Type):
        # Keep the node alive alongside its id so ids are never reused.
        self._types[id(node)] = (node, type_)
        return node

    def type_of(self, node: object) -> Type:
        entry = self._types.get(id(node))
        if entry is None:
            contents = getattr(node, "contents", None)
            where = contents() if callable(contents) else type(node).__name__
            raise InvariantViolation(f"no resolved type for {where}")
        return entry[1]

    def declare(self, reference, declaration):
        """Bind a reference to the function or struct declaration it names."""
        self._declarations[id(reference)] = (reference, declaration)
        return reference

    def decl_of(self, reference: object) -> object | None:
        entry = self._declarations.get(id(reference))
        return None if entry is None else entry[1]

    def __contains__(self, node: object) -> bool:
        return id(node) in self._types

    def __len__(self) -> int:
        return len(self._types)
