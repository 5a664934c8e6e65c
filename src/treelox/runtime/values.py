"""
Runtime values for the interpreter.

Every value is a `Value(data, kind)` pair. The kind set is closed: strings,
numbers (64-bit floats), booleans, functions and nil. Function values carry
a callable object as their data, either a user function with its captured
environment or a builtin.
"""

import math
from decimal import Decimal
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .interpreter import Interpreter


class ValueKind(Enum):
    """Tag of a runtime value."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    FUNCTION = "function"
    NIL = "nil"


class LoxCallable(ABC):
    """Anything a call expression can invoke."""

    name: str

    @property
    @abstractmethod
    def arity(self) -> int:
        """Number of parameters the callable expects."""

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List["Value"]) -> "Value":
        """Invoke with already-evaluated, arity-checked arguments."""


@dataclass(frozen=True, eq=False)
class Value:
    """
    A runtime value.

    `data` holds the Python payload: str, float, bool, a LoxCallable, or
    None for nil. Equality is structural within a kind; values of different
    kinds are never equal.
    """
    data: Any
    kind: ValueKind

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.kind.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self.kind != other.kind:
            return False
        if self.kind == ValueKind.FUNCTION:
            return self.data is other.data
        return self.data == other.data

    def __hash__(self) -> int:
        return hash((self.kind, id(self.data) if self.kind == ValueKind.FUNCTION else self.data))

    def is_truthy(self) -> bool:
        """Only false and nil are falsy; 0 and "" are truthy."""
        if self.kind == ValueKind.NIL:
            return False
        if self.kind == ValueKind.BOOLEAN:
            return bool(self.data)
        return True

    @property
    def is_number(self) -> bool:
        return self.kind == ValueKind.NUMBER

    @property
    def is_string(self) -> bool:
        return self.kind == ValueKind.STRING


# Convenience constructors

def number_val(n: float) -> Value:
    """Create a number value."""
    return Value(float(n), ValueKind.NUMBER)


def string_val(s: str) -> Value:
    """Create a string value."""
    return Value(str(s), ValueKind.STRING)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return TRUE if b else FALSE


def function_val(fn: LoxCallable) -> Value:
    """Wrap a callable as a function value."""
    return Value(fn, ValueKind.FUNCTION)


NIL = Value(None, ValueKind.NIL)
TRUE = Value(True, ValueKind.BOOLEAN)
FALSE = Value(False, ValueKind.BOOLEAN)


def wrap_value(data: Any) -> Value:
    """Wrap a raw Python value, inferring its kind."""
    if data is None:
        return NIL
    if isinstance(data, bool):
        return bool_val(data)
    if isinstance(data, (int, float)):
        return number_val(data)
    if isinstance(data, str):
        return string_val(data)
    if isinstance(data, LoxCallable):
        return function_val(data)
    raise ValueError(f"Cannot wrap {type(data).__name__} as a runtime value")


def format_number(n: float) -> str:
    """Shortest round-tripping digits in plain decimal notation, without a trailing '.0'."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    text = format(Decimal(repr(n)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def stringify(value: Value) -> str:
    """Display form used by print."""
    if value.kind == ValueKind.NIL:
        return "nil"
    if value.kind == ValueKind.BOOLEAN:
        return "true" if value.data else "false"
    if value.kind == ValueKind.NUMBER:
        return format_number(value.data)
    if value.kind == ValueKind.FUNCTION:
        return str(value.data)
    return value.data
