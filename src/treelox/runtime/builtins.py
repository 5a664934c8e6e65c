"""
Built-in function registry for the interpreter.

Builtins are ordinary function values in the global scope, so they go
through the same call path and arity check as user functions.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .values import Value, LoxCallable, number_val, function_val

if TYPE_CHECKING:
    from .interpreter import Interpreter


@dataclass(eq=False)
class BuiltinFunction(LoxCallable):
    """
    A built-in function with its implementation and fixed arity.
    """
    name: str
    param_count: int
    implementation: Callable[..., Value]
    doc: str = ""

    @property
    def arity(self) -> int:
        return self.param_count

    def call(self, interpreter: "Interpreter", arguments: List[Value]) -> Value:
        return self.implementation(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


class BuiltinRegistry:
    """
    Registry of all built-in functions.

    Functions are registered by name and defined into an interpreter's
    global scope at startup.
    """

    def __init__(self):
        self._functions: Dict[str, BuiltinFunction] = {}
        self._register_all()

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def register(self, func: BuiltinFunction) -> None:
        """Register a function."""
        self._functions[func.name] = func

    def names(self) -> List[str]:
        return sorted(self._functions)

    def as_values(self) -> Dict[str, Value]:
        """All builtins as function values, keyed by name."""
        return {name: function_val(func) for name, func in self._functions.items()}

    def _register_all(self) -> None:
        """Register all built-in functions."""
        self._register_time_functions()

    # --- Time Functions ---

    def _register_time_functions(self) -> None:

        def _clock() -> Value:
            return number_val(time.time())

        self.register(BuiltinFunction(
            "clock", 0, _clock,
            "Seconds since the epoch, as a number",
        ))


_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the shared builtin registry."""
    global _registry
    if _registry is None:
        _registry = BuiltinRegistry()
    return _registry
