"""
Environments and execution context for the interpreter.

Manages the lexical scope chain, the current scope pointer and the
function-return signal.
"""

import sys
from dataclasses import dataclass, field
from typing import Dict, Optional, TextIO
from contextlib import contextmanager

from .values import Value, NIL
from ..errors import error_undefined_variable
from ..tokens import Token


@dataclass(eq=False)
class Environment:
    """
    A single scope containing variable bindings.

    Scopes form a chain via `enclosing`. Environments are shared by
    reference: a closure holds the very Environment it was declared in, so
    an assignment through any holder is seen by all of them.
    """
    values: Dict[str, Value] = field(default_factory=dict)
    enclosing: Optional["Environment"] = field(default=None, repr=False)
    name: str = "anonymous"  # For debugging

    def define(self, name: str, value: Value) -> None:
        """Bind a name in this scope, replacing any binding it already has."""
        self.values[name] = value

    def get(self, name: Token) -> Value:
        """Look up a variable in this scope or enclosing scopes."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise error_undefined_variable(name)

    def assign(self, name: Token, value: Value) -> None:
        """
        Update an existing variable in place.

        Searches up the scope chain for the nearest scope defining the name.
        Never creates a binding.
        """
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return
        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return
        raise error_undefined_variable(name)

    def contains(self, name: str) -> bool:
        """Check if a variable exists in this scope or enclosing ones."""
        if name in self.values:
            return True
        return self.enclosing is not None and self.enclosing.contains(name)

    @property
    def depth(self) -> int:
        """Number of scopes in the chain, counting this one."""
        if self.enclosing is None:
            return 1
        return 1 + self.enclosing.depth


@dataclass
class ExecutionContext:
    """
    The execution state of one interpreter.

    Tracks:
    - The global scope and the current scope
    - The output stream for print
    - The pending function return, if any
    """
    globals: Environment = field(default_factory=lambda: Environment(name="global"))
    current_scope: Optional[Environment] = None
    output: TextIO = field(default=None)

    # Control flow flags
    _should_return: bool = False
    _return_value: Value = NIL

    def __post_init__(self):
        if self.current_scope is None:
            self.current_scope = self.globals
        if self.output is None:
            self.output = sys.stdout

    @contextmanager
    def new_scope(self, name: str = "block", enclosing: Optional[Environment] = None):
        """
        Context manager making a new child scope current.

        The child encloses `enclosing` when given (a function's captured
        environment), else the current scope. The previous scope is
        restored however the body exits.

        Usage:
            with ctx.new_scope("block"):
                ctx.current_scope.define("i", number_val(0))
        """
        old_scope = self.current_scope
        parent = enclosing if enclosing is not None else old_scope
        self.current_scope = Environment(enclosing=parent, name=name)
        try:
            yield self.current_scope
        finally:
            self.current_scope = old_scope

    def write(self, text: str) -> None:
        """Emit one line of program output immediately."""
        print(text, file=self.output, flush=True)

    def signal_return(self, value: Value) -> None:
        """Signal a return from the innermost function call."""
        self._should_return = True
        self._return_value = value

    @property
    def should_return(self) -> bool:
        """Check if a return is unwinding."""
        return self._should_return

    def take_return(self) -> Value:
        """Consume the pending return value; nil when none was signaled."""
        value = self._return_value if self._should_return else NIL
        self._should_return = False
        self._return_value = NIL
        return value

    def reset(self) -> None:
        """Drop the scope chain back to globals and clear any pending return."""
        self.current_scope = self.globals
        self.take_return()
