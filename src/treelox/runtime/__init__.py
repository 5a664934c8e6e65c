"""
treelox runtime - tree-walking interpreter.

This module provides:
- Interpreter: Executes parsed statements
- Value: Runtime values tagged with their kind
- Environment / ExecutionContext: Scope chain and return signal
- BuiltinRegistry: Native functions defined in the global scope
"""

from .values import (
    Value,
    ValueKind,
    LoxCallable,
    NIL,
    TRUE,
    FALSE,
    number_val,
    string_val,
    bool_val,
    function_val,
    wrap_value,
    format_number,
    stringify,
)

from .environment import (
    Environment,
    ExecutionContext,
)

from .builtins import (
    BuiltinFunction,
    BuiltinRegistry,
    get_builtin_registry,
)

from .interpreter import (
    Interpreter,
    LoxFunction,
    ExecutionResult,
    run_source,
)

__all__ = [
    # Values
    'Value',
    'ValueKind',
    'LoxCallable',
    'NIL',
    'TRUE',
    'FALSE',
    'number_val',
    'string_val',
    'bool_val',
    'function_val',
    'wrap_value',
    'format_number',
    'stringify',

    # Environment
    'Environment',
    'ExecutionContext',

    # Builtins
    'BuiltinFunction',
    'BuiltinRegistry',
    'get_builtin_registry',

    # Interpreter
    'Interpreter',
    'LoxFunction',
    'ExecutionResult',
    'run_source',
]
