"""
Abstract Syntax Tree (AST) node definitions for treelox.

The parser builds these trees and the interpreter walks them. Nodes are
frozen once built, and each keeps the token(s) needed to report a source
line when evaluating it fails.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Any, TYPE_CHECKING
from abc import ABC
from .tokens import SourceSpan, Token

if TYPE_CHECKING:
    from .runtime.values import Value


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(frozen=True)
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass(frozen=True)
class Literal(Expression):
    """A literal value (number, string, true, false, nil)."""
    value: "Value"


@dataclass(frozen=True)
class Variable(Expression):
    """A variable reference."""
    name: Token


@dataclass(frozen=True)
class Assign(Expression):
    """An assignment to an existing variable (e.g., x = 5). Yields the value."""
    name: Token
    value: Expression


@dataclass(frozen=True)
class Unary(Expression):
    """A unary operation (e.g., !x, -n)."""
    operator: Token
    operand: Expression


@dataclass(frozen=True)
class Binary(Expression):
    """An arithmetic, comparison or equality operation (e.g., a + b)."""
    operator: Token
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Logical(Expression):
    """A short-circuiting 'and' / 'or'."""
    operator: Token
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Grouping(Expression):
    """A parenthesized expression."""
    expression: Expression


@dataclass(frozen=True)
class Call(Expression):
    """A call (e.g., f(1, 2)). `paren` is the closing ')' for error lines."""
    callee: Expression
    paren: Token
    arguments: List[Expression] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""
    expression: Expression


@dataclass(frozen=True)
class PrintStatement(Statement):
    """print expr;"""
    expression: Expression


@dataclass(frozen=True)
class VarStatement(Statement):
    """A variable declaration. A missing initializer parses as nil."""
    name: Token
    initializer: Expression


@dataclass(frozen=True)
class Block(Statement):
    """A braced block of statements with its own scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass(frozen=True)
class IfStatement(Statement):
    """if (condition) then_branch [else else_branch]"""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass(frozen=True)
class WhileStatement(Statement):
    """while (condition) body. Also the target of 'for' desugaring."""
    condition: Expression
    body: Statement


@dataclass(frozen=True)
class FunctionStatement(Statement):
    """A named function declaration.

    Syntax:
        fun name(param1, param2) {
            ...
        }
    """
    name: Token
    params: List[Token]
    body: List[Statement]


@dataclass(frozen=True)
class ReturnStatement(Statement):
    """A return statement. `keyword` locates it for error reporting."""
    keyword: Token
    value: Optional[Expression] = None


# =============================================================================
# Visitor Helpers
# =============================================================================

class PrintVisitor(AstVisitor):
    """Debug visitor that prints the AST structure."""

    def __init__(self, indent: int = 0, emit=print):
        self.indent = indent
        self.emit = emit

    def _print(self, text: str) -> None:
        self.emit("  " * self.indent + text)

    def _child(self) -> "PrintVisitor":
        return PrintVisitor(self.indent + 2, self.emit)

    def generic_visit(self, node: AstNode) -> None:
        self._print(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._print(f"  {name}:")
                self._child().generic_visit(value)
            elif isinstance(value, list):
                self._print(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        self._child().generic_visit(item)
                    else:
                        self._print(f"    {_describe(item)}")
                self._print("  ]")
            else:
                self._print(f"  {name}: {_describe(value)}")


def _describe(value: Any) -> str:
    from .runtime.values import Value, stringify

    if isinstance(value, Token):
        return value.lexeme
    if isinstance(value, Value):
        if value.is_string:
            return repr(value.data)
        return stringify(value)
    return repr(value)


def print_ast(node: AstNode, emit=print) -> None:
    """Print an AST node for debugging."""
    PrintVisitor(emit=emit).generic_visit(node)
