"""
Interpreter exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors

Host recursion exhaustion surfaces as E105 while parsing and E404 while
running.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import Token, TokenType, SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: SourceSpan
    where: str = ""                 # " at 'x'" / " at end" for parser errors
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    @property
    def line(self) -> int:
        return self.span.start.line

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code] where: message
        loc = f"{self.span.start}"
        parts.append(f"{loc}: {self.severity.value}[{self.code}]{self.where}: {self.message}")

        # Source line with caret
        if show_source and self.source_line is not None:
            parts.append(f"  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            end_col = self.span.end.column if self.span.start.line == self.span.end.line else len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "range": {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            },
            "hints": self.hints,
        }


class LoxError(Exception):
    """Base exception for all interpreter errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def line(self) -> int:
        return self.diagnostic.line

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(LoxError):
    """Error during scanning (E0xx)."""
    pass


class ParserError(LoxError):
    """Error during parsing (E1xx). Carries the offending token."""

    def __init__(self, diagnostic: Diagnostic, token: Token):
        super().__init__(diagnostic)
        self.token = token


class LoxRuntimeError(LoxError):
    """Error during evaluation (E4xx). Fatal to the current run."""

    def __init__(self, diagnostic: Diagnostic, token: Token):
        super().__init__(diagnostic)
        self.token = token


class UndefinedVariableError(LoxRuntimeError):
    """Read or assignment of a name no scope defines (E401)."""
    pass


class RuntimeTypeError(LoxRuntimeError):
    """Operand or callee of the wrong kind (E402)."""
    pass


class ArityError(LoxRuntimeError):
    """Argument count does not match the parameter count (E403)."""

    def __init__(self, diagnostic: Diagnostic, token: Token, expected: int, actual: int):
        super().__init__(diagnostic, token)
        self.expected = expected
        self.actual = actual


def _error(code: str, message: str, span: SourceSpan, where: str = "",
           source_line: str = None, hints: List[str] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        severity=ErrorSeverity.ERROR,
        span=span,
        where=where,
        source_line=source_line,
        hints=hints or [],
    )


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Unexpected character."""
    return LexerError(_error(
        "E001", f"Unexpected character '{char}'.", span, source_line=source_line,
    ))


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: Unterminated string literal."""
    return LexerError(_error(
        "E002", "Unterminated string.", span, source_line=source_line,
        hints=["string literals must be closed with a matching '\"'"],
    ))


def error_unterminated_comment(span: SourceSpan, source_line: str = None) -> LexerError:
    """E003: Unterminated block comment."""
    return LexerError(_error(
        "E003", "Unterminated comment (expected closing */).", span, source_line=source_line,
    ))


# --- Parser error codes ---

def _token_where(token: Token) -> str:
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


def error_syntax(token: Token, message: str) -> ParserError:
    """E101: Grammar violation at a token."""
    return ParserError(_error("E101", message, token.span, _token_where(token)), token)


def error_invalid_assignment_target(equals: Token) -> ParserError:
    """E102: Left side of '=' is not a variable."""
    return ParserError(_error(
        "E102", "Invalid assignment target.", equals.span, _token_where(equals),
        hints=["only variables can be assigned to"],
    ), equals)


def error_too_many(token: Token, what: str, limit: int) -> ParserError:
    """E103: Parameter or argument list exceeds the limit."""
    return ParserError(_error(
        "E103", f"Can't have more than {limit} {what}.", token.span, _token_where(token),
    ), token)


def error_top_level_return(keyword: Token) -> ParserError:
    """E104: 'return' outside any function body."""
    return ParserError(_error(
        "E104", "Can't return from top-level code.", keyword.span, _token_where(keyword),
    ), keyword)


def error_nesting_too_deep(token: Token) -> ParserError:
    """E105: Expression nesting exceeded the recursion limit."""
    return ParserError(_error(
        "E105", "Expression nesting too deep.", token.span, _token_where(token),
    ), token)


# --- Runtime error codes ---

def error_undefined_variable(name: Token) -> UndefinedVariableError:
    """E401: Undefined variable."""
    return UndefinedVariableError(
        _error("E401", f"Undefined variable '{name.lexeme}'.", name.span), name,
    )


def error_operand_type(operator: Token, message: str) -> RuntimeTypeError:
    """E402: Operand or callee of the wrong kind."""
    return RuntimeTypeError(_error("E402", message, operator.span), operator)


def error_arity(paren: Token, expected: int, actual: int) -> ArityError:
    """E403: Wrong number of call arguments."""
    return ArityError(
        _error("E403", f"Expected {expected} arguments but got {actual}.", paren.span),
        paren, expected, actual,
    )


def error_stack_overflow(paren: Token) -> LoxRuntimeError:
    """E404: Call nesting exceeded the host recursion limit."""
    return LoxRuntimeError(_error(
        "E404", "Stack overflow.", paren.span,
        hints=["check for recursion without a base case"],
    ), paren)


class DiagnosticCollector:
    """Collects diagnostics during a run.

    When constructed with the source text, diagnostics added without a
    source line get one filled in for display.
    """

    def __init__(self, max_errors: int = 20, source: Optional[str] = None):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0
        self._lines = source.splitlines() if source else []

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        if diagnostic.source_line is None:
            line_num = diagnostic.span.start.line
            if 1 <= line_num <= len(self._lines):
                diagnostic.source_line = self._lines[line_num - 1]
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: LoxError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors

    def format_all(self, show_source: bool = True) -> str:
        """Format collected diagnostics, at most max_errors of them."""
        shown = self.diagnostics[:self.max_errors]
        parts = [d.format(show_source) for d in shown]
        hidden = len(self.diagnostics) - len(shown)
        if hidden > 0:
            parts.append(f"... {hidden} more diagnostic(s) not shown")
        if self._error_count > 0:
            parts.append(f"{self._error_count} error(s)")
        return "\n\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
        }
