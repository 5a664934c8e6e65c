"""
Tree-walking interpreter for treelox programs.

Evaluates statements in order against a chain of environments. A `return`
is not an exception: it sets a flag on the execution context, statement
loops stop as soon as they see it, and the enclosing call takes the value.
Runtime errors are exceptions and end the current `interpret` call.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from .values import (
    Value, ValueKind, LoxCallable, NIL,
    number_val, string_val, bool_val, function_val, stringify,
)
from .environment import Environment, ExecutionContext
from .builtins import get_builtin_registry

from ..ast import (
    Statement, ExpressionStatement, PrintStatement, VarStatement, Block,
    IfStatement, WhileStatement, FunctionStatement, ReturnStatement,
    Expression, Literal, Variable, Assign, Unary, Binary, Logical,
    Grouping, Call,
)
from ..errors import (
    LoxError, LoxRuntimeError,
    error_operand_type, error_arity, error_stack_overflow,
)
from ..limits import recursion_limit
from ..tokens import Token, TokenType


class LoxFunction(LoxCallable):
    """A user-defined function and the environment it was declared in."""

    def __init__(self, declaration: FunctionStatement, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: "Interpreter", arguments: List[Value]) -> Value:
        ctx = interpreter.context
        # Parameters live in a scope enclosed by the closure, not the caller
        with ctx.new_scope(f"call:{self.name}", enclosing=self.closure) as scope:
            for param, argument in zip(self.declaration.params, arguments):
                scope.define(param.lexeme, argument)
            interpreter.execute_statements(self.declaration.body)
            return ctx.take_return()

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"LoxFunction({self.name!r}, arity={self.arity})"


@dataclass
class ExecutionResult:
    """Result of running a program."""
    success: bool
    error: Optional[LoxRuntimeError] = None
    syntax_errors: List[LoxError] = field(default_factory=list)

    @property
    def errors(self) -> List[LoxError]:
        """Every error from the run, scan and parse errors first."""
        errors = list(self.syntax_errors)
        if self.error is not None:
            errors.append(self.error)
        return errors

    @property
    def error_message(self) -> Optional[str]:
        if self.error is not None:
            return self.error.message
        if self.syntax_errors:
            return self.syntax_errors[0].message
        return None


class Interpreter:
    """
    Tree-walking interpreter.

    One instance keeps its global scope across `interpret` calls, so a REPL
    can feed it one line at a time.
    """

    def __init__(self, output: Optional[TextIO] = None):
        """
        Initialize the interpreter.

        Args:
            output: Stream for print statements (default sys.stdout)
        """
        self.context = ExecutionContext(output=output)
        for name, value in get_builtin_registry().as_values().items():
            self.context.globals.define(name, value)

    @property
    def globals(self) -> Environment:
        return self.context.globals

    def interpret(self, statements: List[Statement]) -> ExecutionResult:
        """
        Execute statements in order, stopping at the first runtime error.

        Returns:
            ExecutionResult; `error` is set when execution stopped early
        """
        with recursion_limit():
            try:
                self.execute_statements(statements)
            except LoxRuntimeError as e:
                return ExecutionResult(success=False, error=e)
            finally:
                self.context.reset()
        return ExecutionResult(success=True)

    def execute_statements(self, statements: List[Statement]) -> None:
        """Execute statements in the current scope until one returns."""
        ctx = self.context
        for stmt in statements:
            self._execute_statement(stmt)
            if ctx.should_return:
                return

    # =========================================================================
    # Statements
    # =========================================================================

    def _execute_statement(self, stmt: Statement) -> None:
        """Execute a statement."""
        if isinstance(stmt, ExpressionStatement):
            self._evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            self._execute_print(stmt)
        elif isinstance(stmt, VarStatement):
            self._execute_var(stmt)
        elif isinstance(stmt, Block):
            self._execute_block(stmt)
        elif isinstance(stmt, IfStatement):
            self._execute_if_statement(stmt)
        elif isinstance(stmt, WhileStatement):
            self._execute_while(stmt)
        elif isinstance(stmt, FunctionStatement):
            self._execute_function(stmt)
        elif isinstance(stmt, ReturnStatement):
            self._execute_return(stmt)
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_print(self, stmt: PrintStatement) -> None:
        value = self._evaluate(stmt.expression)
        self.context.write(stringify(value))

    def _execute_var(self, stmt: VarStatement) -> None:
        """Execute a variable declaration."""
        value = self._evaluate(stmt.initializer)
        self.context.current_scope.define(stmt.name.lexeme, value)

    def _execute_block(self, block: Block) -> None:
        """Execute a block of statements in a child scope."""
        with self.context.new_scope("block"):
            self.execute_statements(block.statements)

    def _execute_if_statement(self, stmt: IfStatement) -> None:
        if self._evaluate(stmt.condition).is_truthy():
            self._execute_statement(stmt.then_branch)
        elif stmt.else_branch is not None:
            self._execute_statement(stmt.else_branch)

    def _execute_while(self, stmt: WhileStatement) -> None:
        """Execute a while loop. Iterations share the enclosing scope."""
        ctx = self.context
        while self._evaluate(stmt.condition).is_truthy():
            self._execute_statement(stmt.body)
            if ctx.should_return:
                return

    def _execute_function(self, stmt: FunctionStatement) -> None:
        """Declare a function closing over the current scope."""
        function = LoxFunction(stmt, self.context.current_scope)
        self.context.current_scope.define(stmt.name.lexeme, function_val(function))

    def _execute_return(self, stmt: ReturnStatement) -> None:
        """Execute a return statement."""
        if stmt.value is not None:
            value = self._evaluate(stmt.value)
        else:
            value = NIL
        self.context.signal_return(value)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _evaluate(self, expr: Expression) -> Value:
        """Evaluate an expression to produce a Value."""
        if isinstance(expr, Literal):
            return expr.value
        elif isinstance(expr, Grouping):
            return self._evaluate(expr.expression)
        elif isinstance(expr, Variable):
            return self.context.current_scope.get(expr.name)
        elif isinstance(expr, Assign):
            return self._eval_assign(expr)
        elif isinstance(expr, Logical):
            return self._eval_logical(expr)
        elif isinstance(expr, Unary):
            return self._eval_unary_op(expr)
        elif isinstance(expr, Binary):
            return self._eval_binary_op(expr)
        elif isinstance(expr, Call):
            return self._eval_call(expr)
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_assign(self, expr: Assign) -> Value:
        value = self._evaluate(expr.value)
        self.context.current_scope.assign(expr.name, value)
        return value

    def _eval_logical(self, expr: Logical) -> Value:
        """Evaluate 'and' / 'or', returning an operand rather than a bool."""
        left = self._evaluate(expr.left)

        if expr.operator.type == TokenType.OR:
            if left.is_truthy():
                return left
        elif not left.is_truthy():
            return left

        return self._evaluate(expr.right)

    def _eval_unary_op(self, expr: Unary) -> Value:
        """Evaluate a unary operation."""
        operand = self._evaluate(expr.operand)

        if expr.operator.type == TokenType.BANG:
            return bool_val(not operand.is_truthy())
        if expr.operator.type == TokenType.MINUS:
            if not operand.is_number:
                raise error_operand_type(expr.operator, "Operand must be a number.")
            return number_val(-operand.data)
        raise TypeError(f"Unknown unary operator: {expr.operator.lexeme}")

    def _eval_binary_op(self, expr: Binary) -> Value:
        """Evaluate a binary operation. Both operands are always evaluated."""
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)
        op = expr.operator.type

        # Equality never fails
        if op == TokenType.EQUAL_EQUAL:
            return bool_val(left == right)
        if op == TokenType.BANG_EQUAL:
            return bool_val(left != right)

        if op == TokenType.PLUS:
            if left.is_number and right.is_number:
                return number_val(left.data + right.data)
            if left.is_string and right.is_string:
                return string_val(left.data + right.data)
            raise error_operand_type(
                expr.operator, "Operands must be two numbers or two strings."
            )

        self._check_number_operands(expr.operator, left, right)
        a, b = left.data, right.data

        if op == TokenType.MINUS:
            return number_val(a - b)
        elif op == TokenType.STAR:
            return number_val(a * b)
        elif op == TokenType.SLASH:
            return number_val(_divide(a, b))
        elif op == TokenType.GREATER:
            return bool_val(a > b)
        elif op == TokenType.GREATER_EQUAL:
            return bool_val(a >= b)
        elif op == TokenType.LESS:
            return bool_val(a < b)
        elif op == TokenType.LESS_EQUAL:
            return bool_val(a <= b)
        raise TypeError(f"Unknown binary operator: {expr.operator.lexeme}")

    def _check_number_operands(self, operator: Token, left: Value, right: Value) -> None:
        if not (left.is_number and right.is_number):
            raise error_operand_type(operator, "Operands must be numbers.")

    def _eval_call(self, expr: Call) -> Value:
        """Evaluate a function call."""
        callee = self._evaluate(expr.callee)
        if callee.kind != ValueKind.FUNCTION:
            raise error_operand_type(expr.paren, "Can only call functions and classes.")

        arguments = [self._evaluate(arg) for arg in expr.arguments]

        function: LoxCallable = callee.data
        if len(arguments) != function.arity:
            raise error_arity(expr.paren, function.arity, len(arguments))

        try:
            return function.call(self, arguments)
        except RecursionError:
            raise error_stack_overflow(expr.paren) from None


def _divide(a: float, b: float) -> float:
    """IEEE 754 division: x/0 is a signed infinity and 0/0 is NaN."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def run_source(source: str, interpreter: Optional[Interpreter] = None,
               filename: Optional[str] = None) -> ExecutionResult:
    """
    High-level API to scan, parse and execute source in one call.

        from treelox import run_source

        result = run_source('print "hello";')
        if not result.success:
            for error in result.errors:
                print(error)

    Scan and parse errors are all collected and prevent execution.

    Args:
        source: Program text
        interpreter: Interpreter to run in (default: a fresh one), so that
            globals can persist between calls
        filename: Shown in diagnostic locations

    Returns:
        ExecutionResult with the runtime error or the syntax errors, if any
    """
    from ..lexer import Lexer
    from ..parser import parse

    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()
    parsed = parse(tokens)

    syntax_errors: List[LoxError] = [*lexer.errors, *parsed.errors]
    if syntax_errors:
        return ExecutionResult(success=False, syntax_errors=syntax_errors)

    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.interpret(parsed.statements)
