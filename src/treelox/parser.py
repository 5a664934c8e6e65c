"""
Recursive descent parser for treelox.

Converts a token list into a list of statements. Syntax errors do not stop
the parse: after a failing declaration the parser skips to the next likely
statement boundary and carries on, so one run reports every error it can
find.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from .tokens import Token, TokenType, SourceSpan, STATEMENT_KEYWORDS
from .ast import (
    # Expressions
    Expression, Literal, Variable, Assign, Unary, Binary, Logical,
    Grouping, Call,
    # Statements
    Statement, ExpressionStatement, PrintStatement, VarStatement, Block,
    IfStatement, WhileStatement, FunctionStatement, ReturnStatement,
)
from .errors import (
    ParserError,
    error_syntax,
    error_invalid_assignment_target,
    error_too_many,
    error_top_level_return,
    error_nesting_too_deep,
    Diagnostic,
)
from .limits import recursion_limit
from .runtime.values import NIL, TRUE, FALSE, number_val, string_val


MAX_ARGUMENTS = 255


@dataclass
class ParseResult:
    """Either the whole program or every syntax error found, never both."""
    statements: List[Statement] = field(default_factory=list)
    errors: List[ParserError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [e.diagnostic for e in self.errors]


class Parser:
    """
    Recursive descent parser for treelox.

    Usage:
        parser = Parser(tokens)
        result = parser.parse()

    Each precedence level calls the next tighter one and loops over its own
    operators, so all binary operators are left-associative:
        Lowest:  = (right-associative)
                 or
                 and
                 == !=
                 < > <= >=
                 + -
                 * /
        Highest: unary (! -), call
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.errors: List[ParserError] = []
        self._function_depth = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        """Get the most recently consumed token."""
        return self.tokens[max(0, self.pos - 1)]

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        raise error_syntax(self._current(), message)

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _report(self, error: ParserError) -> None:
        """Record an error without unwinding the current declaration."""
        self.errors.append(error)

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        return SourceSpan(start.span.start, self._previous().span.end)

    def synchronize(self) -> None:
        """Discard tokens until a likely statement boundary."""
        self._advance()

        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._current().type in STATEMENT_KEYWORDS:
                return
            self._advance()

    # =========================================================================
    # Program
    # =========================================================================

    def parse(self) -> ParseResult:
        """Parse the whole token list."""
        statements = []

        with recursion_limit():
            while not self._is_at_end():
                try:
                    statements.append(self._parse_declaration())
                except ParserError as e:
                    self.errors.append(e)
                    self.synchronize()
                except RecursionError:
                    self.errors.append(error_nesting_too_deep(self._current()))
                    self.synchronize()

        if self.errors:
            return ParseResult(errors=list(self.errors))
        return ParseResult(statements=statements)

    # =========================================================================
    # Declarations
    # =========================================================================

    def _parse_declaration(self) -> Statement:
        """Parse a declaration or statement."""
        if self._check(TokenType.FUN):
            return self._parse_function()
        if self._check(TokenType.VAR):
            return self._parse_var_declaration()
        return self._parse_statement()

    def _parse_function(self) -> FunctionStatement:
        """Parse 'fun name(params) { body }'."""
        start = self._advance()  # consume 'fun'
        name = self._consume(TokenType.IDENTIFIER, "Expect function name.")
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after function name.")

        params: List[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) == MAX_ARGUMENTS:
                    self._report(error_too_many(self._current(), "parameters", MAX_ARGUMENTS))
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break

        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self._consume(TokenType.LEFT_BRACE, "Expect '{' before function body.")
        self._function_depth += 1
        try:
            body = self._parse_block_body()
        finally:
            self._function_depth -= 1

        return FunctionStatement(
            span=self._span_from(start),
            name=name,
            params=params,
            body=body
        )

    def _parse_var_declaration(self) -> VarStatement:
        """Parse 'var name [= initializer];'."""
        start = self._advance()  # consume 'var'
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        if self._match(TokenType.EQUAL):
            initializer = self._parse_expression()
        else:
            initializer = Literal(span=name.span, value=NIL)

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarStatement(
            span=self._span_from(start),
            name=name,
            initializer=initializer
        )

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse a statement."""
        token = self._current()

        if token.type == TokenType.PRINT:
            return self._parse_print_statement()

        if token.type == TokenType.IF:
            return self._parse_if_statement()

        if token.type == TokenType.WHILE:
            return self._parse_while_statement()

        if token.type == TokenType.FOR:
            return self._parse_for_statement()

        if token.type == TokenType.RETURN:
            return self._parse_return_statement()

        if token.type == TokenType.LEFT_BRACE:
            self._advance()
            statements = self._parse_block_body()
            return Block(span=self._span_from(token), statements=statements)

        return self._parse_expression_statement()

    def _parse_block_body(self) -> List[Statement]:
        """Parse declarations up to the closing brace; '{' is consumed."""
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            statements.append(self._parse_declaration())

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _parse_print_statement(self) -> PrintStatement:
        """Parse 'print expr;'."""
        start = self._advance()  # consume 'print'
        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(span=self._span_from(start), expression=value)

    def _parse_expression_statement(self) -> ExpressionStatement:
        """Parse 'expr;'."""
        start = self._current()
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(span=self._span_from(start), expression=expr)

    def _parse_if_statement(self) -> IfStatement:
        """Parse an if statement with optional else."""
        start = self._advance()  # consume 'if'
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._parse_statement()
        else_branch = None
        # A dangling else binds to the nearest if
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()

        return IfStatement(
            span=self._span_from(start),
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch
        )

    def _parse_while_statement(self) -> WhileStatement:
        """Parse a while loop."""
        start = self._advance()  # consume 'while'
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self._parse_statement()

        return WhileStatement(
            span=self._span_from(start),
            condition=condition,
            body=body
        )

    def _parse_for_statement(self) -> Statement:
        """Parse a for loop, desugared into blocks and a while loop.

        for (init; cond; incr) body
        becomes
        { init; while (cond) { body; incr; } }
        """
        start = self._advance()  # consume 'for'
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._check(TokenType.VAR):
            initializer = self._parse_var_declaration()
        else:
            initializer = self._parse_expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._parse_expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._parse_statement()

        if increment is not None:
            body = Block(
                span=body.span,
                statements=[body, ExpressionStatement(span=increment.span, expression=increment)]
            )

        if condition is None:
            condition = Literal(span=start.span, value=TRUE)
        loop = WhileStatement(span=self._span_from(start), condition=condition, body=body)

        if initializer is not None:
            return Block(span=self._span_from(start), statements=[initializer, loop])
        return loop

    def _parse_return_statement(self) -> ReturnStatement:
        """Parse 'return [value];'."""
        keyword = self._advance()  # consume 'return'
        if self._function_depth == 0:
            self._report(error_top_level_return(keyword))

        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._parse_expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(span=self._span_from(keyword), keyword=keyword, value=value)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression."""
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        """Parse assignment, right-associative: a = b = c is a = (b = c)."""
        expr = self._parse_or()

        equals = self._match(TokenType.EQUAL)
        if equals is None:
            return expr

        value = self._parse_assignment()
        if isinstance(expr, Variable):
            return Assign(
                span=SourceSpan(expr.span.start, value.span.end),
                name=expr.name,
                value=value
            )

        self._report(error_invalid_assignment_target(equals))
        return expr

    def _parse_or(self) -> Expression:
        expr = self._parse_and()
        while self._check(TokenType.OR):
            operator = self._advance()
            right = self._parse_and()
            expr = Logical(
                span=SourceSpan(expr.span.start, right.span.end),
                operator=operator,
                left=expr,
                right=right
            )
        return expr

    def _parse_and(self) -> Expression:
        expr = self._parse_binary_level(0)
        while self._check(TokenType.AND):
            operator = self._advance()
            right = self._parse_binary_level(0)
            expr = Logical(
                span=SourceSpan(expr.span.start, right.span.end),
                operator=operator,
                left=expr,
                right=right
            )
        return expr

    # Binary levels from loosest to tightest: equality, comparison, term, factor
    BINARY_LEVELS = (
        (TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL),
        (TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL),
        (TokenType.MINUS, TokenType.PLUS),
        (TokenType.SLASH, TokenType.STAR),
    )

    def _parse_binary_level(self, level: int) -> Expression:
        """Parse one left-associative binary level, delegating to the next."""
        if level == len(self.BINARY_LEVELS):
            return self._parse_unary()

        expr = self._parse_binary_level(level + 1)
        while self._current().type in self.BINARY_LEVELS[level]:
            operator = self._advance()
            right = self._parse_binary_level(level + 1)
            expr = Binary(
                span=SourceSpan(expr.span.start, right.span.end),
                operator=operator,
                left=expr,
                right=right
            )
        return expr

    def _parse_unary(self) -> Expression:
        """Parse unary expressions (! -)."""
        operator = self._match(TokenType.BANG, TokenType.MINUS)
        if operator is not None:
            operand = self._parse_unary()
            return Unary(
                span=SourceSpan(operator.span.start, operand.span.end),
                operator=operator,
                operand=operand
            )

        return self._parse_call()

    def _parse_call(self) -> Expression:
        """Parse a primary followed by any number of call suffixes."""
        expr = self._parse_primary()

        while self._match(TokenType.LEFT_PAREN):
            expr = self._finish_call(expr)

        return expr

    def _finish_call(self, callee: Expression) -> Call:
        """Parse call arguments; '(' is consumed."""
        arguments: List[Expression] = []

        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) == MAX_ARGUMENTS:
                    self._report(error_too_many(self._current(), "arguments", MAX_ARGUMENTS))
                arguments.append(self._parse_expression())
                if not self._match(TokenType.COMMA):
                    break

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(
            span=SourceSpan(callee.span.start, paren.span.end),
            callee=callee,
            paren=paren,
            arguments=arguments
        )

    def _parse_primary(self) -> Expression:
        """Parse primary expressions (literals, identifiers, grouped)."""
        token = self._current()

        # Literals
        if token.type == TokenType.FALSE:
            self._advance()
            return Literal(span=token.span, value=FALSE)

        if token.type == TokenType.TRUE:
            self._advance()
            return Literal(span=token.span, value=TRUE)

        if token.type == TokenType.NIL:
            self._advance()
            return Literal(span=token.span, value=NIL)

        if token.type == TokenType.NUMBER:
            self._advance()
            return Literal(span=token.span, value=number_val(token.literal))

        if token.type == TokenType.STRING:
            self._advance()
            return Literal(span=token.span, value=string_val(token.literal))

        # Identifiers
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Variable(span=token.span, name=token)

        # Grouped expression
        if token.type == TokenType.LEFT_PAREN:
            self._advance()
            expr = self._parse_expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(span=self._span_from(token), expression=expr)

        raise error_syntax(token, "Expect expression.")


def parse(tokens: List[Token]) -> ParseResult:
    """
    Convenience function to parse tokens into a program.

    Args:
        tokens: List of tokens from the lexer, ending with EOF

    Returns:
        ParseResult with either the statements or all syntax errors
    """
    parser = Parser(tokens)
    return parser.parse()
