"""
treelox - a tree-walking interpreter for a small Lox-like scripting language.

This module provides:
- Lexer: Tokenizes source code
- Parser: Builds statement trees from tokens, reporting every syntax error
- Interpreter: Executes statements with lexical scoping and closures

Usage:
    from treelox import tokenize, parse, Interpreter

    tokens = tokenize('''
    fun make_counter() {
        var i = 0;
        fun count() { i = i + 1; return i; }
        return count;
    }
    var c = make_counter();
    print c();
    ''')
    result = parse(tokens)
    if result.has_errors:
        for error in result.errors:
            print(error)
    else:
        Interpreter().interpret(result.statements)
"""

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    ParseResult,
    parse,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    # Expressions
    Expression,
    Literal,
    Variable,
    Assign,
    Unary,
    Binary,
    Logical,
    Grouping,
    Call,
    # Statements
    Statement,
    ExpressionStatement,
    PrintStatement,
    VarStatement,
    Block,
    IfStatement,
    WhileStatement,
    FunctionStatement,
    ReturnStatement,
    # Helpers
    print_ast,
)

from .errors import (
    LoxError,
    LexerError,
    ParserError,
    LoxRuntimeError,
    UndefinedVariableError,
    RuntimeTypeError,
    ArityError,
    Diagnostic,
    DiagnosticCollector,
    ErrorSeverity,
)

from .runtime import (
    Interpreter,
    ExecutionResult,
    run_source,
    Value,
    Environment,
    ExecutionContext,
)

__version__ = "0.1.0"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',

    # Lexer
    'Lexer',
    'tokenize',

    # Parser
    'Parser',
    'ParseResult',
    'parse',

    # AST
    'AstNode',
    'AstVisitor',
    'Expression',
    'Literal',
    'Variable',
    'Assign',
    'Unary',
    'Binary',
    'Logical',
    'Grouping',
    'Call',
    'Statement',
    'ExpressionStatement',
    'PrintStatement',
    'VarStatement',
    'Block',
    'IfStatement',
    'WhileStatement',
    'FunctionStatement',
    'ReturnStatement',
    'print_ast',

    # Errors
    'LoxError',
    'LexerError',
    'ParserError',
    'LoxRuntimeError',
    'UndefinedVariableError',
    'RuntimeTypeError',
    'ArityError',
    'Diagnostic',
    'DiagnosticCollector',
    'ErrorSeverity',

    # Runtime
    'Interpreter',
    'ExecutionResult',
    'run_source',
    'Value',
    'Environment',
    'ExecutionContext',
]
