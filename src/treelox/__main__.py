#!/usr/bin/env python3
"""
CLI for the treelox interpreter.

Usage:
    treelox run FILE [--config PATH] [--no-source]
    treelox check FILE
    treelox ast FILE
    treelox repl
    treelox                      # same as 'treelox repl'

Examples:
    # Run a script
    treelox run examples/fib.lox

    # Report every syntax error without running anything
    treelox check examples/fib.lox

    # Show the parsed statements
    treelox ast examples/fib.lox

Exit status follows sysexits: 65 for scan or parse errors, 70 for a
runtime error, 66 when the input file cannot be read.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_DATAERR = 65
EXIT_NOINPUT = 66
EXIT_SOFTWARE = 70


def report_errors(errors, source: str, settings, stream=None) -> None:
    """Print diagnostics for errors, with source lines when enabled."""
    from .errors import DiagnosticCollector

    collector = DiagnosticCollector(max_errors=settings.max_errors, source=source)
    for error in errors:
        collector.add_error(error)
    print(collector.format_all(show_source=settings.show_source), file=stream or sys.stderr)


def read_source(path: Path) -> Optional[str]:
    """Read a source file, printing an error and returning None on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {path}: {e}", file=sys.stderr)
        return None


def scan_and_parse(source: str, filename: Optional[str] = None):
    """Scan and parse source, returning (statements, errors)."""
    from .lexer import Lexer
    from .parser import parse

    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()
    result = parse(tokens)
    return result.statements, [*lexer.errors, *result.errors]


def cmd_run(args, settings) -> int:
    """Run a script file."""
    from . import Interpreter, print_ast

    source_path = Path(args.file)
    source = read_source(source_path)
    if source is None:
        return EXIT_NOINPUT

    statements, errors = scan_and_parse(source, str(source_path))
    if errors:
        report_errors(errors, source, settings)
        return EXIT_DATAERR

    if settings.dump_ast:
        for stmt in statements:
            print_ast(stmt)

    result = Interpreter().interpret(statements)
    if not result.success:
        report_errors([result.error], source, settings)
        return EXIT_SOFTWARE
    return EXIT_OK


def cmd_check(args, settings) -> int:
    """Check a script for scan and parse errors."""
    source_path = Path(args.file)
    source = read_source(source_path)
    if source is None:
        return EXIT_NOINPUT

    statements, errors = scan_and_parse(source, str(source_path))
    if errors:
        report_errors(errors, source, settings)
        return EXIT_DATAERR

    print(f"OK: {source_path.name} - {len(statements)} statement(s), no errors")
    return EXIT_OK


def cmd_ast(args, settings) -> int:
    """Print the parsed statements of a script."""
    from . import print_ast

    source_path = Path(args.file)
    source = read_source(source_path)
    if source is None:
        return EXIT_NOINPUT

    statements, errors = scan_and_parse(source, str(source_path))
    if errors:
        report_errors(errors, source, settings)
        return EXIT_DATAERR

    for stmt in statements:
        print_ast(stmt)
    return EXIT_OK


def cmd_repl(args, settings) -> int:
    """Read-eval-print loop. Globals persist from one line to the next."""
    from . import Interpreter, print_ast

    interpreter = Interpreter()
    while True:
        try:
            line = input(settings.prompt)
        except EOFError:
            print()
            return EXIT_OK
        except KeyboardInterrupt:
            print("\nKeyboardInterrupt", file=sys.stderr)
            continue

        if not line.strip():
            continue

        statements, errors = scan_and_parse(line)
        if errors:
            report_errors(errors, line, settings)
            continue

        if settings.dump_ast:
            for stmt in statements:
                print_ast(stmt)

        try:
            result = interpreter.interpret(statements)
        except KeyboardInterrupt:
            print("\nKeyboardInterrupt", file=sys.stderr)
            continue
        if not result.success:
            report_errors([result.error], line, settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='treelox',
        description='Tree-walking interpreter for a small Lox-like language',
    )
    parser.add_argument('--config', metavar='PATH',
                        help='Settings file (YAML); overrides TREELOX_CONFIG')
    parser.add_argument('--no-source', action='store_true',
                        help='Do not echo source lines in diagnostics')

    subparsers = parser.add_subparsers(dest='action')

    # run command
    run_parser = subparsers.add_parser('run', help='Run a script')
    run_parser.add_argument('file', help='Source file')

    # check command
    check_parser = subparsers.add_parser('check', help='Check a script for syntax errors')
    check_parser.add_argument('file', help='Source file')

    # ast command
    ast_parser = subparsers.add_parser('ast', help='Print the parsed statements')
    ast_parser.add_argument('file', help='Source file')

    # repl command
    subparsers.add_parser('repl', help='Start an interactive session')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    from dataclasses import replace
    from .config import load_settings

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.no_source:
        settings = replace(settings, show_source=False)

    if args.action == 'run':
        return cmd_run(args, settings)
    elif args.action == 'check':
        return cmd_check(args, settings)
    elif args.action == 'ast':
        return cmd_ast(args, settings)
    else:
        return cmd_repl(args, settings)


if __name__ == '__main__':
    sys.exit(main())
