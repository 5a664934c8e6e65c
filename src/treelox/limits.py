"""
Host recursion settings shared by the parser and the interpreter.

Both walk the program recursively and spend several Python frames per
nesting level (a parenthesis, a unary operator, a function call), so they
run with a raised recursion limit.
"""

import sys
from contextlib import contextmanager

RECURSION_LIMIT = 30000


@contextmanager
def recursion_limit(limit: int = RECURSION_LIMIT):
    """
    Context manager raising the recursion limit to at least `limit`.

    The previous limit is restored however the body exits.

    Usage:
        with recursion_limit():
            statements = parser.parse()
    """
    previous = sys.getrecursionlimit()
    if limit > previous:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
