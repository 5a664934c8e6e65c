"""
Lexer for treelox.

Converts source text into a list of tokens for the parser.
Supports:
- Single-line comments (//)
- Block comments (/* */), nested
- String literals, which may span lines
- Number literals (always 64-bit floats)
- All keywords and operators

Scan errors do not stop scanning: each one is recorded and the lexer moves
on to the next character, so a single run reports every bad character.
"""

from typing import List, Optional, Iterator
from .tokens import Token, TokenType, SourceLocation, SourceSpan, KEYWORDS
from .errors import (
    LexerError,
    error_unexpected_character,
    error_unterminated_string,
    error_unterminated_comment,
)


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
}

# char -> (type without '=', type with '=')
EQUAL_SUFFIX_TOKENS = {
    '!': (TokenType.BANG, TokenType.BANG_EQUAL),
    '=': (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    '<': (TokenType.LESS, TokenType.LESS_EQUAL),
    '>': (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def _is_digit(ch: str) -> bool:
    """ASCII digits only; str.isdigit() also accepts superscripts."""
    return '0' <= ch <= '9'


class Lexer:
    """
    Tokenizer for treelox source.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        if lexer.errors:
            ...

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)
        self._lines: Optional[List[str]] = None  # Cached line list
        self.errors: List[LexerError] = []

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if not self._is_at_end() and self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_at_end(self) -> bool:
        """Check if we've reached end of source."""
        return self.pos >= len(self.source)

    def _skip_comment(self) -> None:
        """Skip a single-line comment (// to end of line)."""
        while self._peek() != '\n' and not self._is_at_end():
            self._advance()

    def _skip_block_comment(self, start: SourceLocation) -> None:
        """Skip the rest of a /* ... */ comment; the opener is consumed."""
        depth = 1

        while not self._is_at_end() and depth > 0:
            if self._peek() == '/' and self._peek(1) == '*':
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == '*' and self._peek(1) == '/':
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()

        if depth > 0:
            self.errors.append(error_unterminated_comment(
                self._span(start),
                self.get_source_line(start.line)
            ))

    def _make_token(self, token_type: TokenType, literal, start: SourceLocation) -> Token:
        """Create a token whose lexeme is the source text since start."""
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, lexeme, literal, self._span(start))

    def _scan_string(self, start: SourceLocation) -> Optional[Token]:
        """Scan a string literal; the opening quote is consumed."""
        while not self._is_at_end() and self._peek() != '"':
            self._advance()

        if self._is_at_end():
            self.errors.append(error_unterminated_string(
                self._span(start),
                self.get_source_line(start.line)
            ))
            return None

        self._advance()  # consume closing quote
        value = self.source[start.offset + 1:self.pos - 1]
        return self._make_token(TokenType.STRING, value, start)

    def _scan_number(self, start: SourceLocation) -> Token:
        """Scan a number literal; the first digit is consumed."""
        while _is_digit(self._peek()):
            self._advance()

        # Fractional part needs a digit after the '.'
        if self._peek() == '.' and _is_digit(self._peek(1)):
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.NUMBER, float(lexeme), start)

    def _scan_identifier(self, start: SourceLocation) -> Token:
        """Scan an identifier or keyword; the first character is consumed."""
        while self._peek().isalnum() or self._peek() == '_':
            self._advance()

        text = self.source[start.offset:self.pos]
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return self._make_token(token_type, None, start)

    def _scan_token(self) -> Optional[Token]:
        """Scan one token. Returns None for whitespace, comments and errors."""
        start = self._location()
        ch = self._advance()

        if ch in ' \r\t\n':
            return None

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch], None, start)

        if ch in EQUAL_SUFFIX_TOKENS:
            plain, with_equal = EQUAL_SUFFIX_TOKENS[ch]
            token_type = with_equal if self._match('=') else plain
            return self._make_token(token_type, None, start)

        if ch == '/':
            if self._match('/'):
                self._skip_comment()
                return None
            if self._match('*'):
                self._skip_block_comment(start)
                return None
            return self._make_token(TokenType.SLASH, None, start)

        if ch == '"':
            return self._scan_string(start)

        if _is_digit(ch):
            return self._scan_number(start)

        if ch.isalpha() or ch == '_':
            return self._scan_identifier(start)

        self.errors.append(error_unexpected_character(
            ch, self._span(start), self.get_source_line(start.line)
        ))
        return None

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens, ending with EOF."""
        while not self._is_at_end():
            token = self._scan_token()
            if token is not None:
                yield token

        yield self._make_token(TokenType.EOF, None, self._location())

    def tokenize(self) -> List[Token]:
        """Scan the whole source. Errors are collected in self.errors."""
        return list(self)


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        filename: Optional filename for error messages

    Returns:
        List of tokens, ending with EOF

    Raises:
        LexerError: The first scan error, if any occurred
    """
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()
    if lexer.errors:
        raise lexer.errors[0]
    return tokens
