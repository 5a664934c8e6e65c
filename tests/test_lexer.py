"""
Unit tests for the treelox lexer.
"""

import pytest
from treelox import tokenize, Lexer, TokenType, LexerError


def types_of(source):
    return [t.type for t in tokenize(source)]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        tokens = tokenize("  \t\r\n  ")
        assert [t.type for t in tokens] == [TokenType.EOF]

    def test_var_statement(self):
        """Basic var statement tokenization."""
        assert types_of("var x = 42;") == [
            TokenType.VAR,
            TokenType.IDENTIFIER,
            TokenType.EQUAL,
            TokenType.NUMBER,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_identifier_lexeme(self):
        tokens = tokenize("foo_bar123 _tmp")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].lexeme == "foo_bar123"
        assert tokens[1].lexeme == "_tmp"
        assert tokens[0].literal is None

    def test_position_tracking(self):
        """Token positions are tracked correctly."""
        tokens = tokenize("var x = 5;")
        assert tokens[0].span.start.line == 1
        assert tokens[0].span.start.column == 1
        # 'x' starts at column 5
        assert tokens[1].span.start.column == 5

    def test_multiline_position_tracking(self):
        tokens = tokenize("var x = 5;\nvar y = 10;\n\nprint y;")
        lines = [t.line for t in tokens if t.type in (TokenType.VAR, TokenType.PRINT)]
        assert lines == [1, 2, 4]

    def test_iterating_lexer(self):
        """The lexer can be consumed lazily."""
        tokens = list(Lexer("1 + 2"))
        assert [t.type for t in tokens] == [
            TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.EOF,
        ]


class TestOperators:
    """Test punctuation and operator tokens."""

    def test_single_character_tokens(self):
        assert types_of("(){},.-+;*/") == [
            TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
            TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
            TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
            TokenType.SEMICOLON, TokenType.STAR, TokenType.SLASH,
            TokenType.EOF,
        ]

    def test_one_or_two_character_tokens(self):
        assert types_of("! != = == < <= > >=") == [
            TokenType.BANG, TokenType.BANG_EQUAL,
            TokenType.EQUAL, TokenType.EQUAL_EQUAL,
            TokenType.LESS, TokenType.LESS_EQUAL,
            TokenType.GREATER, TokenType.GREATER_EQUAL,
            TokenType.EOF,
        ]

    def test_longest_match(self):
        """'===' is '==' followed by '='."""
        assert types_of("===") == [TokenType.EQUAL_EQUAL, TokenType.EQUAL, TokenType.EOF]


class TestLiterals:
    """Test number and string literals."""

    def test_integer_is_float(self):
        token = tokenize("123")[0]
        assert token.type == TokenType.NUMBER
        assert token.literal == 123.0
        assert isinstance(token.literal, float)

    def test_decimal_number(self):
        token = tokenize("12.5")[0]
        assert token.literal == 12.5
        assert token.lexeme == "12.5"

    def test_trailing_dot_is_not_fraction(self):
        """A '.' must be followed by a digit to belong to the number."""
        tokens = tokenize("12.")
        assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]
        assert tokens[0].literal == 12.0

    def test_leading_dot_is_not_number(self):
        assert types_of(".5") == [TokenType.DOT, TokenType.NUMBER, TokenType.EOF]

    def test_string_literal(self):
        """Lexeme keeps the quotes, literal does not."""
        token = tokenize('"hello world"')[0]
        assert token.type == TokenType.STRING
        assert token.lexeme == '"hello world"'
        assert token.literal == "hello world"

    def test_empty_string(self):
        assert tokenize('""')[0].literal == ""

    def test_multiline_string(self):
        tokens = tokenize('"one\ntwo" x')
        assert tokens[0].literal == "one\ntwo"
        assert tokens[1].lexeme == "x"
        assert tokens[1].line == 2


class TestKeywords:
    """Test keyword recognition."""

    @pytest.mark.parametrize("word,token_type", [
        ("and", TokenType.AND),
        ("else", TokenType.ELSE),
        ("false", TokenType.FALSE),
        ("for", TokenType.FOR),
        ("fun", TokenType.FUN),
        ("if", TokenType.IF),
        ("nil", TokenType.NIL),
        ("or", TokenType.OR),
        ("print", TokenType.PRINT),
        ("return", TokenType.RETURN),
        ("true", TokenType.TRUE),
        ("var", TokenType.VAR),
        ("while", TokenType.WHILE),
        ("class", TokenType.CLASS),
    ])
    def test_keyword(self, word, token_type):
        assert tokenize(word)[0].type == token_type

    def test_keyword_prefix_is_identifier(self):
        tokens = tokenize("orchid variable")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[1].type == TokenType.IDENTIFIER


class TestComments:
    """Test comment handling."""

    def test_line_comment(self):
        assert types_of("1 // comment\n2") == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]

    def test_comment_at_end(self):
        assert types_of("print 1; // trailing") == [
            TokenType.PRINT, TokenType.NUMBER, TokenType.SEMICOLON, TokenType.EOF,
        ]

    def test_block_comment(self):
        tokens = tokenize("1 /* skip\nthis */ 2")
        assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]
        assert tokens[1].line == 2

    def test_nested_block_comment(self):
        assert types_of("/* a /* b */ c */ 3") == [TokenType.NUMBER, TokenType.EOF]


class TestLexerErrors:
    """Test scan error collection."""

    def test_unexpected_character_raises_from_tokenize(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("var x = @;")
        assert exc_info.value.message == "Unexpected character '@'."
        assert exc_info.value.diagnostic.code == "E001"

    def test_scanning_continues_after_error(self):
        """Every bad character is reported and good tokens are kept."""
        lexer = Lexer("@ 1 #\n2")
        tokens = lexer.tokenize()
        assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]
        assert len(lexer.errors) == 2
        assert [e.line for e in lexer.errors] == [1, 1]

    def test_unterminated_string(self):
        lexer = Lexer('print "oops')
        tokens = lexer.tokenize()
        assert [t.type for t in tokens] == [TokenType.PRINT, TokenType.EOF]
        assert len(lexer.errors) == 1
        assert lexer.errors[0].message == "Unterminated string."
        assert lexer.errors[0].diagnostic.code == "E002"

    def test_unterminated_block_comment(self):
        lexer = Lexer("1 /* never closed")
        lexer.tokenize()
        assert len(lexer.errors) == 1
        assert lexer.errors[0].diagnostic.code == "E003"

    def test_error_carries_source_line(self):
        lexer = Lexer("ok;\nbad $ here;")
        lexer.tokenize()
        diag = lexer.errors[0].diagnostic
        assert diag.line == 2
        assert diag.source_line == "bad $ here;"
        assert diag.span.start.column == 5
