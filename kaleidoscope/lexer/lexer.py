"""
Kaleidoscope Lexer - turns source text into tokens

Tokens are produced lazily: iterating a Lexer scans just far enough to
yield the next token, so the parser can fail on a bad form without the
rest of the line ever being looked at.

xwest
"""

from typing import Iterator, List

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, OPERATORS, COMMENT_CHAR
from .errors import create_invalid_character_error, create_invalid_number_error


class Lexer:
    """
    Kaleidoscope lexical analyzer.

    Every `iter()` over a Lexer restarts from the beginning of the source and
    ends with exactly one EOF token.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        self.pos = 0
        self.line = 1
        self.column = 1

        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                break
            yield self._next_token()

        yield Token(TokenType.EOF, "", None, self._location())

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens including the EOF token

        Raises:
            LexerError: On the first invalid character or number
        """
        return list(self)

    def _next_token(self) -> Token:
        """Scan one token starting at the current position."""
        location = self._location()
        current_char = self.source[self.pos]

        if current_char.isalpha():
            return self._tokenize_identifier_or_keyword(location)

        if current_char.isdigit() or current_char == '.':
            return self._tokenize_number(location)

        token_type = OPERATORS.get(current_char)
        if token_type is None:
            raise create_invalid_character_error(current_char, location)

        self._advance()
        return Token(token_type, current_char, None, location)

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        start_pos = self.pos
        while self.pos < len(self.source) and self.source[self.pos].isalnum():
            self._advance()

        lexeme = self.source[start_pos:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None

        return Token(token_type, lexeme, value, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        """Tokenize a run of digits and dots as a float literal."""
        start_pos = self.pos
        while self.pos < len(self.source) and (self.source[self.pos].isdigit() or
                                               self.source[self.pos] == '.'):
            self._advance()

        lexeme = self.source[start_pos:self.pos]
        try:
            value = float(lexeme)
        except ValueError:
            raise create_invalid_number_error(
                lexeme, location, "Cannot parse floating-point number"
            ) from None

        return Token(TokenType.NUMBER, lexeme, value, location)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and '#' comments running to end of line."""
        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char.isspace():
                self._advance()
                continue

            if char == COMMENT_CHAR:
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            break

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename).tokenize()
