"""
Token definitions for the Kaleidoscope lexer.

The language is tiny: two keywords, four binary operators, a handful of
punctuation marks, identifiers and numbers. Every number is a double.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """Enumeration of all token types in Kaleidoscope."""

    # Special
    EOF = auto()                    # End of input (emitted exactly once)

    # Keywords
    DEF = auto()                    # def
    EXTERN = auto()                 # extern

    # Operators
    LESS_THAN = auto()              # <
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    STAR = auto()                   # *

    # Punctuation
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ;

    # Values
    IDENTIFIER = auto()             # foo, x1
    NUMBER = auto()                 # 1, 2.5, .5


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting only; the parser never looks at it.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    `value` holds the identifier name for IDENTIFIER tokens and the parsed
    float for NUMBER tokens; it is None for everything else.
    """
    type: TokenType
    lexeme: str
    value: Any
    location: SourceLocation

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")


KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}

# Single-character operators and punctuation
OPERATORS = {
    "<": TokenType.LESS_THAN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}

COMMENT_CHAR = "#"
