"""
Kaleidoscope Lexer Package

Lazy tokenizer for Kaleidoscope source text. Skips whitespace and '#'
comments, recognises the 'def' and 'extern' keywords, identifiers,
floating-point numbers and single-character operators.

Author: xwest
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "LexerError",
    "tokenize_string",
]
