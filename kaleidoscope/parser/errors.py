"""
Error handling for the Kaleidoscope parser.

There is no error recovery: the first ParseError abandons the current
top-level form and is handed to the caller untouched.

Author: xwest
"""

from typing import Optional, List, Union

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    def __str__(self) -> str:
        return str(self.diagnostic)


PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P005": "Invalid expression",
    "P010": "Unexpected end of input",
    "P011": "Expression nested too deeply",
}

_TOKEN_DESCRIPTIONS = {
    TokenType.EOF: "end of input",
    TokenType.DEF: "'def'",
    TokenType.EXTERN: "'extern'",
    TokenType.LESS_THAN: "'<'",
    TokenType.PLUS: "'+'",
    TokenType.MINUS: "'-'",
    TokenType.STAR: "'*'",
    TokenType.LEFT_PAREN: "'('",
    TokenType.RIGHT_PAREN: "')'",
    TokenType.COMMA: "','",
    TokenType.SEMICOLON: "';'",
    TokenType.IDENTIFIER: "identifier",
    TokenType.NUMBER: "number",
}

_MISSING_TOKEN_SUGGESTIONS = {
    TokenType.LEFT_PAREN: ["Add an opening parenthesis '(' after the function name"],
    TokenType.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
    TokenType.IDENTIFIER: ["Function names must start with a letter"],
}


def describe_token_type(token_type: TokenType) -> str:
    return _TOKEN_DESCRIPTIONS.get(token_type, token_type.name)


def create_unexpected_token_error(expected: Union[TokenType, str], found: Token) -> ParseError:
    """Create an error for an unexpected token."""
    expected_str = describe_token_type(expected) if isinstance(expected, TokenType) else expected
    found_str = describe_token_type(found.type)
    if found.type in (TokenType.IDENTIFIER, TokenType.NUMBER):
        found_str = f"{found_str} '{found.lexeme}'"

    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(expected_str, found.location)

    suggestions = _MISSING_TOKEN_SUGGESTIONS.get(expected, []) if isinstance(expected, TokenType) else []

    return ParseError(
        message=f"Expected {expected_str}, found {found_str}",
        location=found.location,
        token=found,
        code="P001",
        help_text=f"The parser expected to see {expected_str} at this position, but found {found_str} instead.",
        suggestions=suggestions
    )


def create_invalid_expression_error(reason: str, location: SourceLocation,
                                    token: Optional[Token] = None) -> ParseError:
    """Create an error for an invalid expression."""
    return ParseError(
        message=f"Invalid expression: {reason}",
        location=location,
        token=token,
        code="P005",
        help_text=reason,
        suggestions=["An expression starts with a number, an identifier or '('"]
    )


def create_unexpected_eof_error(expected: str, location: SourceLocation) -> ParseError:
    """Create an error for unexpected end of input."""
    return ParseError(
        message=f"Unexpected end of input, expected {expected}",
        location=location,
        code="P010",
        help_text=f"The parser reached the end of the input while expecting {expected}.",
        suggestions=[f"Add the missing {expected}"]
    )


def create_nesting_too_deep_error(location: SourceLocation) -> ParseError:
    """Create an error for a form whose nesting exhausts the parser's stack."""
    return ParseError(
        message="Expression nested too deeply",
        location=location,
        code="P011",
        help_text="The form starting here nests parentheses or operators beyond what the parser can follow.",
        suggestions=["Split the expression into smaller functions"]
    )
