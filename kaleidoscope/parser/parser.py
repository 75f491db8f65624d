"""
Kaleidoscope Recursive Descent Parser

Recursive descent for the top-level forms plus operator-precedence climbing
for binary expressions. Tokens are pulled one at a time from any iterable,
with a single token of look-ahead, so a lazy Lexer can be fed straight in.

Author: xwest
"""

import logging
from typing import Iterable, Iterator, List, Optional, Dict
from enum import IntEnum

from ..lexer.tokens import Token, TokenType, SourceLocation
from .ast_nodes import (
    SourceSpan, Expression, NullExpr, NumberExpr, VariableExpr, BinaryExpr,
    CallExpr, Prototype, FunctionDef, Program, TopLevelNode,
)
from .errors import (
    ParseError, create_unexpected_token_error, create_invalid_expression_error,
    create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    """Binary operator precedence levels (higher binds tighter)."""
    LESS_THAN = 10      # <
    ADDITION = 20       # +
    SUBTRACTION = 30    # -
    MULTIPLICATION = 40 # *


class Parser:
    """
    Kaleidoscope parser.

    Call `parse_top_level()` repeatedly until it returns None, or `parse()`
    to collect every form into a Program. Any syntax error raises ParseError
    and leaves the parser positioned somewhere inside the failed form.
    """

    def __init__(self, tokens: Iterable[Token]):
        """
        Initialize parser with a token stream.

        Args:
            tokens: Tokens from the lexer; an EOF token is synthesised if the
                iterable runs out without one
        """
        self._tokens: Iterator[Token] = iter(tokens)
        self._current: Optional[Token] = None
        self._previous: Optional[Token] = None

        self.precedences: Dict[TokenType, Precedence] = {
            TokenType.LESS_THAN: Precedence.LESS_THAN,
            TokenType.PLUS: Precedence.ADDITION,
            TokenType.MINUS: Precedence.SUBTRACTION,
            TokenType.STAR: Precedence.MULTIPLICATION,
        }

    def parse(self) -> Program:
        """
        Parse every top-level form up to the end of input.

        Raises:
            ParseError: On the first malformed form
        """
        start = self._peek().location
        items: List[TopLevelNode] = []

        while True:
            item = self.parse_top_level()
            if item is None:
                break
            items.append(item)

        return Program(items, SourceSpan(start, self._peek().location))

    def parse_top_level(self) -> Optional[TopLevelNode]:
        """
        Parse the next top-level form.

        Returns:
            A FunctionDef (named definition or anonymous expression wrapper),
            a Prototype for an 'extern', or None when the input is exhausted
        """
        # ';' separates forms; one with nothing after it ends the input
        while self._check(TokenType.SEMICOLON):
            self._advance()

        token = self._peek()

        if token.type == TokenType.EOF:
            return None

        try:
            if token.type == TokenType.DEF:
                node = self._parse_definition()
            elif token.type == TokenType.EXTERN:
                node = self._parse_extern()
            else:
                node = self._parse_top_level_expression()
        except RecursionError:
            raise create_nesting_too_deep_error(token.location) from None

        logger.debug("parsed top-level %s at %s", node.node_type.value, token.location)
        return node

    def _parse_definition(self) -> FunctionDef:
        """def <prototype> <expression>"""
        start_token = self._consume(TokenType.DEF)
        prototype = self.parse_prototype()
        body = self.parse_expression()

        return FunctionDef(prototype, body, self._span_from(start_token.location))

    def _parse_extern(self) -> Prototype:
        """extern <prototype>"""
        start_token = self._consume(TokenType.EXTERN)
        prototype = self.parse_prototype()
        prototype.span = self._span_from(start_token.location)
        return prototype

    def _parse_top_level_expression(self) -> FunctionDef:
        """Wrap a bare expression in a nameless, parameterless function."""
        start = self._peek().location
        body = self.parse_expression()
        span = self._span_from(start)

        return FunctionDef(Prototype("", [], span), body, span)

    def parse_prototype(self) -> Prototype:
        """
        Parse a function signature: name '(' param* ')'.

        Parameter names follow each other with no separator.
        """
        name_token = self._consume(TokenType.IDENTIFIER)
        self._consume(TokenType.LEFT_PAREN)

        params = []
        while self._check(TokenType.IDENTIFIER):
            params.append(self._advance().value)

        self._consume(TokenType.RIGHT_PAREN)

        return Prototype(name_token.value, params, self._span_from(name_token.location))

    def parse_expression(self) -> Expression:
        """Parse a primary followed by any chain of binary operators."""
        lhs = self._parse_primary()
        return self._parse_bin_op_rhs(0, lhs)

    def _parse_bin_op_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing.

        Folds operators into `lhs` while they bind at least as tightly as
        `min_precedence`. When the operator after a right operand binds
        tighter than the one just consumed, that operand first absorbs the
        tighter chain, using the consumed operator's precedence as its floor.
        """
        while True:
            token_precedence = self._get_precedence(self._peek().type)
            if token_precedence is None or token_precedence < min_precedence:
                return lhs

            operator_token = self._advance()
            rhs = self._parse_primary()

            next_precedence = self._get_precedence(self._peek().type)
            if next_precedence is not None and token_precedence < next_precedence:
                rhs = self._parse_bin_op_rhs(token_precedence, rhs)

            span = SourceSpan(lhs.span.start, rhs.span.end) if lhs.span and rhs.span else None
            lhs = BinaryExpr(operator_token.lexeme, lhs, rhs, span)

    def _get_precedence(self, token_type: TokenType) -> Optional[Precedence]:
        """Precedence of a binary operator token, None for anything else."""
        return self.precedences.get(token_type)

    # Primary expressions

    def _parse_primary(self) -> Expression:
        token = self._peek()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier_expr()
        if token.type == TokenType.NUMBER:
            return self._parse_number_expr()
        if token.type == TokenType.LEFT_PAREN:
            return self._parse_paren_expr()

        if token.type == TokenType.EOF:
            raise create_unexpected_token_error("expression", token)
        raise create_invalid_expression_error(
            f"Unexpected token '{token.lexeme}' in expression",
            token.location,
            token
        )

    def _parse_number_expr(self) -> NumberExpr:
        token = self._consume(TokenType.NUMBER)
        return NumberExpr(token.value, SourceSpan(token.location, token.location))

    def _parse_paren_expr(self) -> Expression:
        """'(' expression ')', or '()' for the empty expression."""
        start_token = self._consume(TokenType.LEFT_PAREN)

        if self._check(TokenType.RIGHT_PAREN):
            self._advance()
            return NullExpr(self._span_from(start_token.location))

        expr = self.parse_expression()
        self._consume(TokenType.RIGHT_PAREN)

        return expr

    def _parse_identifier_expr(self) -> Expression:
        """A variable reference, or a call when '(' follows the name."""
        name_token = self._consume(TokenType.IDENTIFIER)
        name = name_token.value

        if not self._check(TokenType.LEFT_PAREN):
            return VariableExpr(name, SourceSpan(name_token.location, name_token.location))

        self._advance()  # Consume (

        args = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                args.append(self.parse_expression())

                if self._check(TokenType.RIGHT_PAREN):
                    break
                if not self._check(TokenType.COMMA):
                    raise create_unexpected_token_error("',' or ')' in argument list", self._peek())

                self._advance()  # Consume ,

        self._consume(TokenType.RIGHT_PAREN)

        return CallExpr(name, args, self._span_from(name_token.location))

    # Utility methods

    def _peek(self) -> Token:
        """Return current token without consuming."""
        if self._current is None:
            token = next(self._tokens, None)
            if token is None:
                location = self._previous.location if self._previous else SourceLocation("<eof>", 0, 0, 0)
                token = Token(TokenType.EOF, "", None, location)
            self._current = token
        return self._current

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        return self._peek().type == token_type

    def _advance(self) -> Token:
        """Consume and return the current token. EOF is never consumed."""
        token = self._peek()
        if token.type != TokenType.EOF:
            self._current = None
        self._previous = token
        return token

    def _consume(self, token_type: TokenType) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()

        raise create_unexpected_token_error(token_type, self._peek())

    def _span_from(self, start: SourceLocation) -> SourceSpan:
        end = self._previous.location if self._previous else start
        return SourceSpan(start, end)


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to parse a source string.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
    """
    from ..lexer import Lexer

    return Parser(Lexer(source, filename)).parse()


def parse_file(filepath: str) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
