"""
Test suite for the Kaleidoscope lexer.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.lexer import Lexer, LexerError, TokenType, tokenize_string


def token_types(source):
    return [token.type for token in tokenize_string(source)]


class TestLexer(unittest.TestCase):
    """Test cases for tokenization."""

    def test_definition_tokens(self):
        self.assertEqual(
            token_types("def foo(x y) x + y"),
            [TokenType.DEF, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
             TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.RIGHT_PAREN,
             TokenType.IDENTIFIER, TokenType.PLUS, TokenType.IDENTIFIER,
             TokenType.EOF]
        )

    def test_all_operators_and_punctuation(self):
        self.assertEqual(
            token_types("< + - * ( ) , ;"),
            [TokenType.LESS_THAN, TokenType.PLUS, TokenType.MINUS, TokenType.STAR,
             TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.COMMA,
             TokenType.SEMICOLON, TokenType.EOF]
        )

    def test_keywords_only_match_exactly(self):
        tokens = tokenize_string("extern define def1 def")
        self.assertEqual(tokens[0].type, TokenType.EXTERN)
        self.assertEqual(tokens[1].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[1].value, "define")
        self.assertEqual(tokens[2].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[2].value, "def1")
        self.assertEqual(tokens[3].type, TokenType.DEF)
        self.assertIsNone(tokens[3].value)

    def test_numbers_are_floats(self):
        tokens = tokenize_string("42 3.25 .5 1.")
        values = [token.value for token in tokens if token.type == TokenType.NUMBER]
        self.assertEqual(values, [42.0, 3.25, 0.5, 1.0])
        self.assertTrue(all(isinstance(v, float) for v in values))

    def test_identifier_stops_at_non_alphanumeric(self):
        tokens = tokenize_string("ab12c(")
        self.assertEqual(tokens[0].value, "ab12c")
        self.assertEqual(tokens[1].type, TokenType.LEFT_PAREN)

    def test_comments_and_whitespace_skipped(self):
        source = "# a comment with def and 1.2.3\n  \t 7 # trailing\n"
        tokens = tokenize_string(source)
        self.assertEqual([t.type for t in tokens], [TokenType.NUMBER, TokenType.EOF])
        self.assertEqual(tokens[0].value, 7.0)

    def test_empty_input_is_single_eof(self):
        self.assertEqual(token_types(""), [TokenType.EOF])
        self.assertEqual(token_types("   # only a comment"), [TokenType.EOF])

    def test_exactly_one_eof(self):
        tokens = tokenize_string("1 + 2")
        self.assertEqual([t.type for t in tokens].count(TokenType.EOF), 1)
        self.assertEqual(tokens[-1].type, TokenType.EOF)

    def test_malformed_number(self):
        with self.assertRaises(LexerError) as cm:
            tokenize_string("1.2.3")
        self.assertEqual(cm.exception.code, "L003")
        self.assertIn("1.2.3", str(cm.exception))

    def test_lone_dot_is_malformed_number(self):
        with self.assertRaises(LexerError) as cm:
            tokenize_string("1 + .")
        self.assertEqual(cm.exception.code, "L003")

    def test_unexpected_character(self):
        with self.assertRaises(LexerError) as cm:
            tokenize_string("4 / 2")
        self.assertEqual(cm.exception.code, "L001")
        self.assertEqual(cm.exception.location.column, 3)

    def test_tokens_are_produced_lazily(self):
        tokens = iter(Lexer("x $"))
        first = next(tokens)
        self.assertEqual(first.type, TokenType.IDENTIFIER)
        with self.assertRaises(LexerError):
            next(tokens)

    def test_iteration_restarts(self):
        lexer = Lexer("def f(a) a")
        self.assertEqual(list(lexer), list(lexer))

    def test_source_locations(self):
        tokens = tokenize_string("a\n  bb", filename="demo.k")
        self.assertEqual((tokens[0].location.line, tokens[0].location.column), (1, 1))
        self.assertEqual((tokens[1].location.line, tokens[1].location.column), (2, 3))
        self.assertEqual(str(tokens[1].location), "demo.k:2:3")


if __name__ == "__main__":
    unittest.main()
