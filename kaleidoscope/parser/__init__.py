"""
Kaleidoscope Parser Package

Recursive descent parser with operator-precedence climbing for binary
expressions. Produces FunctionDef and Prototype top-level nodes.

Author: xwest
"""

from .ast_nodes import *
from .parser import Parser, Precedence, parse_string, parse_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor", "SourceSpan", "Program",
    "Expression", "NullExpr", "NumberExpr", "VariableExpr", "BinaryExpr",
    "CallExpr", "Prototype", "FunctionDef", "TopLevelNode", "dump",

    # Error handling
    "ParseError",
]
