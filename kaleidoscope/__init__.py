"""
Kaleidoscope Compiler Package

Front end for the Kaleidoscope toy language: a lazy lexer, a recursive
descent / precedence climbing parser, and a codegen that lowers the AST to
LLVM IR through llvmlite.

Architecture:
    kaleidoscope/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax analysis and AST generation
    ├── codegen/         # AST -> IR lowering
    ├── backend/         # llvmlite IR construction session
    └── cli.py           # ready> loop and file driver

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__email__ = "xwest@users.noreply.github.com"
__license__ = "MIT"

from .lexer import Lexer
from .parser import Parser
from .backend import LLVMBackend
from .codegen import Codegen

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "LLVMBackend",
    "Codegen",

    # Version info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
]
