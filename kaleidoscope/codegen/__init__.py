"""
Kaleidoscope Codegen Package

Lowers parsed top-level forms into LLVM IR: prototypes become declarations,
definitions and bare expressions become functions returning a double.

Author: xwest
"""

from .codegen import Codegen, compile_string
from .errors import CodegenError

__all__ = [
    "Codegen",
    "compile_string",
    "CodegenError",
]
