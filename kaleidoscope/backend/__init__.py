"""
Kaleidoscope Backend Package.

IR construction on top of llvmlite.

Author: xwest
"""

from .llvm_backend import LLVMBackend, LLVMGenContext, BINARY_OP_KINDS

__all__ = ['LLVMBackend', 'LLVMGenContext', 'BINARY_OP_KINDS']
