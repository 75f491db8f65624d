"""
LLVM Backend for Kaleidoscope.

A thin session over llvmlite's IR builder. It owns one context, one module
and one instruction builder for the lifetime of a compilation session and
exposes the handful of operations the codegen needs: constants, arithmetic,
calls, function declaration and body attachment, and textual rendering.

Every value is a double.

Author: xwest
"""

import logging
from typing import List, Optional, Sequence
from dataclasses import dataclass

import llvmlite.binding as llvm
import llvmlite.ir as ll

logger = logging.getLogger(__name__)

MODULE_NAME = "my cool jit"
ANONYMOUS_FUNCTION_NAME = "__anon_expr"

DOUBLE = ll.DoubleType()

# Binary operation kinds understood by LLVMBackend.binary_op
BINARY_OP_KINDS = ("add", "sub", "mul", "cmp_lt")


@dataclass
class LLVMGenContext:
    """The per-session llvmlite handles."""
    context: Optional['ll.Context'] = None
    module: Optional['ll.Module'] = None
    builder: Optional['ll.IRBuilder'] = None
    current_function: Optional['ll.Function'] = None


class LLVMBackend:
    """
    IR construction service backed by llvmlite.

    One instance is one compilation session. Functions declared through it
    stay visible to later lookups until `reset()` starts a fresh module.
    """

    def __init__(self, module_name: str = MODULE_NAME):
        """
        Initialize the backend with an empty module.

        Args:
            module_name: Name given to the LLVM module
        """
        self.module_name = module_name
        self.ctx = LLVMGenContext()
        self.reset()

    def reset(self):
        """Tear down the current module and start a new, empty one."""
        context = ll.Context()
        self.ctx = LLVMGenContext(
            context=context,
            module=ll.Module(name=self.module_name, context=context),
            builder=ll.IRBuilder(),
        )
        logger.debug("started module %r", self.module_name)

    @property
    def context(self) -> 'll.Context':
        return self.ctx.context

    @property
    def module(self) -> 'll.Module':
        return self.ctx.module

    @property
    def builder(self) -> 'll.IRBuilder':
        return self.ctx.builder

    # Values

    def constant(self, value: float) -> 'll.Constant':
        """A double constant."""
        return ll.Constant(DOUBLE, float(value))

    def binary_op(self, kind: str, lhs: 'll.Value', rhs: 'll.Value', name: str = "") -> 'll.Value':
        """
        Emit a binary operation at the builder's position.

        Args:
            kind: One of "add", "sub", "mul", "cmp_lt"
            lhs: Left operand
            rhs: Right operand
            name: Debug name for the result

        The comparison produces an i1, which is widened back to a double
        (0.0 or 1.0) since the language only has one type.
        """
        builder = self.builder

        if kind == "add":
            return builder.fadd(lhs, rhs, name=name or "addtmp")
        elif kind == "sub":
            return builder.fsub(lhs, rhs, name=name or "subtmp")
        elif kind == "mul":
            return builder.fmul(lhs, rhs, name=name or "multmp")
        elif kind == "cmp_lt":
            flag = builder.fcmp_ordered("<", lhs, rhs, name=name or "cmptmp")
            return builder.uitofp(flag, DOUBLE, name="booltmp")

        raise ValueError(f"Unknown binary operation kind: {kind!r}")

    def call(self, function: 'll.Function', args: Sequence['ll.Value'], name: str = "calltmp") -> 'll.Value':
        """Emit a call with the arguments in the given order."""
        return self.builder.call(function, list(args), name=name)

    def set_return(self, value: 'll.Value'):
        """Terminate the current function body by returning `value`."""
        self.builder.ret(value)

    # Functions

    def lookup_function(self, name: str) -> Optional['ll.Function']:
        """Return the function already declared under `name`, if any."""
        if not name:
            return None
        value = self.module.globals.get(name)
        return value if isinstance(value, ll.Function) else None

    def declare_function(self, name: str, params: Sequence[str]) -> 'll.Function':
        """
        Declare `name(params...)` in the module, or reuse an existing
        declaration of the same name.

        A reused function that has no body yet has its arguments renamed to
        `params`; one that already has a body keeps its names. Callers are
        responsible for checking that the parameter counts agree. An empty
        name gets a fresh `__anon_expr` symbol on every call.
        """
        if name:
            existing = self.lookup_function(name)
            if existing is not None:
                self._name_arguments(existing, params)
                logger.debug("reusing declaration of %s", name)
                return existing
            symbol = name
        else:
            symbol = self.module.get_unique_name(ANONYMOUS_FUNCTION_NAME)

        function_type = ll.FunctionType(DOUBLE, [DOUBLE] * len(params))
        function = ll.Function(self.module, function_type, name=symbol)
        self._name_arguments(function, params)

        logger.debug("declared %s(%s)", symbol, ", ".join(params))
        return function

    def _name_arguments(self, function: 'll.Function', params: Sequence[str]):
        # A defined function keeps the names its body was built with
        if self.has_body(function):
            return
        if [arg.name for arg in function.args] == list(params):
            return

        # llvmlite never releases a registered name, so renaming in place would
        # collide with the old names (a -> a.1). A declaration owns no other
        # names, so its argument names can be rebuilt in an empty scope.
        function.scope = type(function.scope)()
        for arg, param in zip(function.args, params):
            arg.name = param

    def attach_body(self, function: 'll.Function'):
        """Give `function` an entry block and point the builder at it."""
        block = function.append_basic_block(name="entry")
        self.builder.position_at_end(block)
        self.ctx.current_function = function

    def discard_body(self, function: 'll.Function'):
        """Drop every block of `function`, turning it back into a declaration."""
        del function.blocks[:]
        if self.ctx.current_function is function:
            self.ctx.current_function = None
        logger.debug("discarded body of %s", function.name)

    def function_parameters(self, function: 'll.Function') -> List['ll.Argument']:
        """The formal arguments of `function`, in declaration order."""
        return list(function.args)

    @staticmethod
    def has_body(function: 'll.Function') -> bool:
        return not function.is_declaration

    # Output

    def render_value(self, value: 'll.Value') -> str:
        return str(value)

    def render_function(self, function: 'll.Function') -> str:
        return str(function)

    def render_module(self) -> str:
        return str(self.module)

    def verify(self) -> 'llvm.ModuleRef':
        """
        Parse the textual module back through LLVM and verify it.

        Raises:
            RuntimeError: If LLVM rejects the module
        """
        llvm_module = llvm.parse_assembly(self.render_module())
        llvm_module.verify()
        return llvm_module
