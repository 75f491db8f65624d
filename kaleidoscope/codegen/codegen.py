"""
Kaleidoscope Code Generator

Lowers AST nodes into llvmlite IR through an LLVMBackend session.

Each top-level form is checked in full before the first instruction is
emitted (unbound names, undeclared callees, arity, redeclaration), so a
rejected form leaves the shared module exactly as it was. Operands are
always lowered left before right, and call arguments in source order.

Author: xwest
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import llvmlite.ir as ll

from ..backend.llvm_backend import LLVMBackend
from ..parser.ast_nodes import (
    ASTNodeType, Expression, BinaryExpr, CallExpr, NumberExpr, VariableExpr,
    NullExpr, Prototype, FunctionDef, TopLevelNode,
)
from .errors import (
    create_unbound_identifier_error, create_undeclared_function_error,
    create_arity_mismatch_error, create_empty_expression_error,
    create_redefinition_error, create_conflicting_declaration_error,
)

logger = logging.getLogger(__name__)


# Source operator -> LLVMBackend.binary_op kind and debug name
BINARY_OPERATORS = {
    "<": ("cmp_lt", "cmptmp"),
    "+": ("add", "addtmp"),
    "-": ("sub", "subtmp"),
    "*": ("mul", "multmp"),
}


class Codegen:
    """
    Lowering engine.

    Holds a reference to the backend session (which it does not own) and the
    name -> value environment of the function currently being lowered.
    """

    def __init__(self, backend: LLVMBackend):
        self.backend = backend
        self.named_values: Dict[str, ll.Value] = {}

        self._lowerers: Dict[ASTNodeType, Callable[[Expression, List[ll.Value]], ll.Value]] = {
            ASTNodeType.NUMBER_EXPR: self._lower_number,
            ASTNodeType.VARIABLE_EXPR: self._lower_variable,
            ASTNodeType.BINARY_EXPR: self._lower_binary,
            ASTNodeType.CALL_EXPR: self._lower_call,
            ASTNodeType.NULL_EXPR: self._lower_null,
        }

    def lower_top_level(self, node: TopLevelNode) -> ll.Function:
        """Lower a definition, anonymous expression or extern."""
        if isinstance(node, FunctionDef):
            return self.lower_function(node)
        return self.lower_prototype(node)

    # Expressions

    def lower_expression(self, node: Expression) -> ll.Value:
        """
        Lower an expression at the builder's current position.

        The tree is walked post-order with an explicit stack, so arbitrarily
        long operator chains lower without recursing. Children are lowered
        left to right before their parent; a callee is resolved before any
        of its arguments.

        Raises:
            CodegenError: For unbound names, unknown callees, wrong argument
                counts and the empty expression
        """
        values: List[ll.Value] = []
        stack: List[Tuple[Expression, bool]] = [(node, False)]

        while stack:
            current, expanded = stack.pop()
            children = current.children()

            if children and not expanded:
                if isinstance(current, CallExpr):
                    self._resolve_callee(current)
                stack.append((current, True))
                stack.extend((child, False) for child in reversed(children))
                continue

            split = len(values) - len(children)
            operands = values[split:]
            del values[split:]
            values.append(self._lowerers[current.node_type](current, operands))

        return values[0]

    def _lower_number(self, node: NumberExpr, operands: List[ll.Value]) -> ll.Value:
        return self.backend.constant(node.value)

    def _lower_variable(self, node: VariableExpr, operands: List[ll.Value]) -> ll.Value:
        value = self.named_values.get(node.name)
        if value is None:
            raise create_unbound_identifier_error(node.name, node, self.named_values)
        return value

    def _lower_binary(self, node: BinaryExpr, operands: List[ll.Value]) -> ll.Value:
        lhs, rhs = operands

        if node.operator not in BINARY_OPERATORS:
            # The parser only builds the four operators above
            raise AssertionError(f"invalid binary operator {node.operator!r}")
        kind, name = BINARY_OPERATORS[node.operator]

        return self.backend.binary_op(kind, lhs, rhs, name)

    def _lower_call(self, node: CallExpr, operands: List[ll.Value]) -> ll.Value:
        function = self._resolve_callee(node)
        return self.backend.call(function, operands, "calltmp")

    def _lower_null(self, node: NullExpr, operands: List[ll.Value]) -> ll.Value:
        raise create_empty_expression_error(node)

    def _resolve_callee(self, node: CallExpr) -> ll.Function:
        function = self.backend.lookup_function(node.callee)
        if function is None:
            raise create_undeclared_function_error(node.callee, node, self._declared_names())

        expected = len(self.backend.function_parameters(function))
        if expected != len(node.args):
            raise create_arity_mismatch_error(node.callee, expected, len(node.args), node)
        return function

    # Functions

    def lower_prototype(self, node: Prototype) -> ll.Function:
        """
        Declare a function, or reuse an existing declaration of the same name
        and parameter count.
        """
        self._check_prototype(node)
        return self.backend.declare_function(node.name, node.params)

    def lower_function(self, node: FunctionDef) -> ll.Function:
        """
        Lower a definition (or anonymous expression) into a function with a
        single entry block returning the body's value.
        """
        self._check_function(node)

        function = self.lower_prototype(node.prototype)
        self.backend.attach_body(function)

        try:
            self.named_values.clear()
            for name, arg in zip(node.prototype.params, self.backend.function_parameters(function)):
                self.named_values[name] = arg

            return_value = self.lower_expression(node.body)
            self.backend.set_return(return_value)
        except Exception:
            self.backend.discard_body(function)
            raise
        finally:
            self.named_values.clear()

        logger.debug("lowered function %s", function.name)
        return function

    # Checks run before anything is emitted

    def _check_prototype(self, node: Prototype):
        existing = self.backend.lookup_function(node.name)
        if existing is None:
            return

        arity = len(self.backend.function_parameters(existing))
        if arity != len(node.params):
            raise create_conflicting_declaration_error(node.name, arity, len(node.params), node)

    def _check_function(self, node: FunctionDef):
        prototype = node.prototype
        existing = self.backend.lookup_function(prototype.name)
        if existing is not None and self.backend.has_body(existing):
            raise create_redefinition_error(prototype.name, prototype)

        self._check_prototype(prototype)
        self._check_expression(node.body, prototype)

    def _check_expression(self, root: Expression, prototype: Prototype):
        # Pre-order, leftmost first, so the first error in source order wins
        stack = [root]
        while stack:
            node = stack.pop()

            if isinstance(node, NullExpr):
                raise create_empty_expression_error(node)

            if isinstance(node, VariableExpr):
                if node.name not in prototype.params:
                    raise create_unbound_identifier_error(node.name, node, prototype.params)

            elif isinstance(node, CallExpr):
                expected = self._arity_of(node.callee, prototype)
                if expected is None:
                    raise create_undeclared_function_error(node.callee, node, self._declared_names())
                if expected != len(node.args):
                    raise create_arity_mismatch_error(node.callee, expected, len(node.args), node)

            stack.extend(reversed(node.children()))

    def _arity_of(self, callee: str, prototype: Prototype) -> Optional[int]:
        # A definition may call itself before it exists in the module
        if callee and callee == prototype.name:
            return len(prototype.params)

        function = self.backend.lookup_function(callee)
        if function is None:
            return None
        return len(self.backend.function_parameters(function))

    def _declared_names(self) -> Sequence[str]:
        return [function.name for function in self.backend.module.functions]


def compile_string(source: str, backend: Optional[LLVMBackend] = None,
                   filename: str = "<string>") -> LLVMBackend:
    """
    Convenience function to parse and lower every form of a source string.

    Raises:
        LexerError, ParseError, CodegenError: On the first failing form;
            forms before it stay in the module
    """
    from ..lexer import Lexer
    from ..parser import Parser

    backend = backend or LLVMBackend()
    codegen = Codegen(backend)
    parser = Parser(Lexer(source, filename))

    while True:
        node = parser.parse_top_level()
        if node is None:
            break
        codegen.lower_top_level(node)

    return backend
