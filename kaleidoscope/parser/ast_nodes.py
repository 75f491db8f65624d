"""
Abstract Syntax Tree node definitions for Kaleidoscope.

Nodes form a strict tree: every child has exactly one parent and nodes keep
no back-pointers. Equality is structural and ignores source spans, so two
parses of the same text compare equal.

Author: xwest
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any, Union, ClassVar
from dataclasses import dataclass, field
from enum import Enum

from ..lexer.tokens import SourceLocation


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"
    PROTOTYPE = "Prototype"
    FUNCTION_DEF = "FunctionDef"

    # Expressions
    NULL_EXPR = "Null"
    NUMBER_EXPR = "Number"
    VARIABLE_EXPR = "Variable"
    BINARY_EXPR = "Binary"
    CALL_EXPR = "Call"


@dataclass
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


class ASTVisitor(ABC):
    """Abstract visitor interface for traversing AST nodes."""

    @abstractmethod
    def visit(self, node: 'ASTNode') -> Any:
        """Visit a generic AST node."""
        pass


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass

    @property
    def location(self) -> Optional[SourceLocation]:
        span = getattr(self, "span", None)
        return span.start if span is not None else None


def _span_field():
    return field(default=None, compare=False, repr=False)


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expressions."""
    pass


@dataclass
class NullExpr(Expression):
    """The empty expression written as '()'."""
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.NULL_EXPR

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class NumberExpr(Expression):
    """Numeric literal; always a double."""
    value: float
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER_EXPR

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class VariableExpr(Expression):
    """Reference to a function parameter."""
    name: str
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_EXPR

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class BinaryExpr(Expression):
    """Binary operation; `operator` is one of '<', '+', '-', '*'."""
    operator: str
    lhs: Expression
    rhs: Expression
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_EXPR

    def children(self) -> List[ASTNode]:
        return [self.lhs, self.rhs]


@dataclass
class CallExpr(Expression):
    """Call of a named function with positional arguments."""
    callee: str
    args: List[Expression] = field(default_factory=list)
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL_EXPR

    def children(self) -> List[ASTNode]:
        return list(self.args)


# ============================================================================
# Top-level nodes
# ============================================================================

@dataclass
class Prototype(ASTNode):
    """
    Function signature: a name and its parameter names.

    An empty name marks the implicit wrapper around a top-level expression.
    """
    name: str
    params: List[str] = field(default_factory=list)
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROTOTYPE

    @property
    def is_anonymous(self) -> bool:
        return self.name == ""

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class FunctionDef(ASTNode):
    """A prototype paired with its body expression."""
    prototype: Prototype
    body: Expression
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION_DEF

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_anonymous(self) -> bool:
        return self.prototype.is_anonymous

    def children(self) -> List[ASTNode]:
        return [self.prototype, self.body]


TopLevelNode = Union[FunctionDef, Prototype]


@dataclass
class Program(ASTNode):
    """All top-level forms of one source text, in order."""
    items: List[TopLevelNode] = field(default_factory=list)
    span: Optional[SourceSpan] = _span_field()

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM

    def children(self) -> List[ASTNode]:
        return list(self.items)


# ============================================================================
# Printing
# ============================================================================

class ASTDumper(ASTVisitor):
    """
    Renders a tree in the compact form used by tests and the REPL, e.g.
    Binary(+, Number(1), Binary(*, Number(2), Number(3))).
    """

    def visit(self, node: ASTNode) -> str:
        method = getattr(self, f"_visit_{node.node_type.name.lower()}")
        return method(node)

    def _visit_null_expr(self, node: NullExpr) -> str:
        return "Null"

    def _visit_number_expr(self, node: NumberExpr) -> str:
        return f"Number({node.value:g})"

    def _visit_variable_expr(self, node: VariableExpr) -> str:
        return f"Variable({node.name})"

    def _visit_binary_expr(self, node: BinaryExpr) -> str:
        return f"Binary({node.operator}, {node.lhs.accept(self)}, {node.rhs.accept(self)})"

    def _visit_call_expr(self, node: CallExpr) -> str:
        args = ", ".join(arg.accept(self) for arg in node.args)
        return f"Call({node.callee}, [{args}])"

    def _visit_prototype(self, node: Prototype) -> str:
        return f"Prototype({node.name}, [{', '.join(node.params)}])"

    def _visit_function_def(self, node: FunctionDef) -> str:
        return f"Function({node.prototype.accept(self)}, {node.body.accept(self)})"

    def _visit_program(self, node: Program) -> str:
        return "\n".join(item.accept(self) for item in node.items)


def dump(node: ASTNode) -> str:
    """Render an AST node as a one-line string."""
    return node.accept(ASTDumper())
