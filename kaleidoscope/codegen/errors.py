"""
Lowering error handling for Kaleidoscope.

A CodegenError aborts lowering of the current top-level form only. They are
raised while the form is being checked, before anything is added to the
module.

Author: xwest
"""

from typing import Optional, List, Iterable

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic, similar_names
from ..parser.ast_nodes import ASTNode


class CodegenError(Exception):
    """
    Exception raised when an AST cannot be lowered to IR.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        node: Optional[ASTNode] = None,
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
        self.node = node

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


CODEGEN_ERROR_CODES = {
    "C001": "Unbound identifier",
    "C002": "Call to undeclared function",
    "C003": "Arity mismatch",
    "C004": "Empty expression has no value",
    "C005": "Function redefinition",
    "C006": "Conflicting declaration",
}


def _did_you_mean(name: str, known: Iterable[str]) -> List[str]:
    return [f"Did you mean '{candidate}'?" for candidate in similar_names(name, known)]


def create_unbound_identifier_error(name: str, node: ASTNode,
                                    in_scope: Iterable[str]) -> CodegenError:
    """Create an error for a variable that is not a parameter."""
    in_scope = list(in_scope)
    suggestions = _did_you_mean(name, in_scope)
    if in_scope:
        help_text = f"Only the parameters {', '.join(in_scope)} are in scope here."
    else:
        help_text = "This function has no parameters."

    return CodegenError(
        message=f"Unknown variable name: '{name}'",
        location=node.location,
        node=node,
        code="C001",
        help_text=help_text,
        suggestions=suggestions
    )


def create_undeclared_function_error(name: str, node: ASTNode,
                                     declared: Iterable[str]) -> CodegenError:
    """Create an error for a call to a function nobody declared."""
    suggestions = _did_you_mean(name, declared)
    suggestions.append(f"Declare it first with 'extern {name}(...)'")

    return CodegenError(
        message=f"Unknown function referenced: '{name}'",
        location=node.location,
        node=node,
        code="C002",
        help_text=f"'{name}' must be declared with 'extern' or defined with 'def' before it is called.",
        suggestions=suggestions
    )


def create_arity_mismatch_error(name: str, expected: int, actual: int,
                                node: ASTNode) -> CodegenError:
    """Create an error for a call with the wrong number of arguments."""
    return CodegenError(
        message=f"Incorrect number of arguments passed to '{name}': expected {expected}, found {actual}",
        location=node.location,
        node=node,
        code="C003",
        help_text=f"'{name}' takes {expected} argument{'s' if expected != 1 else ''}."
    )


def create_empty_expression_error(node: ASTNode) -> CodegenError:
    """Create an error for lowering '()'."""
    return CodegenError(
        message="Empty expression has no value",
        location=node.location,
        node=node,
        code="C004",
        help_text="'()' parses, but there is nothing to compute.",
        suggestions=["Put an expression between the parentheses"]
    )


def create_redefinition_error(name: str, node: ASTNode) -> CodegenError:
    """Create an error for a second 'def' of the same function."""
    return CodegenError(
        message=f"Redefinition of function '{name}'",
        location=node.location,
        node=node,
        code="C005",
        help_text=f"'{name}' already has a body in this module."
    )


def create_conflicting_declaration_error(name: str, existing: int, requested: int,
                                         node: ASTNode) -> CodegenError:
    """Create an error for re-declaring a function with a different arity."""
    return CodegenError(
        message=f"Conflicting declaration of '{name}': "
                f"previously declared with {existing} parameter{'s' if existing != 1 else ''}, "
                f"now {requested}",
        location=node.location,
        node=node,
        code="C006",
        help_text="A function keeps the signature it was first declared with."
    )
