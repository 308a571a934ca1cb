"""
Expression Tree (AST) Definitions
=================================

This module defines the nodes produced by the parser and consumed by the
code generator.

Node Hierarchy
--------------
Expression (base)
├── NumberLiteral - integer constant (no children)
└── BinaryExpression - ADD, SUBTRACT, MULTIPLY or DIVIDE (two children)

Unary minus has no node of its own: the parser rewrites ``-x`` to
``0 - x``, and unary plus disappears entirely.

Design Notes
------------
- All nodes are frozen dataclasses, so a tree cannot change after the
  parser has built it
- Each node stores the source location of the token that introduced it
- Every BinaryExpression owns exactly two children; nothing is shared
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from exprcc.errors import SourceLocation


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types, in the order of the grammar."""
    ADD = auto()        # +
    SUBTRACT = auto()   # -
    MULTIPLY = auto()   # *
    DIVIDE = auto()     # /

    @property
    def symbol(self) -> str:
        return OPERATOR_SYMBOLS[self]


OPERATOR_SYMBOLS: dict[BinaryOperator, str] = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
}


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """
    Base class for all expression nodes.

    Attributes:
        location: Source location of the token that produced this node
    """
    location: SourceLocation

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.offset}"


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """
    Integer constant.

    Attributes:
        value: Signed 64-bit value
    """
    value: int

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value})"


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """
    Binary operation expression (left op right).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator
    left: Expression
    right: Expression

    def __repr__(self) -> str:
        return f"BinaryExpression({self.operator.name}, {self.left!r}, {self.right!r})"


# =============================================================================
# Tree Utilities
# =============================================================================

def tree_depth(expr: Expression) -> int:
    """Number of nodes on the longest root-to-leaf path."""
    if isinstance(expr, BinaryExpression):
        return 1 + max(tree_depth(expr.left), tree_depth(expr.right))
    return 1


def format_expression(expr: Expression) -> str:
    """Render ``expr`` fully parenthesized, e.g. ``((1 - 2) - 3)``."""
    if isinstance(expr, NumberLiteral):
        return str(expr.value)
    if isinstance(expr, BinaryExpression):
        left = format_expression(expr.left)
        right = format_expression(expr.right)
        return f"({left} {expr.operator.symbol} {right})"
    return f"<{type(expr).__name__}>"


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches to ``visit_<ClassName>``. Node types without a method land
    in ``generic_visit``, which subclasses override to reject them.

    Usage:
        class Counter(ASTVisitor):
            def visit_NumberLiteral(self, node):
                return 1
            def visit_BinaryExpression(self, node):
                return self.visit(node.left) + self.visit(node.right)
    """

    def visit(self, node: Expression) -> Any:
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Expression) -> Any:
        """Default for node types without a visit method."""
        raise TypeError(f"{type(self).__name__} cannot visit {type(node).__name__}")


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging (``exprcc --ast``).

    Usage:
        print(ASTPrinter().print(tree))

    Output for ``1-2*3``:
        Subtract
          Number 1
          Multiply
            Number 2
            Number 3
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: Expression) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"Number {node.value}")

    def visit_BinaryExpression(self, node: BinaryExpression):
        self._emit(node.operator.name.capitalize())
        self.indent_level += 1
        self.visit(node.left)
        self.visit(node.right)
        self.indent_level -= 1
