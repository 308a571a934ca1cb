"""
x86-64 Stack Code Generator
===========================

This module lowers an expression tree to x86-64 assembly (GNU as, Intel
syntax) that evaluates the expression on the machine stack.

Code Generation Strategy
------------------------
Post-order traversal with a strict stack discipline:

1. A literal pushes its value
2. A binary node generates its left operand, then its right operand, so
   the right value is on top of the stack and the left value below it
3. The node pops right into RDI and left into RAX, applies the operator
   to RAX and pushes RAX

When the traversal finishes, the value of the whole expression is the only
thing left on the stack. The function wrapper pops it into RAX and
returns.

Register Usage
--------------
| Register | Usage                                          |
|----------|------------------------------------------------|
| RAX      | Left operand and result                        |
| RDI      | Right operand                                  |
| RDX      | Sign extension of RAX for IDIV (via CQO)       |

Signed Division
---------------
IDIV divides the 128-bit value RDX:RAX, so RAX has to be sign-extended
into RDX first. CQO does that. Without it a negative dividend would be
read as a huge positive number. IDIV truncates toward zero, giving
``-7/2 = -3`` and ``7/-2 = -3``.

Literals
--------
PUSH only takes a sign-extended 32-bit immediate. Larger literals go
through RAX with a 64-bit MOV first.

Generated Assembly Format
-------------------------
    .intel_syntax noprefix
    .globl main
    main:
            push    2
            push    3
            pop     rdi
            pop     rax
            add     rax, rdi
            push    rax
            pop     rax
            ret
"""

import logging

from exprcc.ast import (
    ASTVisitor,
    BinaryExpression,
    BinaryOperator,
    Expression,
    NumberLiteral,
    format_expression,
)
from exprcc.errors import CodeGenError

logger = logging.getLogger(__name__)


# Range of a sign-extended 32-bit immediate operand
IMM32_MIN = -(2**31)
IMM32_MAX = 2**31 - 1

# Instructions applied to RAX (left) and RDI (right) for each operator
BINARY_INSTRUCTIONS: dict[BinaryOperator, list[tuple[str, str]]] = {
    BinaryOperator.ADD: [("add", "rax, rdi")],
    BinaryOperator.SUBTRACT: [("sub", "rax, rdi")],
    BinaryOperator.MULTIPLY: [("imul", "rax, rdi")],
    BinaryOperator.DIVIDE: [("cqo", ""), ("idiv", "rdi")],
}


def format_instruction(mnemonic: str, operand: str = "") -> str:
    """Format one instruction line with the standard indentation."""
    if operand:
        return f"        {mnemonic:<8}{operand}"
    return f"        {mnemonic}"


class CodeGenerator(ASTVisitor):
    """
    Generates stack-machine x86-64 assembly from an expression tree.

    Only the instruction body is produced; ``render_function`` wraps it
    into a callable function.

    Attributes:
        output_comments: Emit a comment line before each binary operation
    """

    def __init__(self, output_comments: bool = False):
        self.output_comments = output_comments
        self._output: list[str] = []

    def generate(self, root: Expression) -> list[str]:
        """
        Generate the instruction body for ``root``.

        Args:
            root: The expression tree

        Returns:
            Instruction lines; executing them leaves exactly one value,
            the result, on the stack

        Raises:
            CodeGenError: If the tree contains a node or operator with no
                emitter
        """
        self._output = []
        self.visit(root)
        logger.debug("Generated %d instruction lines", len(self._output))
        return list(self._output)

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        self._output.append(format_instruction(mnemonic, operand))

    def _emit_comment(self, comment: str) -> None:
        self._output.append(f"        # {comment}")

    # =========================================================================
    # Node Visitors
    # =========================================================================

    def visit_NumberLiteral(self, node: NumberLiteral) -> None:
        if IMM32_MIN <= node.value <= IMM32_MAX:
            self._emit_instruction("push", str(node.value))
        else:
            self._emit_instruction("mov", f"rax, {node.value}")
            self._emit_instruction("push", "rax")

    def visit_BinaryExpression(self, node: BinaryExpression) -> None:
        instructions = BINARY_INSTRUCTIONS.get(node.operator)
        if instructions is None:
            raise CodeGenError(
                f"no instruction sequence for operator {node.operator.name}",
                location=node.location,
            )

        # Left first: right operand must end up on top of the stack
        self.visit(node.left)
        self.visit(node.right)

        if self.output_comments:
            self._emit_comment(format_expression(node))
        self._emit_instruction("pop", "rdi")
        self._emit_instruction("pop", "rax")
        for mnemonic, operand in instructions:
            self._emit_instruction(mnemonic, operand)
        self._emit_instruction("push", "rax")

    def generic_visit(self, node: Expression) -> None:
        raise CodeGenError(
            f"cannot generate code for {type(node).__name__}",
            location=getattr(node, "location", None),
        )


# =============================================================================
# Function Wrapper
# =============================================================================

def render_function(body: list[str], entry_label: str = "main") -> str:
    """
    Wrap a generated instruction body into a complete assembly function.

    The body must leave exactly one value on the stack; it is popped into
    RAX, the return-value register, before returning.

    Args:
        body: Lines returned by CodeGenerator.generate
        entry_label: Global label of the function

    Returns:
        Assembly source text, newline terminated
    """
    lines = [
        ".intel_syntax noprefix",
        f".globl {entry_label}",
        f"{entry_label}:",
        *body,
        format_instruction("pop", "rax"),
        format_instruction("ret"),
    ]
    return "\n".join(lines) + "\n"
