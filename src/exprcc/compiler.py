"""
exprcc Compiler Main Module
===========================

This module orchestrates the complete compilation of one expression:

    Source → Lex → Parse → Generate → Render → Assembly

Usage
-----
Command line:
    $ exprcc "2+3*4" > expr.s

Programmatic:
    >>> from exprcc import compile_expression
    >>> asm = compile_expression("2+3*4")

Error Handling
--------------
Every stage stops at its first error and raises a CompileError carrying
the source position. Nothing is returned for a failed compilation, so a
caller never sees partial assembly.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from exprcc.ast import Expression, tree_depth
from exprcc.codegen import CodeGenerator, render_function
from exprcc.lexer import Lexer, Token
from exprcc.parser import Parser

logger = logging.getLogger(__name__)


# Labels accepted by GNU as without quoting
LABEL_PATTERN = re.compile(r"^[A-Za-z_.$][A-Za-z0-9_.$]*$")


def is_valid_label(label: str) -> bool:
    """Return True if ``label`` can be used as the function's entry label."""
    return bool(LABEL_PATTERN.match(label))


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        entry_label: Global label of the generated function
        output_comments: Annotate each operation with the sub-expression
                        it computes
        filename: Name shown in diagnostics
    """
    entry_label: str = "main"
    output_comments: bool = False
    filename: str = "<expr>"

    def __post_init__(self):
        if not is_valid_label(self.entry_label):
            raise ValueError(f"invalid entry label: {self.entry_label!r}")


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        source: The expression text
        tokens: Token list produced by the lexer
        ast: Root of the expression tree
        instructions: Instruction body from the code generator
        assembly: Complete assembly text
    """
    source: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Expression] = None
    instructions: list[str] = field(default_factory=list)
    assembly: str = ""


class Compiler:
    """
    Expression compiler.

    Example:
        compiler = Compiler(CompilerOptions(entry_label="_main"))
        result = compiler.compile_source("-(3+4)")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def tokenize(self, source: str) -> list[Token]:
        """Run only the lexer."""
        return Lexer(source, self.options.filename).tokenize()

    def parse(self, source: str) -> Expression:
        """Run the lexer and the parser."""
        return self._parse(self.tokenize(source), source)

    def compile_source(self, source: str) -> CompilerResult:
        """
        Compile an expression to assembly.

        Args:
            source: Expression text

        Returns:
            CompilerResult with every intermediate product

        Raises:
            CompileError: If any stage fails
        """
        result = CompilerResult(source=source)

        result.tokens = self.tokenize(source)
        result.ast = self._parse(result.tokens, source)
        logger.debug("Parsed tree of depth %d", tree_depth(result.ast))

        generator = CodeGenerator(output_comments=self.options.output_comments)
        result.instructions = generator.generate(result.ast)
        result.assembly = render_function(result.instructions, self.options.entry_label)

        logger.debug("Compiled %r into %d lines of assembly",
                     source, result.assembly.count("\n"))
        return result

    def _parse(self, tokens: list[Token], source: str) -> Expression:
        return Parser(tokens, source, self.options.filename).parse()


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_expression(source: str, entry_label: str = "main") -> str:
    """
    Compile an expression to a complete assembly function.

    Args:
        source: Expression text, e.g. ``"2+3*4"``
        entry_label: Global label of the generated function

    Returns:
        Assembly source text

    Raises:
        CompileError: If compilation fails
    """
    options = CompilerOptions(entry_label=entry_label)
    return Compiler(options).compile_source(source).assembly
