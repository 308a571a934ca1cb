"""
exprcc - Arithmetic Expression Compiler
=======================================

This package compiles a single arithmetic expression into x86-64
assembly for a function that returns the expression's value.

The language is deliberately tiny: decimal integer literals, the binary
operators ``+ - * /``, unary ``+`` and ``-``, and parentheses. Evaluation
uses signed 64-bit arithmetic with division truncating toward zero.

Main Components
---------------
- **lexer**: source text → tokens
- **parser**: tokens → expression tree (recursive descent)
- **codegen**: expression tree → stack-machine assembly
- **compiler**: runs the whole pipeline
- **cli**: the ``exprcc`` command

Quick Start
-----------
    >>> from exprcc import compile_expression
    >>> print(compile_expression("2+3*4"))

Or from the shell, assembling with a C toolchain:
    $ exprcc "2+3*4" > expr.s
    $ cc -o expr expr.s && ./expr; echo $?
    14
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from exprcc.ast import (
    ASTPrinter,
    BinaryExpression,
    BinaryOperator,
    Expression,
    NumberLiteral,
    format_expression,
)
from exprcc.codegen import CodeGenerator, render_function
from exprcc.compiler import Compiler, CompilerOptions, CompilerResult, compile_expression
from exprcc.errors import (
    CodeGenError,
    CompileError,
    ExprccError,
    ExprSyntaxError,
    InvalidCharacterError,
    LexicalError,
    MissingTokenError,
    NumberRangeError,
    SourceLocation,
    UnexpectedTokenError,
)
from exprcc.lexer import Lexer, Token, TokenType, tokenize
from exprcc.parser import Parser, parse_source

__all__ = [
    "__version__",
    # Pipeline
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expression",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "parse_source",
    # AST
    "Expression",
    "NumberLiteral",
    "BinaryExpression",
    "BinaryOperator",
    "ASTPrinter",
    "format_expression",
    # Code generator
    "CodeGenerator",
    "render_function",
    # Errors
    "ExprccError",
    "CompileError",
    "LexicalError",
    "InvalidCharacterError",
    "NumberRangeError",
    "ExprSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "CodeGenError",
    "SourceLocation",
]
