"""
exprcc Error Hierarchy
======================

This module defines the exception hierarchy for the expression compiler.
All exceptions inherit from ExprccError, allowing callers to catch every
compiler error with a single except clause if desired.

Exception Hierarchy
-------------------
ExprccError (base)
└── CompileError (anything tied to a position in the source)
    ├── LexicalError - source text cannot be tokenized
    │   ├── InvalidCharacterError - character outside the language
    │   └── NumberRangeError - literal does not fit in 64 bits
    ├── ExprSyntaxError - token stream does not match the grammar
    │   ├── UnexpectedTokenError - wrong kind of token (or missing operand)
    │   └── MissingTokenError - required token such as ')' is absent
    └── CodeGenError - tree cannot be lowered to assembly

Usage errors on the command line are reported through click's own
UsageError and never reach this hierarchy.

Error Message Format
--------------------
Every compile error carries the offset of the offending character or token
and formats itself as:

    <expr>:1:3: error: unexpected end of input
        1+
          ^
    hint: expected a number or '('
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ExprccError(Exception):
    """
    Base exception for all exprcc errors.

        try:
            compile_expression("1+")
        except ExprccError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in the source text, used for error reporting.

    The offset is the index of the character in the source string. Line
    and column are derived from it so that diagnostics still read well if
    the expression happens to contain newlines.

    Attributes:
        filename: Name shown in diagnostics ("<expr>" for command-line input)
        offset: Index into the source text (0-indexed)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    offset: int
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"

    @classmethod
    def from_offset(cls, source: str, offset: int, filename: str = "<input>") -> "SourceLocation":
        """Build a location for ``offset`` within ``source``."""
        line_start = source.rfind("\n", 0, offset) + 1
        line = source.count("\n", 0, offset) + 1
        return cls(filename, offset, line, offset - line_start + 1)


def source_line_at(source: str, offset: int) -> str:
    """Return the full line of ``source`` containing ``offset``."""
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    return source[line_start:line_end]


# =============================================================================
# Positioned Compile Errors
# =============================================================================

class CompileError(ExprccError):
    """
    Base exception for errors raised while compiling an expression.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text containing the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def offset(self) -> Optional[int]:
        """Offset of the offending character, or None if unknown."""
        return self.location.offset if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            <expr>:1:3: error: unexpected token '*'
                1+*2
                  ^
            hint: expected a number or '('
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            # Tabs are kept so the caret lines up on a terminal
            prefix = self.source_line[:self.location.column - 1]
            padding = "".join("\t" if c == "\t" else " " for c in prefix)
            parts.append(f"    {padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Errors
# =============================================================================

class LexicalError(CompileError):
    """
    The source text cannot be split into tokens.

    The lexer stops at the first offending character; no partial token
    list is ever returned.
    """
    pass


class InvalidCharacterError(LexicalError):
    """
    Character that is not part of the expression language.

    Only digits, whitespace, the four arithmetic operators and
    parentheses are accepted.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (U+{ord(char):04X})",
            location=location,
            hint="only digits, '+', '-', '*', '/', '(' and ')' are allowed",
            source_line=source_line,
        )


class NumberRangeError(LexicalError):
    """Integer literal does not fit in a signed 64-bit register."""

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"integer literal {text} is out of range",
            location=location,
            hint="literals must be at most 9223372036854775807",
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors (Parser)
# =============================================================================

class ExprSyntaxError(CompileError):
    """
    The token stream does not match the expression grammar.

    Always located at the offending token, not at the start of the rule
    that was being parsed.
    """
    pass


class UnexpectedTokenError(ExprSyntaxError):
    """
    Unexpected token during parsing.

    Also covers a missing operand, where the unexpected token is the end
    of input, and a stray number after a complete expression.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(ExprSyntaxError):
    """Required token (such as a closing parenthesis) is missing."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompileError):
    """
    The code generator met a node or operator it has no emitter for.

    This only happens if the tree was built by hand with values the
    parser never produces.
    """
    pass
