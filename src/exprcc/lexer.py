"""
Expression Lexer (Tokenizer)
============================

This module converts expression source text into a list of tokens for
the parser.

Token Categories
----------------
| Type     | Examples            | Value                  |
|----------|---------------------|------------------------|
| OPERATOR | + - * / ( )         | the one-character text |
| NUMBER   | 0, 42, 1234567      | the parsed int         |
| EOF      | (end of input)      | None                   |

Whitespace separates tokens and is otherwise ignored. Numbers are
unsigned decimal literals; a leading sign is handled by the parser as a
unary operator.

Example Usage
-------------
>>> from exprcc.lexer import Lexer
>>> for token in Lexer("12 + 3").tokenize():
...     print(token)
Token(NUMBER, 12, @0)
Token(OPERATOR, '+', @3)
Token(NUMBER, 3, @5)
Token(EOF, @6)
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum, auto

from exprcc.errors import (
    InvalidCharacterError,
    NumberRangeError,
    SourceLocation,
    source_line_at,
)

logger = logging.getLogger(__name__)


# Largest literal that fits a signed 64-bit register
INT64_MAX = 2**63 - 1


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the expression language."""
    OPERATOR = auto()   # + - * / ( )
    NUMBER = auto()     # Decimal integer literal
    EOF = auto()        # End of input


# Characters that form a single OPERATOR token
OPERATORS = frozenset("+-*/()")

# Characters skipped between tokens
WHITESPACE = frozenset(" \t\n\r\f\v")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the expression source.

    Tokens only remember where they start; the source text itself is kept
    by whoever needs to print a diagnostic.

    Attributes:
        type: The TokenType classification
        offset: Index of the token's first character in the source
        value: The parsed int for NUMBER, the symbol for OPERATOR, None for EOF
    """
    type: TokenType
    offset: int
    value: str | int | None = None

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is None:
            return f"Token({self.type.name}, @{self.offset})"
        return f"Token({self.type.name}, {self.value!r}, @{self.offset})"

    def is_operator(self, *symbols: str) -> bool:
        """Return True if this is an OPERATOR token with one of ``symbols``."""
        return self.type == TokenType.OPERATOR and self.value in symbols

    def describe(self) -> str:
        """Human-readable description used in syntax errors."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.NUMBER:
            return f"number {self.value}"
        return f"token '{self.value}'"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes an arithmetic expression.

    Scanning is a single left-to-right pass. The first character that is
    not whitespace, a digit, an operator or a parenthesis stops the scan
    with an InvalidCharacterError.

    Usage:
        tokens = Lexer(source_text).tokenize()

    Attributes:
        source: The expression being tokenized
        filename: Name used in diagnostics
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self._pos = 0

    def tokenize(self) -> list[Token]:
        """
        Tokenize the whole source.

        Returns:
            List of tokens ending with exactly one EOF token

        Raises:
            LexicalError: On the first character that cannot start a token
        """
        self._pos = 0
        tokens: list[Token] = []

        while not self._at_end():
            char = self._peek()

            if char in WHITESPACE:
                self._pos += 1
                continue

            if char in OPERATORS:
                tokens.append(Token(TokenType.OPERATOR, self._pos, char))
                self._pos += 1
                continue

            if char in string.digits:
                tokens.append(self._scan_number())
                continue

            raise InvalidCharacterError(
                char,
                self._location(self._pos),
                source_line_at(self.source, self._pos),
            )

        tokens.append(Token(TokenType.EOF, self._pos))
        logger.debug("Tokenized %d tokens from %r", len(tokens), self.source)
        return tokens

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _location(self, offset: int) -> SourceLocation:
        return SourceLocation.from_offset(self.source, offset, self.filename)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_number(self) -> Token:
        """
        Scan the maximal run of decimal digits starting at the cursor.

        The cursor ends up after the last digit, however many there were.
        """
        start = self._pos
        while not self._at_end() and self._peek() in string.digits:
            self._pos += 1

        text = self.source[start:self._pos]
        value = int(text, 10)
        if value > INT64_MAX:
            raise NumberRangeError(
                text,
                self._location(start),
                source_line_at(self.source, start),
            )

        return Token(TokenType.NUMBER, start, value)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize ``source`` and return the token list (EOF included)."""
    return Lexer(source, filename).tokenize()
