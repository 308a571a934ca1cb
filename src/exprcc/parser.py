"""
Expression Recursive Descent Parser
===================================

This module takes the token list from the lexer and builds the
expression tree.

Grammar (EBNF, precedence increasing downward)
----------------------------------------------
expr    ::= mul ( ('+' | '-') mul )*
mul     ::= unary ( ('*' | '/') unary )*
unary   ::= ('+' | '-')? primary
primary ::= NUMBER | '(' expr ')'

Each rule is one method. ``expr`` and ``mul`` loop and fold the operands
to the left, so ``8-3-2`` is ``(8-3)-2``. A leading ``-`` becomes
``0 - primary``; a leading ``+`` is dropped.

The whole token list must be consumed: anything left over after the
top-level ``expr`` is a syntax error.

Example Usage
-------------
>>> from exprcc.parser import parse_source
>>> from exprcc.ast import format_expression
>>> format_expression(parse_source("2+3*4"))
'(2 + (3 * 4))'
"""

import logging
from typing import Callable

from exprcc.ast import BinaryExpression, BinaryOperator, Expression, NumberLiteral
from exprcc.errors import (
    MissingTokenError,
    SourceLocation,
    UnexpectedTokenError,
    source_line_at,
)
from exprcc.lexer import Token, TokenType, tokenize

logger = logging.getLogger(__name__)


ADDITIVE_OPERATORS = {
    "+": BinaryOperator.ADD,
    "-": BinaryOperator.SUBTRACT,
}

MULTIPLICATIVE_OPERATORS = {
    "*": BinaryOperator.MULTIPLY,
    "/": BinaryOperator.DIVIDE,
}

OPERAND_EXPECTED = "a number or '('"


class Parser:
    """
    Recursive descent parser for arithmetic expressions.

    The cursor into the token list is owned by the parser instance, so
    separate parsers never interfere with each other. It only moves
    forward and never steps past the EOF token.

    Attributes:
        tokens: Token list from the lexer, ending in EOF
        source: Original source text (for error context)
        filename: Name used in diagnostics
    """

    def __init__(
        self,
        tokens: list[Token],
        source: str = "",
        filename: str = "<input>",
    ):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")

        self.tokens = tokens
        self.source = source
        self.filename = filename

        # Current position in token stream
        self._pos = 0

    def parse(self) -> Expression:
        """
        Parse the token list into a single expression tree.

        Returns:
            The root Expression node

        Raises:
            ExprSyntaxError: On the first token that breaks the grammar
        """
        self._pos = 0
        root = self._parse_expr()

        if not self._at_end():
            raise self._unexpected(self._peek(), "an operator or end of input")

        logger.debug("Parsed %d tokens into %r", len(self.tokens), root)
        return root

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return the current token; EOF is never consumed."""
        token = self.tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *symbols: str) -> Token | None:
        """Consume the current token if it is one of the operator ``symbols``."""
        if self._peek().is_operator(*symbols):
            return self._advance()
        return None

    def _expect(self, symbol: str) -> Token:
        """
        Consume the operator ``symbol`` or fail at the current token.

        Raises:
            MissingTokenError: If the current token is anything else
        """
        token = self._match(symbol)
        if token is not None:
            return token

        current = self._peek()
        raise MissingTokenError(
            f"'{symbol}' before {current.describe()}",
            self._location(current),
            source_line_at(self.source, current.offset),
        )

    def _location(self, token: Token) -> SourceLocation:
        return SourceLocation.from_offset(self.source, token.offset, self.filename)

    def _unexpected(self, token: Token, expected: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(
            token.describe(),
            expected=expected,
            location=self._location(token),
            source_line=source_line_at(self.source, token.offset),
        )

    # =========================================================================
    # Grammar Rules
    # =========================================================================

    def _parse_expr(self) -> Expression:
        """expr ::= mul ( ('+' | '-') mul )*"""
        return self._parse_binary(self._parse_mul, ADDITIVE_OPERATORS)

    def _parse_mul(self) -> Expression:
        """mul ::= unary ( ('*' | '/') unary )*"""
        return self._parse_binary(self._parse_unary, MULTIPLICATIVE_OPERATORS)

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[str, BinaryOperator],
    ) -> Expression:
        """
        Left-associative binary level.

        Args:
            operand_parser: Parser for the next-higher precedence level
            operators: Map of operator symbols handled at this level
        """
        expr = operand_parser()

        while self._peek().is_operator(*operators):
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryExpression(
                location=self._location(op_token),
                operator=operators[op_token.value],
                left=expr,
                right=right,
            )

        return expr

    def _parse_unary(self) -> Expression:
        """unary ::= ('+' | '-')? primary"""
        if self._match("+"):
            return self._parse_primary()

        sign = self._match("-")
        if sign is not None:
            location = self._location(sign)
            return BinaryExpression(
                location=location,
                operator=BinaryOperator.SUBTRACT,
                left=NumberLiteral(location=location, value=0),
                right=self._parse_primary(),
            )

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """primary ::= NUMBER | '(' expr ')'"""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(location=self._location(token), value=token.value)

        if token.is_operator("("):
            self._advance()
            expr = self._parse_expr()
            self._expect(")")
            return expr

        raise self._unexpected(token, OPERAND_EXPECTED)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> Expression:
    """
    Tokenize and parse ``source`` in one step.

    Raises:
        CompileError: If lexing or parsing fails
    """
    tokens = tokenize(source, filename)
    return Parser(tokens, source, filename).parse()
