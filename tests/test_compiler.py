"""
Expression Compiler Integration Tests
=====================================

End-to-end tests for the compilation pipeline. Generated assembly is
executed on the test interpreter from conftest.py and the returned value
is compared with the expected result of the expression.

Test Organization
-----------------
- TestEvaluation: Values computed by compiled expressions
- TestCompiler: Compiler facade, options and intermediate results
- TestCompileErrors: Failures propagate with no output
"""

import pytest
from exprcc import compile_expression
from exprcc.compiler import Compiler, CompilerOptions, CompilerResult, is_valid_label
from exprcc.errors import (
    CompileError,
    ExprSyntaxError,
    InvalidCharacterError,
    MissingTokenError,
    UnexpectedTokenError,
)
from exprcc.lexer import TokenType


def reference(source: str) -> int:
    """
    Evaluate an expression containing only digits, '+', '-' and spaces,
    left to right.
    """
    tokens = source.replace("+", " + ").replace("-", " - ").split()
    total = int(tokens[0])
    for op, value in zip(tokens[1::2], tokens[2::2]):
        total = total + int(value) if op == "+" else total - int(value)
    return total


# =============================================================================
# Evaluation Tests
# =============================================================================

class TestEvaluation:
    """Compiled expressions return the right value."""

    def test_literal(self, evaluate):
        assert evaluate("42") == 42

    def test_precedence(self, evaluate):
        assert evaluate("2+3*4") == 14

    def test_left_associativity(self, evaluate):
        assert evaluate("8-3-2") == 3

    def test_division_left_associativity(self, evaluate):
        assert evaluate("100/10/5") == 2

    def test_unary_minus_and_grouping(self, evaluate):
        assert evaluate("-(3+4)") == -7

    def test_unary_plus(self, evaluate):
        assert evaluate("+5 - +2") == 3

    @pytest.mark.parametrize("source, expected", [
        ("-7/2", -3),
        ("7/-2", -3),
        ("-7/-2", 3),
        ("7/2", 3),
        ("-8/2", -4),
    ])
    def test_signed_division_truncates_toward_zero(self, evaluate, source, expected):
        assert evaluate(source) == expected

    def test_signed_multiplication(self, evaluate):
        assert evaluate("-6*7") == -42
        assert evaluate("-6*-7") == 42

    def test_whitespace_tolerated(self, evaluate):
        assert evaluate("  12 +  34 - 5 ") == 41

    def test_nested_groups(self, evaluate):
        assert evaluate("((2+3)*(4-1))/(1+2)") == 5

    def test_large_literal(self, evaluate):
        assert evaluate("9223372036854775807 - 1") == 9223372036854775806

    def test_wraps_at_64_bits(self, evaluate):
        assert evaluate("9223372036854775807 + 1") == -(2**63)

    @pytest.mark.parametrize("source", [
        "0",
        "1+2+3",
        "10-20",
        "5 - 3 - 2 + 10",
        "100-1-1-1-1-1-1",
        "1 + 22 - 333 + 4444 - 55555",
        "9-8+7-6+5-4+3-2+1",
    ])
    def test_additive_expressions_match_reference(self, evaluate, source):
        assert evaluate(source) == reference(source)

    def test_division_by_zero_is_runtime_trap(self, evaluate):
        """Division by zero compiles; it only traps when executed."""
        with pytest.raises(ZeroDivisionError):
            evaluate("1/0")


# =============================================================================
# Compiler Facade Tests
# =============================================================================

class TestCompiler:
    """Tests for Compiler, CompilerOptions and CompilerResult."""

    def test_result_contains_every_stage(self):
        result = Compiler().compile_source("1+2")
        assert isinstance(result, CompilerResult)
        assert result.source == "1+2"
        assert result.tokens[-1].type == TokenType.EOF
        assert len(result.tokens) == 4
        assert result.ast.left.value == 1
        assert result.instructions
        assert all(line in result.assembly for line in result.instructions)

    def test_compile_expression_returns_assembly(self):
        asm = compile_expression("1")
        assert asm.startswith(".intel_syntax noprefix\n.globl main\nmain:\n")
        assert asm.endswith("ret\n")

    def test_entry_label_option(self, run_asm):
        asm = Compiler(CompilerOptions(entry_label="_compute")).compile_source("6*7").assembly
        assert ".globl _compute" in asm
        assert "_compute:" in asm
        assert run_asm(asm) == 42

    def test_comments_option(self, run_asm):
        options = CompilerOptions(output_comments=True)
        asm = Compiler(options).compile_source("1+2").assembly
        assert "# (1 + 2)" in asm
        assert run_asm(asm) == 3

    def test_invalid_entry_label_rejected(self):
        with pytest.raises(ValueError):
            CompilerOptions(entry_label="1main")

    @pytest.mark.parametrize("label, valid", [
        ("main", True),
        ("_main", True),
        ("calc.v2", True),
        ("", False),
        ("9lives", False),
        ("has space", False),
    ])
    def test_is_valid_label(self, label, valid):
        assert is_valid_label(label) is valid

    def test_filename_used_in_diagnostics(self):
        compiler = Compiler(CompilerOptions(filename="<arg>"))
        with pytest.raises(CompileError) as exc_info:
            compiler.compile_source("1+")
        assert str(exc_info.value).startswith("<arg>:1:3:")

    def test_tokenize_and_parse_stages(self):
        compiler = Compiler()
        assert [t.value for t in compiler.tokenize("3*4")] == [3, "*", 4, None]
        assert compiler.parse("3*4").right.value == 4

    def test_deterministic_output(self):
        assert compile_expression("-(1+2)*3") == compile_expression("-(1+2)*3")


# =============================================================================
# Compile Error Tests
# =============================================================================

class TestCompileErrors:
    """Every error is fatal and carries the offending offset."""

    def test_trailing_operator_points_after_plus(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            compile_expression("1+")
        assert exc_info.value.offset >= 1

    def test_double_operator(self):
        with pytest.raises(ExprSyntaxError):
            compile_expression("1+*2")

    def test_unterminated_group(self):
        with pytest.raises(MissingTokenError):
            compile_expression("(1+2")

    def test_invalid_character(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            compile_expression("1 + a")
        assert exc_info.value.offset == 4
