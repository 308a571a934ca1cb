"""
exprcc Test Configuration
=========================

Shared fixtures for the exprcc test suite.

The main fixture is ``run_asm``, which executes generated assembly on a
tiny interpreter for the instructions exprcc emits. It lets tests check
the value a compiled expression returns instead of only matching text.
"""

import pytest


MASK64 = (1 << 64) - 1


def to_signed64(value: int) -> int:
    """Wrap ``value`` to a signed 64-bit integer, like a hardware register."""
    value &= MASK64
    return value - (1 << 64) if value & (1 << 63) else value


class StackMachine:
    """
    Interpreter for the x86-64 subset emitted by the code generator.

    Supports PUSH, POP, MOV, ADD, SUB, IMUL, CQO, IDIV and RET on the
    registers RAX, RDI and RDX. Arithmetic wraps at 64 bits; IDIV
    truncates toward zero and traps on a zero divisor, as on hardware.
    """

    REGISTERS = ("rax", "rdi", "rdx")

    def __init__(self):
        self.registers = {name: 0 for name in self.REGISTERS}
        self.stack: list[int] = []

    def run(self, assembly: str) -> int:
        """Execute the function in ``assembly`` and return RAX at RET."""
        for line in assembly.splitlines():
            line = line.split("#", 1)[0].strip()
            if not line or line.startswith(".") or line.endswith(":"):
                continue

            mnemonic, _, rest = line.partition(" ")
            operands = [op.strip() for op in rest.split(",")] if rest.strip() else []

            if mnemonic == "ret":
                assert self.stack == [], f"stack not balanced at ret: {self.stack}"
                return self.registers["rax"]
            self._execute(mnemonic, operands)

        raise AssertionError("function fell off the end without ret")

    def _value(self, operand: str) -> int:
        if operand in self.registers:
            return self.registers[operand]
        return int(operand)

    def _set(self, register: str, value: int) -> None:
        assert register in self.registers, f"unknown register {register}"
        self.registers[register] = to_signed64(value)

    def _execute(self, mnemonic: str, operands: list[str]) -> None:
        if mnemonic == "push":
            value = self._value(operands[0])
            if operands[0] not in self.registers:
                assert -(2**31) <= value < 2**31, f"push immediate {value} exceeds imm32"
            self.stack.append(value)
        elif mnemonic == "pop":
            assert self.stack, "pop from empty stack"
            self._set(operands[0], self.stack.pop())
        elif mnemonic == "mov":
            self._set(operands[0], self._value(operands[1]))
        elif mnemonic == "add":
            self._set(operands[0], self._value(operands[0]) + self._value(operands[1]))
        elif mnemonic == "sub":
            self._set(operands[0], self._value(operands[0]) - self._value(operands[1]))
        elif mnemonic == "imul":
            self._set(operands[0], self._value(operands[0]) * self._value(operands[1]))
        elif mnemonic == "cqo":
            self._set("rdx", -1 if self.registers["rax"] < 0 else 0)
        elif mnemonic == "idiv":
            self._idiv(self._value(operands[0]))
        else:
            raise AssertionError(f"unsupported instruction {mnemonic}")

    def _idiv(self, divisor: int) -> None:
        if divisor == 0:
            raise ZeroDivisionError("divide error")
        # Dividend is the 128-bit value RDX:RAX
        dividend = (self.registers["rdx"] << 64) | (self.registers["rax"] & MASK64)
        quotient = abs(dividend) // abs(divisor)
        if (dividend < 0) != (divisor < 0):
            quotient = -quotient
        remainder = dividend - quotient * divisor
        if not -(2**63) <= quotient < 2**63:
            raise OverflowError("divide error")
        self._set("rax", quotient)
        self._set("rdx", remainder)


@pytest.fixture
def run_asm():
    """Return a function that executes generated assembly and returns RAX."""
    def run(assembly: str) -> int:
        return StackMachine().run(assembly)
    return run


@pytest.fixture
def evaluate(run_asm):
    """Return a function that compiles an expression and runs it."""
    from exprcc import compile_expression

    def run(source: str) -> int:
        return run_asm(compile_expression(source))
    return run
