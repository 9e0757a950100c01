"""Target machine model — registers, opcodes, and instruction text format."""

from __future__ import annotations

from dataclasses import dataclass


# Registers
AC = "AC"
AC1 = "AC1"
GP = "GP"
MP = "MP"
PC = "PC"

REGISTER_CODES: dict[str, int] = {
    AC: 0,
    AC1: 1,
    GP: 5,
    MP: 6,
    PC: 7,
}

REGISTER_NAMES: dict[int, str] = {code: name for name, code in REGISTER_CODES.items()}

# Register-memory instructions: op target,offset(base)
RM_OPS: set[str] = {"LDC", "LD", "LDA", "ST", "JLT", "JEQ"}

# Register-only instructions: op target,src1,src2
RO_OPS: set[str] = {"IN", "OUT", "ADD", "SUB", "MUL", "DIV"}


def register_code(name: str) -> int:
    """Numeric code of a register name."""
    if name not in REGISTER_CODES:
        raise ValueError("unknown register: " + repr(name))
    return REGISTER_CODES[name]


def register_name(code: int) -> str:
    """Register name for a numeric code."""
    if code not in REGISTER_NAMES:
        raise ValueError("no register has code " + str(code))
    return REGISTER_NAMES[code]


@dataclass(frozen=True)
class Instruction:
    """One emitted instruction at a fixed address.

    For RM ops the operands are (target, offset, base) and render as
    `target,a(b)`; for RO ops they are three registers rendering as
    `target,a,b`.
    """

    addr: int
    op: str
    target: int
    a: int
    b: int

    def __str__(self) -> str:
        head = str(self.addr).rjust(3) + ":  " + self.op.rjust(5) + "  "
        if self.op in RM_OPS:
            return head + str(self.target) + "," + str(self.a) + "(" + str(self.b) + ")"
        if self.op in RO_OPS:
            return head + str(self.target) + "," + str(self.a) + "," + str(self.b)
        raise ValueError("unknown opcode: " + repr(self.op))
