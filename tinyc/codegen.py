"""Code generator: syntax tree -> target machine instruction listing.

Each statement and expression leaves its work in the accumulator (AC).
Infix operands are spilled to scratch cells below MP whose offsets are
tracked at compile time, and forward jumps for `if` are emitted into
reserved slots that are backpatched once the target is known.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from .ast import (
    Assign,
    Block,
    Expr,
    Identifier,
    If,
    Infix,
    Node,
    Number,
    Program,
    Read,
    Repeat,
    Stmt,
    Write,
)
from .machine import AC, AC1, GP, MP, PC, RM_OPS, RO_OPS, Instruction, register_code
from .symbols import SymbolTable
from .tokens import TK_EQ, TK_LT, TK_MINUS, TK_OVER, TK_PLUS, TK_TIMES

ARITH_OPS: dict[str, str] = {
    TK_PLUS: "ADD",
    TK_MINUS: "SUB",
    TK_TIMES: "MUL",
    TK_OVER: "DIV",
}

# Relational operators and the jump taken when the relation holds
RELATIONAL_OPS: dict[str, str] = {
    TK_LT: "JLT",
    TK_EQ: "JEQ",
}


class CodegenError(Exception):
    """Tree shape the generator has no rule for."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class InstructionBuffer:
    """Growable instruction store with a rewindable emit cursor."""

    def __init__(self) -> None:
        self.slots: list[Instruction | None] = []
        self.loc: int = 0

    def __len__(self) -> int:
        return len(self.slots)

    def put(self, op: str, target: int, a: int, b: int) -> Instruction:
        """Write an instruction at the cursor and advance it."""
        assert self.loc <= len(self.slots)
        inst = Instruction(self.loc, op, target, a, b)
        if self.loc == len(self.slots):
            self.slots.append(inst)
        else:
            self.slots[self.loc] = inst
        self.loc += 1
        return inst

    def skip(self, count: int) -> int:
        """Reserve count empty slots. Returns the address of the first."""
        assert self.loc == len(self.slots)
        start = self.loc
        for _ in range(count):
            self.slots.append(None)
        self.loc += count
        return start

    @contextmanager
    def backpatch(self, loc: int) -> Iterator[None]:
        """Rewind the cursor to a reserved slot; restore it to the end afterwards."""
        if loc >= len(self.slots) or self.slots[loc] is not None:
            raise ValueError("address " + str(loc) + " is not a reserved slot")
        self.loc = loc
        try:
            yield
        finally:
            self.loc = len(self.slots)

    def lines(self) -> list[str]:
        result: list[str] = []
        for inst in self.slots:
            if inst is None:
                raise ValueError("reserved slot was never patched")
            result.append(str(inst))
        return result


class CodeGenerator:
    """Single-use compiler state for one compilation unit."""

    def __init__(self) -> None:
        self.buffer: InstructionBuffer = InstructionBuffer()
        self.symbols: SymbolTable = SymbolTable()
        self.tmp_offset: int = 0

    def compile(self, program: Program) -> list[str]:
        """Translate a program and return its instruction listing."""
        self.emit_stmt(program)
        return self.buffer.lines()

    # ── Emission primitives ──────────────────────────────────

    def emit_rm(self, op: str, target: str, offset: int, base: str) -> None:
        assert op in RM_OPS
        self.buffer.put(op, register_code(target), offset, register_code(base))

    def emit_ro(self, op: str, target: str, first: str, second: str) -> None:
        assert op in RO_OPS
        self.buffer.put(op, register_code(target), register_code(first), register_code(second))

    def emit_rm_abs(self, op: str, target: str, absolute: int) -> None:
        """PC-relative jump to an absolute address from the cursor position."""
        self.emit_rm(op, target, absolute - (self.buffer.loc + 1), PC)

    # ── Statements ───────────────────────────────────────────

    def emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, (Program, Block)):
            for s in stmt.statements:
                self.emit_stmt(s)
        elif isinstance(stmt, Read):
            self.emit_ro("IN", AC, AC, AC)
            self.emit_rm("ST", AC, self.symbols.resolve(stmt.target.name), GP)
        elif isinstance(stmt, Write):
            self.emit_expr(stmt.source)
            self.emit_ro("OUT", AC, AC, AC)
        elif isinstance(stmt, Assign):
            self.emit_expr(stmt.value)
            self.emit_rm("ST", AC, self.symbols.resolve(stmt.target.name), GP)
        elif isinstance(stmt, If):
            self._emit_if(stmt)
        elif isinstance(stmt, Repeat):
            self._emit_repeat(stmt)
        else:
            raise _unsupported(stmt)

    def _emit_if(self, stmt: If) -> None:
        self.emit_expr(stmt.cond)
        after_cond = self.buffer.skip(1)
        self.emit_stmt(stmt.then_body)
        after_body = self.buffer.skip(1)
        end = len(self.buffer)
        with self.buffer.backpatch(after_cond):
            self.emit_rm_abs("JEQ", AC, end)
        # No else branch exists; this slot always falls through.
        with self.buffer.backpatch(after_body):
            self.emit_rm_abs("LDA", PC, end)

    def _emit_repeat(self, stmt: Repeat) -> None:
        start = len(self.buffer)
        self.emit_stmt(stmt.body)
        self.emit_expr(stmt.cond)
        self.emit_rm_abs("JEQ", AC, start)

    # ── Expressions ──────────────────────────────────────────

    def emit_expr(self, expr: Expr) -> None:
        if isinstance(expr, Number):
            self.emit_rm("LDC", AC, expr.value, AC)
        elif isinstance(expr, Identifier):
            offset = self.symbols.lookup(expr.name)
            if offset is None:
                raise CodegenError(
                    "undefined variable '" + expr.name + "'", expr.pos.line, expr.pos.col
                )
            self.emit_rm("LD", AC, offset, GP)
        elif isinstance(expr, Infix):
            self._emit_infix(expr)
        else:
            raise _unsupported(expr)

    def _emit_infix(self, expr: Infix) -> None:
        op = expr.op.type
        if op not in ARITH_OPS and op not in RELATIONAL_OPS:
            raise CodegenError(
                "unsupported infix operator '" + expr.op.value + "'",
                expr.op.line,
                expr.op.col,
            )
        self.emit_expr(expr.left)
        self.emit_rm("ST", AC, self.tmp_offset, MP)
        self.tmp_offset -= 1
        self.emit_expr(expr.right)
        self.tmp_offset += 1
        self.emit_rm("LD", AC1, self.tmp_offset, MP)
        if op in ARITH_OPS:
            self.emit_ro(ARITH_OPS[op], AC, AC1, AC)
            return
        # AC1 - AC, then materialize 0 or 1 from the jump
        self.emit_ro("SUB", AC, AC1, AC)
        self.emit_rm(RELATIONAL_OPS[op], AC, 2, PC)
        self.emit_rm("LDC", AC, 0, AC)
        self.emit_rm("LDA", PC, 1, PC)
        self.emit_rm("LDC", AC, 1, AC)


def _unsupported(node: Node) -> CodegenError:
    return CodegenError(
        "no translation for " + type(node).__name__, node.pos.line, node.pos.col
    )


def compile_program(program: Program) -> list[str]:
    """Compile a parsed program into listing lines with a fresh generator."""
    return CodeGenerator().compile(program)
