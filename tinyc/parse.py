"""TINY parser — recursive descent, one method per grammar production."""

from __future__ import annotations

from .ast import (
    Assign,
    Block,
    Expr,
    Identifier,
    If,
    Infix,
    Number,
    Pos,
    Program,
    Read,
    Repeat,
    Stmt,
    Write,
)
from .tokens import (
    TK_ASSIGN,
    TK_END,
    TK_EOF,
    TK_EQ,
    TK_IDENT,
    TK_IF,
    TK_ILLEGAL,
    TK_LE,
    TK_LT,
    TK_MINUS,
    TK_NUMBER,
    TK_OVER,
    TK_PLUS,
    TK_READ,
    TK_REPEAT,
    TK_SEMI,
    TK_STRING,
    TK_THEN,
    TK_TIMES,
    TK_UNTIL,
    TK_WRITE,
    Scanner,
    Token,
)

# Operators that may join the two operands of an expression
INFIX_OPS: set[str] = {TK_LT, TK_LE, TK_EQ, TK_PLUS, TK_MINUS, TK_TIMES, TK_OVER}

# Tokens that close a block without being consumed by it
BLOCK_END: set[str] = {TK_END, TK_UNTIL}

# Nested if/repeat blocks allowed before parsing gives up
MAX_BLOCK_DEPTH = 200


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def describe(tok: Token) -> str:
    """Render a token for diagnostics."""
    if tok.type == TK_EOF:
        return "end of input"
    if tok.type == TK_ILLEGAL:
        return "unrecognized input '" + tok.value + "'"
    if tok.type == TK_STRING:
        return 'string "' + tok.value + '"'
    return "'" + tok.value + "'"


class Parser:
    """Recursive descent parser for TINY with one buffered lookahead token."""

    def __init__(self, scanner: Scanner):
        self.scanner: Scanner = scanner
        self.peek: Token = scanner.next_token()
        self.depth: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.peek

    def advance(self) -> Token:
        tok = self.peek
        self.peek = self.scanner.next_token()
        return tok

    def at(self, type_: str) -> bool:
        return self.peek.type == type_

    def expect(self, type_: str) -> Token:
        if self.peek.type != type_:
            raise self.error("expected '" + type_ + "', got " + describe(self.peek))
        return self.advance()

    def expect_ident(self) -> Identifier:
        tok = self.peek
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + describe(tok))
        self.advance()
        return Identifier(self._tok_pos(tok), tok.value)

    def error(self, msg: str) -> ParseError:
        return ParseError(msg, self.peek.line, self.peek.col)

    def _tok_pos(self, tok: Token) -> Pos:
        return Pos(tok.line, tok.col)

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        pos = self._tok_pos(self.peek)
        stmts: list[Stmt] = []
        while not self.at(TK_EOF):
            stmts.append(self.parse_stmt())
        return Program(pos, stmts)

    def parse_block(self) -> Block:
        """Statements up to `end` or `until`, which are left for the caller."""
        if self.depth >= MAX_BLOCK_DEPTH:
            raise self.error("blocks nested too deeply")
        pos = self._tok_pos(self.peek)
        stmts: list[Stmt] = []
        self.depth += 1
        while self.peek.type not in BLOCK_END:
            stmts.append(self.parse_stmt())
        self.depth -= 1
        return Block(pos, stmts)

    # ── Statements ───────────────────────────────────────────

    def parse_stmt(self) -> Stmt:
        tok = self.peek
        if tok.type == TK_IDENT:
            return self.parse_assign()
        if tok.type == TK_IF:
            return self.parse_if()
        if tok.type == TK_REPEAT:
            return self.parse_repeat()
        if tok.type == TK_READ:
            return self.parse_read()
        if tok.type == TK_WRITE:
            return self.parse_write()
        raise self.error("expected statement, got " + describe(tok))

    def parse_assign(self) -> Assign:
        target = self.expect_ident()
        self.expect(TK_ASSIGN)
        value = self.parse_expr()
        self.expect(TK_SEMI)
        return Assign(target.pos, target, value)

    def parse_if(self) -> If:
        pos = self._tok_pos(self.expect(TK_IF))
        cond = self.parse_expr()
        self.expect(TK_THEN)
        body = self.parse_block()
        self.expect(TK_END)
        return If(pos, cond, body)

    def parse_repeat(self) -> Repeat:
        pos = self._tok_pos(self.expect(TK_REPEAT))
        body = self.parse_block()
        self.expect(TK_UNTIL)
        cond = self.parse_expr()
        self.expect(TK_SEMI)
        return Repeat(pos, body, cond)

    def parse_read(self) -> Read:
        pos = self._tok_pos(self.expect(TK_READ))
        target = self.expect_ident()
        self.expect(TK_SEMI)
        return Read(pos, target)

    def parse_write(self) -> Write:
        pos = self._tok_pos(self.expect(TK_WRITE))
        source = self.expect_ident()
        self.expect(TK_SEMI)
        return Write(pos, source)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        """Expr = Prefix ( InfixOp Prefix )? — never more than one operator."""
        left = self.parse_prefix()
        if self.peek.type not in INFIX_OPS:
            return left
        op = self.advance()
        right = self.parse_prefix()
        return Infix(left.pos, op, left, right)

    def parse_prefix(self) -> Expr:
        tok = self.peek
        if tok.type == TK_IDENT:
            self.advance()
            return Identifier(self._tok_pos(tok), tok.value)
        if tok.type == TK_NUMBER:
            self.advance()
            return Number(self._tok_pos(tok), int(tok.value))
        raise self.error("expected identifier or number, got " + describe(tok))
