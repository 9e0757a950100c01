"""TINY syntax tree — node definitions produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass

from .tokens import Token


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# BASES
# ============================================================


@dataclass
class Node:
    """Base for all syntax tree nodes."""

    pos: Pos


@dataclass
class Stmt(Node):
    """Base for statement nodes."""


@dataclass
class Expr(Node):
    """Base for expression nodes."""


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Identifier(Expr):
    """Variable reference."""

    name: str


@dataclass
class Number(Expr):
    """Integer literal."""

    value: int


@dataclass
class Infix(Expr):
    """left op right — at most one per source expression."""

    op: Token
    left: Expr
    right: Expr


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Program(Stmt):
    """The compilation unit."""

    statements: list[Stmt]


@dataclass
class Block(Stmt):
    """Body of if/repeat."""

    statements: list[Stmt]


@dataclass
class Assign(Stmt):
    """target := value;"""

    target: Identifier
    value: Expr


@dataclass
class Read(Stmt):
    """read target;"""

    target: Identifier


@dataclass
class Write(Stmt):
    """write source;"""

    source: Identifier


@dataclass
class If(Stmt):
    """if cond then body end — there is no else."""

    cond: Expr
    then_body: Block


@dataclass
class Repeat(Stmt):
    """repeat body until cond;"""

    body: Block
    cond: Expr


# ============================================================
# SERIALIZATION
# ============================================================


def to_dict(node: Node) -> dict[str, object]:
    """Convert a node and its children to nested dicts."""
    d: dict[str, object] = {
        "kind": type(node).__name__,
        "line": node.pos.line,
        "col": node.pos.col,
    }
    if isinstance(node, (Program, Block)):
        d["statements"] = [to_dict(s) for s in node.statements]
    elif isinstance(node, Assign):
        d["target"] = to_dict(node.target)
        d["value"] = to_dict(node.value)
    elif isinstance(node, Read):
        d["target"] = to_dict(node.target)
    elif isinstance(node, Write):
        d["source"] = to_dict(node.source)
    elif isinstance(node, If):
        d["cond"] = to_dict(node.cond)
        d["then_body"] = to_dict(node.then_body)
    elif isinstance(node, Repeat):
        d["body"] = to_dict(node.body)
        d["cond"] = to_dict(node.cond)
    elif isinstance(node, Infix):
        d["op"] = node.op.value
        d["left"] = to_dict(node.left)
        d["right"] = to_dict(node.right)
    elif isinstance(node, Identifier):
        d["name"] = node.name
    elif isinstance(node, Number):
        d["value"] = node.value
    else:
        raise TypeError("unknown node kind: " + type(node).__name__)
    return d
