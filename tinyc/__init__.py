"""TINY compiler — public API."""

from __future__ import annotations

from .ast import Program
from .codegen import CodegenError as CodegenError, compile_program
from .parse import ParseError as ParseError, Parser
from .tokens import Scanner, Token, tokenize


def scan(source: str) -> list[Token]:
    """Tokenize TINY source into a list ending with an EOF token."""
    return tokenize(source)


def parse(source: str) -> Program:
    """Parse TINY source code into a Program tree."""
    parser = Parser(Scanner(source))
    return parser.parse_program()


def compile_source(source: str) -> str:
    """Parse and compile TINY source. Returns the newline-joined listing."""
    return "\n".join(compile_program(parse(source)))
