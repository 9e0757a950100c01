"""TINY scanner — turns source text into a lazy stream of tokens."""

from __future__ import annotations

from dataclasses import dataclass


# Token type constants
TK_EOF = "EOF"
TK_ILLEGAL = "ILLEGAL"
TK_IDENT = "IDENT"
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"

# Keywords use their own spelling as token type
TK_READ = "read"
TK_IF = "if"
TK_THEN = "then"
TK_REPEAT = "repeat"
TK_UNTIL = "until"
TK_WRITE = "write"
TK_END = "end"

# Operators likewise
TK_LT = "<"
TK_LE = "<="
TK_EQ = "="
TK_ASSIGN = ":="
TK_PLUS = "+"
TK_MINUS = "-"
TK_TIMES = "*"
TK_OVER = "/"
TK_SEMI = ";"

KEYWORDS: dict[str, str] = {
    "read": TK_READ,
    "if": TK_IF,
    "then": TK_THEN,
    "repeat": TK_REPEAT,
    "until": TK_UNTIL,
    "write": TK_WRITE,
    "end": TK_END,
}

SINGLE_OPS: dict[str, str] = {
    "=": TK_EQ,
    "+": TK_PLUS,
    "-": TK_MINUS,
    "*": TK_TIMES,
    "/": TK_OVER,
    ";": TK_SEMI,
}

WHITESPACE: set[str] = {" ", "\t", "\r", "\n"}


@dataclass(frozen=True)
class Token:
    """A token with type, literal text, and source position."""

    type: str
    value: str
    line: int
    col: int


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_letter(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z")


def strip_comments(source: str) -> tuple[str, list[tuple[int, int]]]:
    """Drop `{ ... }` comments.

    Returns the remaining text and, for each remaining character, its
    (line, col) in the original source. One extra trailing entry holds the
    end-of-input position. Comments do not nest; an unterminated comment
    runs to the end of input and a stray `}` is discarded.
    """
    chars: list[str] = []
    positions: list[tuple[int, int]] = []
    in_comment = False
    line = 1
    col = 1
    for c in source:
        if c == "{":
            in_comment = True
        elif c == "}":
            in_comment = False
        elif not in_comment:
            chars.append(c)
            positions.append((line, col))
        if c == "\n":
            line += 1
            col = 1
        else:
            col += 1
    positions.append((line, col))
    return "".join(chars), positions


class Scanner:
    """Single-character lookahead scanner over comment-free text."""

    def __init__(self, source: str):
        self.text, self.positions = strip_comments(source)
        self.pos: int = 0

    def _peek_char(self) -> str:
        if self.pos >= len(self.text):
            return ""
        return self.text[self.pos]

    def _token(self, type_: str, value: str, start: int) -> Token:
        line, col = self.positions[start]
        return Token(type_, value, line, col)

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def next_token(self) -> Token:
        """Return the next token; keeps returning EOF once input is exhausted."""
        self._skip_whitespace()
        start = self.pos
        c = self._peek_char()
        if c == "":
            return self._token(TK_EOF, "", start)
        self.pos += 1

        if _is_letter(c):
            while _is_letter(self._peek_char()):
                self.pos += 1
            word = self.text[start : self.pos]
            return self._token(KEYWORDS.get(word, TK_IDENT), word, start)

        if _is_digit(c):
            while _is_digit(self._peek_char()):
                self.pos += 1
            return self._token(TK_NUMBER, self.text[start : self.pos], start)

        if c == "<":
            if self._peek_char() == "=":
                self.pos += 1
                return self._token(TK_LE, "<=", start)
            return self._token(TK_LT, "<", start)

        if c == ":":
            if self._peek_char() == "=":
                self.pos += 1
                return self._token(TK_ASSIGN, ":=", start)
            return self._token(TK_ILLEGAL, ":", start)

        if c == '"':
            end = self.text.find('"', self.pos)
            if end < 0:
                self.pos = len(self.text)
                return self._token(TK_ILLEGAL, self.text[start:], start)
            value = self.text[self.pos : end]
            self.pos = end + 1
            return self._token(TK_STRING, value, start)

        if c in SINGLE_OPS:
            return self._token(SINGLE_OPS[c], c, start)

        return self._token(TK_ILLEGAL, c, start)


def tokenize(source: str) -> list[Token]:
    """Scan the whole source into a list ending with a single TK_EOF."""
    scanner = Scanner(source)
    tokens: list[Token] = []
    while True:
        tok = scanner.next_token()
        tokens.append(tok)
        if tok.type == TK_EOF:
            return tokens
