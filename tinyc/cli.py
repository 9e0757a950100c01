"""Command-line entry point: TINY source in, instruction listing out."""

from __future__ import annotations

import json
import sys

from .ast import to_dict
from .codegen import CodegenError, compile_program
from .parse import ParseError, Parser
from .tokens import Scanner, tokenize

PHASES: list[str] = [
    "tokens",
    "parse",
]

USAGE: str = """\
tinyc [OPTIONS] [INPUT] [-o OUTPUT]

Compile a TINY program to target machine instructions.

Options:
  --stop-at PHASE     Stop after phase and print it as JSON: tokens, parse
  -o, --output FILE   Write output to FILE instead of stdout
  --help              Show this help message
"""


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)
    return (source, 0)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w") as f:
                f.write(output + "\n")
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    print(output)
    return 0


def to_json(obj: object) -> str:
    return json.dumps(obj, indent=2)


def run_pipeline(source: str, stop_at: str | None) -> tuple[int, str]:
    """Run scan, parse and codegen. Returns (exit_code, output)."""
    if stop_at == "tokens":
        tokens = tokenize(source)
        return (
            0,
            to_json(
                [
                    {"type": t.type, "value": t.value, "line": t.line, "col": t.col}
                    for t in tokens
                ]
            ),
        )
    try:
        program = Parser(Scanner(source)).parse_program()
    except ParseError as e:
        print("error:" + str(e.line) + ":" + str(e.col) + ": " + e.msg, file=sys.stderr)
        return (1, "")
    if stop_at == "parse":
        return (0, to_json(to_dict(program)))
    try:
        lines = compile_program(program)
    except CodegenError as e:
        print("error:" + str(e.line) + ":" + str(e.col) + ": " + e.msg, file=sys.stderr)
        return (1, "")
    return (0, "\n".join(lines))


def parse_args(args: list[str]) -> tuple[str | None, str | None, str | None]:
    """Parse command-line arguments. Returns (stop_at, input_file, output_file)."""
    stop_at: str | None = None
    input_file: str | None = None
    output_file: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg == "--stop-at":
            if i + 1 >= len(args):
                print("error: --stop-at requires an argument", file=sys.stderr)
                sys.exit(2)
            stop_at = args[i + 1]
            i += 2
        elif arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("error: " + arg + " requires an argument", file=sys.stderr)
                sys.exit(2)
            output_file = args[i + 1]
            i += 2
        elif arg.startswith("-"):
            print("error: unknown flag '" + arg + "'", file=sys.stderr)
            sys.exit(2)
        else:
            if input_file is not None:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
                sys.exit(2)
            input_file = arg
            i += 1
    if stop_at is not None and stop_at not in PHASES:
        print("error: unknown phase '" + stop_at + "'", file=sys.stderr)
        sys.exit(2)
    return (stop_at, input_file, output_file)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    stop_at, input_file, output_file = parse_args(
        argv if argv is not None else sys.argv[1:]
    )
    source, err = read_source(input_file)
    if err != 0:
        return err
    if len(source) == 0:
        print("error: no input provided", file=sys.stderr)
        return 2
    exit_code, output = run_pipeline(source, stop_at)
    if exit_code != 0:
        return exit_code
    return write_output(output, output_file)


if __name__ == "__main__":
    sys.exit(main())
