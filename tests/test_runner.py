"""Data-driven tests for the scanner, parser and code generator.

Test cases live in <phase>/*.tests files. Format:

    === test name
    source code here
    ---
    expected
    ---

Expected is one of:
    ok                      phase succeeds
    error: <substring>      phase fails with a message containing substring
    path.to.field = value   dot-path assertions against the phase's data
    listing                 (codegen only) the exact instruction listing
"""

import signal
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from tinyc import CodegenError, ParseError, compile_source, parse, scan
from tinyc.ast import to_dict

PHASE_TIMEOUT = 5
TESTS_DIR = Path(__file__).parent

TESTS = {
    "scan": "scanner",
    "parse": "parser",
    "codegen": "codegen",
}


# ---------------------------------------------------------------------------
# Timeout
# ---------------------------------------------------------------------------


def _timeout_handler(signum, frame):
    raise TimeoutError("phase timed out")


signal.signal(signal.SIGALRM, _timeout_handler)


# ---------------------------------------------------------------------------
# Spec file parsing
# ---------------------------------------------------------------------------


def parse_spec_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples.

    Leading indentation of the expected section is kept; listings are
    right-aligned.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i].rstrip())
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip("\n")
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_specs(test_dir: Path) -> list[tuple[str, str, str]]:
    """Glob *.tests in test_dir, return (test_id, input, expected) tuples."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for name, input_code, expected in parse_spec_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


# ---------------------------------------------------------------------------
# Phase result + assertion checker
# ---------------------------------------------------------------------------


@dataclass
class PhaseResult:
    errors: list[str] = field(default_factory=list)
    data: object = None
    text: str = ""


def resolve_dotpath(obj: object, path: str) -> object:
    """Resolve a dot-separated path against a nested dict/list structure."""
    current = obj
    for part in path.split("."):
        if part == "length":
            return len(current)
        if isinstance(current, list):
            current = current[int(part)]
        elif isinstance(current, dict):
            current = current[part]
        else:
            raise KeyError(
                f"cannot traverse {type(current).__name__} with key {part!r}"
            )
    return current


def to_comparable(value: object) -> str:
    """Convert a value to its string form for comparison."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def check_expected(expected: str, result: PhaseResult, phase: str) -> None:
    stripped = expected.strip()
    if stripped == "ok":
        if result.errors:
            pytest.fail(f"Expected ok, got error: {result.errors[0]}")
        return
    if stripped.startswith("error:"):
        expected_msg = stripped[6:].strip()
        if not result.errors:
            pytest.fail(f"Expected error containing '{expected_msg}', got ok")
        found = any(expected_msg.lower() in e.lower() for e in result.errors)
        if not found:
            pytest.fail(
                f"Expected error containing '{expected_msg}', got: {result.errors}"
            )
        return
    if result.errors:
        pytest.fail(f"{phase} failed: {result.errors[0]}")
    if phase == "codegen":
        if result.text != expected:
            pytest.fail(
                f"Listing mismatch:\n--- expected ---\n{expected}\n--- got ---\n{result.text}"
            )
        return
    # Dotpath assertions
    for line in stripped.split("\n"):
        line = line.strip()
        if not line:
            continue
        if "=" not in line:
            pytest.fail(f"Bad assertion (no '='): {line}")
        path, expected_val = line.split("=", 1)
        path = path.strip()
        expected_val = expected_val.strip()
        try:
            actual = resolve_dotpath(result.data, path)
        except (KeyError, IndexError, TypeError) as e:
            pytest.fail(f"Path '{path}' not found in result: {e}")
        actual_str = to_comparable(actual)
        if actual_str != expected_val:
            pytest.fail(
                f"Assertion failed: {path}\n"
                f"  expected: {expected_val!r}\n"
                f"  actual:   {actual_str!r}"
            )


# ---------------------------------------------------------------------------
# Phase runners
# ---------------------------------------------------------------------------


def run_scan(source: str) -> PhaseResult:
    try:
        signal.alarm(PHASE_TIMEOUT)
        tokens = scan(source)
    finally:
        signal.alarm(0)
    return PhaseResult(
        data={
            "tokens": [
                {"type": t.type, "value": t.value, "line": t.line, "col": t.col}
                for t in tokens
            ]
        }
    )


def run_parse(source: str) -> PhaseResult:
    try:
        signal.alarm(PHASE_TIMEOUT)
        program = parse(source)
        return PhaseResult(data=to_dict(program))
    except ParseError as e:
        return PhaseResult(errors=[str(e)])
    finally:
        signal.alarm(0)


def run_codegen(source: str) -> PhaseResult:
    try:
        signal.alarm(PHASE_TIMEOUT)
        return PhaseResult(text=compile_source(source))
    except (ParseError, CodegenError) as e:
        return PhaseResult(errors=[str(e)])
    finally:
        signal.alarm(0)


RUNNERS = {
    "scan": run_scan,
    "parse": run_parse,
    "codegen": run_codegen,
}


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    for name, subdir in TESTS.items():
        fixture = f"{name}_input"
        if fixture in metafunc.fixturenames:
            specs = discover_specs(TESTS_DIR / subdir)
            params = [pytest.param(inp, exp, id=tid) for tid, inp, exp in specs]
            metafunc.parametrize(f"{fixture},{name}_expected", params)


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------


def test_scan(scan_input, scan_expected):
    check_expected(scan_expected, run_scan(scan_input), "scan")


def test_parse(parse_input, parse_expected):
    check_expected(parse_expected, run_parse(parse_input), "parse")


def test_codegen(codegen_input, codegen_expected):
    check_expected(codegen_expected, run_codegen(codegen_input), "codegen")
