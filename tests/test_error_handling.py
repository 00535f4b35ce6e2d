from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_program
from monkey_ref.evaluator import eval_expr
from monkey_ref.parser_rd import parse_source
from monkey_ref.types import (
    ArityMismatch,
    DivisionByZero,
    Frame,
    IdentifierNotFound,
    MkError,
    MonkeyRuntimeError,
    TypeMismatch,
)

POSITION_CASES = [
    pytest.param("foobar", "IdentifierNotFound", (1, 1), id="identifier"),
    pytest.param("let a = 1;\n  a + b", "IdentifierNotFound", (2, 7), id="identifier-operand"),
    pytest.param("1 +\n  true", "TypeMismatch", (1, 3), id="infix-at-operator"),
    pytest.param("  -true", "TypeMismatch", (1, 3), id="prefix-at-operator"),
    pytest.param("10 / (5 - 5)", "DivisionByZero", (1, 4), id="division"),
    pytest.param("[1, 2][5]", "IndexOutOfBounds", (1, 7), id="index-at-bracket"),
    pytest.param("let f = fn(x) { x };\nf()", "ArityMismatch", (2, 2), id="call-at-paren"),
    pytest.param('#{"a": 1, [2]: 3}', "UnhashableKey", (1, 11), id="hash-key-position"),
    pytest.param(
        dedent(
            """\
            let f = fn(x) {
                let y = x * 2;
                y / 0
            };
            f(1)
        """
        ),
        "DivisionByZero",
        (3, 7),
        id="innermost-node-inside-function",
    ),
    pytest.param("if 1 { 2 + nil }", "TypeMismatch", (1, 10), id="inside-if-block"),
]


@pytest.mark.parametrize("source, kind, position", POSITION_CASES)
def test_runtime_error_positions(source: str, kind: str, position) -> None:
    outcome = run_program(source)

    assert not outcome.diagnostics
    err = outcome.value
    assert isinstance(err, MkError), f"expected MkError, got {err!r}"
    assert err.kind == kind
    assert (err.line, err.column) == position


def test_error_value_repr() -> None:
    err = run_program("let x = 5;\nx + true").value
    assert repr(err) == (
        "TypeMismatch: unsupported operand types for infix operator `+`: "
        "'int' and 'bool' (line 2, col 3)"
    )


def test_error_stops_evaluation(capsys) -> None:
    outcome = run_program('puts("before"); 1 / 0; puts("after")')

    assert outcome.value.kind == "DivisionByZero"
    assert capsys.readouterr().out == "before\n"


def test_error_inside_array_stops_remaining_elements(capsys) -> None:
    outcome = run_program('[puts("a"), 1 / 0, puts("b")]')

    assert outcome.value.kind == "DivisionByZero"
    assert capsys.readouterr().out == "a\n"


def test_eval_expr_never_raises_for_program_errors() -> None:
    program, errors = parse_source("undefined_thing(1)")
    assert not errors

    result = eval_expr(program, Frame())
    assert isinstance(result, MkError)
    assert result.kind == "IdentifierNotFound"


def test_eval_expr_builds_a_frame_when_none_given() -> None:
    program, _ = parse_source("let a = 2; a * 21")
    assert repr(eval_expr(program)) == "42"


def test_bindings_before_an_error_survive_in_frame() -> None:
    frame = Frame()
    program, _ = parse_source("let kept = 1; let lost = 1 / 0;")

    result = eval_expr(program, frame)

    assert result.kind == "DivisionByZero"
    assert repr(frame.get("kept")) == "1"
    assert "lost" not in frame.vars


ERROR_CLASS_CASES = [
    pytest.param(IdentifierNotFound("x"), "IdentifierNotFound", "identifier not found: 'x'", id="identifier"),
    pytest.param(TypeMismatch("bad"), "TypeMismatch", "bad", id="type-mismatch"),
    pytest.param(DivisionByZero(), "DivisionByZero", "division by zero", id="division"),
    pytest.param(
        ArityMismatch(2, 1),
        "ArityMismatch",
        "wrong number of arguments: expected 2 arguments but 1 were given",
        id="arity",
    ),
]


@pytest.mark.parametrize("exc, kind, message", ERROR_CLASS_CASES)
def test_runtime_error_to_value(exc: MonkeyRuntimeError, kind: str, message: str) -> None:
    value = exc.at(3, 4).to_value()

    assert value == MkError(kind, message, 3, 4)
    assert str(exc) == f"{message} (line 3, col 4)"


def test_first_position_wins() -> None:
    exc = TypeMismatch("bad").at(1, 2).at(5, 6)
    assert (exc.line, exc.column) == (1, 2)


def test_unpositioned_error_repr() -> None:
    assert repr(MkError("StackOverflow", "maximum recursion depth exceeded")) == (
        "StackOverflow: maximum recursion depth exceeded"
    )
