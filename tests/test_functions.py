from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_runtime_case

SCENARIOS = [
    pytest.param("let identity = fn(x) { x; }; identity(5);", ("int", 5), None, id="identity"),
    pytest.param("let double = fn(x) { x * 2; }; double(5);", ("int", 10), None, id="double"),
    pytest.param("let add = fn(x, y) { x + y; }; add(5, 5);", ("int", 10), None, id="add"),
    pytest.param(
        "let add = fn(x, y) { x + y; }; add(5 + 5, add(5, 5));",
        ("int", 20),
        None,
        id="nested-call-args",
    ),
    pytest.param("fn(x) { x * 2 }(3)", ("int", 6), None, id="immediate-call"),
    pytest.param("fn() { 1 }()", ("int", 1), None, id="immediate-call-no-args"),
    pytest.param("let f = fn() {}; f()", ("nil", None), None, id="empty-body"),
    pytest.param("fn(x, y) { x }", ("function", "<function(x, y)>"), None, id="function-repr"),
    pytest.param("fn() { 1 }", ("function", "<function()>"), None, id="function-repr-no-params"),
    pytest.param("len", ("function", "<built-in function len>"), None, id="builtin-repr"),
    pytest.param(
        dedent(
            """\
            let make_adder = fn(x) { fn(y) { x + y } };
            let add5 = make_adder(5);
            add5(3)
        """
        ),
        ("int", 8),
        None,
        id="closure-adder",
    ),
    pytest.param(
        dedent(
            """\
            let make_adder = fn(x) { fn(y) { x + y } };
            let add1 = make_adder(1);
            let add10 = make_adder(10);
            [add1(1), add10(1), add1(2)]
        """
        ),
        ("array", [2, 11, 3]),
        None,
        id="closures-are-independent",
    ),
    pytest.param(
        dedent(
            """\
            let x = 1;
            let get = fn() { x };
            let x = 2;
            get()
        """
        ),
        ("int", 2),
        None,
        id="closure-captures-frame-by-reference",
    ),
    pytest.param(
        dedent(
            """\
            let apply_twice = fn(f, x) { f(f(x)) };
            apply_twice(fn(n) { n * 3 }, 2)
        """
        ),
        ("int", 18),
        None,
        id="higher-order",
    ),
    pytest.param(
        dedent(
            """\
            let compose = fn(f, g) { fn(x) { g(f(x)) } };
            let inc = fn(x) { x + 1 };
            let sq = fn(x) { x * x };
            compose(inc, sq)(4)
        """
        ),
        ("int", 25),
        None,
        id="compose",
    ),
    pytest.param(
        dedent(
            """\
            let fib = fn(n) {
                if n < 2 { return n; }
                fib(n - 1) + fib(n - 2)
            };
            fib(15)
        """
        ),
        ("int", 610),
        None,
        id="recursive-fib",
    ),
    pytest.param(
        dedent(
            """\
            let is_even = fn(n) { if n == 0 { true } else { is_odd(n - 1) } };
            let is_odd = fn(n) { if n == 0 { false } else { is_even(n - 1) } };
            [is_even(10), is_odd(7), is_even(3)]
        """
        ),
        ("array", [True, True, False]),
        None,
        id="mutual-recursion",
    ),
    pytest.param(
        dedent(
            """\
            let counter = fn() {
                let n = 0;
                let bump = fn() { n + 1 };
                let n = bump();
                let n = bump();
                n
            };
            counter()
        """
        ),
        ("int", 2),
        None,
        id="rebinding-visible-to-closure",
    ),
    pytest.param(
        "let f = fn(x) { let x = x + 1; x }; f(1)",
        ("int", 2),
        None,
        id="param-rebound-in-body",
    ),
    pytest.param(
        "let x = 10; let f = fn(x) { x }; [f(1), x]",
        ("array", [1, 10]),
        None,
        id="param-shadows-outer",
    ),
    pytest.param(
        "let f = fn(a) { a }; f()",
        ("error", ("ArityMismatch", "expected 1 arguments but 0 were given")),
        None,
        id="arity-too-few",
    ),
    pytest.param(
        "let f = fn() { 1 }; f(1, 2)",
        ("error", ("ArityMismatch", "expected 0 arguments but 2 were given")),
        None,
        id="arity-too-many",
    ),
    pytest.param(
        "5()",
        ("error", ("NotCallable", "'int' is not a function object")),
        None,
        id="call-int",
    ),
    pytest.param(
        '"f"(1)',
        ("error", ("NotCallable", "'string' is not a function object")),
        None,
        id="call-string",
    ),
    pytest.param(
        "nil()",
        ("error", ("NotCallable", "'nil'")),
        None,
        id="call-nil",
    ),
    pytest.param(
        "let f = fn() { f() }; f()",
        ("error", ("StackOverflow", "maximum recursion depth exceeded")),
        None,
        id="unbounded-recursion",
    ),
    pytest.param(
        "missing(1 / 0)",
        ("error", ("IdentifierNotFound", "identifier not found: 'missing'")),
        None,
        id="callee-evaluated-before-args",
    ),
    pytest.param(
        "let f = fn(a, b) { a }; f(1 / 0, undefined_name)",
        ("error", ("DivisionByZero", "division by zero")),
        None,
        id="args-evaluated-left-to-right",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_functions(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_frame_usable_after_stack_overflow() -> None:
    from monkey_ref.runner import new_top_frame, run

    frame = new_top_frame()
    first = run("let f = fn() { f() }; f()", frame)
    second = run("let g = fn(x) { x + 1 }; g(1)", frame)

    assert first.value.kind == "StackOverflow"
    assert repr(second.value) == "2"
