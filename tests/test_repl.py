from __future__ import annotations

import pytest

from monkey_ref.repl import (
    _compute_indent,
    _handle_slash,
    _normalize,
    eval_line,
    needs_more_input,
    open_depth,
)
from monkey_ref.repl_highlight import GROUP_STYLE, _highlight_line
from monkey_ref.runner import new_top_frame
from monkey_ref.utils import debug_py_trace_enabled

CONTINUATION_CASES = [
    pytest.param("let a = 1;", False, id="complete-statement"),
    pytest.param("let f = fn(x) {", True, id="open-brace"),
    pytest.param("let h = #{", True, id="open-hash"),
    pytest.param("[1, 2,", True, id="open-bracket"),
    pytest.param("add(1,", True, id="open-paren"),
    pytest.param("if x {\n  1\n}", False, id="closed-multiline"),
    pytest.param('let s = "abc', True, id="open-string"),
    pytest.param('"a\\q"', False, id="bad-escape-submits"),
    pytest.param("let a = @", False, id="illegal-character-submits"),
    pytest.param("}", False, id="extra-close"),
]


@pytest.mark.parametrize("text, expected", CONTINUATION_CASES)
def test_needs_more_input(text: str, expected: bool) -> None:
    assert needs_more_input(text) is expected


def test_open_depth() -> None:
    assert open_depth("fn() { [1, #{") == 3
    assert open_depth("1 }") == -1
    assert open_depth('"unterminated') == -1


def test_compute_indent() -> None:
    assert _compute_indent("let f = fn() {") == "    "
    assert _compute_indent("if a { if b {") == " " * 8
    assert _compute_indent("1 }") == ""


def test_normalize_strips_invisible_characters() -> None:
    assert _normalize("let\u00a0x = 1;\u200b\r") == "letx = 1;"
    assert _normalize("\ufeffputs(1)") == "puts(1)"


def test_eval_line_prints_repr(capsys) -> None:
    frame = new_top_frame()
    outcome = eval_line('"hi"', frame)

    assert outcome.ok
    assert capsys.readouterr().out == '"hi"\n'


def test_eval_line_keeps_session_bindings(capsys) -> None:
    frame = new_top_frame()
    eval_line("let x = 40;", frame)
    eval_line("x + 2", frame)

    assert capsys.readouterr().out == "42\n"


def test_eval_line_reports_errors_to_stderr(capsys) -> None:
    frame = new_top_frame()
    eval_line("let x 1;", frame)
    eval_line("nope", frame)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == [
        "Error: expected '=', found INT '1' (line 1, col 7)",
        "Error: IdentifierNotFound: identifier not found: 'nope' (line 1, col 1)",
    ]


def test_slash_reset_replaces_frame(capsys) -> None:
    frame_box = [new_top_frame()]
    eval_line("let kept = 1;", frame_box[0])

    assert _handle_slash("/reset", frame_box)
    outcome = eval_line("kept", frame_box[0])

    assert outcome.value.kind == "IdentifierNotFound"
    assert "Environment reset." in capsys.readouterr().out


def test_slash_py_traceback_toggles(capsys) -> None:
    frame_box = [new_top_frame()]

    assert _handle_slash("/py-traceback on", frame_box)
    assert debug_py_trace_enabled()
    assert _handle_slash("/py-traceback", frame_box)
    assert not debug_py_trace_enabled()
    assert _handle_slash("/py-traceback off", frame_box)
    assert not debug_py_trace_enabled()

    assert capsys.readouterr().out.splitlines() == [
        "Python traceback: on",
        "Python traceback: off",
        "Python traceback: off",
    ]


def test_slash_py_traceback_usage(capsys) -> None:
    assert _handle_slash("/py-traceback maybe", [new_top_frame()])
    assert "Usage: /py-traceback [on|off]" in capsys.readouterr().err


def test_unknown_slash_command(capsys) -> None:
    assert _handle_slash("/frobnicate", [new_top_frame()])
    assert capsys.readouterr().err == "Unknown command: /frobnicate\n"


def test_non_command_line_is_not_handled() -> None:
    assert not _handle_slash("1 / 2", [new_top_frame()])


def test_highlight_groups() -> None:
    fragments = _highlight_line('let s = len("ab"); // note', frozenset({"len"}))

    assert "".join(text for _, text in fragments) == 'let s = len("ab"); // note'
    assert (GROUP_STYLE["keyword"], "let") in fragments
    assert (GROUP_STYLE["builtin"], "len") in fragments
    assert (GROUP_STYLE["string"], '"ab"') in fragments
    assert (GROUP_STYLE["comment"], "// note") in fragments


def test_highlight_numbers_and_constants() -> None:
    fragments = _highlight_line("1_000 + nil", frozenset())

    assert fragments[0] == (GROUP_STYLE["number"], "1_000")
    assert (GROUP_STYLE["constant"], "nil") in fragments


def test_highlight_escaped_string_keeps_source_text() -> None:
    line = r'puts("a\"b")'
    fragments = _highlight_line(line, frozenset())

    assert "".join(text for _, text in fragments) == line
    assert (GROUP_STYLE["string"], r'"a\"b"') in fragments


def test_highlight_unlexable_line_is_plain() -> None:
    assert _highlight_line('"open', frozenset()) == [("", '"open')]
