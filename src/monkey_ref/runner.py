from __future__ import annotations

import os
import sys
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from . import loader
from .evaluator import eval_expr
from .parser_rd import parse_source
from .runtime import init_stdlib
from .token_types import SourceError
from .types import Frame, MkError, MkNil, MkValue
from .utils import debug_py_trace_enabled, recursion_limit


@dataclass
class Outcome:
    """Result of one parse+eval pass. With diagnostics, nothing was evaluated."""
    value: Optional[MkValue]
    diagnostics: List[SourceError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics and not isinstance(self.value, MkError)

    def error_lines(self) -> List[str]:
        if self.diagnostics:
            return [f"Error: {diag}" for diag in self.diagnostics]
        if isinstance(self.value, MkError):
            return [f"Error: {self.value!r}"]
        return []


def new_top_frame(source_path: Optional[str]=None) -> Frame:
    return Frame(source_path=source_path)

def run(src: str, frame: Optional[Frame]=None, source_path: Optional[str]=None) -> Outcome:
    """
    Parse and evaluate `src`.

    A frame passed in is reused, so bindings persist across calls (REPL
    sessions). Parse diagnostics stop the pass before evaluation.
    """
    init_stdlib()

    program, diagnostics = parse_source(src)
    if diagnostics:
        return Outcome(None, diagnostics)

    if frame is None:
        frame = new_top_frame(source_path)

    script = os.path.realpath(source_path) if source_path is not None else None
    with loader.evaluating(script):
        return Outcome(eval_expr(program, frame, source_path=source_path))

def configure_runtime() -> None:
    """Apply MONKEY_RECURSION_LIMIT, if set."""
    try:
        limit = recursion_limit()
    except ValueError as e:
        raise SystemExit(f"Error: {e}") from None

    if limit is not None:
        sys.setrecursionlimit(limit)

def _load_source(arg: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Resolve CLI input into (source text, file path).
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data, None

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8"), str(candidate)

    return arg, None

def main() -> None:
    arg = None

    for token in sys.argv[1:]:
        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    configure_runtime()

    if arg is None:
        from .repl import repl
        repl()
        return

    source, path = _load_source(arg)

    try:
        outcome = run(source, source_path=path)
    except Exception as e:
        if debug_py_trace_enabled():
            traceback.print_exc()
        else:
            print(f"Internal error: {type(e).__name__}: {e}", file=sys.stderr)
        raise SystemExit(2) from None

    lines = outcome.error_lines()
    if lines:
        for line in lines:
            print(line, file=sys.stderr)
        raise SystemExit(1)

    if outcome.value is not None and not isinstance(outcome.value, MkNil):
        print(repr(outcome.value))

if __name__ == "__main__":
    main()
