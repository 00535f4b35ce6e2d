from __future__ import annotations

import importlib
from typing import List, Optional

from .types import (
    MkFunction, StdlibFunction, MkValue, Frame, NIL,
    ArityMismatch, NotCallable, MonkeyReturnSignal,
    Builtins, StdlibFn, type_name,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("monkey_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: StdlibFn):
        Builtins.stdlib_functions[name] = StdlibFunction(name=name, fn=fn, arity=arity)
        return fn

    return dec

def call_function(fn: MkFunction, args: List[MkValue]) -> MkValue:
    """
    Invoke a user function:
    - arity must match len(fn.params)
    - params are bound in a fresh frame whose parent is the closure frame
    - a `return` anywhere in the body ends the call with its value
    """
    from .eval.blocks import eval_statements  # local import to avoid cycle
    from .evaluator import eval_node

    if len(args) != len(fn.params):
        raise ArityMismatch(len(fn.params), len(args))

    callee_frame = Frame(parent=fn.frame)

    for name, val in zip(fn.params, args):
        callee_frame.define(name, val)

    callee_frame.mark_function_frame()

    try:
        return eval_statements(fn.body.children, callee_frame, eval_node)
    except MonkeyReturnSignal as signal:
        return signal.value

def call_stdlib(std: StdlibFunction, args: List[MkValue], frame: Frame) -> MkValue:
    if std.arity is not None and len(args) != std.arity:
        raise ArityMismatch(std.arity, len(args))

    result = std.fn(frame, args)
    return NIL if result is None else result

def call_value(callee: MkValue, args: List[MkValue], frame: Frame) -> MkValue:
    match callee:
        case MkFunction():
            return call_function(callee, args)
        case StdlibFunction():
            return call_stdlib(callee, args, frame)
        case _:
            raise NotCallable(type_name(callee))
