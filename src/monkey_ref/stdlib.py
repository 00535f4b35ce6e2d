"""Built-in stdlib functions (puts, len, import, etc.) registered via monkey_ref.runtime."""

from __future__ import annotations

import os
from typing import List

from . import loader
from .runtime import call_value, register_stdlib
from .types import (
    Frame, MkArray, MkHash, MkInteger, MkString, MkValue, NIL,
    ArityMismatch, AssertionFailed, IndexOutOfBounds, ModuleImportError,
    MonkeyRuntimeError, TypeMismatch, type_name,
)
from .utils import stringify
from .eval.chains import index_value
from .eval.helpers import is_truthy

def _expect_array(fn_name: str, value: MkValue) -> MkArray:
    if isinstance(value, MkArray):
        return value

    raise TypeMismatch(f"argument to `{fn_name}` must be array, got '{type_name(value)}'")

def _expect_int(fn_name: str, value: MkValue) -> int:
    if isinstance(value, MkInteger):
        return value.value

    raise TypeMismatch(f"argument to `{fn_name}` must be int, got '{type_name(value)}'")

@register_stdlib("len", arity=1)
def std_len(_frame, args: List[MkValue]) -> MkInteger:
    match args[0]:
        case MkString(value=s):
            return MkInteger(len(s))
        case MkArray(items=items):
            return MkInteger(len(items))
        case other:
            raise TypeMismatch(f"'{type_name(other)}' object has no length")

@register_stdlib("puts")
def std_puts(_frame, args: List[MkValue]):
    if not args:
        raise ArityMismatch(1, 0)

    print(*(stringify(arg) for arg in args))
    return NIL

@register_stdlib("type", arity=1)
def std_type(_frame, args: List[MkValue]) -> MkString:
    return MkString(type_name(args[0]))

@register_stdlib("first", arity=1)
def std_first(_frame, args: List[MkValue]) -> MkValue:
    items = _expect_array("first", args[0]).items
    return items[0] if items else NIL

@register_stdlib("last", arity=1)
def std_last(_frame, args: List[MkValue]) -> MkValue:
    items = _expect_array("last", args[0]).items
    return items[-1] if items else NIL

@register_stdlib("rest", arity=1)
def std_rest(_frame, args: List[MkValue]) -> MkValue:
    items = _expect_array("rest", args[0]).items
    return MkArray(items[1:]) if items else NIL

@register_stdlib("push", arity=2)
def std_push(_frame, args: List[MkValue]) -> MkArray:
    items = _expect_array("push", args[0]).items
    return MkArray(items + (args[1],))

@register_stdlib("cons", arity=2)
def std_cons(_frame, args: List[MkValue]) -> MkArray:
    items = _expect_array("cons", args[1]).items
    return MkArray((args[0],) + items)

@register_stdlib("get", arity=2)
def std_get(_frame, args: List[MkValue]) -> MkValue:
    """Indexing that yields nil instead of failing on a bad position."""
    try:
        return index_value(args[0], args[1])
    except IndexOutOfBounds:
        return NIL

@register_stdlib("map", arity=2)
def std_map(frame: Frame, args: List[MkValue]) -> MkArray:
    fn, array = args
    items = _expect_array("map", array).items
    return MkArray(tuple(call_value(fn, [item], frame) for item in items))

@register_stdlib("range")
def std_range(_frame, args: List[MkValue]) -> MkArray:
    """range(end), range(start, end) or range(start, end, step) with step > 0."""
    if not args:
        raise ArityMismatch(1, 0)
    if len(args) > 3:
        raise ArityMismatch(3, len(args))

    bounds = [_expect_int("range", arg) for arg in args]
    start, step = 0, 1

    if len(bounds) == 1:
        end = bounds[0]
    else:
        start, end = bounds[0], bounds[1]
    if len(bounds) == 3:
        step = bounds[2]

    if step <= 0:
        raise TypeMismatch("third argument to `range` must be positive")

    return MkArray(tuple(MkInteger(i) for i in range(start, end, step)))

@register_stdlib("assert", arity=1)
def std_assert(_frame, args: List[MkValue]):
    if not is_truthy(args[0]):
        raise AssertionFailed(f"assertion failed on value {args[0]!r}")
    return NIL

@register_stdlib("import", arity=1)
def std_import(frame: Frame, args: List[MkValue]) -> MkHash:
    """
    Evaluate another file in a fresh top-level frame.

    The result is a hash of the module's top-level bindings. A file whose
    top level is still running is rejected.
    """
    from .evaluator import eval_node  # local import to avoid cycle
    from .parser_rd import parse_source

    target = args[0]
    if not isinstance(target, MkString):
        raise TypeMismatch(f"argument to `import` must be string, got '{type_name(target)}'")
    path = target.value

    base_dir = os.path.dirname(frame.source_path) if frame.source_path else None
    try:
        resolved = loader.resolve(path, base_dir)
    except FileNotFoundError:
        raise ModuleImportError(f"cannot import '{path}': file not found") from None

    if loader.is_evaluating(resolved):
        raise ModuleImportError(f"cyclic import of '{path}'")

    try:
        source = loader.load(resolved)
    except (OSError, UnicodeDecodeError) as e:
        raise ModuleImportError(f"cannot read '{path}': {e}") from e

    program, errors = parse_source(source)
    if errors:
        raise ModuleImportError(f"cannot import '{path}': {errors[0]}")

    module_frame = Frame(source_path=resolved)

    try:
        with loader.evaluating(resolved):
            eval_node(program, module_frame)
    except MonkeyRuntimeError as e:
        raise ModuleImportError(f"error while evaluating '{path}': {e.kind}: {e}") from e

    return MkHash({MkString(name): value for name, value in module_frame.vars.items()})
