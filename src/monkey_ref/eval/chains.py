from __future__ import annotations

from typing import List

from lark import Tree

from ..runtime import call_value
from ..types import (
    Frame, MkArray, MkHash, MkInteger, MkString, MkValue, NIL,
    IndexOutOfBounds, TypeMismatch, UnhashableKey, is_hashable, type_name,
)
from .helpers import EvalFunc

def eval_args_node(args_node: Tree, frame: Frame, eval_func: EvalFunc) -> List[MkValue]:
    return [eval_func(arg, frame) for arg in args_node.children]

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    """Callee first, then arguments left to right."""
    callee_node, args_node = n.children
    callee = eval_func(callee_node, frame)
    args = eval_args_node(args_node, frame, eval_func)
    return call_value(callee, args, frame)

def eval_index(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    target_node, index_node = n.children
    target = eval_func(target_node, frame)
    index = eval_func(index_node, frame)
    return index_value(target, index)

def index_value(target: MkValue, index: MkValue) -> MkValue:
    match target:
        case MkArray(items=items):
            return items[_sequence_position(index, len(items), "array")]
        case MkString(value=s):
            return MkString(s[_sequence_position(index, len(s), "string")])
        case MkHash(pairs=pairs):
            if not is_hashable(index):
                raise UnhashableKey(type_name(index))
            return pairs.get(index, NIL)
        case _:
            raise TypeMismatch(f"'{type_name(target)}' is not an array, string or hash object")

def _sequence_position(index: MkValue, length: int, kind: str) -> int:
    if not isinstance(index, MkInteger):
        raise TypeMismatch(f"{kind} index must be integer, not '{type_name(index)}'")

    pos = index.value
    if pos < 0 or pos >= length:
        raise IndexOutOfBounds(pos)

    return pos
