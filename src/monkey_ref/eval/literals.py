from __future__ import annotations

from typing import Dict

from lark import Token, Tree

from ..tree import node_position
from ..types import (
    Frame, MkArray, MkHash, MkInteger, MkString, MkValue,
    UnhashableKey, is_hashable, type_name,
)
from .helpers import EvalFunc

def token_int(t: Token, _frame: Frame) -> MkInteger:
    return MkInteger(int(t.value))

def token_string(t: Token, _frame: Frame) -> MkString:
    return MkString(str(t.value))

def eval_array(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkArray:
    return MkArray(tuple(eval_func(ch, frame) for ch in n.children))

def eval_hash(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkHash:
    """Pairs evaluate key then value, left to right; a repeated key keeps its first slot."""
    pairs: Dict[MkValue, MkValue] = {}

    for pair in n.children:
        key_node, value_node = pair.children
        key = eval_func(key_node, frame)

        if not is_hashable(key):
            raise UnhashableKey(type_name(key)).at(*node_position(key_node))

        pairs[key] = eval_func(value_node, frame)

    return MkHash(pairs)