from __future__ import annotations

from typing import List

from lark import Tree

from ..tree import Node
from ..types import Frame, MkValue, NIL
from .helpers import EvalFunc

def eval_statements(children: List[Node], frame: Frame, eval_func: EvalFunc) -> MkValue:
    """Run statements in order in `frame`; the last statement's value is the result."""
    result: MkValue = NIL

    for child in children:
        result = eval_func(child, frame)

    return result

def eval_program(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    return eval_statements(n.children, frame, eval_func)

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    """`block` and `blockexpr` both get a fresh child scope."""
    return eval_statements(n.children, Frame(parent=frame), eval_func)

def eval_exprstmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    return eval_func(n.children[0], frame)
