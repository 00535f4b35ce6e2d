from __future__ import annotations

from lark import Tree
from ..types import Frame, MkValue, NIL
from .helpers import EvalFunc

def eval_let(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    """Bind in the current frame; a repeated `let` rebinds. Yields nil."""
    name_tok, value_node = n.children
    value = eval_func(value_node, frame)
    frame.define(str(name_tok), value)
    return NIL
