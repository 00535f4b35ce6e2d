from __future__ import annotations

from lark import Tree

from ..tree import child_by_label
from ..types import Frame, MkFunction

def eval_fn_literal(n: Tree, frame: Frame) -> MkFunction:
    """Function literals close over the frame they are evaluated in."""
    params_node = child_by_label(n, 'params')
    body = child_by_label(n, 'block')
    params = tuple(str(tok) for tok in params_node.children) if params_node is not None else ()

    return MkFunction(params=params, body=body, frame=frame)
