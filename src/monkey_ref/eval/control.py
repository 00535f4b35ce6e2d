from __future__ import annotations

from lark import Tree
from ..types import Frame, InvalidReturn, MkValue, MonkeyReturnSignal, NIL
from .helpers import EvalFunc, current_function_frame, is_truthy

def eval_return_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    if current_function_frame(frame) is None:
        raise InvalidReturn()

    value = eval_func(n.children[0], frame) if n.children else NIL

    raise MonkeyReturnSignal(value)

def eval_if(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    cond, consequence, *rest = n.children

    if is_truthy(eval_func(cond, frame)):
        return eval_func(consequence, frame)

    if rest:
        return eval_func(rest[0], frame)

    return NIL
