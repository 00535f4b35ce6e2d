from __future__ import annotations

from typing import Callable, Optional
from lark import Token, Tree

from .runtime import init_stdlib
from .types import (
    Frame,
    MkValue,
    MonkeyRuntimeError,
    StackOverflow,
    FALSE,
    NIL,
    TRUE,
)
from .tree import Node, is_token, node_position

from .eval.blocks import eval_program, eval_block, eval_exprstmt
from .eval.chains import eval_call, eval_index
from .eval.control import eval_if, eval_return_stmt
from .eval.expr import eval_infix, eval_prefix
from .eval.fn import eval_fn_literal
from .eval.let import eval_let
from .eval.literals import eval_array, eval_hash, token_int, token_string


def _maybe_attach_location(exc: MonkeyRuntimeError, node: Node) -> None:
    line, column = node_position(node)
    exc.at(line, column)

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame]=None, source_path: Optional[str]=None) -> MkValue:
    """
    Evaluate a parsed program (or any node) and return its value.

    Runtime failures come back as an MkError value; this never raises for a
    failing Monkey program.
    """
    init_stdlib()

    if frame is None:
        frame = Frame(source_path=source_path)
    elif source_path is not None:
        frame.source_path = source_path

    try:
        return eval_node(ast, frame)
    except MonkeyRuntimeError as e:
        _maybe_attach_location(e, ast)
        return e.to_value()
    except RecursionError:
        return StackOverflow().to_value()

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> MkValue:
    try:
        return _eval_node_inner(n, frame)
    except MonkeyRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> MkValue:
    if is_token(n):
        return _eval_token(n, frame)

    handler = _NODE_DISPATCH.get(n.data)
    if handler is not None:
        return handler(n, frame)

    match n.data:
        case 'return':
            return eval_return_stmt(n, frame, eval_node)
        case 'fn':
            return eval_fn_literal(n, frame)
        case _:
            raise MonkeyRuntimeError(f"Unknown node: {n.data}")

# ---------------- Tokens ----------------

def _eval_token(t: Token, frame: Frame) -> MkValue:
    handler = _TOKEN_DISPATCH.get(t.type)
    if handler:
        return handler(t, frame)

    if t.type == 'IDENT':
        return frame.get(str(t))

    raise MonkeyRuntimeError(f"Unhandled token {t.type}:{t.value}")

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], MkValue]] = {
    'program': lambda n, frame: eval_program(n, frame, eval_node),
    'exprstmt': lambda n, frame: eval_exprstmt(n, frame, eval_node),
    'let': lambda n, frame: eval_let(n, frame, eval_node),
    'block': lambda n, frame: eval_block(n, frame, eval_node),
    'blockexpr': lambda n, frame: eval_block(n, frame, eval_node),
    'if': lambda n, frame: eval_if(n, frame, eval_node),
    'prefix': lambda n, frame: eval_prefix(n, frame, eval_node),
    'infix': lambda n, frame: eval_infix(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'index': lambda n, frame: eval_index(n, frame, eval_node),
    'array': lambda n, frame: eval_array(n, frame, eval_node),
    'hash': lambda n, frame: eval_hash(n, frame, eval_node),
}

_TOKEN_DISPATCH: dict[str, Callable[[Token, Frame], MkValue]] = {
    'INT': token_int,
    'STRING': token_string,
    'TRUE': lambda _, __: TRUE,
    'FALSE': lambda _, __: FALSE,
    'NIL': lambda _, __: NIL,
}
