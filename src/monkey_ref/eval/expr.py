from __future__ import annotations

from lark import Token, Tree

from ..types import (
    Frame, MkInteger, MkString, MkValue, TypeMismatch, mk_bool, type_name,
)
from ..utils import checked, int_div, int_mod, int_pow, mk_equals
from .helpers import EvalFunc, is_truthy

def eval_prefix(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    op, rhs_node = n.children
    rhs = eval_func(rhs_node, frame)

    match op.type, rhs:
        case 'NEG', _:
            return mk_bool(not is_truthy(rhs))
        case 'MINUS', MkInteger(value=v):
            return MkInteger(checked(-v, "-"))
        case _:
            raise TypeMismatch(
                f"unsupported operand type for prefix operator `{op}`: '{type_name(rhs)}'"
            )

def eval_infix(n: Tree, frame: Frame, eval_func: EvalFunc) -> MkValue:
    lhs_node, op, rhs_node = n.children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)
    return apply_binary_operator(op, lhs, rhs)

def apply_binary_operator(op: Token, lhs: MkValue, rhs: MkValue) -> MkValue:
    match op.type:
        case 'EQ':
            return mk_bool(mk_equals(lhs, rhs))
        case 'NEQ':
            return mk_bool(not mk_equals(lhs, rhs))

    match lhs, rhs:
        case MkInteger(value=a), MkInteger(value=b):
            return _integer_op(op, a, b)
        case MkString(value=a), MkString(value=b):
            result = _string_op(op, a, b)
            if result is not None:
                return result

    raise TypeMismatch(
        f"unsupported operand types for infix operator `{op}`: "
        f"'{type_name(lhs)}' and '{type_name(rhs)}'"
    )

def _integer_op(op: Token, a: int, b: int) -> MkValue:
    match op.type:
        case 'PLUS':
            return MkInteger(checked(a + b, "+"))
        case 'MINUS':
            return MkInteger(checked(a - b, "-"))
        case 'STAR':
            return MkInteger(checked(a * b, "*"))
        case 'SLASH':
            return MkInteger(int_div(a, b))
        case 'MOD':
            return MkInteger(int_mod(a, b))
        case 'CARET':
            return MkInteger(int_pow(a, b))
        case 'LT':
            return mk_bool(a < b)
        case 'GT':
            return mk_bool(a > b)
        case 'LTE':
            return mk_bool(a <= b)
        case 'GTE':
            return mk_bool(a >= b)
        case _:
            raise TypeMismatch(f"unsupported infix operator `{op}` for 'int'")

def _string_op(op: Token, a: str, b: str):
    match op.type:
        case 'PLUS':
            return MkString(a + b)
        case 'LT':
            return mk_bool(a < b)
        case 'GT':
            return mk_bool(a > b)
        case 'LTE':
            return mk_bool(a <= b)
        case 'GTE':
            return mk_bool(a >= b)
        case _:
            return None
