from __future__ import annotations

import os as _os
from typing import List, Optional

from .types import (
    MkValue,
    MkNil,
    MkInteger,
    MkString,
    MkBoolean,
    IntegerOverflow,
    DivisionByZero,
    NegativeExponent,
)

INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def mk_equals(lhs: MkValue, rhs: MkValue) -> bool:
    """Language `==`: scalars compare by value within a kind, everything else is unequal."""
    match (lhs, rhs):
        case (MkNil(), MkNil()):
            return True
        case (MkInteger(value=a), MkInteger(value=b)):
            return a == b
        case (MkBoolean(value=a), MkBoolean(value=b)):
            return a == b
        case (MkString(value=a), MkString(value=b)):
            return a == b
        case _:
            return False


def stringify(value: MkValue) -> str:
    """Text used by `puts`: strings print raw, everything else as its repr."""
    if isinstance(value, MkString):
        return value.value
    return repr(value)

# ---------- checked 64-bit integer arithmetic ----------

def checked(value: int, op: str) -> int:
    if value < INT_MIN or value > INT_MAX:
        raise IntegerOverflow(f"integer overflow in `{op}`")
    return value


def int_div(lhs: int, rhs: int) -> int:
    """Division truncating toward zero."""
    if rhs == 0:
        raise DivisionByZero()
    quotient = abs(lhs) // abs(rhs)
    if (lhs < 0) != (rhs < 0):
        quotient = -quotient
    return checked(quotient, "/")


def int_mod(lhs: int, rhs: int) -> int:
    """Remainder with the sign of the dividend, so `a == (a / b) * b + a % b`."""
    if rhs == 0:
        raise DivisionByZero("modulo by zero")
    return lhs - int_div(lhs, rhs) * rhs


def int_pow(base: int, exponent: int) -> int:
    if exponent < 0:
        raise NegativeExponent(exponent)

    result = 1
    while exponent:
        if exponent & 1:
            result = checked(result * base, "^")
        exponent >>= 1
        if exponent:
            base = checked(base * base, "^")
    return result

# ---------- environment configuration ----------

def envvar_value_by_name(name: str) -> Optional[str]:
    """Get the current value of an env var by name, or None if missing."""
    return _os.environ.get(name)


def debug_py_trace_enabled() -> bool:
    return bool(envvar_value_by_name("MONKEY_DEBUG_PY_TRACE"))


def module_search_path() -> List[str]:
    """Directories listed in MONKEY_PATH, in order."""
    raw = envvar_value_by_name("MONKEY_PATH")
    if not raw:
        return []
    return [part for part in raw.split(_os.pathsep) if part]


def recursion_limit() -> Optional[int]:
    raw = envvar_value_by_name("MONKEY_RECURSION_LIMIT")
    if raw is None or not raw.strip():
        return None
    try:
        limit = int(raw)
    except ValueError:
        raise ValueError(f"MONKEY_RECURSION_LIMIT must be an integer, got {raw!r}") from None
    if limit <= 0:
        raise ValueError(f"MONKEY_RECURSION_LIMIT must be positive, got {limit}")
    return limit
