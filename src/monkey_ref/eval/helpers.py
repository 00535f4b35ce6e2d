from __future__ import annotations

from typing import Callable, Optional

from ..tree import Node
from ..types import Frame, MkBoolean, MkNil, MkValue

EvalFunc = Callable[[Node, Frame], MkValue]

def is_truthy(val: MkValue) -> bool:
    match val:
        case MkBoolean(value=b):
            return b
        case MkNil():
            return False
        case _:
            return True

def current_function_frame(frame: Frame) -> Optional[Frame]:
    """Walk parents to find the nearest function-call frame marker."""
    cur: Optional[Frame] = frame

    while cur is not None:
        if cur.is_function_frame():
            return cur

        cur = cur.parent

    return None
