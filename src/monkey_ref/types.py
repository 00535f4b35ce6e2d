from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias
from .tree import Node

# ---------- Value Model ----------

@dataclass(frozen=True)
class MkNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass(frozen=True)
class MkInteger:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class MkBoolean:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

_REPR_ESCAPES = {'"': '\\"', '\\': '\\\\', '\n': '\\n', '\t': '\\t', '\r': '\\r'}

@dataclass(frozen=True)
class MkString:
    value: str
    def __repr__(self) -> str:
        body = "".join(_REPR_ESCAPES.get(ch, ch) for ch in self.value)
        return f'"{body}"'

@dataclass(frozen=True)
class MkArray:
    items: Tuple['MkValue', ...]
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(frozen=True)
class MkHash:
    # Keys are the key values themselves; dict order is insertion order
    pairs: Dict['MkValue', 'MkValue']
    def __repr__(self) -> str:
        pairs = []

        for k, v in self.pairs.items():
            pairs.append(f"{k!r}: {v!r}")

        return "#{" + ", ".join(pairs) + "}"

@dataclass(eq=False)
class MkFunction:
    params: Tuple[str, ...]
    body: Node                    # `block` tree
    frame: 'Frame'                # Closure frame
    def __repr__(self) -> str:
        return f"<function({', '.join(self.params)})>"

StdlibFn = Callable[['Frame', List['MkValue']], 'MkValue']

@dataclass(frozen=True)
class StdlibFunction:
    name: str
    fn: StdlibFn
    arity: Optional[int] = None
    def __repr__(self) -> str:
        return f"<built-in function {self.name}>"

@dataclass(frozen=True)
class MkError:
    """A runtime error surfaced as a value to the caller of the evaluator."""
    kind: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    def __repr__(self) -> str:
        if self.line is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: {self.message} (line {self.line}, col {self.column})"

MkValue: TypeAlias = (
    MkNil
    | MkInteger
    | MkBoolean
    | MkString
    | MkArray
    | MkHash
    | MkFunction
    | StdlibFunction
    | MkError
)

NIL = MkNil()
TRUE = MkBoolean(True)
FALSE = MkBoolean(False)

TYPE_NAMES: Dict[type, str] = {
    MkInteger: "int",
    MkBoolean: "bool",
    MkString: "string",
    MkNil: "nil",
    MkArray: "array",
    MkHash: "hash",
    MkFunction: "function",
    StdlibFunction: "function",
    MkError: "error",
}

def type_name(value: MkValue) -> str:
    return TYPE_NAMES.get(type(value), type(value).__name__)

_HASHABLE_TYPES: Tuple[type, ...] = (MkInteger, MkBoolean, MkString)

def is_hashable(value: MkValue) -> bool:
    return isinstance(value, _HASHABLE_TYPES)

def mk_bool(flag: bool) -> MkBoolean:
    return TRUE if flag else FALSE


class Frame:
    def __init__(self, parent: Optional['Frame']=None, source_path: Optional[str]=None):
        self.parent = parent
        self.vars: Dict[str, MkValue] = {}
        self._is_function_frame = False

        if source_path is not None:
            self.source_path: Optional[str] = source_path
        elif parent is not None:
            self.source_path = parent.source_path
        else:
            self.source_path = None

    def define(self, name: str, val: MkValue) -> None:
        self.vars[name] = val

    def get(self, name: str) -> MkValue:
        frame: Optional[Frame] = self
        while frame is not None:
            if name in frame.vars:
                return frame.vars[name]
            frame = frame.parent

        builtin = Builtins.stdlib_functions.get(name)
        if builtin is not None:
            return builtin

        raise IdentifierNotFound(name)

    def mark_function_frame(self) -> None:
        self._is_function_frame = True

    def is_function_frame(self) -> bool:
        return self._is_function_frame

# ---------- Exceptions ----------

class MonkeyRuntimeError(Exception):
    """Base of every error the evaluator raises for a failing program."""
    kind = "RuntimeError"
    line: Optional[int]
    column: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.line = None
        self.column = None

    def at(self, line: int, column: int) -> 'MonkeyRuntimeError':
        """Attach a position unless a more specific one is already set."""
        if self.line is None and line:
            self.line = line
            self.column = column
        return self

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f"{self.message} (line {self.line}, col {self.column})"

    def to_value(self) -> MkError:
        return MkError(self.kind, self.message, self.line, self.column)

class IdentifierNotFound(MonkeyRuntimeError):
    kind = "IdentifierNotFound"
    def __init__(self, name: str):
        super().__init__(f"identifier not found: '{name}'")
        self.name = name

class TypeMismatch(MonkeyRuntimeError):
    kind = "TypeMismatch"

class DivisionByZero(MonkeyRuntimeError):
    kind = "DivisionByZero"
    def __init__(self, message: str = "division by zero"):
        super().__init__(message)

class ArityMismatch(MonkeyRuntimeError):
    kind = "ArityMismatch"
    def __init__(self, expected: int, given: int):
        super().__init__(
            f"wrong number of arguments: expected {expected} arguments but {given} were given"
        )
        self.expected = expected
        self.given = given

class UnhashableKey(MonkeyRuntimeError):
    kind = "UnhashableKey"
    def __init__(self, type_label: str):
        super().__init__(f"hash key must be hashable type, not '{type_label}'")

class IndexOutOfBounds(MonkeyRuntimeError):
    kind = "IndexOutOfBounds"
    def __init__(self, index: int):
        super().__init__(f"index out of bounds: {index}")
        self.index = index

class NotCallable(MonkeyRuntimeError):
    kind = "NotCallable"
    def __init__(self, type_label: str):
        super().__init__(f"'{type_label}' is not a function object")

class NegativeExponent(MonkeyRuntimeError):
    kind = "NegativeExponent"
    def __init__(self, exponent: int):
        super().__init__(f"negative exponent: {exponent}")

class IntegerOverflow(MonkeyRuntimeError):
    kind = "IntegerOverflow"

class InvalidReturn(MonkeyRuntimeError):
    kind = "InvalidReturn"
    def __init__(self) -> None:
        super().__init__("`return` outside of function context")

class ModuleImportError(MonkeyRuntimeError):
    kind = "ImportError"

class AssertionFailed(MonkeyRuntimeError):
    kind = "AssertionFailed"

class StackOverflow(MonkeyRuntimeError):
    kind = "StackOverflow"
    def __init__(self) -> None:
        super().__init__("maximum recursion depth exceeded")

class MonkeyReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: MkValue):
        self.value = value

class Builtins:
    stdlib_functions: Dict[str, StdlibFunction] = {}
