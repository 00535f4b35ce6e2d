"""
Token Types for the Monkey Parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    INT = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords
    LET = auto()
    RETURN = auto()
    IF = auto()
    ELSE = auto()
    FN = auto()
    TRUE = auto()
    FALSE = auto()
    NIL = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()
    CARET = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Logical
    NEG = auto()  # !

    ASSIGN = auto()  # =

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    HASH_OPEN = auto()  # #{
    COMMA = auto()
    COLON = auto()
    SEMI = auto()

    # Special
    EOF = auto()


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"


def describe(tok: Tok) -> str:
    """Human readable token description for diagnostics."""
    if tok.type == TT.EOF:
        return "end of input"
    if tok.type in (TT.IDENT, TT.INT):
        return f"{tok.type.name} '{tok.value}'"
    if tok.type == TT.STRING:
        return f"STRING {tok.value!r}"
    return f"'{tok.value}'"


class SourceError(Exception):
    """A diagnostic tied to a position in source text."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} (line {self.line}, col {self.column})"
        return self.message
