"""prompt_toolkit lexer for live Monkey syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as MkLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "builtin": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_TT_GROUP = {
    TT.LET: "keyword",
    TT.RETURN: "keyword",
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.FN: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NIL: "constant",
    TT.INT: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.MOD: "operator",
    TT.CARET: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.NEG: "operator",
    TT.ASSIGN: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.HASH_OPEN: "punctuation",
    TT.COMMA: "punctuation",
    TT.COLON: "punctuation",
    TT.SEMI: "punctuation",
}


def _string_end(text: str, start: int) -> int:
    """Index just past the closing quote of the string literal at `start`."""
    pos = start + 1
    while pos < len(text):
        if text[pos] == "\\":
            pos += 2
            continue
        if text[pos] == '"':
            return pos + 1
        pos += 1
    return len(text)


_WORDS = {TT.LET, TT.RETURN, TT.IF, TT.ELSE, TT.FN, TT.TRUE, TT.FALSE, TT.NIL}


def _scan(text: str, start: int, accept: Callable[[str], bool]) -> int:
    pos = start
    while pos < len(text) and accept(text[pos]):
        pos += 1
    return pos


def _token_end(text: str, tok: Tok, start: int) -> int:
    if tok.type == TT.STRING:
        return _string_end(text, start)
    if tok.type == TT.INT:
        return _scan(text, start, lambda ch: "0" <= ch <= "9" or ch == "_")
    if tok.type == TT.IDENT or tok.type in _WORDS:
        return _scan(text, start, lambda ch: ch.isalnum() or ch == "_")

    # operators and punctuation have fixed spellings
    return start + len(str(tok.value))


def _gap_fragments(gap: str) -> StyleAndTextTuples:
    """Whitespace between tokens, with any `//` comment styled."""
    idx = gap.find("//")
    if idx < 0:
        return [("", gap)]
    parts: StyleAndTextTuples = []
    if idx > 0:
        parts.append(("", gap[:idx]))
    parts.append((GROUP_STYLE["comment"], gap[idx:]))
    return parts


def _highlight_line(text: str, builtins: frozenset[str] = frozenset()) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = MkLexer(text).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF:
            break

        start = tok.column - 1
        if start > pos:
            result.extend(_gap_fragments(text[pos:start]))

        end = _token_end(text, tok, start)
        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and tok.value in builtins:
            group = "builtin"
        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    # Trailing text: whitespace and comments.
    if pos < len(text):
        result.extend(_gap_fragments(text[pos:]))

    return result if result else [("", text)]


class MonkeyLexer(Lexer):
    """prompt_toolkit Lexer that highlights Monkey source using the RD lexer."""

    def __init__(self, builtins: frozenset[str] = frozenset()):
        self.builtins = builtins

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno], self.builtins)
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
