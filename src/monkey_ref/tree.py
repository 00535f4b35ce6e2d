"""Shared helpers for working with the lark Tree/Token nodes of the Monkey AST."""
from __future__ import annotations
from typing import List, Optional, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard

from lark import Token, Tree
from lark.tree import Meta

from .token_types import Tok

Node: TypeAlias = Union[Tree, Token]


def make_token(tok: Tok, value: Optional[str] = None) -> Token:
    """Lift a lexer token into an AST leaf, keeping its position."""
    text = tok.value if value is None else value
    return Token(tok.type.name, text, line=tok.line, column=tok.column)


def make_tree(label: str, children: List[Node], at: Tok) -> Tree:
    """Build a tree node positioned at `at`."""
    meta = Meta()
    meta.line = at.line
    meta.column = at.column
    meta.empty = False
    return Tree(label, children, meta)


def is_tree(node: Node) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Node) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Node) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    children = getattr(node, "children", None)
    if children is None:
        return []

    return list(children)

def node_position(node: Node) -> Tuple[int, int]:
    """(line, column) of a node, (0, 0) when unknown."""
    if is_token(node):
        return (node.line or 0, node.column or 0)

    meta = getattr(node, "meta", None)
    if meta is None or getattr(meta, "empty", True):
        return (0, 0)
    return (getattr(meta, "line", 0), getattr(meta, "column", 0))

def child_by_label(node: Node, label: str) -> Optional[Node]:
    for ch in tree_children(node):
        if tree_label(ch) == label:
            return ch

    return None


def render(node: Node) -> str:
    """Compact s-expression rendering, used for debugging and parser tests."""
    if is_token(node):
        if node.type == "STRING":
            return repr(str(node))
        return str(node)

    parts = [render(ch) for ch in tree_children(node)]
    if not parts:
        return f"({node.data})"
    return f"({node.data} {' '.join(parts)})"
