"""File loading for `import`: path resolution, reading source text, and the
stack of files whose top level is being evaluated."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .utils import module_search_path

# Resolved paths of files currently running their top level, outermost first
_evaluating: List[str] = []


def candidate_paths(path: str, base_dir: Optional[str]) -> List[str]:
    """Places an import path may refer to, most specific first."""
    if os.path.isabs(path):
        return [path]

    candidates: List[str] = []
    if base_dir:
        candidates.append(os.path.join(base_dir, path))
    for directory in module_search_path():
        candidates.append(os.path.join(directory, path))
    candidates.append(os.path.join(os.getcwd(), path))
    return candidates


def resolve(path: str, base_dir: Optional[str] = None) -> str:
    """Absolute, normalized path of the first existing candidate."""
    for candidate in candidate_paths(path, base_dir):
        if os.path.isfile(candidate):
            return os.path.realpath(candidate)

    raise FileNotFoundError(path)


def load(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def is_evaluating(resolved: str) -> bool:
    return resolved in _evaluating


def evaluating_files() -> List[str]:
    return list(_evaluating)


@contextmanager
def evaluating(resolved: Optional[str]) -> Iterator[None]:
    """Mark `resolved` as running for the duration of the block. None is a no-op."""
    if resolved is None:
        yield
        return

    _evaluating.append(resolved)
    try:
        yield
    finally:
        _evaluating.pop()
