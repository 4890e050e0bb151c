"""pyskip: an ordered associative container built on a skip list.

The package exposes :class:`pyskip.SkipList`, a ``MutableMapping`` that keeps
its keys sorted, together with the pieces it is made of (node store, level
generator, cursor) so that they can be tested and reused on their own.
"""

from __future__ import annotations

__all__ = [
    "SkipList",
    "InsertResult",
    "Cursor",
    "InvalidCursorError",
    "LevelGenerator",
    "NodeStore",
]

from .cursor import Cursor, InvalidCursorError
from .levels import LevelGenerator
from .skiplist import InsertResult, SkipList
from .store import NodeStore
