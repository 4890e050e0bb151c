"""Ordered map backed by a skip list.

The list keeps a *head* of per-level entry points and a chain of nodes whose
towers are drawn from a fair-coin :class:`~pyskip.levels.LevelGenerator`.
All nodes live in a :class:`~pyskip.store.NodeStore` owned by the container;
forward links are store handles.

Complexities (average case):
    • find     – O(log n)
    • insert   – O(log n)
    • erase    – O(log n)
    • iterate  – O(n)
    • size     – O(n), the chain is walked rather than counted on the fly

Indexed access assumes presence: ``sl[key]`` raises ``KeyError`` for a missing
key and never inserts. Use :meth:`SkipList.setdefault` to insert a default on
a miss.

Keys must be orderable against the keys already stored. ``find``, ``insert``,
``erase`` and ``sl[key]`` let the ``TypeError`` of a failed comparison
propagate; ``key in sl`` and ``get`` treat such a key as absent, like ``dict``.
"""
from __future__ import annotations

import copy as _copy
import logging
import operator
import random
import sys
from collections.abc import ItemsView, Iterator, Mapping, MutableMapping, ValuesView
from typing import Any, Callable, Generic, NamedTuple, Optional, TypeVar

from .cursor import Cursor
from .levels import LevelGenerator
from .store import Node, NodeStore

__all__ = ["SkipList", "InsertResult"]

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

Less = Callable[[Any, Any], bool]
Slots = list[Optional[int]]  # head or a node's forward list


class InsertResult(NamedTuple):
    position: Cursor
    changed: bool


class _ItemsView(ItemsView):
    def __iter__(self):
        for node in self._mapping._chain():
            yield node.key, node.value


class _ValuesView(ValuesView):
    def __iter__(self):
        for node in self._mapping._chain():
            yield node.value


class SkipList(MutableMapping, Generic[K, V]):
    """Skip-list mapping of unique, ordered keys to arbitrary values.

    Parameters
    ----------
    items:
        Optional mapping or iterable of ``(key, value)`` pairs inserted in order.
    less:
        Strict ordering predicate, ``less(a, b)`` is true when *a* sorts before
        *b*. Two keys are equal when neither is less than the other. Defaults
        to ``operator.lt``.
    seed, rng:
        Seed or engine for the container's own level generator.
    levels:
        A ready-made :class:`LevelGenerator` (takes precedence over seed/rng).
    """

    def __init__(
        self,
        items: Any = None,
        *,
        less: Optional[Less] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        levels: Optional[LevelGenerator] = None,
    ):
        self._less: Less = less if less is not None else operator.lt
        self._levels = levels if levels is not None else LevelGenerator(seed, rng=rng)
        self._store: NodeStore[K, V] = NodeStore()
        self._head: Slots = [None]
        if items is not None:
            self.update(items)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def _search_path(self, key: K) -> tuple[list[Slots], Optional[int]]:
        """Walk from the top level down to level 0 looking for `key`.

        Returns the predecessor slot list for every level (the head, or the
        forward list of the last node whose key is less than `key`) and the
        handle of the node holding `key`, or ``None``.
        """
        store = self._store
        less = self._less
        slots = self._head
        path: list[Slots] = [slots] * len(slots)
        for level in reversed(range(len(self._head))):
            while (nxt := slots[level]) is not None and less(store.node(nxt).key, key):
                slots = store.node(nxt).forward
            path[level] = slots
        found = slots[0]
        if found is not None and less(key, store.node(found).key):
            found = None
        return path, found

    def _chain(self) -> Iterator[Node[K, V]]:
        store = self._store
        handle = self._head[0]
        while handle is not None:
            node = store.node(handle)
            yield node
            handle = node.forward[0]

    def _grow_head(self, height: int, path: list[Slots]) -> None:
        head = self._head
        if height <= len(head):
            return
        before = len(head)
        while len(head) < height:
            head.append(None)
            path.append(head)
        logger.debug("head grew from %d to %d levels", before, len(head))

    def _trim_head(self) -> None:
        head = self._head
        before = len(head)
        while len(head) > 1 and head[-1] is None:
            head.pop()
        if len(head) != before:
            logger.debug("head shrank from %d to %d levels", before, len(head))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find(self, key: K) -> Cursor[K, V]:
        """Cursor to the node holding `key`, or :meth:`end` if absent."""
        _, found = self._search_path(key)
        return Cursor(self._store, found)

    def count(self, key: K) -> int:
        return 0 if self._search_path(key)[1] is None else 1

    def __contains__(self, key: object) -> bool:
        try:
            return self.count(key) == 1  # type: ignore[arg-type]
        except TypeError:
            # not orderable against the stored keys, so it cannot be one of them
            return False

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        try:
            _, found = self._search_path(key)
        except TypeError:
            return default
        if found is None:
            return default
        return self._store.node(found).value

    def __getitem__(self, key: K) -> V:
        _, found = self._search_path(key)
        if found is None:
            raise KeyError(key)
        return self._store.node(found).value

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def insert(self, key: K, value: V) -> InsertResult:
        """Insert `key` or overwrite its value.

        An existing node whose tower is at least as tall as the freshly drawn
        height is updated in place. A shorter one is replaced by a new node of
        the drawn height, which invalidates cursors to the old node.
        """
        store = self._store
        height = self._levels.generate(len(self._head))
        path, found = self._search_path(key)

        old: Optional[Node[K, V]] = None
        if found is not None:
            old = store.node(found)
            if old.height >= height:
                old.value = value
                return InsertResult(Cursor(store, found), True)

        handle = store.allocate(key, value, height)
        try:
            self._grow_head(height, path)
        except Exception:
            self._trim_head()
            store.free(handle)
            raise

        node = store.node(handle)
        low = 0
        if old is not None:
            for level in range(old.height):
                node.forward[level] = old.forward[level]
                path[level][level] = handle
            low = old.height
        for level in range(low, height):
            slots = path[level]
            node.forward[level] = slots[level]
            slots[level] = handle

        if found is not None:
            logger.debug("replaced node of height %d with height %d", low, height)
            store.free(found)
        return InsertResult(Cursor(store, handle), True)

    def erase(self, key: K) -> int:
        """Remove `key`; return 1 if it was present, 0 otherwise."""
        path, found = self._search_path(key)
        if found is None:
            return 0
        node = self._store.node(found)
        for level in range(node.height):
            path[level][level] = node.forward[level]
        self._trim_head()
        self._store.free(found)
        return 1

    def __setitem__(self, key: K, value: V) -> None:
        self.insert(key, value)

    def __delitem__(self, key: K) -> None:
        if not self.erase(key):
            raise KeyError(key)

    def popitem(self) -> tuple[K, V]:
        """Remove and return the pair with the smallest key."""
        first = self._head[0]
        if first is None:
            raise KeyError("popitem(): skip list is empty")
        node = self._store.node(first)
        item = node.key, node.value
        self.erase(node.key)
        return item

    def clear(self) -> None:
        """Release every node and reset the head to a single empty level."""
        self._store.clear()
        self._head = [None]
        logger.debug("cleared skip list")

    # ------------------------------------------------------------------
    # Capacity
    # ------------------------------------------------------------------
    def empty(self) -> bool:
        return self._head[0] is None

    def size(self) -> int:
        return sum(1 for _ in self._chain())

    def max_size(self) -> int:
        return sys.maxsize

    def top_level(self) -> int:
        """Current number of levels in the head."""
        return len(self._head)

    def __len__(self) -> int:
        return self.size()

    def __bool__(self) -> bool:
        return not self.empty()

    # ------------------------------------------------------------------
    # Iteration helpers (ordered)
    # ------------------------------------------------------------------
    def begin(self) -> Cursor[K, V]:
        return Cursor(self._store, self._head[0])

    def end(self) -> Cursor[K, V]:
        return Cursor(self._store)

    def __iter__(self) -> Iterator[K]:
        for node in self._chain():
            yield node.key

    def items(self) -> _ItemsView:
        return _ItemsView(self)

    def values(self) -> _ValuesView:
        return _ValuesView(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _empty_like(self) -> "SkipList[K, V]":
        return type(self)(less=self._less, levels=self._levels.spawn())

    def _clone_structure(self, memo: Optional[dict] = None) -> tuple[Slots, NodeStore[K, V]]:
        """Rebuild head and nodes with the same tower heights.

        One pass over the bottom chain; `tails[i]` is the slot list that the
        next level-i node must be attached to. Nothing is installed here, so a
        failure only has to drop the partial store.
        """
        store: NodeStore[K, V] = NodeStore()
        head: Slots = [None] * len(self._head)
        tails: list[Slots] = [head] * len(head)
        try:
            for src in self._chain():
                key, value = src.key, src.value
                if memo is not None:
                    key, value = _copy.deepcopy(key, memo), _copy.deepcopy(value, memo)
                handle = store.allocate(key, value, src.height)
                forward = store.node(handle).forward
                for level in range(src.height):
                    tails[level][level] = handle
                    tails[level] = forward
        except Exception:
            logger.debug("copy aborted after %d nodes", len(store))
            store.clear()
            raise
        return head, store

    def copy(self) -> "SkipList[K, V]":
        """Independent copy with identical content and tower heights.

        Values are shared, as with ``dict.copy``.
        """
        clone = self._empty_like()
        clone._head, clone._store = self._clone_structure()
        logger.debug("copied skip list with %d levels", len(clone._head))
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo: dict) -> "SkipList[K, V]":
        clone = self._empty_like()
        memo[id(self)] = clone
        clone._head, clone._store = self._clone_structure(memo)
        return clone

    def assign(self, other: "SkipList[K, V]") -> None:
        """Replace this list's content with a copy of `other`."""
        if not isinstance(other, SkipList):
            raise TypeError(f"can only assign from a SkipList, not {type(other).__name__}")
        if other is self:
            return
        head, store = other._clone_structure()
        self._store.clear()
        self._head, self._store, self._less = head, store, other._less

    def move_from(self, other: "SkipList[K, V]") -> None:
        """Take over `other`'s nodes in O(1), leaving `other` empty."""
        if not isinstance(other, SkipList):
            raise TypeError(f"can only move from a SkipList, not {type(other).__name__}")
        if other is self:
            return
        self._store.clear()
        self._head, self._store, self._less = other._head, other._store, other._less
        other._head, other._store = [None], NodeStore()
        logger.debug("moved %d levels between skip lists", len(self._head))

    def move(self) -> "SkipList[K, V]":
        """Return a new list holding this list's nodes; this list becomes empty."""
        dest = self._empty_like()
        dest.move_from(self)
        return dest

    def swap(self, other: "SkipList[K, V]") -> None:
        if not isinstance(other, SkipList):
            raise TypeError(f"can only swap with a SkipList, not {type(other).__name__}")
        self._head, other._head = other._head, self._head
        self._store, other._store = other._store, self._store
        self._less, other._less = other._less, self._less

    # ------------------------------------------------------------------
    # Comparison & display
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if isinstance(other, SkipList):
            return list(self.items()) == list(other.items())
        if not isinstance(other, Mapping):
            return NotImplemented
        if len(self) != len(other):
            return False
        for key, value in self.items():
            try:
                if other[key] != value:
                    return False
            except (KeyError, TypeError):
                # TypeError: unhashable key, which a dict cannot hold
                return False
        return True

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"{type(self).__name__}({{{body}}})"
