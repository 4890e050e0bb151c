"""Forward cursor over the bottom level of a skip list.

A cursor is a borrowed position: it names one node (or the end-sentinel) and
never owns anything. It stays usable until the node it names is removed from
the container, either by an erase, by ``clear()``, or by an insert that
replaces the node with a taller tower. Using a cursor after that raises
:class:`InvalidCursorError`.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .store import Node, NodeStore

K = TypeVar("K")
V = TypeVar("V")

__all__ = ["Cursor", "InvalidCursorError"]


class InvalidCursorError(RuntimeError):
    """The node a cursor referred to has been removed from its container."""


class Cursor(Generic[K, V]):
    __slots__ = ("_store", "_handle", "_serial")

    def __init__(self, store: "NodeStore[K, V]", handle: Optional[int] = None):
        self._store = store
        self._handle = handle
        self._serial = store.node(handle).serial if handle is not None else -1

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------
    @property
    def is_end(self) -> bool:
        return self._handle is None

    def __bool__(self) -> bool:
        return self._handle is not None

    def _node(self) -> "Node[K, V]":
        if self._handle is None:
            raise IndexError("cannot dereference the end cursor")
        if not self._store.is_live(self._handle, self._serial):
            raise InvalidCursorError(f"node behind cursor {self._handle} was removed")
        return self._store.node(self._handle)

    def advance(self) -> "Cursor[K, V]":
        """Move to the next node in key order (in place) and return self."""
        nxt = self._node().forward[0]
        self._handle = nxt
        self._serial = self._store.node(nxt).serial if nxt is not None else -1
        return self

    def next(self) -> "Cursor[K, V]":
        """Return a new cursor one position further, leaving this one as is."""
        return Cursor(self._store, self._node().forward[0])

    # ------------------------------------------------------------------
    # Dereference
    # ------------------------------------------------------------------
    @property
    def key(self) -> K:
        return self._node().key

    @property
    def value(self) -> V:
        return self._node().value

    @value.setter
    def value(self, value: V) -> None:
        self._node().value = value

    @property
    def item(self) -> tuple[K, V]:
        node = self._node()
        return node.key, node.value

    @property
    def height(self) -> int:
        """Tower height of the node under the cursor."""
        return self._node().height

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cursor):
            return NotImplemented
        if self._handle is None or other._handle is None:
            return self._handle is other._handle
        return (
            self._store is other._store
            and self._handle == other._handle
            and self._serial == other._serial
        )

    def __hash__(self) -> int:
        if self._handle is None:
            return hash(None)
        return hash((id(self._store), self._handle, self._serial))

    def __repr__(self) -> str:  # pragma: no cover
        if self._handle is None:
            return "Cursor<end>"
        return f"Cursor<handle={self._handle}>"
