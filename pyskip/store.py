"""Slab-style storage for skip-list nodes.

Nodes are never referenced directly by their neighbours. Every forward slot
holds an integer *handle* into the store instead, which keeps the ownership
story simple: the store owns every record, links and cursors only borrow.

Each record is sized for its own tower height, so the common short towers
(average height ≈ 2) do not pay for a fixed maximum level.

Handles of freed records are recycled. To tell a recycled handle apart from
the record a stale cursor still points to, every allocation is stamped with a
store-wide serial number.
"""
from __future__ import annotations

from typing import Generic, Iterator, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")

__all__ = ["Node", "NodeStore"]


class Node(Generic[K, V]):
    __slots__ = ("key", "value", "forward", "serial")

    def __init__(self, key: K, value: V, height: int, serial: int):
        self.key = key
        self.value = value
        self.forward: list[Optional[int]] = [None] * height
        self.serial = serial

    @property
    def height(self) -> int:
        return len(self.forward)

    def __repr__(self) -> str:  # pragma: no cover
        return f"Node<{self.key!r}:{self.value!r} h={self.height}>"


class NodeStore(Generic[K, V]):
    """Arena of :class:`Node` records addressed by integer handles."""

    def __init__(self):
        self._slots: list[Optional[Node[K, V]]] = []
        self._free: list[int] = []
        self._next_serial = 0

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------
    def allocate(self, key: K, value: V, height: int) -> int:
        """Create a record with `height` empty forward slots and return its handle.

        The record is fully built before the store is touched, so a failure
        (``MemoryError``) leaves the store exactly as it was.
        """
        if height < 1:
            raise ValueError(f"tower height must be >= 1, got {height}")
        node: Node[K, V] = Node(key, value, height, self._next_serial)
        self._next_serial += 1
        if self._free:
            handle = self._free.pop()
            self._slots[handle] = node
        else:
            handle = len(self._slots)
            self._slots.append(node)
        return handle

    def free(self, handle: int) -> None:
        """Release the record behind `handle`."""
        if self._slots[handle] is None:
            raise ValueError(f"handle {handle} is already free")
        self._slots[handle] = None
        self._free.append(handle)

    def clear(self) -> None:
        self._slots.clear()
        self._free.clear()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def node(self, handle: int) -> Node[K, V]:
        node = self._slots[handle]
        if node is None:
            raise ValueError(f"handle {handle} does not name a live node")
        return node

    def is_live(self, handle: int, serial: int) -> bool:
        """True if `handle` still holds the record stamped with `serial`."""
        if handle >= len(self._slots):
            return False
        node = self._slots[handle]
        return node is not None and node.serial == serial

    def __len__(self) -> int:
        return len(self._slots) - len(self._free)

    def __iter__(self) -> Iterator[int]:
        """Yield the handles of all live records (storage order, not key order)."""
        for handle, node in enumerate(self._slots):
            if node is not None:
                yield handle
