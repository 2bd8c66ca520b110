#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
rb_node.py
----------

Node storage for the red‑black tree in ``red_black_tree.py``.

Nodes live in an index‑addressed **arena** owned by a single tree.  Links
between nodes (``parent``, ``left``, ``right``) are plain ``int`` indices into
that arena, so the cyclic parent/child graph never holds object references to
itself.  Slot ``SENTINEL`` (index 0) is reserved for the tree's own black leaf
node: every link that would be ``None`` in a textbook BST points there instead.

Typical usage
~~~~~~~~~~~~~
>>> from rb_node import NodeArena, SENTINEL, RED, BLACK
>>> arena = NodeArena()
>>> root = arena.allocate(10, "ten", BLACK)
>>> child = arena.allocate(5, "five")
>>> arena[root].left = child
>>> arena[child].parent = root
>>> arena.sibling_of(child) == SENTINEL
True
>>> arena.color_of(child) == RED
True
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
#  Type variables (keys must be comparable, values may be anything)
# ----------------------------------------------------------------------
K = TypeVar("K")
V = TypeVar("V")

# ----------------------------------------------------------------------
#  Node colour constants – using simple booleans is fastest
# ----------------------------------------------------------------------
RED = True
BLACK = False

# Arena slot reserved for the black leaf sentinel.
SENTINEL = 0


class _Node(Generic[K, V]):
    """Internal node record – not meant to be used directly by callers."""

    __slots__ = ("key", "value", "color", "left", "right", "parent")

    def __init__(
        self,
        key: Optional[K] = None,
        value: Optional[V] = None,
        color: bool = BLACK,
        left: int = SENTINEL,
        right: int = SENTINEL,
        parent: Optional[int] = None,
    ) -> None:
        self.key = key
        self.value = value
        self.color = color
        self.left = left
        self.right = right
        self.parent = parent

    def __repr__(self) -> str:
        col = "R" if self.color == RED else "B"
        return f"<{col} {self.key!r}:{self.value!r}>"


class NodeArena(Generic[K, V]):
    """
    Index‑addressed storage for the nodes of one tree.

    The arena owns exactly one sentinel (slot ``SENTINEL``), created black
    together with the arena.  Freed slots are recycled by later allocations,
    so indices stay small even after long insert/delete workloads.
    """

    __slots__ = ("_slots", "_free")

    def __init__(self) -> None:
        self._slots: List[_Node[K, V]] = [_Node(color=BLACK)]
        self._free: List[int] = []

    # ------------------------------------------------------------------
    #   Allocation
    # ------------------------------------------------------------------
    def allocate(self, key: K, value: V, color: bool = RED) -> int:
        """Create a node whose children are both the sentinel; return its index."""
        if self._free:
            index = self._free.pop()
            node = self._slots[index]
            node.key = key
            node.value = value
            node.color = color
            node.left = node.right = SENTINEL
            node.parent = None
            return index
        self._slots.append(_Node(key, value, color))
        return len(self._slots) - 1

    def release(self, index: int) -> None:
        """Return *index* to the free list and drop its payload references."""
        if index == SENTINEL:
            raise ValueError("the sentinel slot cannot be released")
        node = self._slots[index]
        node.key = node.value = None
        node.color = BLACK
        node.left = node.right = SENTINEL
        node.parent = None
        self._free.append(index)

    def reset(self) -> None:
        """Drop every node except the sentinel."""
        del self._slots[1:]
        self._free.clear()
        logger.debug("node arena reset")

    @property
    def live(self) -> int:
        """Number of allocated (non‑sentinel) nodes."""
        return len(self._slots) - 1 - len(self._free)

    def node(self, index: int) -> _Node[K, V]:
        return self._slots[index]

    __getitem__ = node

    # ------------------------------------------------------------------
    #   Relational look‑ups
    # ------------------------------------------------------------------
    def parent_of(self, index: int) -> Optional[int]:
        return self._slots[index].parent

    def grandparent_of(self, index: int) -> Optional[int]:
        parent = self._slots[index].parent
        if parent is None:
            return None
        return self._slots[parent].parent

    def sibling_of(self, index: int, parent: Optional[int] = None) -> Optional[int]:
        """
        Return the other child of *index*'s parent, or ``None`` at the root.

        The sentinel has no meaningful parent of its own; callers that hold a
        sentinel position pass its logical *parent* explicitly.
        """
        if parent is None:
            parent = self._slots[index].parent
            if parent is None:
                return None
        p = self._slots[parent]
        return p.right if p.left == index else p.left

    def uncle_of(self, index: int) -> Optional[int]:
        parent = self._slots[index].parent
        if parent is None or self._slots[parent].parent is None:
            return None
        return self.sibling_of(parent)

    # ------------------------------------------------------------------
    #   Colouring
    # ------------------------------------------------------------------
    def color_of(self, index: int) -> bool:
        return self._slots[index].color

    def set_color(self, index: int, color: bool) -> None:
        if index == SENTINEL and color == RED:
            raise ValueError("the sentinel must stay black")
        self._slots[index].color = color

    def toggle_color(self, index: int) -> None:
        """Flip *index* between RED and BLACK."""
        self.set_color(index, not self._slots[index].color)

    def __repr__(self) -> str:
        return f"NodeArena(live={self.live}, slots={len(self._slots)})"


def describe(arena: NodeArena[Any, Any], index: Optional[int]) -> str:
    """Short label for a slot, used in validation messages."""
    if index is None:
        return "none"
    if index == SENTINEL:
        return "sentinel"
    return repr(arena[index])
