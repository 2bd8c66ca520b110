#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
red_black_tree.py
-----------------

A thread‑safe ordered map backed by a **Red‑Black** binary search tree.
Lookup, insertion/update and deletion are all guaranteed O(log n).

Features
~~~~~~~~
* `tree.put(key, value)`      – insert / replace
* `tree.get(key)`             – ``(value, True)`` or ``(None, False)``
* `tree.remove(key)`          – ``True`` if the key was present
* `tree.size()` / `len(tree)` – number of stored items
* `tree[key] = value`, `tree[key]`, `del tree[key]`, `key in tree`
  – dict‑style access (KeyError if missing)
* iteration (`for key in tree:`) – keys in ascending order
* `tree.items()`, `tree.keys()`, `tree.values()`
* `tree.min_key()`, `tree.max_key()`
* `tree.successor(key)`, `tree.predecessor(key)` (raise KeyError if not found)
* `tree.height()`, `tree.clear()`
* `tree.validate()` – sanity‑check that the red‑black invariants hold (useful for debugging)

Nodes are kept in a per‑tree ``NodeArena`` (see ``rb_node.py``) and linked by
index.  All leaf links point at the arena's single black sentinel slot, which
eliminates ``None`` checks in the balancing code.  An empty tree has no root
at all (``_root is None``), which is distinct from a root link to the sentinel.

Lookups take the tree's ``RWLock`` in shared mode; ``put``/``remove``/``clear``
take it exclusively for the whole operation, fix‑up included.

Typical usage
~~~~~~~~~~~~~
>>> from red_black_tree import RedBlackTree
>>> rbt = RedBlackTree.new()
>>> rbt.put(5, "five")
>>> rbt.put(2, "two")
>>> rbt.put(8, "eight")
>>> rbt.get(2)
('two', True)
>>> rbt.get(3)
(None, False)
>>> rbt.min_key(), rbt.max_key()
(2, 8)
>>> rbt.remove(5)
True
>>> rbt.remove(5)
False
>>> rbt.items()
[(2, 'two'), (8, 'eight')]
"""

from __future__ import annotations

import logging
import math
from typing import (
    Generator,
    Generic,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from rb_node import BLACK, RED, SENTINEL, NodeArena, describe
from rwlock import RWLock

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
#  Type variables (keys must be comparable, values may be anything)
# ----------------------------------------------------------------------
K = TypeVar("K")
V = TypeVar("V")


class RedBlackTree(Generic[K, V]):
    """
    An ordered map implemented with a red‑black binary search tree.

    The public API is the ``get`` / ``put`` / ``remove`` / ``size`` quartet;
    the dict‑style protocol (``__setitem__``, ``__getitem__``,
    ``__delitem__``, ``__contains__``, ``__len__``, ``__iter__``) is layered
    on top of it.  Keys only need ``<``, ``>`` and ``==``; the tree never
    supplies its own comparator.
    """

    __slots__ = ("_arena", "_root", "_size", "_lock")

    # ------------------------------------------------------------------
    #   Construction / basic container protocol
    # ------------------------------------------------------------------
    def __init__(self, items: Optional[Iterable[Tuple[K, V]]] = None) -> None:
        """
        Create an empty tree or optionally initialise it from an iterable of
        ``(key, value)`` pairs.

        Parameters
        ----------
        items : iterable of (key, value)   optional
            If supplied, each pair is inserted using ``put`` (i.e. the
            whole operation is O(n log n)).  Later duplicates win.
        """
        self._arena: NodeArena[K, V] = NodeArena()
        self._root: Optional[int] = None
        self._size: int = 0
        self._lock = RWLock()
        logger.debug("created red-black tree %#x", id(self))

        if items is not None:
            for key, value in items:
                self.put(key, value)

    @classmethod
    def new(cls) -> "RedBlackTree[K, V]":
        """Return an empty tree with a fresh sentinel."""
        return cls()

    # ------------------------------------------------------------------
    #   Search (internal, caller holds the lock)
    # ------------------------------------------------------------------
    def _search(self, key: K) -> Tuple[Optional[int], Optional[int]]:
        """
        Walk down from the root looking for *key*.

        Returns ``(parent, match)``: *parent* is the last real node visited
        (where a new node for *key* would hang), *match* the node holding
        *key* or ``None`` on a miss.
        """
        nodes = self._arena
        parent: Optional[int] = None
        cur = self._root if self._root is not None else SENTINEL
        while cur != SENTINEL:
            node = nodes[cur]
            if key < node.key:
                parent = cur
                cur = node.left
            elif key > node.key:
                parent = cur
                cur = node.right
            else:
                return node.parent, cur
        return parent, None

    def _find(self, key: K) -> Optional[int]:
        return self._search(key)[1]

    # ------------------------------------------------------------------
    #   Public API
    # ------------------------------------------------------------------
    def get(self, key: K) -> Tuple[Optional[V], bool]:
        """Return ``(value, True)`` for a stored *key*, else ``(None, False)``."""
        with self._lock.read_lock():
            match = self._find(key)
            if match is None:
                return None, False
            return self._arena[match].value, True

    def put(self, key: K, value: V) -> None:
        """Insert *key* with *value* or replace the existing value."""
        with self._lock.write_lock():
            self._insert(key, value)

    def remove(self, key: K) -> bool:
        """Delete *key*; return ``False`` (and change nothing) if it is absent."""
        with self._lock.write_lock():
            return self._delete(key)

    def size(self) -> int:
        """Number of stored entries."""
        return self._size

    def clear(self) -> None:
        """Remove every entry; the sentinel survives."""
        with self._lock.write_lock():
            self._arena.reset()
            self._root = None
            self._size = 0
        logger.debug("cleared red-black tree %#x", id(self))

    # ------------------------------------------------------------------
    #   Mapping protocol
    # ------------------------------------------------------------------
    def __contains__(self, key: object) -> bool:  # type: ignore[override]
        with self._lock.read_lock():
            return self._find(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, key: K) -> V:
        value, found = self.get(key)
        if not found:
            raise KeyError(key)
        return value  # type: ignore[return-value]

    def __setitem__(self, key: K, value: V) -> None:
        self.put(key, value)

    def __delitem__(self, key: K) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __iter__(self) -> Generator[K, None, None]:
        """Yield keys in ascending order from a snapshot taken under the read lock."""
        for key, _ in self.items():
            yield key

    # ------------------------------------------------------------------
    #   Convenience collection‑like view methods
    # ------------------------------------------------------------------
    def _inorder(self) -> List[Tuple[K, V]]:
        """In‑order list of ``(key, value)`` pairs (caller holds the lock)."""
        nodes = self._arena
        out: List[Tuple[K, V]] = []
        stack: List[int] = []
        cur = self._root if self._root is not None else SENTINEL
        while stack or cur != SENTINEL:
            while cur != SENTINEL:
                stack.append(cur)
                cur = nodes[cur].left
            cur = stack.pop()
            node = nodes[cur]
            out.append((node.key, node.value))  # type: ignore[arg-type]
            cur = node.right
        return out

    def keys(self) -> List[K]:
        """Return a list of all keys in sorted order."""
        return [key for key, _ in self.items()]

    def values(self) -> List[V]:
        """Return a list of all values in key order."""
        return [value for _, value in self.items()]

    def items(self) -> List[Tuple[K, V]]:
        """Return a list of ``(key, value)`` pairs in sorted order."""
        with self._lock.read_lock():
            return self._inorder()

    # ------------------------------------------------------------------
    #   Minimum / maximum helpers
    # ------------------------------------------------------------------
    def _minimum_node(self, start: int) -> int:
        nodes = self._arena
        while nodes[start].left != SENTINEL:
            start = nodes[start].left
        return start

    def _maximum_node(self, start: int) -> int:
        nodes = self._arena
        while nodes[start].right != SENTINEL:
            start = nodes[start].right
        return start

    def min_key(self) -> K:
        """Return the smallest key stored in the tree."""
        with self._lock.read_lock():
            if self._root is None:
                raise KeyError("min_key(): tree is empty")
            return self._arena[self._minimum_node(self._root)].key  # type: ignore[return-value]

    def max_key(self) -> K:
        """Return the largest key stored in the tree."""
        with self._lock.read_lock():
            if self._root is None:
                raise KeyError("max_key(): tree is empty")
            return self._arena[self._maximum_node(self._root)].key  # type: ignore[return-value]

    # ------------------------------------------------------------------
    #   Successor / predecessor
    # ------------------------------------------------------------------
    def _successor_node(self, index: int) -> Optional[int]:
        nodes = self._arena
        if nodes[index].right != SENTINEL:
            return self._minimum_node(nodes[index].right)
        # Walk up until we leave a left subtree.
        parent = nodes[index].parent
        while parent is not None and index == nodes[parent].right:
            index = parent
            parent = nodes[parent].parent
        return parent

    def _predecessor_node(self, index: int) -> Optional[int]:
        nodes = self._arena
        if nodes[index].left != SENTINEL:
            return self._maximum_node(nodes[index].left)
        parent = nodes[index].parent
        while parent is not None and index == nodes[parent].left:
            index = parent
            parent = nodes[parent].parent
        return parent

    def successor(self, key: K) -> K:
        """Return the smallest key greater than *key*; raise KeyError if none."""
        with self._lock.read_lock():
            match = self._find(key)
            if match is None:
                raise KeyError(key)
            nxt = self._successor_node(match)
            if nxt is None:
                raise KeyError(f"No successor for {key!r}")
            return self._arena[nxt].key  # type: ignore[return-value]

    def predecessor(self, key: K) -> K:
        """Return the greatest key smaller than *key*; raise KeyError if none."""
        with self._lock.read_lock():
            match = self._find(key)
            if match is None:
                raise KeyError(key)
            prv = self._predecessor_node(match)
            if prv is None:
                raise KeyError(f"No predecessor for {key!r}")
            return self._arena[prv].key  # type: ignore[return-value]

    # ------------------------------------------------------------------
    #   Insertion
    # ------------------------------------------------------------------
    def _insert(self, key: K, value: V) -> None:
        nodes = self._arena
        if self._root is None:
            self._root = nodes.allocate(key, value, BLACK)
            self._size += 1
            return

        parent, match = self._search(key)
        if match is not None:
            # Key already exists → replace value, no tree‑structure change.
            nodes[match].value = value
            return

        assert parent is not None
        new_node = nodes.allocate(key, value, RED)
        nodes[new_node].parent = parent
        if key < nodes[parent].key:
            nodes[parent].left = new_node
        else:
            nodes[parent].right = new_node

        self._size += 1
        self._fix_insert(new_node)

    def _fix_insert(self, n: int) -> None:
        """Restore red‑black properties after linking the RED node `n`."""
        nodes = self._arena
        while n != self._root:
            p = nodes[n].parent
            if nodes.color_of(p) == BLACK:
                break
            # A red parent is never the root, so the grandparent exists.
            gp: int = nodes.grandparent_of(n)  # type: ignore[assignment]
            u = nodes.uncle_of(n)

            if u is not None and nodes.color_of(u) == RED:
                # Case A – red uncle: push the blackness down from gp
                nodes.toggle_color(p)
                nodes.toggle_color(u)
                nodes.toggle_color(gp)
                n = gp
                continue

            if p == nodes[gp].left:
                if n == nodes[p].left:
                    # Case B1 – straight line
                    self._rotate_right(gp)
                    nodes.toggle_color(p)
                    nodes.toggle_color(gp)
                    break
                # Case B2 – zig‑zag, becomes B1 next round
                self._rotate_left(p)
                n = p
            else:  # Mirror of the above (parent is a right child)
                if n == nodes[p].right:
                    # Case C1
                    self._rotate_left(gp)
                    nodes.toggle_color(p)
                    nodes.toggle_color(gp)
                    break
                # Case C2
                self._rotate_right(p)
                n = p

        nodes.set_color(self._root, BLACK)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    #   Left / right rotations – helper primitives
    # ------------------------------------------------------------------
    def _replace_child(self, parent: Optional[int], old: int, new: int) -> None:
        """Point the link from *parent* that held *old* at *new*."""
        if parent is None:
            self._root = new
            return
        p = self._arena[parent]
        if p.left == old:
            p.left = new
        else:
            p.right = new

    def _rotate_left(self, x: int) -> None:
        """Left‑rotate the subtree rooted at `x`."""
        nodes = self._arena
        xn = nodes[x]
        y = xn.right
        if y == SENTINEL:
            raise RuntimeError("rotate_left called on a node with sentinel right child")
        yn = nodes[y]
        # Turn y's left subtree into x's right subtree
        xn.right = yn.left
        if yn.left != SENTINEL:
            nodes[yn.left].parent = x
        # Link x's parent to y
        yn.parent = xn.parent
        self._replace_child(xn.parent, x, y)
        # Put x on y's left
        yn.left = x
        xn.parent = y

    def _rotate_right(self, y: int) -> None:
        """Right‑rotate the subtree rooted at `y`."""
        nodes = self._arena
        yn = nodes[y]
        x = yn.left
        if x == SENTINEL:
            raise RuntimeError("rotate_right called on a node with sentinel left child")
        xn = nodes[x]
        # Turn x's right subtree into y's left subtree
        yn.left = xn.right
        if xn.right != SENTINEL:
            nodes[xn.right].parent = y
        # Link y's parent to x
        xn.parent = yn.parent
        self._replace_child(yn.parent, y, x)
        # Put y on x's right
        xn.right = y
        yn.parent = x

    # ------------------------------------------------------------------
    #   Deletion
    # ------------------------------------------------------------------
    def _delete(self, key: K) -> bool:
        target = self._find(key)
        if target is None:
            return False

        nodes = self._arena
        t = nodes[target]
        if t.left != SENTINEL and t.right != SENTINEL:
            # Two children: take over the in‑order predecessor's payload and
            # remove the predecessor, which has at most one (left) child.
            pred = self._maximum_node(t.left)
            t.key = nodes[pred].key
            t.value = nodes[pred].value
            target = pred

        self._unlink(target)
        nodes.release(target)
        self._size -= 1
        if self._root is None:
            logger.debug("red-black tree %#x is now empty", id(self))
        return True

    def _unlink(self, target: int) -> None:
        """Detach *target*, which has at most one real child."""
        nodes = self._arena
        t = nodes[target]
        parent = t.parent
        child = t.left if t.left != SENTINEL else t.right

        if child != SENTINEL:
            # A node with one child is BLACK and the child is a RED leaf:
            # splicing it in and blackening it keeps every black‑height.
            assert t.color == BLACK and nodes.color_of(child) == RED, (
                f"single child {describe(nodes, child)} under {describe(nodes, target)}"
            )
            self._replace_child(parent, target, child)
            nodes[child].parent = parent
            nodes.set_color(child, BLACK)
            return

        if parent is None:
            self._root = None
            return

        self._replace_child(parent, target, SENTINEL)
        if t.color == BLACK:
            self._fix_delete(SENTINEL, parent)

    def _fix_delete(self, n: int, parent: int) -> None:
        """
        Restore red‑black properties after removing a black node.

        `n` sits one black node short of its sibling's subtrees; it may be the
        sentinel, so its logical `parent` is tracked here rather than read
        from the node.
        """
        nodes = self._arena
        while n != self._root and nodes.color_of(n) == BLACK:
            s: int = nodes.sibling_of(n, parent)  # type: ignore[assignment]
            if n == nodes[parent].left:
                if nodes.color_of(s) == RED:
                    # Case 1 – red sibling: rotate it above the parent
                    nodes.set_color(s, BLACK)
                    nodes.set_color(parent, RED)
                    self._rotate_left(parent)
                    s = nodes[parent].right
                near, far = nodes[s].left, nodes[s].right
                if nodes.color_of(near) == BLACK and nodes.color_of(far) == BLACK:
                    # Case 2 – both nephews black: move the deficit up
                    nodes.set_color(s, RED)
                    n = parent
                    parent = nodes.parent_of(n)  # type: ignore[assignment]
                    continue
                if nodes.color_of(far) == RED:
                    # Case 3 – far nephew red
                    nodes.set_color(s, nodes.color_of(parent))
                    nodes.set_color(parent, BLACK)
                    nodes.set_color(far, BLACK)
                    self._rotate_left(parent)
                    break
                # Case 4 – only the near nephew is red, becomes Case 3
                nodes.set_color(s, RED)
                nodes.set_color(near, BLACK)
                self._rotate_right(s)
            else:
                # Mirror of the above, with "left" and "right" swapped
                if nodes.color_of(s) == RED:
                    nodes.set_color(s, BLACK)
                    nodes.set_color(parent, RED)
                    self._rotate_right(parent)
                    s = nodes[parent].left
                near, far = nodes[s].right, nodes[s].left
                if nodes.color_of(near) == BLACK and nodes.color_of(far) == BLACK:
                    nodes.set_color(s, RED)
                    n = parent
                    parent = nodes.parent_of(n)  # type: ignore[assignment]
                    continue
                if nodes.color_of(far) == RED:
                    nodes.set_color(s, nodes.color_of(parent))
                    nodes.set_color(parent, BLACK)
                    nodes.set_color(far, BLACK)
                    self._rotate_right(parent)
                    break
                nodes.set_color(s, RED)
                nodes.set_color(near, BLACK)
                self._rotate_left(s)

        nodes.set_color(n, BLACK)

    # ------------------------------------------------------------------
    #   Validation/checking utilities – useful for debugging
    # ------------------------------------------------------------------
    def height(self) -> int:
        """Number of real nodes on the longest root‑to‑leaf path (0 if empty)."""
        with self._lock.read_lock():
            return self._height()

    def _height(self) -> int:
        nodes = self._arena

        def depth(index: int) -> int:
            if index == SENTINEL:
                return 0
            return 1 + max(depth(nodes[index].left), depth(nodes[index].right))

        return depth(self._root) if self._root is not None else 0

    def validate(self) -> None:
        """
        Verify that the tree satisfies all red‑black invariants.
        Raises ``AssertionError`` with a descriptive message if something is broken.
        """
        with self._lock.read_lock():
            nodes = self._arena
            assert nodes.color_of(SENTINEL) == BLACK, "Sentinel is not black"

            if self._root is None:
                assert self._size == 0, f"Empty tree reports size {self._size}"
                return

            def dfs(index: int, parent: Optional[int]) -> Tuple[int, int]:
                """Return ``(black_height, node_count)`` of the subtree at *index*."""
                if index == SENTINEL:
                    return 1, 0  # leaves count as black height 1 (they are black)

                node = nodes[index]
                assert node.parent == parent, (
                    f"Broken parent link at {describe(nodes, index)}"
                )

                # Red nodes have black children
                if node.color == RED:
                    assert nodes.color_of(node.left) == BLACK, (
                        f"Red node {describe(nodes, index)} has red left child"
                    )
                    assert nodes.color_of(node.right) == BLACK, (
                        f"Red node {describe(nodes, index)} has red right child"
                    )

                # BST ordering check
                if node.left != SENTINEL:
                    assert nodes[node.left].key < node.key, (
                        "BST property violated (left child larger)"
                    )
                if node.right != SENTINEL:
                    assert nodes[node.right].key > node.key, (
                        "BST property violated (right child smaller)"
                    )

                left_black, left_count = dfs(node.left, index)
                right_black, right_count = dfs(node.right, index)

                # All paths have the same black height
                assert left_black == right_black, (
                    f"Black-height mismatch under {describe(nodes, index)}"
                )

                bh = left_black + (1 if node.color == BLACK else 0)
                return bh, left_count + right_count + 1

            assert nodes.color_of(self._root) == BLACK, "Root is not black"
            _, count = dfs(self._root, None)
            assert count == self._size, f"Size {self._size} but {count} nodes reachable"

            # Child links only order neighbours; the full in‑order walk
            # catches keys misplaced deeper in a subtree.
            keys = [key for key, _ in self._inorder()]
            assert all(a < b for a, b in zip(keys, keys[1:])), (
                "In-order traversal is not strictly ascending"
            )
            height = self._height()
            assert height <= 2 * math.log2(count + 1), (
                f"Height {height} exceeds 2*log2(n+1) for n={count}"
            )

    # ------------------------------------------------------------------
    #   Convenience string representation (for debugging)
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"RedBlackTree({{{items}}})"
