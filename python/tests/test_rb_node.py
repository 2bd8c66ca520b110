#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
test_rb_node.py
---------------

Unit tests for the node arena that backs ``RedBlackTree``:

* sentinel slot creation and protection
* allocation, release and slot reuse
* parent / grandparent / sibling / uncle look‑ups
* recolouring helpers
"""

import unittest

from rb_node import BLACK, RED, SENTINEL, NodeArena, describe


class TestNodeArena(unittest.TestCase):
    # ------------------------------------------------------------------
    #  Helpers
    # ------------------------------------------------------------------
    def _link(self, arena: NodeArena, parent: int, child: int, side: str) -> None:
        setattr(arena[parent], side, child)
        arena[child].parent = parent

    def _small_tree(self):
        """
        Build::

                 g
               /   \\
              p     u
             /
            n
        """
        arena = NodeArena[int, str]()
        g = arena.allocate(10, "g", BLACK)
        p = arena.allocate(5, "p")
        u = arena.allocate(20, "u")
        n = arena.allocate(2, "n")
        self._link(arena, g, p, "left")
        self._link(arena, g, u, "right")
        self._link(arena, p, n, "left")
        return arena, g, p, u, n

    # ------------------------------------------------------------------
    #  Sentinel
    # ------------------------------------------------------------------
    def test_sentinel_is_black_and_reserved(self):
        arena = NodeArena()
        self.assertEqual(arena.color_of(SENTINEL), BLACK)
        self.assertEqual(arena.live, 0)
        self.assertNotEqual(arena.allocate(1, "one"), SENTINEL)

        with self.assertRaises(ValueError):
            arena.set_color(SENTINEL, RED)
        with self.assertRaises(ValueError):
            arena.toggle_color(SENTINEL)
        with self.assertRaises(ValueError):
            arena.release(SENTINEL)

        # Blackening the sentinel is a no‑op, not an error
        arena.set_color(SENTINEL, BLACK)
        self.assertEqual(arena.color_of(SENTINEL), BLACK)

    def test_each_arena_owns_its_sentinel(self):
        a, b = NodeArena(), NodeArena()
        self.assertIsNot(a[SENTINEL], b[SENTINEL])

    # ------------------------------------------------------------------
    #  Allocation
    # ------------------------------------------------------------------
    def test_allocate_defaults(self):
        arena = NodeArena[int, str]()
        index = arena.allocate(7, "seven")
        node = arena.node(index)
        self.assertEqual((node.key, node.value), (7, "seven"))
        self.assertEqual(node.color, RED)
        self.assertEqual((node.left, node.right), (SENTINEL, SENTINEL))
        self.assertIsNone(node.parent)
        self.assertEqual(arena.live, 1)

    def test_release_recycles_slot(self):
        arena = NodeArena[int, str]()
        first = arena.allocate(1, "one")
        second = arena.allocate(2, "two")
        arena[second].parent = first
        arena.release(second)
        self.assertEqual(arena.live, 1)
        self.assertIsNone(arena[second].key)
        self.assertIsNone(arena[second].value)

        again = arena.allocate(3, "three", BLACK)
        self.assertEqual(again, second)
        self.assertEqual(arena[again].key, 3)
        self.assertEqual(arena[again].color, BLACK)
        self.assertIsNone(arena[again].parent)
        self.assertEqual(arena.live, 2)

    def test_reset(self):
        arena = NodeArena[int, int]()
        for i in range(10):
            arena.allocate(i, i)
        arena.release(4)
        arena.reset()
        self.assertEqual(arena.live, 0)
        self.assertEqual(arena.allocate(0, 0), 1)
        self.assertEqual(arena.color_of(SENTINEL), BLACK)

    # ------------------------------------------------------------------
    #  Relational look‑ups
    # ------------------------------------------------------------------
    def test_relatives(self):
        arena, g, p, u, n = self._small_tree()
        self.assertEqual(arena.parent_of(n), p)
        self.assertEqual(arena.grandparent_of(n), g)
        self.assertEqual(arena.uncle_of(n), u)
        self.assertEqual(arena.sibling_of(p), u)
        self.assertEqual(arena.sibling_of(u), p)
        self.assertEqual(arena.sibling_of(n), SENTINEL)

    def test_relatives_near_root(self):
        arena, g, p, u, n = self._small_tree()
        self.assertIsNone(arena.parent_of(g))
        self.assertIsNone(arena.grandparent_of(g))
        self.assertIsNone(arena.grandparent_of(p))
        self.assertIsNone(arena.sibling_of(g))
        self.assertIsNone(arena.uncle_of(g))
        self.assertIsNone(arena.uncle_of(p))

    def test_sibling_of_sentinel_needs_parent(self):
        arena, g, p, u, n = self._small_tree()
        # p.right is the sentinel; its sibling is n
        self.assertEqual(arena.sibling_of(SENTINEL, p), n)
        # The sentinel's own parent field is never set
        self.assertIsNone(arena[SENTINEL].parent)

    # ------------------------------------------------------------------
    #  Colouring
    # ------------------------------------------------------------------
    def test_toggle_color(self):
        arena, g, p, u, n = self._small_tree()
        arena.toggle_color(g)
        self.assertEqual(arena.color_of(g), RED)
        arena.toggle_color(g)
        self.assertEqual(arena.color_of(g), BLACK)
        arena.set_color(n, BLACK)
        self.assertEqual(arena.color_of(n), BLACK)

    def test_describe(self):
        arena, g, p, u, n = self._small_tree()
        self.assertEqual(describe(arena, None), "none")
        self.assertEqual(describe(arena, SENTINEL), "sentinel")
        self.assertEqual(describe(arena, g), "<B 10:'g'>")
        self.assertEqual(describe(arena, n), "<R 2:'n'>")


if __name__ == "__main__":
    unittest.main(verbosity=2)
