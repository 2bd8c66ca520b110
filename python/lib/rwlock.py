#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
rwlock.py
---------

A readers–writer lock guarding a whole tree.

Any number of readers may hold the lock together; a writer holds it alone.
Waiting writers block new readers, so a steady stream of lookups cannot
starve ``put`` / ``remove``.  Both sides are exposed as context managers so
the lock is released on every exit path, including early returns and
exceptions.

Typical usage
~~~~~~~~~~~~~
>>> from rwlock import RWLock
>>> rw = RWLock()
>>> with rw.read_lock():
...     rw.readers
1
>>> with rw.write_lock():
...     rw.writing
True
"""

from __future__ import annotations

import threading
from types import TracebackType
from typing import Optional, Type


class RWLock:
    """Writer‑preferring readers–writer lock built on ``threading.Condition``."""

    __slots__ = (
        "_mu",
        "_ok_to_read",
        "_ok_to_write",
        "_active_readers",
        "_active_writer",
        "_waiting_writers",
    )

    def __init__(self) -> None:
        self._mu = threading.Lock()
        self._ok_to_read = threading.Condition(self._mu)
        self._ok_to_write = threading.Condition(self._mu)
        self._active_readers = 0
        self._active_writer = False
        self._waiting_writers = 0

    # ------------------------------------------------------------------
    #   Scoped guards
    # ------------------------------------------------------------------
    class _ReadGuard:
        __slots__ = ("_rw",)

        def __init__(self, rw: "RWLock") -> None:
            self._rw = rw

        def __enter__(self) -> "RWLock._ReadGuard":
            self._rw.acquire_read()
            return self

        def __exit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
        ) -> bool:
            self._rw.release_read()
            return False

    class _WriteGuard:
        __slots__ = ("_rw",)

        def __init__(self, rw: "RWLock") -> None:
            self._rw = rw

        def __enter__(self) -> "RWLock._WriteGuard":
            self._rw.acquire_write()
            return self

        def __exit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
        ) -> bool:
            self._rw.release_write()
            return False

    def read_lock(self) -> "RWLock._ReadGuard":
        """Shared access for the duration of a ``with`` block."""
        return RWLock._ReadGuard(self)

    def write_lock(self) -> "RWLock._WriteGuard":
        """Exclusive access for the duration of a ``with`` block."""
        return RWLock._WriteGuard(self)

    # ------------------------------------------------------------------
    #   Raw acquire / release
    # ------------------------------------------------------------------
    def acquire_read(self) -> None:
        with self._mu:
            # Writers active or queued block new readers
            while self._active_writer or self._waiting_writers:
                self._ok_to_read.wait()
            self._active_readers += 1

    def release_read(self) -> None:
        with self._mu:
            if self._active_readers <= 0:
                raise RuntimeError("release_read() without a matching acquire_read()")
            self._active_readers -= 1
            if self._active_readers == 0:
                self._ok_to_write.notify()

    def acquire_write(self) -> None:
        with self._mu:
            self._waiting_writers += 1
            try:
                while self._active_writer or self._active_readers:
                    self._ok_to_write.wait()
            finally:
                self._waiting_writers -= 1
            self._active_writer = True

    def release_write(self) -> None:
        with self._mu:
            if not self._active_writer:
                raise RuntimeError("release_write() without a matching acquire_write()")
            self._active_writer = False
            # Prefer the next writer; otherwise let every queued reader in
            if self._waiting_writers:
                self._ok_to_write.notify()
            else:
                self._ok_to_read.notify_all()

    # ------------------------------------------------------------------
    #   Introspection (tests / debugging)
    # ------------------------------------------------------------------
    @property
    def readers(self) -> int:
        """Number of threads currently holding shared access."""
        with self._mu:
            return self._active_readers

    @property
    def writing(self) -> bool:
        """Whether a writer currently holds exclusive access."""
        with self._mu:
            return self._active_writer
