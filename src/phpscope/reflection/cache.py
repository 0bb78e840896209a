"""Memoization of lazily derived element values.

Derived values (modifiers, prototypes, resolved constant values, inherited
annotations) may depend on symbols that have not been registered yet. Each
computation therefore reports whether its dependency closure was complete;
only complete results are frozen, everything else is recomputed on the next
access.

Frozen values are never invalidated. When an ancestor later turns into a
conflict placeholder, descendants keep the members they composed and report
the conflict through ``is_valid``.
"""

from __future__ import annotations

import functools
import itertools
import threading
from collections.abc import Callable
from typing import Any, TypeVar

V = TypeVar("V")

_element_ids = itertools.count(1)


def next_element_id() -> int:
    """Allocate a process-unique element id."""
    return next(_element_ids)


class LazyCache:
    """Cache keyed by ``(element id, field)`` holding only complete values."""

    def __init__(self) -> None:
        self._entries: dict[tuple[int, str], Any] = {}
        self._lock = threading.Lock()

    def get(self, element_id: int, field: str, compute: Callable[[], tuple[V, bool]]) -> V:
        """Return the frozen value or compute a fresh one.

        Args:
            element_id: Id of the element owning the value.
            field: Name of the derived value.
            compute: Callable returning ``(value, complete)``.

        Returns:
            The cached value when one was frozen, otherwise the freshly
            computed value (frozen if ``complete`` is true).
        """
        key = (element_id, field)
        with self._lock:
            if key in self._entries:
                return self._entries[key]
        value, complete = compute()
        if complete:
            with self._lock:
                self._entries.setdefault(key, value)
        return value

    def is_frozen(self, element_id: int, field: str) -> bool:
        with self._lock:
            return (element_id, field) in self._entries

    def put(self, element_id: int, field: str, value: Any) -> None:
        """Freeze a value explicitly (used when a value is overridden)."""
        with self._lock:
            self._entries[(element_id, field)] = value

    def __len__(self) -> int:
        return len(self._entries)


_active = threading.local()


def recursion_guard(default: Callable[..., Any]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Break cycles in derived-value computations.

    Cyclic hierarchies (``class A extends B``, ``class B extends A``) make
    derivations such as modifiers or parent lists re-enter themselves. A
    re-entrant call for the same element returns ``default(self)`` instead.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            active = getattr(_active, "calls", None)
            if active is None:
                active = _active.calls = set()
            key = (id(self), func.__qualname__)
            if key in active:
                return default(self)
            active.add(key)
            try:
                return func(self, *args, **kwargs)
            finally:
                active.discard(key)

        return wrapper

    return decorator
