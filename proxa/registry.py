"""
Proxa Observer Registry
=======================

Per-node storage for observer callbacks.

A registry keeps two collections:

- **global observers**: called for a change to any property of the node.
  Insertion order is notification order and a callback is stored at most once.
- **property observers**: called only for changes to one named property.
  The list for a property is created on first subscription and the same
  callback may be registered several times, firing once per registration.

Notification never iterates the live lists. ``snapshot()`` copies them under
the registry lock so callbacks can subscribe or unsubscribe while a change is
being dispatched.
"""

import threading
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from .errors import CallbackNotFound, PropertyCallbackNotFound, PropertyNotWatched

# (node, prop, value, path) -> ignored
Callback = Callable[[Any, Hashable, Any, str], Any]


class ObserverRegistry:
    """Global and per-property observer lists for a single node."""

    __slots__ = ("_global", "_by_property", "_lock")

    def __init__(self) -> None:
        self._global: List[Callback] = []
        self._by_property: Dict[Hashable, List[Callback]] = {}
        self._lock = threading.RLock()

    def add(self, callback: Callback, prop: Optional[Hashable] = None) -> None:
        """Register ``callback`` globally, or for ``prop`` when one is given."""
        with self._lock:
            if prop is None:
                if callback not in self._global:
                    self._global.append(callback)
                return

            callbacks = self._by_property.get(prop)
            if callbacks is None:
                callbacks = []
                self._by_property[prop] = callbacks
            callbacks.append(callback)

    def remove(self, callback: Callback, prop: Optional[Hashable] = None) -> None:
        """
        Remove the first registration of ``callback``.

        Raises:
            CallbackNotFound: no ``prop`` given and ``callback`` is not global.
            PropertyNotWatched: ``prop`` never had a callback registered.
            PropertyCallbackNotFound: ``prop`` is watched, but not by ``callback``.
        """
        with self._lock:
            if prop is None:
                try:
                    self._global.remove(callback)
                except ValueError:
                    raise CallbackNotFound() from None
                return

            callbacks = self._by_property.get(prop)
            if callbacks is None:
                raise PropertyNotWatched(prop)
            try:
                callbacks.remove(callback)
            except ValueError:
                raise PropertyCallbackNotFound(prop) from None

    def snapshot(
        self, prop: Hashable
    ) -> Tuple[Tuple[Callback, ...], Tuple[Callback, ...]]:
        """Return (global observers, observers of ``prop``) as frozen tuples."""
        with self._lock:
            return tuple(self._global), tuple(self._by_property.get(prop, ()))

    @property
    def global_observers(self) -> Tuple[Callback, ...]:
        with self._lock:
            return tuple(self._global)

    def property_observers(self, prop: Hashable) -> Tuple[Callback, ...]:
        with self._lock:
            return tuple(self._by_property.get(prop, ()))

    def is_watched(self, prop: Hashable) -> bool:
        """True once ``prop`` has had at least one subscription, even if emptied."""
        with self._lock:
            return prop in self._by_property

    def __len__(self) -> int:
        with self._lock:
            return len(self._global) + sum(
                len(callbacks) for callbacks in self._by_property.values()
            )

    def __repr__(self) -> str:
        with self._lock:
            watched = list(self._by_property)
            return f"ObserverRegistry(global={len(self._global)}, properties={watched!r})"
