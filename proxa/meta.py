"""
Proxa Node Metadata
===================

Bookkeeping for a node, kept out of the user's data.

Each node owns exactly one ``NodeMeta``. Enumerating, reading, writing or
serializing the wrapped value never sees any of these fields.
"""

import threading
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional

from .registry import ObserverRegistry


class _NO_KEY:
    """Sentinel for a node that has no parent key."""

    def __repr__(self) -> str:
        return "NO_KEY"


NO_KEY = _NO_KEY()


@dataclass(eq=False)
class NodeMeta:
    """Observers, parent link and flags for one node."""

    is_array: bool
    observers: ObserverRegistry = field(default_factory=ObserverRegistry)
    parent_ref: Optional["weakref.ReferenceType[Any]"] = None
    parent_key: Any = NO_KEY
    # Non-index properties attached to a list node; never serialized.
    extras: Dict[Hashable, Any] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def parent(self) -> Optional[Any]:
        """The enclosing node, or None for a root or a collected parent."""
        if self.parent_ref is None:
            return None
        return self.parent_ref()

    @property
    def has_parent_key(self) -> bool:
        return self.parent_key is not NO_KEY

    def adopt(self, parent: Any, key: Hashable) -> bool:
        """
        Record ``parent`` as the enclosing node, reachable under ``key``.

        A live parent is never replaced. A collected parent counts as no
        parent at all. Returns False when the node already has a live one.
        """
        if self.parent is not None:
            return False
        self.parent_ref = weakref.ref(parent)
        self.parent_key = key
        return True

    def reclaim(self, parent: Any, key: Hashable) -> bool:
        """
        Re-parent a node whose previous parent was collected.

        A node that never had a parent was wrapped standalone and stays
        that way.
        """
        with self.lock:
            if self.parent_ref is None or self.parent_ref() is not None:
                return False
            return self.adopt(parent, key)
