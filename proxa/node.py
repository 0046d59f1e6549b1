"""
Proxa Nodes - Instrumented Views over Plain Data
================================================

This module provides the node types that stand in for a plain ``dict`` or
``list`` and intercept every read and write made through them.

A node is a *view*: the raw value it was built over is mutated in place and no
copy is ever taken. Nested dicts and lists are instrumented lazily, the first
time they are read through their enclosing node. The new child node is stored
back into the raw slot, so every later read returns the same object, and it
remembers its parent and the key it lives under so that a change deep in the
structure is reported at every level above it.

Core Components
---------------

**ProxaDict**: A ``MutableMapping`` over a ``dict``. User keys are also
reachable as attributes (``node.lorem.ipsum = "x"``).

**ProxaList**: A ``MutableSequence`` over a ``list``. Index keys may be ints or
strings of digits. Other keys are non-index properties kept beside the list;
they are observed like any other property but never serialized.

**wrap**: Returns the node for a composite value, creating it on first use.
Wrapping the same raw value, or an existing node, always yields the same node.

Writes
------

A write that does not change the stored value is accepted silently. Two
values are unchanged when they are the same object, or when they are scalars
of the same type that compare equal. Any other write, and every deletion or
list insertion, is handed to the update dispatcher.

Known limitations
-----------------

- A child's parent key is fixed when the child is first wrapped. Inserting
  into, deleting from or reordering a list does not update the keys of
  children that were already wrapped, so their paths go stale.
- A raw value reachable from two parents is parented by whichever reaches it
  first; the second parent gets the same node and no parent link. Once the
  first parent is collected, the next parent to read the value takes it over.
"""

import logging
import operator
import threading
import weakref
from collections.abc import MutableMapping, MutableSequence
from typing import Any, Dict, Hashable, Iterator, Optional, Union

from .dispatch import join_path, notify
from .errors import InvalidTarget
from .meta import NO_KEY, NodeMeta
from .registry import Callback


class _DELETED:
    """Sentinel passed as the value when a property is deleted."""

    def __repr__(self) -> str:
        return "DELETED"


DELETED = _DELETED()

_MISSING = object()

_SCALAR_TYPES = (str, bytes, int, float, complex, bool, type(None))


def _unchanged(old: Any, new: Any) -> bool:
    if old is new:
        return True
    if old is _MISSING:
        return False
    return type(old) is type(new) and isinstance(old, _SCALAR_TYPES) and old == new


def _is_plain_composite(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _as_index(key: Any) -> Optional[int]:
    """Return ``key`` as a list index, or None if it names a non-index property."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return int(key)
    if isinstance(key, str) and key.isascii() and key.isdigit():
        return int(key)
    return None


# ============================================================================
# RAW -> NODE TABLE
# ============================================================================

# id(raw) -> weak reference to the node built over it. A node holds its raw
# value strongly, so an id cannot be reused while its entry is alive.
_nodes: Dict[int, "weakref.ReferenceType[ProxaNode]"] = {}
_nodes_lock = threading.RLock()


def _lookup(raw: Any) -> Optional["ProxaNode"]:
    ref = _nodes.get(id(raw))
    node = ref() if ref is not None else None
    if node is not None and node._raw is raw:
        return node
    return None


def _register(node: "ProxaNode") -> None:
    key = id(node._raw)

    def _forget(ref: "weakref.ReferenceType[ProxaNode]") -> None:
        with _nodes_lock:
            if _nodes.get(key) is ref:
                del _nodes[key]

    _nodes[key] = weakref.ref(node, _forget)


def _reclaim(node: "ProxaNode", parent: "ProxaNode", key: Any) -> bool:
    if not node._meta.reclaim(parent, key):
        return False
    logging.debug(
        f"proxa: {type(node).__name__} re-parented under {key!r}; "
        f"its previous parent was collected"
    )
    return True


def _node_for(
    raw: Union[dict, list], parent: Optional["ProxaNode"] = None, key: Any = NO_KEY
) -> "ProxaNode":
    """
    Return the node for ``raw``, building it if it does not exist yet.

    ``parent`` and ``key`` are recorded on a node built by this call. An
    existing node keeps its live parent, or none if it was wrapped standalone.
    A node whose parent was collected is taken over by ``parent``.
    """
    with _nodes_lock:
        node = _lookup(raw)
        if node is not None:
            if parent is not None and not _reclaim(node, parent, key):
                logging.debug(
                    f"proxa: {type(node).__name__} reached again under {key!r}; "
                    f"keeping its original parent"
                )
            return node

        cls = ProxaList if isinstance(raw, list) else ProxaDict
        node = cls(raw)
        if parent is not None:
            node._meta.adopt(parent, key)
        _register(node)
        logging.debug(
            f"proxa: created {cls.__name__} {id(node):#x}"
            + (f" under key {key!r}" if parent is not None else "")
        )
        return node


# ============================================================================
# NODE TYPES
# ============================================================================


class ProxaNode:
    """
    Shared read/write interception for dict and list nodes.

    Subclasses provide four storage primitives over their raw value
    (``_peek``, ``_load``, ``_store`` and ``_drop``); this class turns them
    into observed reads, writes and deletions. Nodes are built by ``wrap``,
    never directly.
    """

    __slots__ = ("_raw", "_meta", "__weakref__")

    _raw: Any
    _meta: NodeMeta

    def __init__(self, raw: Any, is_array: bool) -> None:
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_meta", NodeMeta(is_array=is_array))

    # Storage primitives

    def _peek(self, key: Any) -> Any:
        raise NotImplementedError

    def _load(self, key: Any) -> Any:
        raise NotImplementedError

    def _store(self, key: Any, value: Any) -> None:
        raise NotImplementedError

    def _drop(self, key: Any) -> None:
        raise NotImplementedError

    # Interception

    def _read(self, key: Any) -> Any:
        with self._meta.lock:
            value = self._load(key)
            if _is_plain_composite(value):
                value = _node_for(value, self, key)
                self._store(key, value)
            elif isinstance(value, ProxaNode):
                _reclaim(value, self, key)
        return value

    def _write(self, key: Any, value: Any) -> None:
        with self._meta.lock:
            if _unchanged(self._peek(key), value):
                return
            self._store(key, value)
        notify(self, key, value, join_path(key))

    def _delete(self, key: Any) -> None:
        with self._meta.lock:
            self._drop(key)
        notify(self, key, DELETED, join_path(key))

    # Observers

    def subscribe(
        self, callback: Callback, prop: Optional[Hashable] = None
    ) -> "ProxaNode":
        """Register ``callback`` for every property, or only for ``prop``."""
        self._meta.observers.add(callback, prop)
        return self

    def unsubscribe(
        self, callback: Callback, prop: Optional[Hashable] = None
    ) -> "ProxaNode":
        """Remove one registration of ``callback``; see ``ObserverRegistry.remove``."""
        self._meta.observers.remove(callback, prop)
        return self

    # Serialization

    def to_json(self) -> Any:
        """Plain, observer-free copy of this node, for JSON encoders."""
        from .snapshot import to_plain

        return to_plain(self)

    def __reduce__(self):
        # Copies and pickles are fresh nodes over a snapshot, without observers.
        return (wrap, (self.to_json(),))

    # Attribute access to user data

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except (KeyError, IndexError):
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        try:
            del self[name]
        except (KeyError, IndexError):
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_json()!r})"


class ProxaDict(ProxaNode, MutableMapping):
    """Observed view over a ``dict``."""

    __slots__ = ()

    def __init__(self, raw: dict) -> None:
        super().__init__(raw, is_array=False)

    def _peek(self, key: Any) -> Any:
        return self._raw.get(key, _MISSING)

    def _load(self, key: Any) -> Any:
        return self._raw[key]

    def _store(self, key: Any, value: Any) -> None:
        self._raw[key] = value

    def _drop(self, key: Any) -> None:
        del self._raw[key]

    def __getitem__(self, key: Hashable) -> Any:
        return self._read(key)

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self._write(key, value)

    def __delitem__(self, key: Hashable) -> None:
        self._delete(key)

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)


class ProxaList(ProxaNode, MutableSequence):
    """
    Observed view over a ``list``.

    Keys that are not indexes (``node.test = 1``, ``node["test"] = 1``) are
    stored in the node's metadata. They notify like any other property but
    are left out of iteration, ``len()`` and snapshots.
    """

    __slots__ = ()

    def __init__(self, raw: list) -> None:
        super().__init__(raw, is_array=True)

    def _position(self, index: int) -> int:
        length = len(self._raw)
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError("list index out of range")
        return index

    def _resolve(self, key: Any) -> Any:
        index = _as_index(key)
        if index is None:
            return key
        return self._position(index)

    def subscribe(
        self, callback: Callback, prop: Optional[Hashable] = None
    ) -> "ProxaList":
        # Writes notify with int indexes, so "0" and 0 name the same property.
        if prop is not None:
            index = _as_index(prop)
            if index is not None:
                prop = index
        return super().subscribe(callback, prop)

    def unsubscribe(
        self, callback: Callback, prop: Optional[Hashable] = None
    ) -> "ProxaList":
        if prop is not None:
            index = _as_index(prop)
            if index is not None:
                prop = index
        return super().unsubscribe(callback, prop)

    # Resolved keys are either a plain int position or an extras key.

    def _peek(self, key: Any) -> Any:
        if type(key) is int:
            return self._raw[key]
        return self._meta.extras.get(key, _MISSING)

    def _load(self, key: Any) -> Any:
        if type(key) is int:
            return self._raw[key]
        return self._meta.extras[key]

    def _store(self, key: Any, value: Any) -> None:
        if type(key) is int:
            self._raw[key] = value
        else:
            self._meta.extras[key] = value

    def _drop(self, key: Any) -> None:
        if type(key) is int:
            del self._raw[key]
        else:
            del self._meta.extras[key]

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, slice):
            return [self._read(i) for i in range(*key.indices(len(self._raw)))]
        return self._read(self._resolve(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        if isinstance(key, slice):
            raise TypeError("slice assignment is not supported on a ProxaList")
        self._write(self._resolve(key), value)

    def __delitem__(self, key: Any) -> None:
        if isinstance(key, slice):
            raise TypeError("slice deletion is not supported on a ProxaList")
        self._delete(self._resolve(key))

    def __len__(self) -> int:
        return len(self._raw)

    def insert(self, index: int, value: Any) -> None:
        with self._meta.lock:
            length = len(self._raw)
            index = operator.index(index)
            if index < 0:
                index = max(0, index + length)
            index = min(index, length)
            self._raw.insert(index, value)
        notify(self, index, value, join_path(index))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ProxaList):
            other = list(other)
        if not isinstance(other, list):
            return NotImplemented
        return list(self) == other

    __hash__ = None  # type: ignore[assignment]


# ============================================================================
# FACTORY
# ============================================================================


def wrap(
    value: Any,
    callback: Optional[Callback] = None,
    prop: Optional[Hashable] = None,
) -> Union[ProxaDict, ProxaList]:
    """
    Return the node for ``value``, optionally subscribing ``callback``.

    ``value`` may be a dict, a list or an existing node; an existing node is
    returned as is. ``callback`` is registered for every property of the
    node, or only for ``prop`` when one is given.

    Raises:
        InvalidTarget: ``value`` is not a dict, list or node.
        TypeError: ``callback`` is given but not callable.
    """
    if isinstance(value, ProxaNode):
        node = value
    elif _is_plain_composite(value):
        node = _node_for(value)
    else:
        raise InvalidTarget(value)

    if callback is not None:
        if not callable(callback):
            raise TypeError("wrap() expects a callable callback")
        node.subscribe(callback, prop)
    return node


def is_proxa(value: Any) -> bool:
    """True if ``value`` is an instrumented node."""
    return isinstance(value, ProxaNode)
