"""
Proxa Update Dispatcher
=======================

Routes a single mutation through a node's observers and then up its parent
chain.

Order is strictly bottom-up: the mutated node's global observers run first,
then its observers for the mutated property, then the same two groups on the
parent (with the parent's key for the child as the property and the child
node as the value), and so on until a node without a parent is reached.
Every callback receives ``(node, prop, value, path)`` where ``path`` is the
dotted path from that level down to the leaf property that changed.

Dispatch is synchronous. A write returns only after every ancestor's
observers have run, and exceptions raised by observers propagate to the
writer.
"""

import logging
from typing import Any, Hashable

from .errors import ParentChainError

PATH_SEPARATOR = "."


def join_path(*segments: Hashable) -> str:
    """Join path segments with ``PATH_SEPARATOR``; segments are str()-ed."""
    return PATH_SEPARATOR.join(str(segment) for segment in segments)


def notify(node: Any, prop: Hashable, value: Any, path: str) -> None:
    """
    Dispatch a change of ``prop`` on ``node`` to ``value``.

    Walks the parent chain iteratively so a deep structure cannot overflow
    the stack on its own; re-entrant writes made by observers still nest.

    Raises:
        ParentChainError: a node on the chain has a parent but no parent key.
    """
    while node is not None:
        meta = node._meta
        global_observers, property_observers = meta.observers.snapshot(prop)
        logging.debug(
            f"proxa: dispatching {path!r} to {len(global_observers)} global and "
            f"{len(property_observers)} property observer(s)"
        )

        for callback in global_observers:
            callback(node, prop, value, path)
        for callback in property_observers:
            callback(node, prop, value, path)

        parent = meta.parent
        if parent is None:
            return
        if not meta.has_parent_key:
            raise ParentChainError(
                f"node {id(node):#x} has a parent but no key to reach it by"
            )

        prop, value, path = meta.parent_key, node, join_path(meta.parent_key, path)
        node = parent
