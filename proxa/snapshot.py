"""
Proxa Snapshots
===============

Conversion of nodes back into plain, observer-free data.

``to_plain`` copies the user-visible entries of a node, replacing every nested
node with its own plain copy. List nodes become lists holding only their
indexed items; non-index properties attached to a list node are dropped.
Reading for a snapshot never instruments anything.

Nodes expose the result through ``to_json()``, and ``ProxaEncoder`` calls that
hook for any object that has it, so ``json.dumps(node, cls=ProxaEncoder)`` (or
the ``dumps`` shortcut) serializes a node like the plain value it wraps.

Example:
    node = wrap([1, {"foo": "bar"}])
    node.test = 1
    dumps(node, separators=(",", ":"))  # '[1,{"foo":"bar"}]'
"""

import json
from typing import Any

from .node import ProxaNode


def _plain(value: Any) -> Any:
    if isinstance(value, ProxaNode):
        return to_plain(value)
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def to_plain(value: Any) -> Any:
    """
    Return a plain copy of ``value`` with every node replaced by its contents.

    Plain dicts and lists inside the structure are copied as well, so the
    result shares no containers with the wrapped data. Scalars and other
    objects are returned as they are. Cycles are not detected.
    """
    if not isinstance(value, ProxaNode):
        return _plain(value)

    meta = value._meta
    with meta.lock:
        if meta.is_array:
            entries = list(value._raw)
        else:
            entries = list(value._raw.items())

    if meta.is_array:
        return [_plain(item) for item in entries]
    return {key: _plain(item) for key, item in entries}


class ProxaEncoder(json.JSONEncoder):
    """JSON encoder that serializes any object through its ``to_json()`` hook."""

    def default(self, o: Any) -> Any:
        to_json = getattr(o, "to_json", None)
        if callable(to_json):
            return to_json()
        return super().default(o)


def dumps(value: Any, **kwargs: Any) -> str:
    """``json.dumps`` with ``ProxaEncoder`` as the default encoder class."""
    kwargs.setdefault("cls", ProxaEncoder)
    return json.dumps(value, **kwargs)
