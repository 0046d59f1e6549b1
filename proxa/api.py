"""
Proxa Public API
================

The operations surrounding code calls: ``wrap`` to instrument a value and
attach observers, and ``unwrap_and_remove`` to detach them again.

```python
from proxa import wrap, unwrap_and_remove

def on_change(node, prop, value, path):
    print(f"{path} -> {value!r}")

state = wrap({"user": {"name": "Ada"}}, on_change)
state["user"]["name"] = "Grace"   # user.name -> ProxaDict({'name': 'Grace'})

unwrap_and_remove(state, on_change)
state["user"]["name"] = "Ada"     # nothing printed
```
"""

from typing import Any, Hashable, Optional

from .node import ProxaNode, is_proxa, wrap
from .registry import Callback


def unwrap_and_remove(
    value: ProxaNode, callback: Callback, prop: Optional[Hashable] = None
) -> ProxaNode:
    """
    Remove ``callback`` from ``value`` and return ``value`` for chaining.

    Without ``prop`` the callback is removed from the global observers;
    with ``prop`` it is removed from that property's observers. Only the
    first registration is removed.

    Raises:
        CallbackNotFound: ``callback`` is not a global observer.
        PropertyNotWatched: ``prop`` was never subscribed to.
        PropertyCallbackNotFound: ``callback`` does not watch ``prop``.
        TypeError: ``value`` is not a wrapped value.
    """
    if not is_proxa(value):
        raise TypeError("unwrap_and_remove() expects a wrapped value")
    return value.unsubscribe(callback, prop)


# Short names, matching the package name.
proxa = wrap
off = unwrap_and_remove

__all__ = ["wrap", "proxa", "unwrap_and_remove", "off", "is_proxa"]
