"""
Proxa - Deep Change Observation for Plain Data
==============================================

Proxa wraps a plain ``dict`` or ``list`` in a transparent node that reports
every change made anywhere inside it. Nested containers are instrumented
lazily as they are read, every notification carries the dotted path from the
observing level down to the property that changed, and a wrapped structure
can be turned back into plain data at any time for serialization.

Basic Usage
-----------

```python
from proxa import dumps, wrap

def log(node, prop, value, path):
    print(f"changed {path} = {value!r}")

settings = wrap({"theme": "light", "editor": {"tabs": 4}}, log)

settings["theme"] = "dark"        # changed theme = 'dark'
settings.editor.tabs = 2          # changed editor.tabs = ProxaDict({'tabs': 2})
settings["theme"] = "dark"        # unchanged, nothing printed

dumps(settings)                   # '{"theme": "dark", "editor": {"tabs": 2}}'
```

Callbacks receive ``(node, prop, value, path)``. A callback subscribed with
a property name only fires for that property. Observers run synchronously,
the mutated level first and then each ancestor in turn.
"""

from .api import is_proxa, off, proxa, unwrap_and_remove, wrap
from .dispatch import PATH_SEPARATOR
from .errors import (
    CallbackNotFound,
    InvalidTarget,
    ParentChainError,
    PropertyCallbackNotFound,
    PropertyNotWatched,
    ProxaError,
)
from .node import DELETED, ProxaDict, ProxaList, ProxaNode
from .registry import Callback, ObserverRegistry
from .snapshot import ProxaEncoder, dumps, to_plain

__version__ = "0.1.0"

__all__ = [
    # Core API
    "wrap",
    "proxa",
    "unwrap_and_remove",
    "off",
    "is_proxa",
    # Node types
    "ProxaNode",
    "ProxaDict",
    "ProxaList",
    "ObserverRegistry",
    "Callback",
    # Serialization
    "to_plain",
    "dumps",
    "ProxaEncoder",
    # Sentinels and constants
    "DELETED",
    "PATH_SEPARATOR",
    # Exceptions
    "ProxaError",
    "InvalidTarget",
    "CallbackNotFound",
    "PropertyNotWatched",
    "PropertyCallbackNotFound",
    "ParentChainError",
]
