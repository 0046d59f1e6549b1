"""
Proxa Errors
============

Exception hierarchy for the proxa instrumentation engine.

Every error is raised where it is detected and propagates to the immediate
caller. The message text of the user-facing errors is stable: calling code
and tests match on it.
"""

from typing import Hashable


class ProxaError(Exception):
    """Base class for all proxa errors."""

    pass


class InvalidTarget(ProxaError, TypeError):
    """Raised when a non-composite value is handed to ``wrap``."""

    def __init__(self, value: object = None):
        super().__init__("Cannot create proxy with a non-object as target or handler")
        self.value = value


class CallbackNotFound(ProxaError, LookupError):
    """Raised when removing a global callback that was never registered."""

    def __init__(self):
        super().__init__("Callback does not exist on this object")


class PropertyNotWatched(ProxaError, LookupError):
    """Raised when removing a callback from a property nobody ever watched."""

    def __init__(self, prop: Hashable):
        super().__init__(f"Could not find any callbacks for property '{prop}'")
        self.prop = prop


class PropertyCallbackNotFound(ProxaError, LookupError):
    """Raised when a watched property does not hold the callback being removed."""

    def __init__(self, prop: Hashable):
        super().__init__(
            f"Callback does not exist on property '{prop}' for this object"
        )
        self.prop = prop


class ParentChainError(ProxaError, RuntimeError):
    """A node has a parent but no key to reach it by. Always a bug."""

    pass
