"""
Shared pytest fixtures for proxa tests.
"""

from unittest.mock import Mock

import pytest


@pytest.fixture
def callback():
    """A fresh call-recording observer."""
    return Mock(name="callback")


@pytest.fixture
def events():
    """List that ``recorder`` callbacks append ``(name, prop, path)`` to."""
    return []


@pytest.fixture
def recorder(events):
    """Factory for named observers that log into ``events`` in call order."""

    def make(name):
        def observe(node, prop, value, path):
            events.append((name, prop, path))

        return observe

    return make


@pytest.fixture
def nested():
    """A fresh nested structure; tests mutate it freely."""
    return {"foo": "bar", "lorem": {"ipsum": "dolor", "set": "amit"}}
