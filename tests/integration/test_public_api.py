"""Integration tests for the public proxa API."""

import json
import threading
from unittest.mock import Mock

import pytest

from proxa import (
    CallbackNotFound,
    InvalidTarget,
    PropertyCallbackNotFound,
    PropertyNotWatched,
    dumps,
    off,
    proxa,
    unwrap_and_remove,
    wrap,
)


@pytest.mark.integration
class TestInstantiation:
    def test_wraps_object(self):
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor"}})
        assert obj["foo"] == "bar"
        assert obj.lorem.ipsum == "dolor"

    def test_wraps_array(self):
        obj = proxa([{"foo": "bar"}, 1])
        assert obj[0]["foo"] == "bar"
        assert obj[1] == 1

    def test_rejects_non_composite(self):
        with pytest.raises(InvalidTarget) as excinfo:
            proxa(1)
        assert (
            str(excinfo.value)
            == "Cannot create proxy with a non-object as target or handler"
        )

    def test_rewraps_nested_node(self):
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor"}})
        deep = proxa(obj.lorem)
        assert deep is obj.lorem
        assert deep.ipsum == "dolor"


@pytest.mark.integration
class TestGlobalCallbacks:
    def test_called_for_every_changed_property(self):
        cb = Mock()
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor"}}, cb)
        obj.foo = "updated"
        obj.lorem = {"ipsum": "updated"}
        assert cb.call_count == 2

    def test_called_for_deep_changes(self):
        cb = Mock()
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor"}}, cb)
        obj.lorem.ipsum = "updated"
        assert cb.call_count == 1

    def test_nested_and_root_observers_both_fire_with_their_paths(self):
        root_cb = Mock()
        lorem_cb = Mock()
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor"}}, root_cb)
        lorem = proxa(obj.lorem, lorem_cb)

        obj.lorem.ipsum = "updated"

        root_cb.assert_called_once_with(obj, "lorem", lorem, "lorem.ipsum")
        lorem_cb.assert_called_once_with(lorem, "ipsum", "updated", "ipsum")

    def test_not_called_when_value_is_unchanged(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb)
        obj.foo = "updated"
        obj.foo = "updated"
        assert cb.call_count == 1

    def test_callbacks_added_later_share_the_node(self):
        cb1, cb2 = Mock(), Mock()
        obj = proxa({"foo": "bar"}, cb1)
        assert proxa(obj, cb2) is obj
        obj.foo = "updated"
        assert cb1.call_count == 1
        assert cb2.call_count == 1

    def test_same_callback_is_only_added_once(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb)
        proxa(obj, cb)
        obj.foo = "updated"
        assert cb.call_count == 1

    def test_fan_out_preserves_registration_order_and_arguments(self):
        calls = []
        callbacks = [
            lambda *args, i=i: calls.append((i,) + args) for i in range(3)
        ]
        obj = proxa({"foo": "bar"})
        for callback in callbacks:
            proxa(obj, callback)

        obj.foo = "updated"

        assert calls == [(i, obj, "foo", "updated", "foo") for i in range(3)]


@pytest.mark.integration
class TestPropertyCallbacks:
    def test_only_called_for_the_property(self):
        cb = Mock()
        obj = proxa({"foo": "bar", "lorem": "ipsum"}, cb, "lorem")
        obj.foo = "updated"
        obj.lorem = "updated"
        assert cb.call_count == 1

    def test_property_callback_on_nested_node(self):
        cb1, cb2 = Mock(), Mock()
        obj = proxa({"foo": "bar", "lorem": {"ipsum": "dolor", "set": "amit"}}, cb1)
        proxa(obj.lorem, cb2, "ipsum")
        obj.foo = "updated"
        obj.lorem.ipsum = "updated"
        obj.lorem["set"] = "updated"
        assert cb1.call_count == 3
        assert cb2.call_count == 1

    def test_property_callbacks_added_to_existing_node(self):
        cb1, cb2, cb3, cb4 = Mock(), Mock(), Mock(), Mock()
        obj = proxa({"foo": "bar", "lorem": "ipsum"}, cb1)
        proxa(obj, cb2, "foo")
        proxa(obj, cb3, "foo")
        proxa(obj, cb4, "lorem")
        obj.foo = "updated"
        obj.lorem = "updated"
        assert cb1.call_count == 2
        assert cb2.call_count == 1
        assert cb3.call_count == 1
        assert cb4.call_count == 1

    def test_same_property_callback_fires_once_per_registration(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb, "foo")
        proxa(obj, cb, "foo")
        obj.foo = "updated"
        assert cb.call_count == 2


@pytest.mark.integration
class TestRemoval:
    def test_removed_global_callback_stops_firing(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb)
        assert unwrap_and_remove(obj, cb) is obj
        obj.foo = "updated"
        cb.assert_not_called()

    def test_removed_property_callback_stops_firing(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb, "foo")
        off(obj, cb, "foo")
        obj.foo = "updated"
        cb.assert_not_called()

    def test_removal_is_chainable(self):
        cb1, cb2 = Mock(), Mock()
        obj = proxa({"foo": "bar"}, cb1)
        proxa(obj, cb2)
        off(off(obj, cb1), cb2).foo = "updated"
        cb1.assert_not_called()
        cb2.assert_not_called()

    def test_missing_global_callback(self):
        obj = proxa({"foo": "bar"})
        with pytest.raises(CallbackNotFound, match="Callback does not exist on this object"):
            off(obj, Mock())

    def test_unwatched_property(self):
        obj = proxa({"foo": "bar"}, Mock())
        with pytest.raises(PropertyNotWatched) as excinfo:
            off(obj, Mock(), "foo")
        assert str(excinfo.value) == "Could not find any callbacks for property 'foo'"

    def test_missing_property_callback(self):
        obj = proxa({"foo": "bar"}, Mock(), "foo")
        with pytest.raises(PropertyCallbackNotFound) as excinfo:
            off(obj, Mock(), "foo")
        assert (
            str(excinfo.value)
            == "Callback does not exist on property 'foo' for this object"
        )

    def test_double_removal_raises(self):
        cb = Mock()
        obj = proxa({"foo": "bar"}, cb)
        off(obj, cb)
        with pytest.raises(CallbackNotFound):
            off(obj, cb)

    def test_plain_values_are_rejected(self):
        with pytest.raises(TypeError):
            unwrap_and_remove({"foo": "bar"}, Mock())


@pytest.mark.integration
class TestSerialization:
    def test_object_json(self):
        obj = proxa({"foo": "bar", "lorem": "ipsum"})
        assert dumps(obj, separators=(",", ":")) == '{"foo":"bar","lorem":"ipsum"}'

    def test_array_json(self):
        obj = proxa([1, {"foo": "bar"}])
        assert dumps(obj, separators=(",", ":")) == '[1,{"foo":"bar"}]'

    def test_array_json_ignores_non_index_properties(self):
        obj = proxa([1, {"foo": "bar"}])
        obj.test = 1
        assert dumps(obj, separators=(",", ":")) == '[1,{"foo":"bar"}]'

    def test_snapshot_after_deep_edits(self):
        obj = wrap({"users": [{"name": "Ada"}], "count": 1})
        obj.users[0].name = "Grace"
        obj.users.append({"name": "Linus"})
        obj.count = 2
        assert json.loads(dumps(obj)) == {
            "users": [{"name": "Grace"}, {"name": "Linus"}],
            "count": 2,
        }


@pytest.mark.integration
def test_concurrent_writers_each_notify_once():
    """Writes from several threads are all dispatched"""
    seen = []
    lock = threading.Lock()

    def record(node, prop, value, path):
        with lock:
            seen.append(path)

    obj = wrap({}, record)

    def writer(n):
        for i in range(100):
            obj[f"t{n}-{i}"] = i

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 800
    assert len(obj) == 800
