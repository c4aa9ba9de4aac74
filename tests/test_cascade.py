import unittest
from types import SimpleNamespace

import pytest

from litewire import ConfigurationError, Container, MergeableList, mark_mergeable


class Widget:
    def __init__(self, *args):
        self.args = args


class Gadget(Widget): ...


class TestCascadedConfiguration(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def cascaded(self, name):
        return self.cont.definition(name).cascaded_config()

    def test_root_definition_gets_defaults(self):
        self.cont.add({"root": {}})
        assert self.cascaded("root") == {
            "type": SimpleNamespace,
            "singleton": True,
            "ctor_args": [],
            "properties": {},
            "init_method": None,
            "parent": None,
        }

    def test_child_scalar_replaces_parent(self):
        self.cont.add({"Parent": {"x": 1}, "Child": {"parent": "Parent", "x": 2}})
        assert self.cascaded("Child")["x"] == 2
        assert self.cascaded("Parent")["x"] == 1

    def test_child_inherits_absent_fields(self):
        self.cont.add(
            {
                "Parent": {"type": Gadget, "singleton": False, "init_method": "start"},
                "Child": {"parent": "Parent"},
            }
        )
        config = self.cascaded("Child")
        assert config["type"] is Gadget
        assert config["singleton"] is False
        assert config["init_method"] == "start"
        assert config["parent"] == "Parent"

    def test_mergeable_list_is_concatenated(self):
        self.cont.add({"Parent": {"list": [1, 2]}, "Child": {"parent": "Parent", "list": mark_mergeable([3])}})
        assert self.cascaded("Child")["list"] == [1, 2, 3]

    def test_mergeable_parent_list_combines_with_plain_child_list(self):
        self.cont.add({"Parent": {"list": mark_mergeable([1])}, "Child": {"parent": "Parent", "list": [2]}})
        assert self.cascaded("Child")["list"] == [1, 2]

    def test_plain_lists_replace(self):
        self.cont.add({"Parent": {"list": [1, 2]}, "Child": {"parent": "Parent", "list": [3]}})
        assert self.cascaded("Child")["list"] == [3]

    def test_mergeable_marker_carries_down_the_chain(self):
        self.cont.add(
            {
                "A": {"list": [1]},
                "B": {"parent": "A", "list": mark_mergeable([2])},
                "C": {"parent": "B", "list": [3]},
            }
        )
        assert self.cascaded("C")["list"] == [1, 2, 3]
        assert isinstance(self.cascaded("C")["list"], MergeableList)

    def test_properties_are_combined_per_key(self):
        self.cont.add(
            {
                "Parent": {"type": Widget, "properties": {"a": 1, "b": 2}},
                "Child": {"parent": "Parent", "properties": {"b": 3, "c": 4}},
            }
        )
        assert self.cascaded("Child")["properties"] == {"a": 1, "b": 3, "c": 4}
        child = self.cont.get("Child")
        assert (child.a, child.b, child.c) == (1, 3, 4)

    def test_plain_nested_property_dict_replaces(self):
        self.cont.add(
            {
                "Parent": {"properties": {"opts": {"a": 1, "b": 2}}},
                "Child": {"parent": "Parent", "properties": {"opts": {"b": 3}}},
            }
        )
        assert self.cascaded("Child")["properties"]["opts"] == {"b": 3}

    def test_mergeable_nested_property_dict_is_deep_merged(self):
        self.cont.add(
            {
                "Parent": {"properties": {"opts": {"a": 1, "inner": {"x": [1]}}}},
                "Child": {
                    "parent": "Parent",
                    "properties": {"opts": mark_mergeable({"b": 2, "inner": mark_mergeable({"x": mark_mergeable([2])})})},
                },
            }
        )
        assert self.cascaded("Child")["properties"]["opts"] == {"a": 1, "b": 2, "inner": {"x": [1, 2]}}

    def test_mergeable_property_list_is_concatenated(self):
        self.cont.add(
            {
                "flyout": {"type": Widget, "properties": {"builders": ["address", "actions"]}},
                "special": {"parent": "flyout", "properties": {"builders": mark_mergeable(["ratings"])}},
            }
        )
        assert self.cont.get("special").builders == ["address", "actions", "ratings"]
        assert self.cont.get("flyout").builders == ["address", "actions"]

    def test_ctor_args_overlay_by_position(self):
        self.cont.add(
            {
                "Parent": {"type": Widget, "ctor_args": [1, 2, 3]},
                "Child": {"parent": "Parent", "ctor_args": ["a", "b"]},
            }
        )
        assert self.cont.get("Child").args == ("a", "b", 3)

    def test_mergeable_ctor_args_are_appended(self):
        self.cont.add(
            {
                "Parent": {"type": Widget, "ctor_args": [1, 2]},
                "Child": {"parent": "Parent", "ctor_args": mark_mergeable([3])},
            }
        )
        assert self.cont.get("Child").args == (1, 2, 3)

    def test_child_ctor_args_extend_shorter_parent(self):
        self.cont.add({"Parent": {"type": Widget, "ctor_args": [1]}, "Child": {"parent": "Parent", "ctor_args": [9, 8]}})
        assert self.cont.get("Child").args == (9, 8)

    def test_three_level_cascade(self):
        self.cont.add(
            {
                "A": {"type": Widget, "properties": {"a": 1}},
                "B": {"parent": "A", "type": Gadget, "properties": {"b": 2}},
                "C": {"parent": "B", "properties": {"c": 3}},
            }
        )
        c = self.cont.get("C")
        assert isinstance(c, Gadget)
        assert (c.a, c.b, c.c) == (1, 2, 3)

    def test_cascade_is_cached(self):
        self.cont.add({"A": {"type": Widget}})
        assert self.cascaded("A") is self.cascaded("A")

    def test_child_type_given_as_dotted_path(self):
        self.cont.add({"A": {"type": Widget, "properties": {"a": 1}}, "B": {"parent": "A", "type": "collections.Counter"}})
        assert self.cascaded("B")["type"].__name__ == "Counter"


def test_unknown_parent_raises():
    c = Container()
    c.add({"child": {"parent": "missing"}})
    with pytest.raises(ConfigurationError) as ctx:
        c.get("child")
    assert ctx.value.name == "child"
    assert "missing" in str(ctx.value)


def test_non_string_parent_raises():
    c = Container()
    c.add({"child": {"parent": 3}})
    with pytest.raises(ConfigurationError):
        c.get("child")


def test_looping_parent_chain_raises():
    c = Container()
    c.add({"a": {"parent": "b"}, "b": {"parent": "c"}, "c": {"parent": "a"}})
    with pytest.raises(ConfigurationError) as ctx:
        c.get("a")
    assert "looping" in str(ctx.value)


def test_self_parent_raises():
    c = Container()
    c.add({"a": {"parent": "a"}})
    with pytest.raises(ConfigurationError):
        c.get("a")
