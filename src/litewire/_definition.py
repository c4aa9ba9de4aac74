from __future__ import annotations

import functools
import importlib
import logging
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from ._errors import ConfigurationError
from ._values import merge_ctor_args, merge_properties, merge_values


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping


def default_config() -> dict[str, Any]:
    return {
        "type": SimpleNamespace,
        "singleton": True,
        "ctor_args": [],
        "properties": {},
        "init_method": None,
        "parent": None,
    }


def cascade_config(inherited: Mapping[str, Any], own: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay `own` fields onto `inherited` ones.

    `properties` maps are always combined per key and `ctor_args` are overlaid
    by position; other fields follow the mergeable rule of `merge_values`.
    """
    config = dict(inherited)
    for key, value in own.items():
        if key == "properties":
            config[key] = merge_properties(inherited.get(key) or {}, value or {})
        elif key == "ctor_args":
            config[key] = merge_ctor_args(inherited.get(key) or [], value or [])
        elif key in inherited:
            config[key] = merge_values(inherited[key], value)
        else:
            config[key] = value
    return config


def load_type(ref: Any, name: str) -> Any:
    """Import a dotted path ("pkg.mod.Name" or "pkg.mod:Outer.Inner"); other values pass through."""
    if not isinstance(ref, str):
        return ref

    if ":" in ref:
        module_name, _, attr_path = ref.partition(":")
    else:
        module_name, _, attr_path = ref.rpartition(".")

    if not module_name or not attr_path:
        msg = f"Definition {name!r} has type {ref!r}, which is not an importable dotted path"
        raise ConfigurationError(msg, name=name)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Definition {name!r} has type {ref!r}, but module {module_name!r} cannot be imported: {e}"
        raise ConfigurationError(msg, name=name) from e

    try:
        return functools.reduce(getattr, attr_path.split("."), module)
    except AttributeError as e:
        msg = f"Definition {name!r} has type {ref!r}, but {attr_path!r} is not found in {module_name!r}"
        raise ConfigurationError(msg, name=name) from e


class Definition:
    """One named object definition and its cascaded (inherited) configuration.

    `registry` is the owning container's name -> Definition mapping, used to
    look up parents. A definition without a name is an ephemeral one, as
    created by factories with per-call overrides.
    """

    def __init__(self, name: str | None, config: Mapping[str, Any], registry: Mapping[str, Definition]) -> None:
        self.name = name
        self.raw: dict[str, Any] = dict(config)
        self.cached_instance: object | None = None
        self.has_instance = False
        self._registry = registry
        self._cascaded: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return f"Definition({self.label!r})"

    @property
    def label(self) -> str:
        if self.name is not None:
            return self.name
        return f"<child of {self.raw.get('parent')!r}>"

    def cache_instance(self, instance: object) -> None:
        self.cached_instance = instance
        self.has_instance = True

    def drop_instance(self) -> None:
        self.cached_instance = None
        self.has_instance = False

    @property
    def parent_name(self) -> Any:
        return self.raw.get("parent")

    def parent(self) -> Definition | None:
        parent_name = self.parent_name
        if parent_name is None:
            return None

        if not isinstance(parent_name, str):
            msg = f"Definition {self.label!r} has a non-string parent reference {parent_name!r}"
            raise ConfigurationError(msg, name=self.name)

        parent = self._registry.get(parent_name)
        if parent is None:
            msg = f"Definition {self.label!r} names unknown parent {parent_name!r}"
            raise ConfigurationError(msg, name=self.name)
        return parent

    def ancestors(self) -> list[Definition]:
        """Parent chain, nearest first. Raises ConfigurationError on a broken or looping chain."""
        chain: list[Definition] = []
        seen = {id(self)}
        current = self.parent()
        while current is not None:
            if id(current) in seen:
                path = " -> ".join([self.label, *(d.label for d in chain), current.label])
                msg = f"Definition {self.label!r} has a looping parent chain: {path}"
                raise ConfigurationError(msg, name=self.name)
            seen.add(id(current))
            chain.append(current)
            current = current.parent()
        return chain

    def descends_from(self, name: str) -> bool:
        # walks names only, broken chains are reported by ancestors()
        seen: set[str] = set()
        current = self.parent_name
        while isinstance(current, str) and current not in seen:
            if current == name:
                return True
            seen.add(current)
            parent = self._registry.get(current)
            if parent is None:
                return False
            current = parent.parent_name
        return False

    def cascaded_config(self) -> dict[str, Any]:
        if self._cascaded is None:
            self._cascaded = self._cascade()
        return self._cascaded

    def invalidate(self) -> None:
        self._cascaded = None

    def _cascade(self) -> dict[str, Any]:
        self.ancestors()  # validate the whole chain before recursing into it

        parent = self.parent()
        if parent is None:
            config = cascade_config(default_config(), self.raw)
        else:
            config = cascade_config(parent.cascaded_config(), self.raw)

        config["type"] = load_type(config["type"], self.label)
        logger.debug("Cascaded configuration of %s computed", self.label)
        return config
