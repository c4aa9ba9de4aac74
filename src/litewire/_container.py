from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ._builder import InstanceBuilder
from ._definition import Definition, cascade_config
from ._errors import ConfigurationError
from ._factory import Factory
from ._values import (
    PLACEHOLDER_SEPARATOR,
    REFERENCE_PREFIX,
    ContainerAware,
    ReferenceResolver,
    ValueResolver,
    mark_mergeable,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping


class Container:
    """Lazy DI container built from named definitions.

    - add / modify declarative definitions
    - get instances with constructor and property injection
    - singleton or fresh instance per definition
    - parent definitions, cascaded into their children
    - ``prefix:key`` placeholders, ``ref:<name>`` built in.

    Example:
      container.add({
          "db": {"type": Database, "ctor_args": ["sqlite://"]},
          "repo": {"type": "app.repos.Repo", "properties": {"db": "ref:db"}, "init_method": "open"},
      })
      repo = container.get("repo")

    """

    def __init__(self) -> None:
        self._definitions: dict[str, Definition] = {}
        self._resolvers: dict[str, ValueResolver] = {}
        self._builder = InstanceBuilder(self)
        self._lock = threading.RLock()
        self.add_resolver(REFERENCE_PREFIX, ReferenceResolver())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_defined(name)

    @property
    def resolvers(self) -> Mapping[str, ValueResolver]:
        return MappingProxyType(self._resolvers)

    mark_mergeable = staticmethod(mark_mergeable)

    def add(self, definitions: Mapping[str, Mapping[str, Any]]) -> None:
        """Register definitions by name, replacing any existing definition of the same name.

        Nothing is checked here; types, parents and references are looked at on `get`.
        """
        with self._lock:
            for name, config in definitions.items():
                replaced = name in self._definitions
                self._definitions[name] = Definition(name, config, self._definitions)
                if replaced:
                    logger.debug("Definition '%s' replaced", name)
                    self._invalidate_descendants(name)

    def modify(self, definitions: Mapping[str, Mapping[str, Any]]) -> None:
        """Merge partial configuration into existing definitions.

        Fields are combined the way a child combines with its parent, so
        `properties` are added to rather than replaced. Singletons that were
        already created are kept.
        """
        with self._lock:
            for name in definitions:
                if name not in self._definitions:
                    msg = f"Cannot modify definition {name!r}: no such definition"
                    raise ConfigurationError(msg, name=name)

            for name, partial in definitions.items():
                definition = self._definitions[name]
                definition.raw = cascade_config(definition.raw, partial)
                definition.invalidate()
                self._invalidate_descendants(name)

    def get(self, name: str) -> Any:
        """Return the instance for `name`, or None when no such definition exists."""
        with self._lock:
            definition = self._definitions.get(name)
            if definition is None:
                logger.debug("No definition named '%s'", name)
                return None
            return self._builder.materialize(definition)

    def is_defined(self, name: str) -> bool:
        with self._lock:
            return name in self._definitions

    def definition(self, name: str) -> Definition:
        with self._lock:
            try:
                return self._definitions[name]
            except KeyError:
                msg = f"No definition named {name!r}"
                raise ConfigurationError(msg, name=name) from None

    def add_resolver(self, prefix: str, resolver: ValueResolver) -> None:
        """Register the resolver for ``prefix:key`` values, replacing any previous one.

        Resolvers implementing `set_container` receive this container first.
        """
        if not prefix or PLACEHOLDER_SEPARATOR in prefix:
            msg = f"Invalid resolver prefix {prefix!r}"
            raise ValueError(msg)

        if isinstance(resolver, ContainerAware):
            resolver.set_container(self)

        with self._lock:
            self._resolvers[prefix] = resolver

    def remove_resolver(self, prefix: str) -> None:
        with self._lock:
            self._resolvers.pop(prefix, None)

    def factory(self, ref_id: str) -> Factory:
        return Factory(ref_id, self)

    def build_child(self, parent: str, overrides: Mapping[str, Any]) -> Any:
        """Build a fresh instance from an unregistered child of `parent` carrying `overrides`."""
        child = Definition(None, {**overrides, "parent": parent}, self._definitions)
        with self._lock:
            return self._builder.materialize(child, cache=False)

    def _invalidate_descendants(self, name: str) -> None:
        for definition in self._definitions.values():
            if definition.descends_from(name):
                definition.invalidate()
