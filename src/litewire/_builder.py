from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from ._errors import CircularReferenceError, ConfigurationError
from ._values import ContainerAware, expand_value


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._container import Container
    from ._definition import Definition


SETTER_PREFIX = "set_"


class InstanceBuilder:
    """Turns definitions into wired instances for one container.

    Tracks the definitions being materialized so that a reference cycle
    raises CircularReferenceError instead of recursing without end, and the
    singletons cached during a failing top-level call are dropped again.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self._setters: dict[type, dict[str, str]] = {}
        self._resolving: list[Definition] = []
        self._cached: list[Definition] = []

    def materialize(self, definition: Definition, *, cache: bool = True) -> Any:
        if cache and definition.has_instance:
            if definition.cascaded_config()["singleton"]:
                return definition.cached_instance
            # modified to non-singleton since it was cached
            definition.drop_instance()

        for i, pending in enumerate(self._resolving):
            if pending is definition:
                raise CircularReferenceError([d.label for d in self._resolving[i:]] + [definition.label])

        top_level = not self._resolving
        self._resolving.append(definition)
        try:
            return self._build(definition, cache=cache)
        except Exception:
            if top_level:
                self._rollback()
            raise
        finally:
            self._resolving.pop()
            if top_level:
                self._cached.clear()

    def _build(self, definition: Definition, *, cache: bool) -> Any:
        config = definition.cascaded_config()
        target = config["type"]
        if not callable(target):
            msg = f"Definition {definition.label!r} has type {target!r}, which is not constructible"
            raise ConfigurationError(msg, name=definition.name, config=config)

        logger.debug("Materializing %s as %r", definition.label, target)
        ctor_args = config["ctor_args"]
        if ctor_args:
            instance = target(*(self._expand(arg) for arg in ctor_args))
        else:
            instance = target()

        # cache before injection so references back to this definition see the instance
        if cache and config["singleton"]:
            definition.cache_instance(instance)
            self._cached.append(definition)

        if isinstance(instance, ContainerAware):
            instance.set_container(self._container)

        self._inject_properties(instance, config["properties"])
        self._call_init_method(definition, instance, config)
        return instance

    def _expand(self, value: Any) -> Any:
        return expand_value(value, self._container.resolvers)

    def _inject_properties(self, instance: object, properties: Mapping[str, Any]) -> None:
        setters = self.setters_for(type(instance))

        for name, value in properties.items():
            expanded = self._expand(value)
            setter = setters.get(name)
            if setter is not None:
                getattr(instance, setter)(expanded)
            else:
                setattr(instance, name, expanded)

    def _call_init_method(self, definition: Definition, instance: object, config: Mapping[str, Any]) -> None:
        init_method = config["init_method"]
        if init_method is None:
            return

        method = getattr(instance, init_method, None) if isinstance(init_method, str) else None
        if not callable(method):
            msg = (
                f"Definition {definition.label!r} configures init method {init_method!r}, "
                f"which is not a callable on {type(instance).__name__}"
            )
            raise ConfigurationError(msg, name=definition.name, config=config)

        method()

    def setters_for(self, cls: type) -> dict[str, str]:
        """Property name -> setter method name (``set_<property>``), computed once per class."""
        table = self._setters.get(cls)
        if table is None:
            table = {}
            for attr in dir(cls):
                if not attr.startswith(SETTER_PREFIX) or attr == SETTER_PREFIX:
                    continue
                member = inspect.getattr_static(cls, attr, None)
                if isinstance(member, (classmethod, staticmethod)):
                    member = member.__func__
                if callable(member):
                    table[attr[len(SETTER_PREFIX) :]] = attr
            self._setters[cls] = table
        return table

    def _rollback(self) -> None:
        for definition in self._cached:
            logger.debug("Dropping singleton %s cached by a failed resolution", definition.label)
            definition.drop_instance()
