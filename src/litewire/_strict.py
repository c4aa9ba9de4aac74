from __future__ import annotations

import copy
import inspect
import logging
from typing import Any

from ._container import Container
from ._errors import ConfigurationError


logger = logging.getLogger(__name__)

WIRING_NAME_ATTR = "__wiring_name__"


class StrictContainer(Container):
    """A container that validates definitions before building them.

    - unknown names raise ConfigurationError instead of returning None
    - the parent chain, type and init method are checked up front
    - errors raised while building get a note naming the definition
    - returned instances are tagged with ``__wiring_name__`` (`tag_instances`).
    """

    def __init__(self, *, tag_instances: bool = True) -> None:
        super().__init__()
        self.tag_instances = tag_instances

    def get(self, name: str) -> Any:
        with self._lock:
            self.validate(name)
            try:
                instance = self._builder.materialize(self._definitions[name])
            except Exception as e:
                e.add_note(f"while resolving definition {name!r}")
                raise

            if self.tag_instances:
                _tag(instance, name)
            return instance

    def validate(self, name: str) -> dict[str, Any]:
        """Check that `name` can be built; return its cascaded configuration."""
        with self._lock:
            definition = self._definitions.get(name)
            if definition is None:
                msg = f"No definition named {name!r}"
                raise ConfigurationError(msg, name=name)

            # parent references: strings naming existing definitions, no loops
            definition.ancestors()
            config = definition.cascaded_config()

            target = config["type"]
            if not callable(target):
                msg = f"Definition {name!r} has type {target!r}, which is not constructible"
                raise ConfigurationError(msg, name=name, config=config)

            init_method = config["init_method"]
            if init_method is not None:
                if not isinstance(init_method, str):
                    msg = f"Definition {name!r} has init method {init_method!r}, which is not a string"
                    raise ConfigurationError(msg, name=name, config=config)

                # only classes can be checked before an instance exists
                if inspect.isclass(target) and not callable(getattr(target, init_method, None)):
                    msg = f"Definition {name!r} has init method {init_method!r}, not a callable of {target.__name__}"
                    raise ConfigurationError(msg, name=name, config=config)

            return config

    def dump_config(self) -> dict[str, dict[str, Any]]:
        """Copy of the raw configuration of every definition, as added and modified, keyed by name."""
        with self._lock:
            return {name: copy.deepcopy(definition.raw) for name, definition in self._definitions.items()}


def _tag(instance: object, name: str) -> None:
    try:
        setattr(instance, WIRING_NAME_ATTR, name)
    except (AttributeError, TypeError):
        logger.debug("Instance of %s for '%s' does not accept a name tag", type(instance).__name__, name)
