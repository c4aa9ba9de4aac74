"""Lazy, configuration-driven dependency injection.

Objects are declared as named definitions (type, constructor arguments,
properties, parent, singleton flag, init method) and built on demand, with
``ref:<name>`` values wired to other definitions and children inheriting the
configuration of their parents.

Exports:
- `Container`: registry of definitions; `add`, `modify`, `get`, resolvers.
- `StrictContainer`: container that validates definitions before building them
  and raises on unknown names.
- `Factory`: builds instances of one definition, optionally with overrides.
- `mark_mergeable`: mark a list or dict to be combined with the inherited value.
- `ReferenceResolver`, `MappingResolver`: placeholder resolvers.
- `ContainerAware`: capability of instances that want their container injected.
"""

from ._container import Container
from ._definition import Definition
from ._errors import CircularReferenceError, ConfigurationError
from ._factory import Factory
from ._strict import StrictContainer
from ._values import (
    ContainerAware,
    MappingResolver,
    MergeableDict,
    MergeableList,
    ReferenceResolver,
    ValueResolver,
    mark_mergeable,
)


__all__ = [
    "CircularReferenceError",
    "ConfigurationError",
    "Container",
    "ContainerAware",
    "Definition",
    "Factory",
    "MappingResolver",
    "MergeableDict",
    "MergeableList",
    "ReferenceResolver",
    "StrictContainer",
    "ValueResolver",
    "mark_mergeable",
]
