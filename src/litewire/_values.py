"""Configuration values: mergeable markers, the cascade merge rule and placeholder expansion."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ._errors import ConfigurationError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ._container import Container


PLACEHOLDER_SEPARATOR = ":"
REFERENCE_PREFIX = "ref"


class MergeableList(list):
    """A list that is concatenated onto the inherited list instead of replacing it."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({super().__repr__()})"


class MergeableDict(dict):
    """A dict that is combined key by key with the inherited dict instead of replacing it."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({super().__repr__()})"


def mark_mergeable(value: Sequence[Any] | Mapping[str, Any]) -> MergeableList | MergeableDict:
    """Mark a list or dict for additive combination during cascade.

    Example:
      container.add({"child": {"parent": "base", "properties": {"tags": mark_mergeable(["extra"])}}})

    """
    if isinstance(value, dict):
        return MergeableDict(value)
    if isinstance(value, (list, tuple)):
        return MergeableList(value)
    msg = f"Only lists, tuples and dicts can be marked mergeable, got {type(value).__name__}"
    raise TypeError(msg)


def is_mergeable(value: object) -> bool:
    return isinstance(value, (MergeableList, MergeableDict))


def merge_values(inherited: Any, own: Any) -> Any:
    """Combine an inherited value with the value a child definition declares.

    Sequences and dicts are combined additively when at least one side is
    marked mergeable; the result stays marked. Everything else is replaced.
    """
    if not (is_mergeable(inherited) or is_mergeable(own)):
        return own

    if isinstance(inherited, (list, tuple)) and isinstance(own, (list, tuple)):
        return MergeableList([*inherited, *own])

    if isinstance(inherited, dict) and isinstance(own, dict):
        merged = MergeableDict(inherited)
        for key, value in own.items():
            merged[key] = merge_values(merged[key], value) if key in merged else value
        return merged

    return own


def merge_properties(inherited: Mapping[str, Any], own: Mapping[str, Any]) -> dict[str, Any]:
    """Property maps always combine: the union of keys, the child winning per key."""
    merged = dict(inherited)
    for key, value in own.items():
        merged[key] = merge_values(merged[key], value) if key in merged else value
    return merged


def merge_ctor_args(inherited: Sequence[Any], own: Sequence[Any]) -> list[Any]:
    """Constructor arguments overlay by position unless one side is mergeable.

    merge_ctor_args([1, 2], ["a"]) == ["a", 2]
    merge_ctor_args([1, 2], mark_mergeable(["a"])) == [1, 2, "a"]
    """
    if is_mergeable(inherited) or is_mergeable(own):
        return merge_values(inherited, own)

    merged = list(inherited)
    for i, value in enumerate(own):
        if i < len(merged):
            merged[i] = value
        else:
            merged.append(value)
    return merged


def split_placeholder(value: str) -> tuple[str, str] | None:
    prefix, sep, key = value.partition(PLACEHOLDER_SEPARATOR)
    if not sep or not prefix:
        return None
    return prefix, key


def expand_value(value: Any, resolvers: Mapping[str, ValueResolver]) -> Any:
    """Turn a configured value into the value that gets injected.

    Lists, tuples and dicts are rebuilt so no instance shares them with the
    stored configuration. Strings of the form ``prefix:key`` are handed to the
    resolver registered for ``prefix``; without one they are kept literally.
    """
    if isinstance(value, (list, tuple)):
        expanded = [expand_value(item, resolvers) for item in value]
        return tuple(expanded) if isinstance(value, tuple) else expanded

    if isinstance(value, dict):
        return {key: expand_value(item, resolvers) for key, item in value.items()}

    if isinstance(value, str):
        placeholder = split_placeholder(value)
        if placeholder is None:
            return value

        prefix, key = placeholder
        resolver = resolvers.get(prefix)
        if resolver is None:
            logger.debug("No resolver for prefix '%s', keeping %r literally", prefix, value)
            return value
        return resolver.resolve(key)

    return value


@runtime_checkable
class ContainerAware(Protocol):
    """Objects that want the container that built them."""

    def set_container(self, container: Container) -> None: ...


class ValueResolver(Protocol):
    def resolve(self, key: str) -> Any: ...


class ReferenceResolver:
    """Resolves ``ref:<name>`` to the instance of another definition."""

    def __init__(self) -> None:
        self._container: Container | None = None

    def set_container(self, container: Container) -> None:
        self._container = container

    def resolve(self, key: str) -> Any:
        if self._container is None:
            msg = f"Cannot resolve reference {key!r}: resolver is not attached to a container"
            raise ConfigurationError(msg, name=key)
        return self._container.get(key)


class MappingResolver:
    """Resolves keys from a fixed mapping, e.g. ``config:db.url`` or ``msg:greeting``.

    Missing keys resolve to None, or raise ConfigurationError when `strict`.
    """

    def __init__(self, values: Mapping[str, Any], *, strict: bool = False) -> None:
        self._values = values
        self._strict = strict

    def resolve(self, key: str) -> Any:
        if key in self._values:
            return self._values[key]

        if self._strict:
            msg = f"No value configured for key {key!r}"
            raise ConfigurationError(msg, name=key)
        return None
