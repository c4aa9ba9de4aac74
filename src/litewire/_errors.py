from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class ConfigurationError(RuntimeError):
    """Raised when a definition cannot be turned into an instance as configured.

    `name` is the offending definition, `config` its cascaded configuration
    when that was computed before the failure.
    """

    def __init__(self, msg: str, *, name: str | None = None, config: Mapping[str, Any] | None = None) -> None:
        super().__init__(msg)
        self.name = name
        self.config = config


class CircularReferenceError(ConfigurationError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        msg = f"Circular reference between definitions: {' -> '.join(self.path)}"
        super().__init__(msg, name=self.path[-1])
