from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._errors import ConfigurationError


if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._container import Container


class Factory:
    """Creates instances of one definition on demand.

    Can be declared as a definition itself, the container is injected:

      container.add({"poi_factory": {"type": Factory, "properties": {"ref_id": "poi"}}})

    """

    def __init__(self, ref_id: str | None = None, container: Container | None = None) -> None:
        self.ref_id = ref_id
        self.container = container

    def set_container(self, container: Container) -> None:
        self.container = container

    def create_instance(self, overrides: Mapping[str, Any] | None = None) -> Any:
        """Create an instance of the target definition.

        Without overrides (None) this is `container.get(ref_id)`, so a singleton target
        returns its shared instance. With overrides (e.g. ``{"properties": {"x": 9}}``)
        a new instance is built from an unregistered child of the target every
        call, whatever the target's singleton flag says.
        """
        if self.container is None:
            msg = f"Factory for {self.ref_id!r} is not attached to a container"
            raise ConfigurationError(msg, name=self.ref_id)
        if self.ref_id is None:
            msg = "Factory has no ref_id configured"
            raise ConfigurationError(msg)

        if overrides is None:
            return self.container.get(self.ref_id)

        return self.container.build_child(self.ref_id, overrides)
