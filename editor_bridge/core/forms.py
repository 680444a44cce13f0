"""
Form-control registry.

Controls declare the form-protocol capabilities they implement by
registering after their class is defined, e.g.

    class EditorAdapter: ...

    register_form_control(EditorAdapter)

Hosts look providers up by capability.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol


class Capability(Enum):
    VALUE_ACCESSOR = "value_accessor"
    VALIDATOR = "validator"


class ValueAccessor(Protocol):
    def write_value(self, value: Any) -> None:
        ...

    def register_on_change(self, callback: Callable[[Any], None]) -> None:
        ...

    def register_on_touched(self, callback: Callable[[], None]) -> None:
        ...

    def set_disabled_state(self, is_disabled: bool) -> None:
        ...


class Validator(Protocol):
    def validate(self) -> dict[str, Any] | None:
        ...


REQUIRED_METHODS: dict[Capability, tuple[str, ...]] = {
    Capability.VALUE_ACCESSOR: (
        "write_value",
        "register_on_change",
        "register_on_touched",
        "set_disabled_state",
    ),
    Capability.VALIDATOR: ("validate",),
}


class FormControlRegistry:
    """Maps capabilities to the control classes that provide them."""

    def __init__(self) -> None:
        self._providers: dict[Capability, list[type]] = {c: [] for c in Capability}

    def register(self, cls: type, *capabilities: Capability) -> type:
        """
        Register `cls` for each capability. Idempotent.

        Raises:
            TypeError: If the class lacks a method the capability needs.
        """
        for capability in capabilities:
            missing = [
                name
                for name in REQUIRED_METHODS[capability]
                if not callable(getattr(cls, name, None))
            ]
            if missing:
                raise TypeError(
                    f"{cls.__name__} cannot provide {capability.value}: "
                    f"missing {', '.join(missing)}"
                )
            if cls not in self._providers[capability]:
                self._providers[capability].append(cls)
        return cls

    def provides(self, cls: type, capability: Capability) -> bool:
        return cls in self._providers[capability]

    def providers(self, capability: Capability) -> list[type]:
        return list(self._providers[capability])

    def accessors(self) -> list[type]:
        return self.providers(Capability.VALUE_ACCESSOR)

    def validators(self) -> list[type]:
        return self.providers(Capability.VALIDATOR)


FORM_CONTROLS = FormControlRegistry()


def register_form_control(cls: type, registry: FormControlRegistry | None = None) -> type:
    """Register a class as both value accessor and validator."""
    return (registry or FORM_CONTROLS).register(
        cls, Capability.VALUE_ACCESSOR, Capability.VALIDATOR
    )
