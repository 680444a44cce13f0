from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class HostPort(Protocol):
    """The host element the adapter is rendered into, plus host scheduling."""

    body: Any

    def is_interactive(self) -> bool:
        """False when rendering on a server; no engine is built there."""
        ...

    def find_marked(self, marker: str) -> Any | None:
        """Find a projected child element carrying the marker attribute."""
        ...

    def mount(self, marker: str) -> Any:
        """Append a container element carrying the marker attribute."""
        ...

    def set_style(self, element: Any, name: str, value: str) -> None:
        ...

    def set_attribute(self, name: str, value: str) -> None:
        """Set an attribute on the host element."""
        ...

    def remove_attribute(self, name: str) -> None:
        ...

    def run(self, callback: Callable[[], T]) -> T:
        """Run the callback inside the host's change-notification context."""
        ...
