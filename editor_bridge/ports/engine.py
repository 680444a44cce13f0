"""
Rich-text engine port definitions.

The engine owns the authoritative document. The adapter only reaches it
through the narrow surface below.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class ClipboardPort(Protocol):
    def convert(self, html: str) -> Any:
        """Convert markup into an insertable structured delta."""
        ...


class HistoryPort(Protocol):
    def clear(self) -> None:
        """Drop the undo/redo stacks."""
        ...


class EnginePort(Protocol):
    """A live engine instance."""

    clipboard: ClipboardPort
    history: HistoryPort
    root: Any

    def get_text(self) -> str:
        ...

    def get_contents(self) -> Any:
        ...

    def set_contents(self, delta: Any, source: str = "api") -> None:
        ...

    def set_text(self, text: str, source: str = "api") -> None:
        ...

    def enable(self, enabled: bool = True) -> None:
        ...

    def disable(self) -> None:
        ...

    def on(self, event: str, handler: Callable[..., None]) -> Callable[..., None]:
        """Subscribe to an engine event, returning the handler."""
        ...

    def off(self, event: str, handler: Callable[..., None]) -> None:
        """Unsubscribe. May raise if the handler is not subscribed."""
        ...


class EngineClassPort(Protocol):
    """The engine constructor together with its extension registry."""

    def __call__(self, container: Any, options: dict[str, Any]) -> EnginePort:
        ...

    def import_(self, path: str) -> Any:
        """Look up a registered extension (format, module, attributor)."""
        ...

    def register(self, extension: Any, overwrite: bool = False) -> None:
        ...
