"""
Headless host adapter.

Implements HostPort without a browser: a small element tree for the
adapter's host element, an interactive/server flag, and a
change-notification context that runs callbacks immediately.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class Element:
    """A minimal DOM-like element."""

    def __init__(self, tag: str = "div", attributes: dict[str, str] | None = None) -> None:
        self.tag = tag
        self.attributes: dict[str, str] = dict(attributes or {})
        self.style: dict[str, str] = {}
        self.children: list[Any] = []

    def append_child(self, child: Any) -> Any:
        self.children.append(child)
        return child

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def query_selector(self, marker: str) -> Element | None:
        """Depth-first search for a descendant carrying the marker attribute."""
        for child in self.children:
            if not isinstance(child, Element):
                continue
            if child.has_attribute(marker):
                return child
            found = child.query_selector(marker)
            if found is not None:
                return found
        return None

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {self.attributes!r})"


class HeadlessHost:
    """HostPort implementation backed by an in-memory element tree."""

    def __init__(self, *, interactive: bool = True, tag: str = "editor-bridge") -> None:
        self.element = Element(tag)
        self.body = Element("body")
        self.body.append_child(self.element)
        self.interactive = interactive
        self.zone_entries = 0

    def is_interactive(self) -> bool:
        return self.interactive

    def project(self, marker: str, tag: str = "div") -> Element:
        """Project a child element into the host, as host markup would."""
        return self.element.append_child(Element(tag, {marker: ""}))

    def find_marked(self, marker: str) -> Element | None:
        return self.element.query_selector(marker)

    def mount(self, marker: str) -> Element:
        return self.element.append_child(Element("div", {marker: ""}))

    def set_style(self, element: Any, name: str, value: str) -> None:
        element.style[name] = value

    def set_attribute(self, name: str, value: str) -> None:
        self.element.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.element.attributes.pop(name, None)

    def run(self, callback: Callable[[], T]) -> T:
        self.zone_entries += 1
        return callback()
