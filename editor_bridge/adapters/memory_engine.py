"""
In-memory engine adapter.

A self-contained engine for development and testing. Holds its document
as a delta (`{"ops": [...]}`) and implements EnginePort and EngineClassPort.

Key behaviors:
- The document always ends with a newline
- The root renders one <p> per line, <p><br></p> for empty lines
- bold/italic/underline/strike/link attributes render as inline tags
- clipboard.convert parses HTML back into a delta
- "silent" writes emit no events and leave history untouched
- User edits are ignored while the engine is disabled
"""

from __future__ import annotations

import copy
import html
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any

from editor_bridge.domain.entities import SELECTION_CHANGE, TEXT_CHANGE

logger = logging.getLogger(__name__)

Ops = list[dict[str, Any]]
Chars = list[tuple[str, dict[str, Any]]]


@dataclass(frozen=True)
class Range:
    """A selection: start index and length."""

    index: int
    length: int = 0


@dataclass
class Extension:
    """A registrable engine extension (format, attributor, module)."""

    name: str
    whitelist: list[str] = field(default_factory=list)


# --- Delta Helpers ---


def _flatten(ops: Ops) -> Chars:
    chars: Chars = []
    for op in ops:
        insert = op.get("insert")
        if not isinstance(insert, str):
            continue
        attrs = op.get("attributes") or {}
        chars.extend((ch, attrs) for ch in insert)
    return chars


def compose(chars: Chars) -> Ops:
    """Merge adjacent characters sharing the same attributes into ops."""
    ops: Ops = []
    for ch, attrs in chars:
        if ops and (ops[-1].get("attributes") or {}) == attrs:
            ops[-1]["insert"] += ch
        else:
            op: dict[str, Any] = {"insert": ch}
            if attrs:
                op["attributes"] = dict(attrs)
            ops.append(op)
    return ops


def normalize(delta: Any) -> Ops:
    if isinstance(delta, dict):
        ops = delta.get("ops", [])
    elif isinstance(delta, list):
        ops = delta
    else:
        raise TypeError(f"Expected a delta, got {type(delta).__name__}")

    chars = _flatten(ops)
    if not chars or chars[-1][0] != "\n":
        chars.append(("\n", {}))
    return compose(chars)


# --- HTML Rendering ---

# Outermost first
INLINE_TAGS: tuple[tuple[str, str], ...] = (
    ("bold", "strong"),
    ("italic", "em"),
    ("underline", "u"),
    ("strike", "s"),
)


def _render_inline(text: str, attrs: dict[str, Any]) -> str:
    out = html.escape(text, quote=False)
    for attr, tag in reversed(INLINE_TAGS):
        if attrs.get(attr):
            out = f"<{tag}>{out}</{tag}>"
    link = attrs.get("link")
    if link:
        out = f'<a href="{html.escape(link)}">{out}</a>'
    return out


def render_html(ops: Ops) -> str:
    lines: list[Chars] = [[]]
    for ch, attrs in _flatten(ops):
        if ch == "\n":
            lines.append([])
        else:
            lines[-1].append((ch, attrs))
    lines.pop()

    parts = []
    for line in lines:
        if not line:
            parts.append("<p><br></p>")
            continue
        inline = "".join(
            _render_inline(op["insert"], op.get("attributes", {})) for op in compose(line)
        )
        parts.append(f"<p>{inline}</p>")
    return "".join(parts)


# --- HTML Parsing ---

BLOCK_TAGS = frozenset(
    ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre"]
)
INLINE_FORMATS: dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
    "strike": "strike",
}


class _DeltaBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.chars: Chars = []
        self._formats: list[tuple[str, str, Any]] = []
        # One flag per open block: whether a nested block already closed
        self._blocks: list[bool] = []
        self._line_has_content = False

    def _current_attrs(self) -> dict[str, Any]:
        return {attr: value for _, attr, value in self._formats}

    def _newline(self) -> None:
        self.chars.append(("\n", {}))
        self._line_has_content = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in BLOCK_TAGS:
            if self._line_has_content:
                self._newline()
            self._blocks.append(False)
        elif tag == "br":
            if self._line_has_content:
                self._newline()
        elif tag in INLINE_FORMATS:
            self._formats.append((tag, INLINE_FORMATS[tag], True))
        elif tag == "a":
            href = dict(attrs).get("href")
            if href:
                self._formats.append((tag, "link", href))

    def handle_endtag(self, tag: str) -> None:
        if tag in BLOCK_TAGS:
            closed_child = self._blocks.pop() if self._blocks else False
            if self._line_has_content or not closed_child:
                self._newline()
            if self._blocks:
                self._blocks[-1] = True
        elif tag in INLINE_FORMATS or tag == "a":
            for i in range(len(self._formats) - 1, -1, -1):
                if self._formats[i][0] == tag:
                    del self._formats[i]
                    break

    def handle_data(self, data: str) -> None:
        if not self._blocks and not data.strip():
            return
        attrs = self._current_attrs()
        self.chars.extend((ch, attrs) for ch in data)
        self._line_has_content = True


def html_to_delta(markup: str) -> dict[str, Any]:
    builder = _DeltaBuilder()
    builder.feed(markup or "")
    builder.close()
    return {"ops": compose(builder.chars)}


# --- Engine Parts ---


class Clipboard:
    def convert(self, html: str) -> dict[str, Any]:
        return html_to_delta(html)


class History:
    def __init__(self) -> None:
        self.stack: list[dict[str, Any]] = []

    def record(self, change: dict[str, Any]) -> None:
        self.stack.append(change)

    def clear(self) -> None:
        self.stack.clear()


class EditorRoot:
    """The engine's rendered root element."""

    def __init__(self, engine: MemoryEngine) -> None:
        self._engine = engine
        self.dataset: dict[str, str] = {}
        self.children: list[Any] = []

    @property
    def inner_html(self) -> str:
        return render_html(self._engine.get_contents()["ops"])


_REGISTRIES: dict[type, dict[str, Extension]] = {}


class MemoryEngine:
    """In-process rich-text engine."""

    def __init__(self, container: Any, options: dict[str, Any] | None = None) -> None:
        self.container = container
        self.options = dict(options or {})

        self.root = EditorRoot(self)
        self.root.dataset["placeholder"] = self.options.get("placeholder") or ""
        container.append_child(self.root)

        self.clipboard = Clipboard()
        self.history = History()

        self._ops: Ops = [{"insert": "\n"}]
        self._handlers: dict[str, list[Callable[..., None]]] = {
            TEXT_CHANGE: [],
            SELECTION_CHANGE: [],
        }
        self._enabled = not self.options.get("read_only", False)
        self._selection: Range | None = None

    # --- Extension Registry ---

    @classmethod
    def _registry(cls) -> dict[str, Extension]:
        return _REGISTRIES.setdefault(cls, {})

    @classmethod
    def import_(cls, path: str) -> Extension:
        return cls._registry().get(path) or Extension(path)

    @classmethod
    def register(cls, extension: Extension, overwrite: bool = False) -> None:
        registry = cls._registry()
        if extension.name in registry and not overwrite:
            logger.warning("Refusing to overwrite extension %s", extension.name)
            return
        registry[extension.name] = extension

    @classmethod
    def registered(cls, path: str) -> Extension | None:
        return cls._registry().get(path)

    @classmethod
    def reset_registry(cls) -> None:
        _REGISTRIES.pop(cls, None)

    # --- Events ---

    def on(self, event: str, handler: Callable[..., None]) -> Callable[..., None]:
        self._handlers[event].append(handler)
        return handler

    def off(self, event: str, handler: Callable[..., None]) -> None:
        self._handlers[event].remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    # --- Content ---

    def get_text(self) -> str:
        return "".join(ch for ch, _ in _flatten(self._ops))

    def get_contents(self) -> dict[str, Any]:
        return {"ops": copy.deepcopy(self._ops)}

    def get_length(self) -> int:
        return len(_flatten(self._ops))

    def set_contents(self, delta: Any, source: str = "api") -> None:
        old = self.get_contents()
        old_length = self.get_length()
        self._ops = normalize(delta)

        ops: Ops = [{"delete": old_length}] if old_length else []
        ops.extend(copy.deepcopy(self._ops))
        self._changed({"ops": ops}, old, source)

    def set_text(self, text: str, source: str = "api") -> None:
        self.set_contents({"ops": [{"insert": text}]}, source)

    def insert_text(
        self,
        index: int,
        text: str,
        attributes: dict[str, Any] | None = None,
        source: str = "user",
    ) -> None:
        if source == "user" and not self._enabled:
            return
        old = self.get_contents()
        chars = _flatten(self._ops)
        index = max(0, min(index, len(chars) - 1))
        attrs = dict(attributes or {})
        chars[index:index] = [(ch, attrs) for ch in text]
        self._ops = normalize(compose(chars))

        insert: dict[str, Any] = {"insert": text}
        if attrs:
            insert["attributes"] = attrs
        ops: Ops = [{"retain": index}] if index else []
        ops.append(insert)
        self._changed({"ops": ops}, old, source)

    def delete_text(self, index: int, length: int, source: str = "user") -> None:
        if source == "user" and not self._enabled:
            return
        old = self.get_contents()
        chars = _flatten(self._ops)
        index = max(0, min(index, len(chars) - 1))
        end = min(index + length, len(chars) - 1)
        if end <= index:
            return
        del chars[index:end]
        self._ops = normalize(compose(chars))

        ops: Ops = [{"retain": index}] if index else []
        ops.append({"delete": end - index})
        self._changed({"ops": ops}, old, source)

    def _changed(self, change: dict[str, Any], old: dict[str, Any], source: str) -> None:
        if source == "silent":
            return
        self.history.record(change)
        self.emit(TEXT_CHANGE, change, old, source)

    # --- Selection ---

    def get_selection(self) -> Range | None:
        return self._selection

    def set_selection(self, selection: Range | None, source: str = "api") -> None:
        old = self._selection
        self._selection = selection
        if source != "silent":
            self.emit(SELECTION_CHANGE, selection, old, source)

    def focus(self) -> None:
        self.set_selection(Range(max(self.get_length() - 1, 0)), "user")

    def blur(self) -> None:
        self.set_selection(None, "user")

    # --- Editability ---

    def enable(self, enabled: bool = True) -> None:
        self._enabled = enabled

    def disable(self) -> None:
        self.enable(False)

    def is_enabled(self) -> bool:
        return self._enabled
