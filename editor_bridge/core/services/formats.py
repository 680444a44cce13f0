"""
FormatConverter - bidirectional mapping between external values and engine content.

One converter per Format, dispatched through a lookup table.

Key behaviors:
- text: engine plain text in, plain text out
- object: the engine's native delta, passed through
- json: delta serialized to a string; malformed JSON degrades to plain text
- html: rendered root markup; inbound markup goes through the clipboard
- bbcode: html plus the external markup codec on both directions

Invariants:
- Neither direction raises for malformed values
- An editor holding only the empty-paragraph sentinel reads as ""
  for html and bbcode
- An internal representation that is a plain string is written as text
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from editor_bridge.core.services.sanitize import DISABLED_GUARD, SanitizationGuard
from editor_bridge.domain.entities import Format
from editor_bridge.ports.codecs import MarkupCodecPort
from editor_bridge.ports.engine import EnginePort

logger = logging.getLogger(__name__)

# Markup an engine renders for a document the user emptied out.
EMPTY_PARAGRAPH_SENTINELS: frozenset[str] = frozenset(["<p><br></p>", "<div><br><div>"])


def read_markup(editor_element: Any) -> str | None:
    """
    Read the rendered root's inner markup.

    Returns None when the root holds only an empty-paragraph sentinel.
    """
    html: str = editor_element.children[0].inner_html
    if html in EMPTY_PARAGRAPH_SENTINELS:
        return None
    return html


def write_internal(engine: EnginePort, internal: Any, source: str = "api") -> None:
    """Write a converted value, as text when it is a plain string."""
    if isinstance(internal, str):
        engine.set_text(internal, source)
    else:
        engine.set_contents(internal, source)


def as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def is_delta(value: Any) -> bool:
    """A list of ops, or a mapping whose `ops` is a list of ops."""
    ops = value.get("ops") if isinstance(value, dict) else value
    return isinstance(ops, list) and all(isinstance(op, dict) for op in ops)


# --- Converters ---


class TextConverter:
    format = Format.TEXT

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        return engine.get_text()

    def to_internal(self, engine: EnginePort, value: Any) -> Any:
        return value


class StructuredConverter(TextConverter):
    format = Format.STRUCTURED

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        return engine.get_contents()


class JsonConverter(TextConverter):
    format = Format.JSON

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        try:
            return json.dumps(engine.get_contents(), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning("Cannot serialize engine contents, using plain text: %s", e)
            return engine.get_text()

    def to_internal(self, engine: EnginePort, value: Any) -> Any:
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError):
            logger.warning("Value is not valid JSON, writing it as plain text")
            return as_text(value)
        if is_delta(parsed):
            return parsed
        logger.warning("JSON value is not a delta, writing it as plain text")
        return value


class HtmlConverter(TextConverter):
    format = Format.HTML

    def __init__(self, guard: SanitizationGuard = DISABLED_GUARD) -> None:
        self._guard = guard

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        return read_markup(editor_element) or ""

    def to_internal(self, engine: EnginePort, value: Any) -> Any:
        return engine.clipboard.convert(self._guard.apply(as_text(value)))


class MarkupConverter(HtmlConverter):
    format = Format.MARKUP

    def __init__(self, codec: MarkupCodecPort, guard: SanitizationGuard = DISABLED_GUARD) -> None:
        super().__init__(guard)
        self._codec = codec

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        html = read_markup(editor_element)
        if not html:
            return ""
        return self._codec.build(html)

    def to_internal(self, engine: EnginePort, value: Any) -> Any:
        return super().to_internal(engine, self._codec.parse(as_text(value)))


Converter = TextConverter


def _markup_converter(guard: SanitizationGuard, codec: MarkupCodecPort | None) -> Converter:
    if codec is None:
        raise ValueError("The bbcode format requires a markup codec")
    return MarkupConverter(codec, guard)


CONVERTERS: dict[Format, Callable[[SanitizationGuard, MarkupCodecPort | None], Converter]] = {
    Format.TEXT: lambda guard, codec: TextConverter(),
    Format.STRUCTURED: lambda guard, codec: StructuredConverter(),
    Format.JSON: lambda guard, codec: JsonConverter(),
    Format.HTML: lambda guard, codec: HtmlConverter(guard),
    Format.MARKUP: _markup_converter,
}


# --- Service Class ---


class FormatConverter:
    """
    Converter bound to one Format for the lifetime of an adapter.

    The format cannot be switched after construction.
    """

    def __init__(
        self,
        fmt: Format,
        *,
        guard: SanitizationGuard | None = None,
        codec: MarkupCodecPort | None = None,
    ) -> None:
        self._format = Format(fmt)
        self._converter = CONVERTERS[self._format](guard or DISABLED_GUARD, codec)

    @property
    def format(self) -> Format:
        return self._format

    def to_external(self, engine: EnginePort, editor_element: Any) -> Any:
        """Read the engine's content in the configured format."""
        return self._converter.to_external(engine, editor_element)

    def to_internal(self, engine: EnginePort, value: Any) -> Any:
        """Convert an external value into something the engine can insert."""
        return self._converter.to_internal(engine, value)

    def write_initial(self, engine: EnginePort, value: Any) -> None:
        """Silently write a buffered value and drop the undo history."""
        write_internal(engine, self.to_internal(engine, value), "silent")
        engine.history.clear()
