"""
Default HTML sanitizer adapter.

Implements SanitizerPort for the HTML security context.

Key behaviors:
- Drops script/style elements together with their content
- Strips tags and attributes outside the allow lists
- Removes links and images using a forbidden URL protocol
- Adds rel attributes to surviving links
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field

from editor_bridge.domain.entities import SecurityContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizerConfig:
    """Allow lists and link policy for the sanitizer."""

    allow_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            [
                "p",
                "div",
                "br",
                "span",
                "h1",
                "h2",
                "h3",
                "blockquote",
                "ul",
                "ol",
                "li",
                "strong",
                "b",
                "em",
                "i",
                "u",
                "s",
                "code",
                "pre",
                "a",
                "img",
            ]
        )
    )

    allow_attrs: dict[str, frozenset[str]] = field(
        default_factory=lambda: {
            "a": frozenset(["href", "title", "target"]),
            "img": frozenset(["src", "alt", "title", "width", "height"]),
        }
    )

    forbid_protocols: frozenset[str] = field(
        default_factory=lambda: frozenset(["javascript:", "data:", "vbscript:"])
    )

    add_noopener: bool = True
    add_noreferrer: bool = True


DEFAULT_CONFIG = SanitizerConfig()

# Elements whose content is never text
DROP_WITH_CONTENT = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
TAG_PATTERN = re.compile(r"<(/?)(\w+)([^>]*)>", re.IGNORECASE)
ATTR_PATTERN = re.compile(r'(\w+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|(\S+))', re.IGNORECASE)


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse HTML attributes from a string."""
    attrs = {}
    for match in ATTR_PATTERN.finditer(attr_string):
        name = match.group(1).lower()
        value = match.group(2) or match.group(3) or match.group(4) or ""
        attrs[name] = value
    return attrs


def is_safe_url(url: str, config: SanitizerConfig = DEFAULT_CONFIG) -> bool:
    """Check that a URL does not start with a forbidden protocol."""
    if not url:
        return True
    url_lower = html.unescape(url).lower().strip()
    return not any(url_lower.startswith(protocol) for protocol in config.forbid_protocols)


def build_link_rel(config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    parts = []
    if config.add_noopener:
        parts.append("noopener")
    if config.add_noreferrer:
        parts.append("noreferrer")
    return " ".join(parts)


def sanitize_html(html_content: str, config: SanitizerConfig = DEFAULT_CONFIG) -> str:
    """Strip disallowed markup from an HTML fragment."""
    stripped = DROP_WITH_CONTENT.sub("", html_content)

    def process_tag(match: re.Match[str]) -> str:
        is_closing = bool(match.group(1))
        tag_name = match.group(2).lower()

        if tag_name not in config.allow_tags:
            logger.debug("Stripped tag %s", tag_name)
            return ""
        if is_closing:
            return f"</{tag_name}>"

        attrs = parse_attributes(match.group(3))
        allowed = config.allow_attrs.get(tag_name, frozenset())
        filtered = {name: value for name, value in attrs.items() if name in allowed}

        url_attr = {"a": "href", "img": "src"}.get(tag_name)
        if url_attr and not is_safe_url(filtered.get(url_attr, ""), config):
            logger.debug("Stripped %s with unsafe %s", tag_name, url_attr)
            return ""

        if tag_name == "a":
            rel = build_link_rel(config)
            if rel:
                filtered["rel"] = rel

        if filtered:
            attr_parts = [f'{name}="{html.escape(value)}"' for name, value in filtered.items()]
            return f"<{tag_name} {' '.join(attr_parts)}>"
        return f"<{tag_name}>"

    return TAG_PATTERN.sub(process_tag, stripped)


class HtmlSanitizer:
    """SanitizerPort implementation for HTML values."""

    def __init__(self, config: SanitizerConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def sanitize(self, context: SecurityContext, value: str) -> str | None:
        if context is not SecurityContext.HTML:
            raise ValueError(f"HtmlSanitizer cannot sanitize for context {context.value}")
        if value is None:
            return None
        return sanitize_html(value, self._config)
