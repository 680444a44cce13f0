from typing import Protocol

from editor_bridge.domain.entities import SecurityContext


class SanitizerPort(Protocol):
    def sanitize(self, context: SecurityContext, value: str) -> str | None:
        """Neutralize unsafe content for the given security context."""
        ...


class MarkupCodecPort(Protocol):
    def parse(self, markup: str) -> str:
        """Decode custom markup into HTML."""
        ...

    def build(self, html: str) -> str:
        """Encode HTML into custom markup."""
        ...
