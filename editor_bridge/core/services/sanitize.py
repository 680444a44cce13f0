"""
SanitizationGuard - optional pass over markup moving into the engine.

Key behaviors:
- Disabled by default; enabled per adapter with `sanitize=True`
- Only markup strings are passed through the sanitizer
- The sanitizer is bound to the HTML security context
- Sanitizer failures propagate to the caller unchanged
"""

from __future__ import annotations

from editor_bridge.domain.entities import SecurityContext
from editor_bridge.ports.codecs import SanitizerPort


class SanitizationGuard:
    """Applies an externally supplied sanitizer when enabled."""

    def __init__(self, sanitizer: SanitizerPort | None = None, enabled: bool = False) -> None:
        if enabled and sanitizer is None:
            raise ValueError("Sanitization is enabled but no sanitizer was supplied")
        self._sanitizer = sanitizer
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def apply(self, markup: str) -> str:
        """Return the markup unchanged, or sanitized when the guard is on."""
        if not self._enabled or self._sanitizer is None:
            return markup
        if not isinstance(markup, str):
            return markup
        # A sanitizer may return None for content it refuses outright.
        return self._sanitizer.sanitize(SecurityContext.HTML, markup) or ""


DISABLED_GUARD = SanitizationGuard()
