"""
Engine provider - selects and prepares the engine class once per process.

Key behaviors:
- The engine variant is chosen from `AdapterSettings.language`
- Custom extensions are registered when the variant is first resolved
- Later resolutions return the cached class without re-registering
- One provider is installed per process at startup (init_engine_provider)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

from editor_bridge.config.models import AdapterSettings, CustomExtension
from editor_bridge.ports.engine import EngineClassPort

logger = logging.getLogger(__name__)


class EngineProviderError(RuntimeError):
    """Raised when no engine provider is available."""


def register_extensions(
    engine_class: EngineClassPort,
    customs: Iterable[CustomExtension],
) -> None:
    """Install each extension's whitelist and re-register it, overwriting."""
    for custom in customs:
        extension = engine_class.import_(custom.import_path)
        extension.whitelist = list(custom.whitelist)
        engine_class.register(extension, True)
        logger.debug("Registered custom extension %s", custom.import_path)


class EngineProvider:
    """Resolves the engine class (locale variant plus extensions) exactly once."""

    def __init__(
        self,
        default: EngineClassPort,
        variants: Mapping[str, EngineClassPort] | None = None,
    ) -> None:
        self._default = default
        self._variants = dict(variants or {})
        self._resolved: EngineClassPort | None = None
        self._lock = threading.Lock()

    @property
    def resolved(self) -> EngineClassPort | None:
        return self._resolved

    def resolve(self, settings: AdapterSettings) -> EngineClassPort:
        with self._lock:
            if self._resolved is None:
                engine_class = self._variants.get(settings.language, self._default)
                register_extensions(engine_class, settings.customs)
                self._resolved = engine_class
                logger.info(
                    "Resolved engine %s for language %r",
                    getattr(engine_class, "__name__", engine_class),
                    settings.language,
                )
            return self._resolved


# Process-wide provider, installed once at startup
_installed_provider: EngineProvider | None = None


def get_engine_provider() -> EngineProvider:
    """
    Get the installed provider (must call init_engine_provider first).

    Raises:
        EngineProviderError: If no provider has been installed.
    """
    if _installed_provider is None:
        raise EngineProviderError(
            "Engine provider not initialized. Call init_engine_provider() at startup."
        )
    return _installed_provider


def init_engine_provider(provider: EngineProvider) -> EngineProvider:
    """
    Install the process-wide provider.

    Installing the same provider again is a no-op; installing a different
    one raises EngineProviderError.
    """
    global _installed_provider
    if _installed_provider is not None and _installed_provider is not provider:
        raise EngineProviderError("An engine provider is already installed")
    _installed_provider = provider
    return provider


def reset_engine_provider() -> None:
    """Reset the installed provider (for testing only)."""
    global _installed_provider
    _installed_provider = None
