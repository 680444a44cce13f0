"""
LifecycleController - owns the engine instance from creation to teardown.

States: uninitialized -> initializing -> ready -> destroyed.
Enabled/disabled and editable/read-only are orthogonal flags of `ready`.

Key behaviors:
- Initialization runs at most once, and only in an interactive host
- Values written before the engine exists are buffered and flushed
  silently exactly once
- read_only and placeholder are live; every other option is fixed
- Disabling always locks the engine; re-enabling respects read_only
- A failed construction rolls back to uninitialized and keeps the
  buffered value, so initialization can be retried
- Teardown detaches the event bridge exactly once
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from editor_bridge.config.models import AdapterSettings, EditorConfiguration
from editor_bridge.core.services.engine_provider import EngineProvider, get_engine_provider
from editor_bridge.core.services.events import AdapterEvents, EventBridge
from editor_bridge.core.services.formats import FormatConverter, write_internal
from editor_bridge.domain.entities import (
    DEFAULT_PLACEHOLDER,
    DEFAULT_THEME,
    DISABLED_ATTRIBUTE,
    EDITOR_ELEMENT_MARKER,
    TOOLBAR_MARKER,
)
from editor_bridge.ports.engine import EnginePort
from editor_bridge.ports.host import HostPort

logger = logging.getLogger(__name__)

LIVE_OPTIONS = frozenset(["read_only", "placeholder"])


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DESTROYED = "destroyed"


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.UNINITIALIZED: frozenset(
        [LifecycleState.INITIALIZING, LifecycleState.DESTROYED]
    ),
    LifecycleState.INITIALIZING: frozenset(
        [LifecycleState.READY, LifecycleState.UNINITIALIZED, LifecycleState.DESTROYED]
    ),
    LifecycleState.READY: frozenset([LifecycleState.DESTROYED]),
    LifecycleState.DESTROYED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised for a lifecycle transition the state machine does not allow."""


class UnsupportedChangeError(ValueError):
    """Raised when a fixed option is changed after construction."""


def can_transition(current: LifecycleState, new: LifecycleState) -> bool:
    return new in _TRANSITIONS[current]


def build_engine_options(
    config: EditorConfiguration,
    settings: AdapterSettings,
    host: HostPort,
    editor_element: Any,
    *,
    read_only: bool,
    placeholder: str | None,
) -> dict[str, Any]:
    """Merge instance options and adapter settings into engine options."""
    modules = dict(config.modules if config.modules is not None else settings.modules)
    toolbar = host.find_marked(TOOLBAR_MARKER)
    if toolbar is not None:
        modules["toolbar"] = toolbar

    if config.bounds == "self":
        bounds = editor_element
    else:
        bounds = config.bounds or host.body

    return {
        "bounds": bounds,
        "debug": settings.debug,
        "formats": config.formats,
        "modules": modules,
        "placeholder": placeholder.strip() if placeholder is not None else DEFAULT_PLACEHOLDER,
        "read_only": read_only,
        "scrolling_container": config.scrolling_container,
        "strict": config.strict,
        "theme": config.theme or DEFAULT_THEME,
    }


class LifecycleController:
    """State machine around one engine instance."""

    def __init__(
        self,
        config: EditorConfiguration,
        settings: AdapterSettings,
        host: HostPort,
        converter: FormatConverter,
        bridge: EventBridge,
        events: AdapterEvents,
        provider: EngineProvider | None = None,
    ) -> None:
        self._config = config
        self._settings = settings
        self._host = host
        self._converter = converter
        self._bridge = bridge
        self._events = events
        self._provider = provider

        self._state = LifecycleState.UNINITIALIZED
        self._engine: EnginePort | None = None
        self._editor_element: Any = None

        self._pending_value: Any = None
        self._disabled = False
        self._read_only = config.read_only
        self._placeholder = config.placeholder

    # --- Accessors ---

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def engine(self) -> EnginePort | None:
        return self._engine

    @property
    def editor_element(self) -> Any:
        return self._editor_element

    @property
    def pending_value(self) -> Any:
        return self._pending_value

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def placeholder(self) -> str | None:
        return self._placeholder

    def _transition(self, new: LifecycleState) -> None:
        if not can_transition(self._state, new):
            raise InvalidTransitionError(
                f"Invalid transition from {self._state.value} to {new.value}"
            )
        logger.debug("Editor lifecycle %s -> %s", self._state.value, new.value)
        self._state = new

    # --- Initialization ---

    def initialize(self) -> bool:
        """
        Build the engine. Returns True if an engine was created.

        A non-interactive host skips initialization and leaves the
        controller uninitialized, so a later call in a live host can
        still build the engine.
        """
        if self._state is not LifecycleState.UNINITIALIZED:
            raise InvalidTransitionError(
                f"Cannot initialize an editor that is {self._state.value}"
            )
        if not self._host.is_interactive():
            logger.debug("Non-interactive host, skipping engine construction")
            return False

        provider = self._provider or get_engine_provider()
        self._transition(LifecycleState.INITIALIZING)

        pending, self._pending_value = self._pending_value, None
        try:
            engine = self._build_engine(provider, pending)
        except Exception:
            logger.warning("Engine construction failed, editor left uninitialized")
            self._engine = None
            self._editor_element = None
            self._pending_value = pending
            self._transition(LifecycleState.UNINITIALIZED)
            raise
        editor_element = self._editor_element

        self._transition(LifecycleState.READY)
        self.set_disabled(self._disabled)
        logger.info("Editor engine created (format=%s)", self._converter.format.value)
        self._events.editor_created.emit(engine)
        self._bridge.attach(engine, editor_element)
        return True

    def _build_engine(self, provider: EngineProvider, pending: Any) -> EnginePort:
        engine_class = provider.resolve(self._settings)

        editor_element = self._host.mount(EDITOR_ELEMENT_MARKER)
        for name, value in self._config.style.items():
            self._host.set_style(editor_element, name, value)

        options = build_engine_options(
            self._config,
            self._settings,
            self._host,
            editor_element,
            read_only=self._read_only,
            placeholder=self._placeholder,
        )
        engine = engine_class(editor_element, options)
        self._engine = engine
        self._editor_element = editor_element

        if pending:
            self._converter.write_initial(engine, pending)
        return engine

    # --- Writes ---

    def write(self, value: Any, value_setter: Callable[[EnginePort, Any], Any]) -> None:
        """Write an external value, or buffer it until the engine exists."""
        engine = self._engine
        if self._state is LifecycleState.DESTROYED:
            return
        if engine is None:
            logger.debug("Buffering value until the engine is created")
            self._pending_value = value
            return

        if value:
            write_internal(engine, value_setter(engine, value))
        else:
            engine.set_text("")

    # --- Live Updates ---

    def apply_changes(self, **changes: Any) -> None:
        unsupported = set(changes) - LIVE_OPTIONS
        if unsupported:
            raise UnsupportedChangeError(
                f"Options cannot change after construction: {', '.join(sorted(unsupported))}"
            )

        if "read_only" in changes:
            self._read_only = bool(changes["read_only"])
        if "placeholder" in changes:
            self._placeholder = changes["placeholder"]

        engine = self._engine
        if engine is None or self._state is not LifecycleState.READY:
            return

        if "read_only" in changes:
            engine.enable(not self._read_only and not self._disabled)
            logger.debug("Editor read-only set to %s", self._read_only)
        if "placeholder" in changes:
            engine.root.dataset["placeholder"] = self._placeholder or ""

    def set_disabled(self, is_disabled: bool) -> None:
        self._disabled = is_disabled
        engine = self._engine
        if engine is None or self._state is not LifecycleState.READY:
            return

        if is_disabled:
            engine.disable()
            self._host.set_attribute(DISABLED_ATTRIBUTE, DISABLED_ATTRIBUTE)
        else:
            if not self._read_only:
                engine.enable()
            self._host.remove_attribute(DISABLED_ATTRIBUTE)

    # --- Teardown ---

    def destroy(self) -> None:
        """Detach from the engine. Calling it again does nothing."""
        if self._state is LifecycleState.DESTROYED:
            return
        self._transition(LifecycleState.DESTROYED)
        self._bridge.detach()
        had_engine = self._engine is not None
        self._engine = None
        self._pending_value = None
        if had_engine:
            logger.info("Editor engine destroyed")
