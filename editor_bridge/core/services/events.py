"""
EventBridge - republishes engine events as adapter events.

Key behaviors:
- selection-change: emit selectionChanged; a lost selection marks touched
- text-change: push the converted value to the model, then emit contentChanged
- Every handler runs inside the host's change-notification context
- Detaching is idempotent and tolerates handlers the engine already dropped

Invariants:
- The model-change callback runs before contentChanged observers
- No callback runs once the bridge is detached
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from editor_bridge.core.services.formats import read_markup
from editor_bridge.domain.entities import SELECTION_CHANGE, TEXT_CHANGE
from editor_bridge.ports.engine import EnginePort
from editor_bridge.ports.host import HostPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

ValueGetter = Callable[[EnginePort, Any], Any]
ModelCallback = Callable[[Any], None]
TouchedCallback = Callable[[], None]


# --- Event Payloads ---


@dataclass(frozen=True)
class ContentChange:
    editor: Any
    html: str | None
    text: str
    content: Any
    delta: Any
    old_delta: Any
    source: str


@dataclass(frozen=True)
class SelectionChange:
    editor: Any
    range: Any
    old_range: Any
    source: str


# --- Emitter ---


class EventEmitter(Generic[T]):
    """Synchronous publish/subscribe channel for one public event."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Add a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self._listeners = [lst for lst in self._listeners if lst != listener]

        return unsubscribe

    def emit(self, payload: T) -> None:
        for listener in list(self._listeners):
            listener(payload)

    def __len__(self) -> int:
        return len(self._listeners)


@dataclass
class AdapterEvents:
    """The adapter's public outputs."""

    editor_created: EventEmitter[Any] = field(
        default_factory=lambda: EventEmitter("editorCreated")
    )
    content_changed: EventEmitter[ContentChange] = field(
        default_factory=lambda: EventEmitter("contentChanged")
    )
    selection_changed: EventEmitter[SelectionChange] = field(
        default_factory=lambda: EventEmitter("selectionChanged")
    )


# --- Bridge ---


class EventBridge:
    """
    Subscribes to a live engine on behalf of one adapter.

    Model and touched callbacks start unregistered; until registered,
    the bridge skips them and still emits public events.
    """

    def __init__(
        self,
        host: HostPort,
        events: AdapterEvents,
        value_getter: ValueGetter,
    ) -> None:
        self._host = host
        self._events = events
        self.value_getter = value_getter

        self._on_model_change: ModelCallback | None = None
        self._on_touched: TouchedCallback | None = None

        self._engine: EnginePort | None = None
        self._editor_element: Any = None
        self._subscriptions: list[tuple[str, Callable[..., None]]] = []

    @property
    def attached(self) -> bool:
        return self._engine is not None

    @property
    def model_change_registered(self) -> bool:
        return self._on_model_change is not None

    @property
    def touched_registered(self) -> bool:
        return self._on_touched is not None

    def register_on_change(self, callback: ModelCallback) -> None:
        self._on_model_change = callback

    def register_on_touched(self, callback: TouchedCallback) -> None:
        self._on_touched = callback

    def attach(self, engine: EnginePort, editor_element: Any) -> None:
        if self.attached:
            raise RuntimeError("Event bridge is already attached to an engine")

        self._engine = engine
        self._editor_element = editor_element
        self._subscriptions = [
            (SELECTION_CHANGE, engine.on(SELECTION_CHANGE, self._handle_selection_change)),
            (TEXT_CHANGE, engine.on(TEXT_CHANGE, self._handle_text_change)),
        ]

    def detach(self) -> None:
        """Remove both engine subscriptions. Safe to call more than once."""
        engine = self._engine
        subscriptions, self._subscriptions = self._subscriptions, []
        self._engine = None
        self._editor_element = None

        if engine is None:
            return
        for event, handler in subscriptions:
            with suppress(KeyError, ValueError):
                engine.off(event, handler)
        logger.debug("Detached event bridge from engine")

    # --- Engine Handlers ---

    def _handle_selection_change(self, range: Any, old_range: Any, source: str) -> None:
        engine = self._engine
        if engine is None:
            return

        def publish() -> None:
            self._events.selection_changed.emit(
                SelectionChange(editor=engine, range=range, old_range=old_range, source=source)
            )
            if not range and self._on_touched is not None:
                self._on_touched()

        self._host.run(publish)

    def _handle_text_change(self, delta: Any, old_delta: Any, source: str) -> None:
        engine = self._engine
        if engine is None:
            return
        editor_element = self._editor_element

        text = engine.get_text()
        content = engine.get_contents()
        html = read_markup(editor_element)

        def publish() -> None:
            if self._on_model_change is not None:
                self._on_model_change(self.value_getter(engine, editor_element))
            self._events.content_changed.emit(
                ContentChange(
                    editor=engine,
                    html=html,
                    text=text,
                    content=content,
                    delta=delta,
                    old_delta=old_delta,
                    source=source,
                )
            )

        self._host.run(publish)
