"""
Editor component - binds a form model to a rich-text engine.

Implements the form-control protocol (value accessor + validator) on top
of the lifecycle controller, format converter and event bridge.

Outputs:
- editor_created(engine)
- content_changed(ContentChange)
- selection_changed(SelectionChange)

Invariants:
- At most one engine per adapter, constructed at most once
- The format is fixed for the adapter's lifetime
- After destroy(), stale engine events reach no adapter callback
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from editor_bridge.adapters.html_sanitizer import HtmlSanitizer
from editor_bridge.config.models import AdapterSettings, EditorConfiguration
from editor_bridge.core.forms import register_form_control
from editor_bridge.core.services.engine_provider import EngineProvider
from editor_bridge.core.services.events import (
    AdapterEvents,
    ContentChange,
    EventBridge,
    EventEmitter,
    SelectionChange,
    ValueGetter,
)
from editor_bridge.core.services.formats import FormatConverter
from editor_bridge.core.services.lifecycle import LifecycleController, LifecycleState
from editor_bridge.core.services.sanitize import SanitizationGuard
from editor_bridge.core.services.validation import (
    LengthConstraints,
    ValidationErrors,
    ValidationVerdict,
    evaluate,
)
from editor_bridge.domain.entities import Format
from editor_bridge.ports.codecs import MarkupCodecPort, SanitizerPort
from editor_bridge.ports.engine import EnginePort
from editor_bridge.ports.host import HostPort

ValueSetter = Callable[[EnginePort, Any], Any]


class EditorAdapter:
    """
    Form control wrapping one rich-text engine.

    `value_getter` and `value_setter` default to the configured format's
    converter and may be replaced at any time.
    """

    def __init__(
        self,
        host: HostPort,
        config: EditorConfiguration | None = None,
        *,
        settings: AdapterSettings | None = None,
        provider: EngineProvider | None = None,
        sanitizer: SanitizerPort | None = None,
        codec: MarkupCodecPort | None = None,
        value_getter: ValueGetter | None = None,
        value_setter: ValueSetter | None = None,
    ) -> None:
        self._config = config or EditorConfiguration()
        self._settings = settings or AdapterSettings()

        if self._config.sanitize and sanitizer is None:
            sanitizer = HtmlSanitizer()
        guard = SanitizationGuard(sanitizer, enabled=self._config.sanitize)

        self._converter = FormatConverter(self._config.format, guard=guard, codec=codec)
        self.value_setter: ValueSetter = value_setter or self._converter.to_internal

        self.events = AdapterEvents()
        self._bridge = EventBridge(
            host,
            self.events,
            value_getter or self._converter.to_external,
        )
        self._lifecycle = LifecycleController(
            self._config,
            self._settings,
            host,
            self._converter,
            self._bridge,
            self.events,
            provider,
        )
        self._constraints = LengthConstraints(
            min_length=self._config.min_length,
            max_length=self._config.max_length,
            required=self._config.required,
        )

    # --- Accessors ---

    @property
    def config(self) -> EditorConfiguration:
        return self._config

    @property
    def format(self) -> Format:
        return self._converter.format

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def engine(self) -> EnginePort | None:
        return self._lifecycle.engine

    @property
    def editor_element(self) -> Any:
        return self._lifecycle.editor_element

    @property
    def read_only(self) -> bool:
        return self._lifecycle.read_only

    @property
    def placeholder(self) -> str | None:
        return self._lifecycle.placeholder

    @property
    def disabled(self) -> bool:
        return self._lifecycle.disabled

    @property
    def value_getter(self) -> ValueGetter:
        return self._bridge.value_getter

    @value_getter.setter
    def value_getter(self, getter: ValueGetter) -> None:
        self._bridge.value_getter = getter

    @property
    def editor_created(self) -> EventEmitter[Any]:
        return self.events.editor_created

    @property
    def content_changed(self) -> EventEmitter[ContentChange]:
        return self.events.content_changed

    @property
    def selection_changed(self) -> EventEmitter[SelectionChange]:
        return self.events.selection_changed

    # --- Lifecycle ---

    def initialize(self) -> bool:
        """Create the engine once the host has rendered. See LifecycleController."""
        return self._lifecycle.initialize()

    def apply_changes(self, **changes: Any) -> None:
        """
        Apply live option changes (read_only, placeholder).

        Raises UnsupportedChangeError for any other option, including format.
        """
        self._lifecycle.apply_changes(**changes)

    def destroy(self) -> None:
        self._lifecycle.destroy()

    # --- Form-Control Protocol ---

    def write_value(self, value: Any) -> None:
        self._lifecycle.write(value, self.value_setter)

    def register_on_change(self, callback: Callable[[Any], None]) -> None:
        self._bridge.register_on_change(callback)

    def register_on_touched(self, callback: Callable[[], None]) -> None:
        self._bridge.register_on_touched(callback)

    def set_disabled_state(self, is_disabled: bool | None = None) -> None:
        """Set the disabled flag; with no argument, re-apply the current one."""
        if is_disabled is None:
            is_disabled = self._lifecycle.disabled
        self._lifecycle.set_disabled(is_disabled)

    def verdict(self) -> ValidationVerdict:
        engine = self._lifecycle.engine
        return evaluate(engine.get_text() if engine is not None else None, self._constraints)

    def validate(self) -> ValidationErrors | None:
        """None when valid or not yet ready; otherwise the error mapping."""
        return self.verdict().as_form_result()


register_form_control(EditorAdapter)


def create_editor(
    host: HostPort,
    config: EditorConfiguration | dict[str, Any] | None = None,
    **kwargs: Any,
) -> EditorAdapter:
    """Create an EditorAdapter, validating a plain options mapping if given."""
    if isinstance(config, dict):
        config = EditorConfiguration.model_validate(config)
    return EditorAdapter(host, config, **kwargs)
