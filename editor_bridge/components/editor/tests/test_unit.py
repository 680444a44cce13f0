"""
Editor component unit tests.

Drives the adapter end to end against the in-memory engine and the
headless host: buffered writes, model sync, validation, editability
and teardown.
"""

from __future__ import annotations

from typing import Any

import pytest

from editor_bridge.adapters.headless_host import HeadlessHost
from editor_bridge.adapters.memory_engine import MemoryEngine
from editor_bridge.components.editor import (
    ContentChange,
    EditorAdapter,
    InvalidTransitionError,
    LifecycleState,
    UnsupportedChangeError,
    VerdictStatus,
    create_editor,
)
from editor_bridge.config.models import AdapterSettings, CustomExtension, EditorConfiguration
from editor_bridge.core.services.engine_provider import EngineProvider
from editor_bridge.domain.entities import (
    DISABLED_ATTRIBUTE,
    SELECTION_CHANGE,
    TEXT_CHANGE,
    TOOLBAR_MARKER,
    Format,
)

# --- Mock Implementations ---


class FixtureEngine(MemoryEngine):
    """Engine class with a registry private to these tests."""


class ChineseFixtureEngine(MemoryEngine):
    pass


class SquareBracketCodec:
    """Maps [b]..[/b] to <strong>..</strong> and back."""

    def parse(self, markup: str) -> str:
        return markup.replace("[b]", "<strong>").replace("[/b]", "</strong>")

    def build(self, html: str) -> str:
        return html.replace("<strong>", "[b]").replace("</strong>", "[/b]")


class Recorder:
    """Collects model values, touched calls and public events in order."""

    def __init__(self) -> None:
        self.values: list[Any] = []
        self.touched = 0
        self.order: list[str] = []

    def on_change(self, value: Any) -> None:
        self.values.append(value)
        self.order.append("model")

    def on_touched(self) -> None:
        self.touched += 1
        self.order.append("touched")


# --- Fixtures ---


@pytest.fixture(autouse=True)
def clean_registries() -> None:
    FixtureEngine.reset_registry()
    ChineseFixtureEngine.reset_registry()


@pytest.fixture
def host() -> HeadlessHost:
    return HeadlessHost()


def make_adapter(
    host: HeadlessHost,
    config: EditorConfiguration | dict[str, Any] | None = None,
    **kwargs: Any,
) -> EditorAdapter:
    kwargs.setdefault("provider", EngineProvider(FixtureEngine))
    return create_editor(host, config, **kwargs)


def wire(adapter: EditorAdapter) -> Recorder:
    recorder = Recorder()
    adapter.register_on_change(recorder.on_change)
    adapter.register_on_touched(recorder.on_touched)
    adapter.content_changed.subscribe(lambda change: recorder.order.append("content"))
    return recorder


def live_engine(adapter: EditorAdapter) -> MemoryEngine:
    engine = adapter.engine
    assert isinstance(engine, MemoryEngine)
    return engine


# --- Initialization ---


class TestInitialization:
    def test_creates_engine_and_announces_it(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        created: list[Any] = []
        adapter.editor_created.subscribe(created.append)

        assert adapter.initialize() is True

        assert adapter.state is LifecycleState.READY
        assert created == [adapter.engine]
        assert isinstance(adapter.engine, FixtureEngine)

    def test_non_interactive_host_skips(self) -> None:
        adapter = make_adapter(HeadlessHost(interactive=False))
        assert adapter.initialize() is False
        assert adapter.engine is None
        assert adapter.state is LifecycleState.UNINITIALIZED

    def test_second_initialize_raises(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        with pytest.raises(InvalidTransitionError):
            adapter.initialize()

    def test_projected_toolbar_used(self, host: HeadlessHost) -> None:
        toolbar = host.project(TOOLBAR_MARKER)
        adapter = make_adapter(host)
        adapter.initialize()
        assert live_engine(adapter).options["modules"]["toolbar"] is toolbar

    def test_style_applied_to_editor_element(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"style": {"height": "200px"}})
        adapter.initialize()
        assert adapter.editor_element.style == {"height": "200px"}

    def test_language_variant(self, host: HeadlessHost) -> None:
        provider = EngineProvider(FixtureEngine, {"chinese": ChineseFixtureEngine})
        adapter = make_adapter(
            host, settings=AdapterSettings(language="chinese"), provider=provider
        )
        adapter.initialize()
        assert isinstance(adapter.engine, ChineseFixtureEngine)

    def test_custom_extensions_registered(self, host: HeadlessHost) -> None:
        settings = AdapterSettings(
            customs=[CustomExtension(import_path="formats/font", whitelist=["mirza"])]
        )
        adapter = make_adapter(host, settings=settings)
        adapter.initialize()
        assert FixtureEngine.registered("formats/font").whitelist == ["mirza"]


# --- Writes ---


class TestWriteValue:
    def test_buffered_value_flushed_silently(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)

        adapter.write_value("<p>Hello</p>")
        adapter.initialize()

        engine = live_engine(adapter)
        assert engine.get_text() == "Hello\n"
        assert engine.history.stack == []
        assert recorder.values == []

    def test_latest_buffered_value_wins(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "text"})
        adapter.write_value("first")
        adapter.write_value("second")
        adapter.initialize()
        assert live_engine(adapter).get_text() == "second\n"

    def test_html_write_updates_engine_and_model(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()

        adapter.write_value("<p>Hi <strong>there</strong></p>")

        assert recorder.values == ["<p>Hi <strong>there</strong></p>"]

    def test_empty_write_clears(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()
        adapter.write_value("<p>x</p>")

        adapter.write_value(None)

        assert live_engine(adapter).get_text() == "\n"
        assert recorder.values[-1] == ""

    def test_malformed_json_written_as_text(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "json"})
        adapter.initialize()
        adapter.write_value("{oops")
        assert live_engine(adapter).get_text() == "{oops\n"

    def test_json_without_op_list_written_as_text(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "json"})
        adapter.initialize()
        adapter.write_value('{"ops": 5}')
        assert live_engine(adapter).get_text() == '{"ops": 5}\n'

    def test_non_string_html_value(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        adapter.write_value(123)
        assert live_engine(adapter).get_text() == "123\n"

    def test_json_document(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "json"})
        recorder = wire(adapter)
        adapter.initialize()

        adapter.write_value('{"ops": [{"insert": "x\\n"}]}')

        assert recorder.values == ['{"ops":[{"insert":"x\\n"}]}']

    def test_structured_value(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "object"})
        recorder = wire(adapter)
        adapter.initialize()
        delta = {"ops": [{"insert": "a", "attributes": {"bold": True}}, {"insert": "\n"}]}

        adapter.write_value(delta)

        assert recorder.values == [delta]

    def test_custom_value_setter(self, host: HeadlessHost) -> None:
        adapter = make_adapter(
            host, {"format": "text"}, value_setter=lambda engine, value: value.upper()
        )
        adapter.initialize()
        adapter.write_value("hi")
        assert live_engine(adapter).get_text() == "HI\n"

    def test_custom_value_getter(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "text"})
        recorder = wire(adapter)
        adapter.value_getter = lambda engine, element: engine.get_length()
        adapter.initialize()

        adapter.write_value("abc")

        assert recorder.values == [4]

    def test_write_after_destroy_ignored(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        adapter.destroy()
        adapter.write_value("<p>late</p>")
        assert adapter.engine is None


# --- Model Sync ---


class TestModelSync:
    def test_typing_updates_model_before_event(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()

        live_engine(adapter).insert_text(0, "Hi")

        assert recorder.values == ["<p>Hi</p>"]
        assert recorder.order == ["model", "content"]

    def test_content_change_payload(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        changes: list[ContentChange] = []
        adapter.content_changed.subscribe(changes.append)
        adapter.initialize()

        live_engine(adapter).insert_text(0, "Hi")

        assert changes[0].html == "<p>Hi</p>"
        assert changes[0].text == "Hi\n"
        assert changes[0].source == "user"

    def test_clearing_document_yields_empty_string(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()
        engine = live_engine(adapter)

        engine.insert_text(0, "x")
        engine.delete_text(0, 1)

        assert recorder.values == ["<p>x</p>", ""]

    def test_blur_marks_touched(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()
        engine = live_engine(adapter)

        engine.focus()
        engine.blur()

        assert recorder.touched == 1

    def test_markup_format(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "bbcode"}, codec=SquareBracketCodec())
        recorder = wire(adapter)
        adapter.initialize()

        adapter.write_value("[b]bold[/b]")

        assert recorder.values == ["<p>[b]bold[/b]</p>"]

    def test_markup_without_codec_rejected(self, host: HeadlessHost) -> None:
        with pytest.raises(ValueError):
            make_adapter(host, {"format": "bbcode"})


# --- Sanitization ---


class TestSanitize:
    def test_default_sanitizer_applied(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"sanitize": True})
        adapter.initialize()
        adapter.write_value('<p>safe<script>alert("x")</script></p>')
        assert live_engine(adapter).get_text() == "safe\n"

    def test_injected_sanitizer_preferred(self, host: HeadlessHost) -> None:
        class UpperSanitizer:
            def sanitize(self, context: Any, value: str) -> str:
                return value.upper()

        adapter = make_adapter(host, {"sanitize": True}, sanitizer=UpperSanitizer())
        adapter.initialize()
        adapter.write_value("<p>quiet</p>")
        assert live_engine(adapter).get_text() == "QUIET\n"


# --- Validation ---


class TestValidation:
    CONSTRAINTS = {"format": "text", "minLength": 3, "maxLength": 5, "required": True}

    def test_not_ready_before_engine(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        assert adapter.validate() is None
        assert adapter.verdict().status is VerdictStatus.NOT_READY

    def test_required_on_empty(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        adapter.initialize()
        assert adapter.validate() == {"requiredError": {"empty": True}}

    def test_too_short(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        adapter.initialize()
        adapter.write_value("ab")
        assert adapter.validate() == {"minLengthError": {"given": 2, "minLength": 3}}

    def test_too_long(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        adapter.initialize()
        adapter.write_value("abcdef")
        assert adapter.validate() == {"maxLengthError": {"given": 6, "maxLength": 5}}

    def test_within_limits(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        adapter.initialize()
        adapter.write_value("  abcd  ")
        assert adapter.validate() is None
        assert adapter.verdict().status is VerdictStatus.VALID

    def test_not_ready_after_destroy(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, self.CONSTRAINTS)
        adapter.initialize()
        adapter.destroy()
        assert adapter.verdict().status is VerdictStatus.NOT_READY


# --- Editability ---


class TestEditability:
    def test_disabled_before_initialize(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.set_disabled_state(True)
        adapter.initialize()

        assert not live_engine(adapter).is_enabled()
        assert host.element.has_attribute(DISABLED_ATTRIBUTE)

    def test_enable_after_disable(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        adapter.set_disabled_state(True)
        adapter.set_disabled_state(False)

        assert live_engine(adapter).is_enabled()
        assert not host.element.has_attribute(DISABLED_ATTRIBUTE)

    def test_enabling_keeps_read_only(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"readOnly": True})
        adapter.initialize()
        adapter.set_disabled_state(True)
        adapter.set_disabled_state(False)

        assert not live_engine(adapter).is_enabled()
        assert not host.element.has_attribute(DISABLED_ATTRIBUTE)

    def test_read_only_change_keeps_disabled(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"readOnly": True})
        adapter.initialize()
        adapter.set_disabled_state(True)

        adapter.apply_changes(read_only=False)
        assert not live_engine(adapter).is_enabled()

        adapter.set_disabled_state(False)
        assert live_engine(adapter).is_enabled()

    def test_reapply_current_state(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        adapter.set_disabled_state(True)
        live_engine(adapter).enable()

        adapter.set_disabled_state()

        assert not live_engine(adapter).is_enabled()

    def test_placeholder_is_live(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"placeholder": "Start here"})
        adapter.initialize()
        engine = live_engine(adapter)
        assert engine.root.dataset["placeholder"] == "Start here"

        adapter.apply_changes(placeholder="Type away")

        assert engine.root.dataset["placeholder"] == "Type away"
        assert adapter.placeholder == "Type away"

    def test_format_cannot_change(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "text"})
        with pytest.raises(UnsupportedChangeError):
            adapter.apply_changes(format="html")
        assert adapter.format is Format.TEXT


# --- Teardown ---


class TestTeardown:
    def test_destroy_detaches_engine(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        recorder = wire(adapter)
        adapter.initialize()
        engine = live_engine(adapter)

        adapter.destroy()
        engine.insert_text(0, "late")
        engine.blur()

        assert adapter.state is LifecycleState.DESTROYED
        assert adapter.engine is None
        assert engine.listener_count(TEXT_CHANGE) == 0
        assert engine.listener_count(SELECTION_CHANGE) == 0
        assert recorder.order == []

    def test_destroy_twice(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.initialize()
        adapter.destroy()
        adapter.destroy()
        assert adapter.state is LifecycleState.DESTROYED

    def test_destroy_before_initialize(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        adapter.destroy()
        with pytest.raises(InvalidTransitionError):
            adapter.initialize()


# --- Construction ---


class TestCreateEditor:
    def test_from_camel_case_mapping(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host, {"format": "text", "maxLength": 5, "readOnly": True})
        assert adapter.format is Format.TEXT
        assert adapter.config.max_length == 5
        assert adapter.read_only is True

    def test_from_model(self, host: HeadlessHost) -> None:
        config = EditorConfiguration(format=Format.JSON)
        adapter = make_adapter(host, config)
        assert adapter.config is config

    def test_defaults(self, host: HeadlessHost) -> None:
        adapter = make_adapter(host)
        assert adapter.format is Format.HTML
        assert adapter.state is LifecycleState.UNINITIALIZED
        assert adapter.disabled is False
