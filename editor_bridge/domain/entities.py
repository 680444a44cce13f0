from enum import Enum
from typing import Literal

# --- Enums / Literals ---


class Format(str, Enum):
    """External representation exchanged with the surrounding application."""

    TEXT = "text"
    STRUCTURED = "object"
    JSON = "json"
    HTML = "html"
    MARKUP = "bbcode"


class SecurityContext(str, Enum):
    """Context a sanitizer is bound to."""

    HTML = "html"
    STYLE = "style"
    URL = "url"


Theme = Literal["snow", "bubble"]
ChangeSource = Literal["api", "user", "silent"]

# Engine event names
TEXT_CHANGE = "text-change"
SELECTION_CHANGE = "selection-change"

# Host markup markers
TOOLBAR_MARKER = "editor-toolbar"
EDITOR_ELEMENT_MARKER = "editor-element"
DISABLED_ATTRIBUTE = "disabled"

DEFAULT_PLACEHOLDER = "Insert text here ..."
DEFAULT_THEME: Theme = "snow"
