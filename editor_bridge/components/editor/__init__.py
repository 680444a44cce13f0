"""
Editor component - rich-text form control.

Format conversion, validation and lifecycle around an embedded engine.
"""

from editor_bridge.core.services.events import ContentChange, SelectionChange
from editor_bridge.core.services.lifecycle import (
    InvalidTransitionError,
    LifecycleState,
    UnsupportedChangeError,
)
from editor_bridge.core.services.validation import ValidationVerdict, VerdictStatus

from .component import EditorAdapter, create_editor

__all__ = [
    # Entry points
    "EditorAdapter",
    "create_editor",
    # Event payloads
    "ContentChange",
    "SelectionChange",
    # State
    "LifecycleState",
    "ValidationVerdict",
    "VerdictStatus",
    # Errors
    "InvalidTransitionError",
    "UnsupportedChangeError",
]
