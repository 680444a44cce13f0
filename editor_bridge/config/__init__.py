from .loader import load_settings, settings_from_mapping
from .models import AdapterSettings, CustomExtension, EditorConfiguration

__all__ = [
    "AdapterSettings",
    "CustomExtension",
    "EditorConfiguration",
    "load_settings",
    "settings_from_mapping",
]
