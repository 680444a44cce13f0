from .headless_host import Element, HeadlessHost
from .html_sanitizer import HtmlSanitizer, SanitizerConfig
from .memory_engine import Extension, MemoryEngine, Range

__all__ = [
    "Element",
    "Extension",
    "HeadlessHost",
    "HtmlSanitizer",
    "MemoryEngine",
    "Range",
    "SanitizerConfig",
]
