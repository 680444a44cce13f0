from .codecs import MarkupCodecPort, SanitizerPort
from .engine import ClipboardPort, EngineClassPort, EnginePort, HistoryPort
from .host import HostPort

__all__ = [
    "ClipboardPort",
    "EngineClassPort",
    "EnginePort",
    "HistoryPort",
    "HostPort",
    "MarkupCodecPort",
    "SanitizerPort",
]
