"""
editor-bridge - binds an application data model to an embedded rich-text engine.

The adapter reconciles the engine's structured content with an external
value in one of several formats (text, object, json, html, bbcode).
"""

__version__ = "0.1.0"
