"""Completion client package.

Exposes :class:`CompletionClient` and the text cleanup helper.
"""

from .client import CompletionClient, ConnectionProbe, SettingsSource
from .text_cleanup import clean_generated_text

__all__ = ["CompletionClient", "ConnectionProbe", "SettingsSource", "clean_generated_text"]
