# bangjump Utilities Package
"""
Shared utility functions and helpers for bangjump.
"""

from .helpers import insert_trigger, load_settings, open_url

__all__ = ["insert_trigger", "load_settings", "open_url"]
