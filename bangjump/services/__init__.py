# bangjump Services Package
"""
Backend services for bangjump.

Services handle background matching and the user's settings.
"""

from .settings import SettingsService
from .worker import MatchRequest, MatchResponse, SuggestionWorker

__all__ = ["SettingsService", "MatchRequest", "MatchResponse", "SuggestionWorker"]
