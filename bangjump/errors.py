"""
Exceptions raised by the bang engine.

Only NavigationFailure ever reaches the end user. The others are caught
inside the engine and degraded into a fallback path.
"""


class BangError(Exception):
    """Base class for all bangjump errors."""


class InvalidBangDefinition(BangError):
    """A custom bang entry is missing its trigger or url."""


class MalformedPartialTrigger(BangError):
    """A partial trigger containing whitespace was passed to the matcher."""


class WorkerUnavailable(BangError):
    """The background matching executor could not be created or used."""


class WorkerFailure(BangError):
    """A background match computation raised."""


class NavigationFailure(BangError):
    """The navigation sink could not open the destination URL."""

    def __init__(self, url: str, message: str = "Could not navigate"):
        super().__init__(message)
        self.url = url
