"""
Custom exceptions for Google Calendar operations.

``GoogleCalendarClient`` converts ``HttpError`` into these so callers can
log a readable cause. The sync bridge never lets them escape.
"""


class GoogleCalendarError(Exception):
    """Base exception for Google Calendar operations."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class GoogleCalendarAuthError(GoogleCalendarError):
    """
    Authentication or authorization failure.

    Causes:
    - Missing, invalid or expired access token
    - Calendar scope not granted
    """


class GoogleCalendarNotFoundError(GoogleCalendarError):
    """
    Event or calendar not found.

    Causes:
    - Event was deleted in Google Calendar
    - Stale google_event_id on a task
    """


class GoogleCalendarRateLimitError(GoogleCalendarError):
    """Rate limit or quota exceeded (429, or 403 with a quota reason)."""
