"""
Google Calendar integration for CommandStack.

Provides the API client, credential helpers and task/event mapping used by
the calendar sync service.
"""

from commandstack.integrations.google_calendar.adapter import (
    CalendarEvent,
    GoogleCalendarAdapter,
)
from commandstack.integrations.google_calendar.auth import (
    build_client_for_user,
    get_oauth_credentials,
)
from commandstack.integrations.google_calendar.client import GoogleCalendarClient
from commandstack.integrations.google_calendar.exceptions import (
    GoogleCalendarAuthError,
    GoogleCalendarError,
    GoogleCalendarNotFoundError,
    GoogleCalendarRateLimitError,
)

__all__ = [
    "CalendarEvent",
    "GoogleCalendarAdapter",
    "GoogleCalendarClient",
    "build_client_for_user",
    "get_oauth_credentials",
    "GoogleCalendarError",
    "GoogleCalendarAuthError",
    "GoogleCalendarNotFoundError",
    "GoogleCalendarRateLimitError",
]
