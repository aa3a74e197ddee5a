"""
Event CRUD against one user's Google Calendar.

Every request goes through ``GoogleCalendarClient._execute``, which turns
``HttpError`` into the ``GoogleCalendarError`` family. Requests run once
with the HTTP client's default timeout.
"""

import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from commandstack.integrations.google_calendar.exceptions import (
    GoogleCalendarError,
    GoogleCalendarAuthError,
    GoogleCalendarNotFoundError,
    GoogleCalendarRateLimitError,
)

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("quota", "rate limit")


def classify_http_error(error: HttpError, action: str) -> GoogleCalendarError:
    """
    Map a Calendar API ``HttpError`` to a typed error.

    Args:
        error: The error raised by ``execute()``
        action: What was being attempted, for the message

    Returns:
        The matching ``GoogleCalendarError`` subclass instance
    """
    status = error.resp.status
    detail = str(error).lower()

    if status == 401:
        return GoogleCalendarAuthError(
            f"Cannot {action}: Google rejected the access token", original_error=error
        )
    if status == 429 or (status == 403 and any(m in detail for m in _QUOTA_MARKERS)):
        return GoogleCalendarRateLimitError(
            f"Cannot {action}: Calendar API quota exhausted", original_error=error
        )
    if status == 403:
        return GoogleCalendarAuthError(
            f"Cannot {action}: the calendar scope was not granted", original_error=error
        )
    if status == 404:
        return GoogleCalendarNotFoundError(
            f"Cannot {action}: no such event or calendar", original_error=error
        )
    return GoogleCalendarError(
        f"Cannot {action}: Calendar API returned {status}", original_error=error
    )


class GoogleCalendarClient:
    """Calendar API v3 ``events`` resource bound to one set of credentials."""

    def __init__(self, credentials: Credentials):
        self._events = build(
            "calendar",
            "v3",
            credentials=credentials,
            cache_discovery=False,
        ).events()

    @staticmethod
    def _execute(request, action: str):
        try:
            return request.execute()
        except HttpError as e:
            raise classify_http_error(e, action) from e

    def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int = 100,
    ) -> list[dict]:
        """
        Events overlapping ``time_min``..``time_max`` (RFC 3339), earliest first.

        Recurring events come back as individual occurrences. Only the
        first ``max_results`` are returned; later pages are not fetched.
        """
        response = self._execute(
            self._events.list(
                calendarId=calendar_id,
                timeMin=time_min,
                timeMax=time_max,
                singleEvents=True,
                orderBy="startTime",
                maxResults=max_results,
            ),
            "list events",
        )
        items = response.get("items", [])
        logger.debug(f"Fetched {len(items)} events between {time_min} and {time_max}")
        return items

    def get_event(self, calendar_id: str, event_id: str) -> dict:
        return self._execute(
            self._events.get(calendarId=calendar_id, eventId=event_id),
            f"read event {event_id}",
        )

    def insert_event(self, calendar_id: str, body: dict) -> dict:
        """Create an event from ``body``; the result carries Google's ``id``."""
        created = self._execute(
            self._events.insert(calendarId=calendar_id, body=body),
            "create event",
        )
        logger.info(f"Inserted calendar event {created.get('id')}")
        return created

    def update_event(self, calendar_id: str, event_id: str, body: dict) -> dict:
        """Overwrite event ``event_id`` with ``body`` (full replace, not patch)."""
        updated = self._execute(
            self._events.update(calendarId=calendar_id, eventId=event_id, body=body),
            f"update event {event_id}",
        )
        logger.info(f"Replaced calendar event {event_id}")
        return updated

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        self._execute(
            self._events.delete(calendarId=calendar_id, eventId=event_id),
            f"delete event {event_id}",
        )
        logger.info(f"Removed calendar event {event_id}")
