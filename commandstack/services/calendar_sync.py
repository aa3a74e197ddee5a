"""
Synchronization between tasks and Google Calendar events.

Push (task -> event) runs inline with task create/update/delete. Pull
(event -> task) upserts tasks keyed by ``google_event_id`` into the
reserved ``google`` context.

No error from the Calendar API or the token endpoint propagates out of
this service: failures are logged and surface as ``None``, an empty
list or a ``failed`` count.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from commandstack.auth.google_oauth import refresh_access_token
from commandstack.auth.token_refresh import Refresher, refresh_if_needed
from commandstack.config import get_settings
from commandstack.integrations.google_calendar import (
    CalendarEvent,
    GoogleCalendarAdapter,
    GoogleCalendarClient,
    build_client_for_user,
)
from commandstack.integrations.google_calendar.adapter import (
    UNTITLED,
    format_query_time,
)
from commandstack.models import Context, Task, User, WorkStatus, WorkType
from commandstack.services.contexts import ContextService
from commandstack.time_utils import utcnow

logger = logging.getLogger(__name__)

ClientFactory = Callable[[User], GoogleCalendarClient]

PULL_LOOKBACK = timedelta(weeks=1)
PULL_LOOKAHEAD = timedelta(days=90)
MAX_EVENTS = 100


@dataclass
class SyncResult:
    """Outcome of a pull."""

    created: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.created + self.updated + self.failed


class CalendarSyncService:
    """
    Bridge between tasks and the user's Google Calendar.

    Every call refreshes the user's access token first when it is close
    to expiry, then builds a client from the (possibly new) token.
    """

    def __init__(
        self,
        db: Session,
        client_factory: ClientFactory = build_client_for_user,
        refresher: Refresher = refresh_access_token,
    ):
        self.db = db
        self._client_factory = client_factory
        self._refresher = refresher
        self._calendar_id = get_settings().google_calendar_id

    def _client_for(self, user: User) -> GoogleCalendarClient:
        user = refresh_if_needed(self.db, user, self._refresher)
        return self._client_factory(user)

    def create_event(self, user: User, task: Task) -> Optional[str]:
        """
        Create a calendar event for ``task``.

        Returns:
            The new event ID, or None if the event could not be created
        """
        try:
            client = self._client_for(user)
            body = GoogleCalendarAdapter.to_google_event(task)
            created = client.insert_event(self._calendar_id, body)
        except Exception as e:
            logger.error(f"Failed to create calendar event for task {task.id}: {e}")
            return None

        event_id = created.get("id")
        logger.info(f"Created calendar event {event_id} for task {task.id}")
        return event_id

    def update_event(self, user: User, task: Task) -> None:
        """Push ``task``'s fields to its linked event."""
        if not task.google_event_id:
            logger.warning(f"Task {task.id} has no linked calendar event, skipping update")
            return

        try:
            client = self._client_for(user)
            event = client.get_event(self._calendar_id, task.google_event_id)
            body = GoogleCalendarAdapter.apply_task(event, task)
            client.update_event(self._calendar_id, task.google_event_id, body)
        except Exception as e:
            logger.error(
                f"Failed to update calendar event {task.google_event_id} "
                f"for task {task.id}: {e}"
            )
            return

        logger.info(f"Updated calendar event {task.google_event_id} for task {task.id}")

    def delete_event(self, user: User, event_id: Optional[str]) -> None:
        """Best-effort delete of a calendar event."""
        if not event_id:
            return

        try:
            client = self._client_for(user)
            client.delete_event(self._calendar_id, event_id)
        except Exception as e:
            logger.error(f"Failed to delete calendar event {event_id}: {e}")

    def get_events(
        self,
        user: User,
        start: datetime,
        end: datetime,
    ) -> list[CalendarEvent]:
        """List up to 100 events between ``start`` and ``end``."""
        try:
            client = self._client_for(user)
            items = client.list_events(
                self._calendar_id,
                time_min=format_query_time(start),
                time_max=format_query_time(end),
                max_results=MAX_EVENTS,
            )
        except Exception as e:
            logger.error(f"Failed to list calendar events for user {user.email}: {e}")
            return []

        return [GoogleCalendarAdapter.from_google_event(item) for item in items]

    def _google_context_id(self) -> UUID:
        """Ensure the reserved context exists and commit it."""
        contexts = ContextService(self.db)
        try:
            context_id = contexts.ensure_google_context().id
            self.db.commit()
        except IntegrityError:
            # A concurrent first pull created it
            self.db.rollback()
            context_id = contexts.get_by_namespace(Context.NAMESPACE_GOOGLE).id
        return context_id

    def pull(
        self,
        user: User,
        window: Optional[tuple[datetime, datetime]] = None,
    ) -> SyncResult:
        """
        Import calendar events as tasks.

        Events already linked to a task update that task in place; other
        events become new SCHEDULE tasks in the ``google`` context. Each
        event is committed on its own so one failure does not undo the
        rest of the batch.

        Args:
            user: Owner of the calendar
            window: (start, end) range; defaults to one week back through
                90 days ahead

        Returns:
            Counts of created, updated and failed events
        """
        if window is None:
            now = utcnow()
            window = (now - PULL_LOOKBACK, now + PULL_LOOKAHEAD)
        start, end = window

        result = SyncResult()

        google_context_id = self._google_context_id()

        try:
            client = self._client_for(user)
            items = client.list_events(
                self._calendar_id,
                time_min=format_query_time(start),
                time_max=format_query_time(end),
                max_results=MAX_EVENTS,
            )
        except Exception as e:
            logger.error(f"Failed to list calendar events for user {user.email}: {e}")
            return result

        for item in items:
            event_id = item.get("id")
            try:
                created = self._upsert_task(item, user, google_context_id)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                result.failed += 1
                logger.error(f"Failed to import calendar event {event_id}: {e}")
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        logger.info(
            f"Calendar pull for {user.email}: {result.created} created, "
            f"{result.updated} updated, {result.failed} failed"
        )
        return result

    def _upsert_task(self, item: dict, user: User, google_context_id) -> bool:
        """Apply one event; returns True if a new task was created."""
        event_id = item["id"]
        syntax = item.get("summary") or UNTITLED
        details = item.get("description")
        started_at = _event_time(item.get("start"))
        deadline = _event_time(item.get("end"))

        stmt = select(Task).where(Task.google_event_id == event_id)
        task = self.db.scalars(stmt).first()

        if task is not None:
            task.apply_calendar_event(syntax, details, started_at, deadline)
            self.db.flush()
            return False

        task = Task(
            syntax=syntax,
            details=details,
            status=WorkStatus.PENDING,
            type=WorkType.SCHEDULE,
            context_id=google_context_id,
            started_at=started_at,
            deadline=deadline,
            google_event_id=event_id,
            sync_to_google=True,
            user_id=user.id,
        )
        self.db.add(task)
        self.db.flush()
        return True


def _event_time(data: Optional[dict]) -> Optional[datetime]:
    if not data:
        return None
    return GoogleCalendarAdapter.parse_event_time(data.get("dateTime") or data.get("date"))
