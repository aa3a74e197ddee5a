"""
Google Calendar API routes.

Both endpoints require a signed-in user with a stored Google token.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from commandstack.api.dependencies import require_user
from commandstack.api.models import CalendarEventResponse, SyncResponse
from commandstack.database import get_db
from commandstack.models import User
from commandstack.services import CalendarSyncService
from commandstack.time_utils import to_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

DEFAULT_EVENTS_RANGE = timedelta(days=30)


def get_calendar_sync_service(db: Session = Depends(get_db)) -> CalendarSyncService:
    return CalendarSyncService(db)


@router.get("/events", response_model=list[CalendarEventResponse])
def list_calendar_events(
    start: Optional[datetime] = Query(None, description="Range start (ISO 8601, naive = local time)"),
    end: Optional[datetime] = Query(None, description="Range end (ISO 8601, naive = local time)"),
    user: User = Depends(require_user),
    service: CalendarSyncService = Depends(get_calendar_sync_service),
):
    """
    List events from the user's calendar.

    Defaults to now through 30 days ahead. Calendar errors yield an
    empty list.
    """
    range_start = to_utc(start) if start else utcnow()
    range_end = to_utc(end) if end else range_start + DEFAULT_EVENTS_RANGE

    events = service.get_events(user, range_start, range_end)
    return [CalendarEventResponse.model_validate(event) for event in events]


@router.post("/sync", response_model=SyncResponse)
def sync_calendar(
    user: User = Depends(require_user),
    service: CalendarSyncService = Depends(get_calendar_sync_service),
) -> SyncResponse:
    """Pull events from the user's calendar into tasks."""
    result = service.pull(user)
    return SyncResponse(
        message="Sync completed",
        created=result.created,
        updated=result.updated,
        failed=result.failed,
    )
