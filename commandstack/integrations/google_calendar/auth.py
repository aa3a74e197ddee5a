"""
Credentials for calling Google Calendar on behalf of a user.
"""

import logging
from typing import Optional

from google.oauth2.credentials import Credentials

from commandstack.integrations.google_calendar.client import GoogleCalendarClient
from commandstack.integrations.google_calendar.exceptions import GoogleCalendarAuthError
from commandstack.models import User

logger = logging.getLogger(__name__)

CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
]


def get_oauth_credentials(
    access_token: str,
    scopes: Optional[list[str]] = None,
) -> Credentials:
    """
    Create bearer credentials from a stored access token.

    No refresh token is attached: refreshing is done by
    ``refresh_if_needed`` so the new token is persisted on the user.
    """
    return Credentials(
        token=access_token,
        scopes=scopes or CALENDAR_SCOPES,
    )


def build_client_for_user(user: User) -> GoogleCalendarClient:
    """
    Build a Calendar client authorized as ``user``.

    Raises:
        GoogleCalendarAuthError: If the user has no access token
    """
    if not user.access_token:
        raise GoogleCalendarAuthError(f"User {user.email} has no Google access token")

    return GoogleCalendarClient(get_oauth_credentials(user.access_token))
