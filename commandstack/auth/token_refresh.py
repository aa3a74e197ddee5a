"""
Refresh of expiring Google access tokens.

``refresh_if_needed`` is cheap when the token is still fresh, so callers
run it before every Google API call. A failed refresh is logged and the
user is returned unchanged; the API call that follows then fails on its
own and is handled there.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commandstack.auth.google_oauth import OAuthTokens, refresh_access_token
from commandstack.config import get_settings
from commandstack.models import User

logger = logging.getLogger(__name__)

Refresher = Callable[[str], OAuthTokens]


def refresh_if_needed(
    db: Session,
    user: Optional[User],
    refresher: Refresher = refresh_access_token,
) -> Optional[User]:
    """
    Refresh ``user``'s access token if it is expired or about to expire.

    No-op when ``token_expires_at`` is unset or further away than the
    configured margin (5 minutes by default).

    Args:
        db: Database session used to persist new tokens
        user: User whose token to check
        refresher: Callable performing the refresh_token grant

    Returns:
        The same user, updated in place when a refresh succeeded
    """
    if user is None:
        return None

    margin = timedelta(minutes=get_settings().token_refresh_margin_minutes)
    if not user.needs_refresh(margin):
        return user

    logger.info(f"Access token expired or expiring soon for user {user.email}, refreshing")
    return refresh_user_token(db, user, refresher)


def refresh_user_token(
    db: Session,
    user: User,
    refresher: Refresher = refresh_access_token,
) -> User:
    """
    Unconditionally refresh ``user``'s access token.

    Never raises; on any failure the user is returned unmodified.
    """
    if not user.refresh_token:
        logger.warning(f"No refresh token available for user {user.email}")
        return user

    try:
        new_tokens = refresher(user.refresh_token)
    except Exception as e:
        logger.error(f"Failed to refresh access token for user {user.email}: {e}")
        return user

    try:
        # Savepoint only; the caller's transaction decides the commit
        with db.begin_nested():
            user.update_tokens(
                new_tokens.access_token,
                new_tokens.refresh_token or user.refresh_token,
                new_tokens.expiry,
            )
    except SQLAlchemyError as e:
        logger.error(f"Failed to store refreshed token for user {user.email}: {e}")
        return user

    logger.info(
        f"Refreshed access token for user {user.email}, expires at {user.token_expires_at}"
    )
    return user
