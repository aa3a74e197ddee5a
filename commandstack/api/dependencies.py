"""
FastAPI dependency injection providers.

Provides the session principal and the signed-in user.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from commandstack.auth import (
    AuthenticatedPrincipal,
    get_session_principal,
    get_user_for_principal,
)
from commandstack.database import get_db
from commandstack.models import User

logger = logging.getLogger(__name__)


def get_current_principal(request: Request) -> Optional[AuthenticatedPrincipal]:
    """Principal from the signed session cookie, or None when signed out."""
    return get_session_principal(request)


def get_optional_user(
    principal: Optional[AuthenticatedPrincipal] = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Load the signed-in user, if any.

    Used by endpoints that work anonymously but sync to Google Calendar
    when a user is present.
    """
    return get_user_for_principal(db, principal)


def require_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """
    Require a signed-in user.

    Raises:
        HTTPException: 401 if there is no session or the user no longer exists
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
