"""
User persistence for the OAuth login flow.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from commandstack.auth.google_oauth import GoogleUserInfo, OAuthTokens
from commandstack.auth.session import AuthenticatedPrincipal
from commandstack.models import User

logger = logging.getLogger(__name__)


def get_user_by_google_id(db: Session, google_id: str) -> Optional[User]:
    return db.scalar(select(User).where(User.google_id == google_id))


def get_user_for_principal(
    db: Session,
    principal: Optional[AuthenticatedPrincipal],
) -> Optional[User]:
    """Load the user behind a session principal."""
    if principal is None:
        return None
    try:
        user_id = uuid.UUID(principal.user_id)
    except ValueError:
        return None
    return db.get(User, user_id)


def process_oauth_login(
    db: Session,
    tokens: OAuthTokens,
    user_info: GoogleUserInfo,
) -> User:
    """
    Create or update the user for a completed Google login.

    Profile fields and tokens are overwritten on every login. An existing
    refresh token is kept when Google does not send a new one.

    Args:
        db: Database session
        tokens: Tokens from the authorization code exchange
        user_info: OpenID profile of the account

    Returns:
        The saved User
    """
    user = get_user_by_google_id(db, user_info.sub)

    if user:
        user.email = user_info.email
        user.name = user_info.name
        user.picture_url = user_info.picture
        user.update_tokens(
            tokens.access_token,
            tokens.refresh_token or user.refresh_token,
            tokens.expiry,
        )
        logger.info(f"Updated user {user.id} from Google login")
    else:
        user = User(
            google_id=user_info.sub,
            email=user_info.email,
            name=user_info.name,
            picture_url=user_info.picture,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_expires_at=tokens.expiry,
        )
        db.add(user)
        logger.info(f"Created user for Google account {user_info.email}")

    db.commit()
    db.refresh(user)
    return user


def principal_for(user: User) -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(
        user_id=str(user.id),
        google_id=user.google_id,
        email=user.email,
    )
