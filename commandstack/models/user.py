"""
User account linked to a Google identity.

Stores the Google OAuth tokens used for Calendar access. Tokens are
overwritten on every login and on every refresh.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from commandstack.models.base import BaseModel
from commandstack.time_utils import utcnow


class User(BaseModel):
    """
    Account created on first Google login.

    Attributes:
        google_id: Google subject identifier ("sub" claim)
        email: Email reported by Google
        name: Display name
        picture_url: Avatar URL
        access_token: Current Google access token (secret)
        refresh_token: Google refresh token (secret)
        token_expires_at: When the access token expires
    """

    __tablename__ = "users"

    google_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        doc="Google subject identifier"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="User's email from Google"
    )

    name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    picture_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )

    access_token: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="OAuth access token"
    )

    refresh_token: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="OAuth refresh token (for obtaining new access tokens)"
    )

    token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True,
        doc="When the access token expires"
    )

    def update_tokens(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str],
        expires_at: Optional[datetime],
    ) -> None:
        """Replace the stored OAuth tokens."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.token_expires_at = expires_at
        self.touch()

    @property
    def is_token_expired(self) -> bool:
        """Check if the access token is past its expiry."""
        if self.token_expires_at is None:
            return False
        return utcnow() > self.token_expires_at

    def needs_refresh(self, margin: timedelta = timedelta(minutes=5)) -> bool:
        """Check if the token is expired or expires within ``margin``."""
        if self.token_expires_at is None:
            return False
        return self.token_expires_at < utcnow() + margin

    @property
    def has_calendar_access(self) -> bool:
        return self.access_token is not None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
