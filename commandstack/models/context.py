"""
Context model: a named bucket that groups commands and tasks.
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from commandstack.models.base import BaseModel


class Context(BaseModel):
    """
    User-defined category for commands and tasks.

    The ``google`` namespace is reserved for tasks pulled from Google
    Calendar and is created on first sync.
    """

    __tablename__ = "contexts"

    NAMESPACE_GOOGLE = "google"
    GOOGLE_DESCRIPTION = "Synced from Google Calendar"
    GOOGLE_COLOR = "#4285F4"

    namespace: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Unique context name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    color: Mapped[Optional[str]] = mapped_column(
        String(7),
        nullable=True,
        doc="Display color (#RRGGBB)"
    )

    def update(
        self,
        namespace: str,
        description: Optional[str],
        color: Optional[str] = None,
    ) -> None:
        self.namespace = namespace
        self.description = description
        self.color = color
        self.touch()

    def __repr__(self) -> str:
        return f"<Context(id={self.id}, namespace={self.namespace})>"
