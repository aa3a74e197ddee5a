"""
Authenticated principal and its place in the signed cookie session.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from starlette.requests import Request

SESSION_PRINCIPAL_KEY = "principal"
SESSION_OAUTH_STATE_KEY = "oauth_state"
SESSION_OAUTH_SOURCE_KEY = "oauth_source"

SOURCE_WEB = "web"


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Identity installed in the session after a successful Google login."""

    user_id: str
    google_id: str
    email: str

    @classmethod
    def from_session(cls, data: dict) -> "AuthenticatedPrincipal":
        return cls(
            user_id=data["user_id"],
            google_id=data["google_id"],
            email=data["email"],
        )


def login_session(request: Request, principal: AuthenticatedPrincipal) -> None:
    """Make ``principal`` the active session identity."""
    request.session[SESSION_PRINCIPAL_KEY] = asdict(principal)


def logout_session(request: Request) -> None:
    request.session.clear()


def get_session_principal(request: Request) -> Optional[AuthenticatedPrincipal]:
    """Return the principal stored in the session, if any."""
    data = request.session.get(SESSION_PRINCIPAL_KEY)
    if not data:
        return None
    try:
        return AuthenticatedPrincipal.from_session(data)
    except (KeyError, TypeError):
        # Cookie from an older layout; treat as signed out
        request.session.pop(SESSION_PRINCIPAL_KEY, None)
        return None
