"""
Google OAuth 2.0 implementation for sign-in and calendar access.

Implements the OAuth 2.0 authorization code flow:
1. Generate authorization URL → user redirected to Google
2. User grants permission → Google redirects back with code
3. Exchange code for tokens → access_token + refresh_token
4. Fetch the OpenID profile (sub, email, name, picture)
5. Refresh access_token when expired using refresh_token

Calls are synchronous; they run inline with the request that triggers them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

import httpx

from commandstack.config import get_settings
from commandstack.time_utils import utcnow

logger = logging.getLogger(__name__)

# Google OAuth endpoints
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

OAUTH_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/calendar",
]


@dataclass
class OAuthTokens:
    """OAuth token response from Google."""

    access_token: str
    refresh_token: Optional[str]
    expires_in: int
    token_type: str
    scope: str

    @property
    def expiry(self) -> datetime:
        """Calculate token expiry time."""
        return utcnow() + timedelta(seconds=self.expires_in)


@dataclass
class GoogleUserInfo:
    """OpenID profile of the signed-in Google account."""

    sub: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class GoogleOAuthFlow:
    """
    Manages the Google OAuth 2.0 flow.

    Usage:
        flow = GoogleOAuthFlow()

        # Step 1: Get authorization URL
        auth_url = flow.get_authorization_url(state="random_state")

        # Step 2: Handle callback with authorization code
        tokens = flow.exchange_code(code)

        # Step 3: Get user info
        user_info = flow.get_user_info(tokens.access_token)

        # Step 4: Refresh token when expired
        new_tokens = flow.refresh_token(tokens.refresh_token)
    """

    def __init__(self, http_client: Optional[httpx.Client] = None):
        settings = get_settings()
        self.client_id = settings.google_oauth_client_id
        self.client_secret = settings.google_oauth_client_secret
        self.redirect_uri = settings.google_oauth_redirect_uri
        self._http_client = http_client

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_OAUTH_CLIENT_ID and "
                "GOOGLE_OAUTH_CLIENT_SECRET in environment."
            )

    def _post_form(self, url: str, data: dict) -> dict:
        if self._http_client is not None:
            response = self._http_client.post(url, data=data)
        else:
            with httpx.Client() as client:
                response = client.post(url, data=data)
        response.raise_for_status()
        return response.json()

    def get_authorization_url(self, state: str) -> str:
        """
        Generate the Google OAuth authorization URL.

        Args:
            state: Random string to prevent CSRF attacks

        Returns:
            URL to redirect user to for authorization
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(OAUTH_SCOPES),
            "access_type": "offline",  # Get refresh token
            "prompt": "consent",  # Always show consent screen (ensures refresh token)
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> OAuthTokens:
        """
        Exchange authorization code for access and refresh tokens.

        Raises:
            httpx.HTTPStatusError: If token exchange fails
        """
        token_data = self._post_form(
            GOOGLE_TOKEN_URL,
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            },
        )

        logger.info("Successfully exchanged authorization code for tokens")

        return OAuthTokens(
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token"),
            expires_in=int(token_data["expires_in"]),
            token_type=token_data.get("token_type", "Bearer"),
            scope=token_data.get("scope", ""),
        )

    def refresh_token(self, refresh_token: str) -> OAuthTokens:
        """
        Obtain a new access token with ``grant_type=refresh_token``.

        ``refresh_token`` on the result is only set when Google rotated it;
        Google usually omits it.

        Raises:
            httpx.HTTPError: If the request fails or returns non-2xx
            KeyError: If the response lacks access_token or expires_in
        """
        token_data = self._post_form(
            GOOGLE_TOKEN_URL,
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )

        return OAuthTokens(
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token"),
            expires_in=int(token_data["expires_in"]),
            token_type=token_data.get("token_type", "Bearer"),
            scope=token_data.get("scope", ""),
        )

    def get_user_info(self, access_token: str) -> GoogleUserInfo:
        """
        Get the OpenID profile using an access token.

        Raises:
            httpx.HTTPStatusError: If request fails
        """
        headers = {"Authorization": f"Bearer {access_token}"}

        if self._http_client is not None:
            response = self._http_client.get(GOOGLE_USERINFO_URL, headers=headers)
        else:
            with httpx.Client() as client:
                response = client.get(GOOGLE_USERINFO_URL, headers=headers)
        response.raise_for_status()
        user_data = response.json()

        return GoogleUserInfo(
            sub=user_data["sub"],
            email=user_data["email"],
            name=user_data.get("name"),
            picture=user_data.get("picture"),
        )


# Module-level convenience functions
_flow: Optional[GoogleOAuthFlow] = None


def _get_flow() -> GoogleOAuthFlow:
    """Get or create the OAuth flow singleton."""
    global _flow
    if _flow is None:
        _flow = GoogleOAuthFlow()
    return _flow


def get_authorization_url(state: str) -> str:
    """Generate authorization URL. See GoogleOAuthFlow.get_authorization_url."""
    return _get_flow().get_authorization_url(state)


def exchange_code_for_tokens(code: str) -> OAuthTokens:
    """Exchange code for tokens. See GoogleOAuthFlow.exchange_code."""
    return _get_flow().exchange_code(code)


def refresh_access_token(refresh_token: str) -> OAuthTokens:
    """Refresh access token. See GoogleOAuthFlow.refresh_token."""
    return _get_flow().refresh_token(refresh_token)


def get_google_user_info(access_token: str) -> GoogleUserInfo:
    """Get user info. See GoogleOAuthFlow.get_user_info."""
    return _get_flow().get_user_info(access_token)
