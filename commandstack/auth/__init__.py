"""
Authentication module for CommandStack.

Provides Google OAuth 2.0 sign-in, the one-time-token session handoff,
and refresh of expiring Google access tokens.
"""

from commandstack.auth.google_oauth import (
    GoogleOAuthFlow,
    OAuthTokens,
    GoogleUserInfo,
    get_authorization_url,
    exchange_code_for_tokens,
    refresh_access_token,
    get_google_user_info,
)
from commandstack.auth.one_time_tokens import OneTimeTokenStore, get_token_store
from commandstack.auth.session import (
    AuthenticatedPrincipal,
    get_session_principal,
    login_session,
    logout_session,
)
from commandstack.auth.token_refresh import refresh_if_needed, refresh_user_token
from commandstack.auth.users import (
    get_user_by_google_id,
    get_user_for_principal,
    principal_for,
    process_oauth_login,
)

__all__ = [
    # OAuth flow
    "GoogleOAuthFlow",
    "OAuthTokens",
    "GoogleUserInfo",
    "get_authorization_url",
    "exchange_code_for_tokens",
    "refresh_access_token",
    "get_google_user_info",
    # Session handoff
    "OneTimeTokenStore",
    "get_token_store",
    "AuthenticatedPrincipal",
    "get_session_principal",
    "login_session",
    "logout_session",
    # Token refresh
    "refresh_if_needed",
    "refresh_user_token",
    # Users
    "get_user_by_google_id",
    "get_user_for_principal",
    "principal_for",
    "process_oauth_login",
]
