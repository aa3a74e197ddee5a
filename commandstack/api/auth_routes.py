"""
Authentication API routes for Google OAuth and the session handoff.

Flow:
1. /api/auth/google/login?source=web|app - store source and CSRF state, redirect to Google
2. /api/auth/google/callback - exchange code, upsert user, sign in, go to /success
3. /api/auth/success - issue a one-time token and hand it to the client
   (web: URL fragment on the frontend, app: custom URI scheme page)
4. /api/auth/exchange - client trades the token for its own session
"""

import html
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from commandstack.api.dependencies import get_optional_user
from commandstack.api.models import (
    AuthStatusResponse,
    TokenExchangeRequest,
    UserResponse,
)
from commandstack.auth import (
    exchange_code_for_tokens,
    get_authorization_url,
    get_google_user_info,
    get_session_principal,
    get_token_store,
    login_session,
    logout_session,
    principal_for,
    process_oauth_login,
)
from commandstack.auth.session import (
    SESSION_OAUTH_SOURCE_KEY,
    SESSION_OAUTH_STATE_KEY,
    SOURCE_WEB,
)
from commandstack.config import get_settings
from commandstack.database import get_db
from commandstack.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

SUCCESS_PATH = "/api/auth/success"
FAILURE_PATH = "/api/auth/failure"
LOGIN_PATH = "/api/auth/google/login"
LOGOUT_SUCCESS_PATH = "/api/auth/logout-success"

INVALID_TOKEN_MESSAGE = "Invalid or expired token"

DEEP_LINK_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>CommandStack - Login</title>
  <style>
    body {{
      background: #0d1117;
      color: #3fb950;
      font-family: "SF Mono", Menlo, Consolas, monospace;
      display: flex;
      flex-direction: column;
      align-items: center;
      justify-content: center;
      height: 100vh;
      margin: 0;
    }}
    .spinner {{
      width: 32px;
      height: 32px;
      border: 3px solid #30363d;
      border-top-color: #3fb950;
      border-radius: 50%;
      animation: spin 1s linear infinite;
      margin-bottom: 24px;
    }}
    @keyframes spin {{ to {{ transform: rotate(360deg); }} }}
    a {{ color: #58a6ff; }}
    .hint {{ color: #8b949e; margin-top: 16px; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="spinner" id="spinner"></div>
  <div id="status">$ AUTHENTICATING...</div>
  <div class="hint">
    If the app does not open, <a href="{link}" id="fallback">click here</a>.
  </div>
  <script>
    window.location.href = "{link}";
    setTimeout(function () {{
      document.getElementById("status").textContent = "$ APP OPENED";
      document.getElementById("spinner").style.display = "none";
    }}, 2000);
  </script>
</body>
</html>
"""


def _deep_link_page(link: str) -> str:
    return DEEP_LINK_PAGE.format(link=html.escape(link, quote=True))


def _failure_redirect() -> RedirectResponse:
    return RedirectResponse(FAILURE_PATH, status_code=302)


@router.get("/google/login")
def google_login(
    request: Request,
    source: str = Query(SOURCE_WEB, description="web (SPA) or app (desktop deep link)"),
) -> RedirectResponse:
    """
    Start the Google OAuth flow.

    The source and a CSRF state token are kept in the signed session
    cookie until the callback.
    """
    if not get_settings().uses_google_oauth:
        raise HTTPException(status_code=503, detail="Google OAuth is not configured")

    state = secrets.token_urlsafe(32)
    request.session[SESSION_OAUTH_STATE_KEY] = state
    request.session[SESSION_OAUTH_SOURCE_KEY] = source

    logger.info(f"Starting Google login (source={source})")
    return RedirectResponse(get_authorization_url(state), status_code=302)


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="State token for CSRF protection"),
    error: Optional[str] = Query(None, description="Error from Google OAuth"),
    db: Session = Depends(get_db),
) -> RedirectResponse:
    """
    Handle the Google OAuth callback.

    On success the user is upserted, signed in on this session and sent
    to the handoff endpoint. Any failure lands on the failure endpoint.
    """
    expected_state = request.session.pop(SESSION_OAUTH_STATE_KEY, None)

    if error:
        logger.warning(f"OAuth error: {error}")
        return _failure_redirect()

    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Invalid OAuth state token")
        return _failure_redirect()

    try:
        tokens = exchange_code_for_tokens(code)
        user_info = get_google_user_info(tokens.access_token)
        user = process_oauth_login(db, tokens, user_info)
    except Exception as e:
        db.rollback()
        logger.error(f"OAuth callback failed: {e}")
        return _failure_redirect()

    login_session(request, principal_for(user))
    logger.info(f"Signed in user {user.id} ({user.email})")
    return RedirectResponse(SUCCESS_PATH, status_code=302)


@router.get("/google/url")
def google_login_url() -> dict:
    """Relative URL that starts the login flow."""
    return {"url": LOGIN_PATH}


@router.get("/success", response_model=None)
def auth_success(request: Request):
    """
    Hand the signed-in session to the client that started the login.

    Issues a one-time token and either redirects the web client with the
    token in the URL fragment or serves a page that opens the desktop
    app through its URI scheme.
    """
    principal = get_session_principal(request)
    if principal is None:
        logger.warning("Handoff requested without a signed-in session")
        return _failure_redirect()

    settings = get_settings()
    token = get_token_store().issue(principal)
    source = request.session.pop(SESSION_OAUTH_SOURCE_KEY, SOURCE_WEB)

    if source == SOURCE_WEB:
        return RedirectResponse(
            f"{settings.frontend_url}#/auth/callback?token={token}",
            status_code=302,
        )

    logger.info(f"Handing session to {source} client via deep link")
    return HTMLResponse(_deep_link_page(f"{settings.deep_link_scheme}://auth-success?token={token}"))


@router.get("/failure")
def auth_failure() -> RedirectResponse:
    return RedirectResponse(f"{get_settings().frontend_url}?login=failure", status_code=302)


@router.post("/exchange")
def exchange_token(request: Request, body: TokenExchangeRequest):
    """
    Trade a one-time token for a session on this client.

    Returns:
        {"status": "success"}, or 401 if the token is unknown, used or expired
    """
    principal = get_token_store().redeem(body.token)
    if principal is None:
        logger.warning("Rejected one-time token exchange")
        return JSONResponse(status_code=401, content={"error": INVALID_TOKEN_MESSAGE})

    login_session(request, principal)
    logger.info(f"Exchanged one-time token for user {principal.user_id}")
    return {"status": "success"}


@router.get("/me", response_model=Optional[UserResponse])
def current_user(user: Optional[User] = Depends(get_optional_user)):
    """Signed-in user, or null."""
    if user is None:
        return None
    return UserResponse.model_validate(user)


@router.get("/status", response_model=AuthStatusResponse)
def auth_status(user: Optional[User] = Depends(get_optional_user)) -> AuthStatusResponse:
    if user is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, user=UserResponse.model_validate(user))


@router.api_route("/logout", methods=["GET", "POST"])
def logout(request: Request) -> RedirectResponse:
    """Clear the session."""
    logout_session(request)
    return RedirectResponse(LOGOUT_SUCCESS_PATH, status_code=303)


@router.get("/logout-success")
def logout_success() -> dict:
    return {"message": "Logged out successfully"}
