"""
Admin authentication: one shared credential pair and a signed cookie.

The cookie holds the admin username signed with a timestamp; it expires
after AUTH_COOKIE_MAX_AGE_SECONDS. There is no server-side session state.
"""
import logging
import secrets
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, Response
from itsdangerous import BadSignature, SignatureExpired, TimestampSigner

from portfolio.config import Settings, get_settings


logger = logging.getLogger(__name__)


def _signer(settings: Settings) -> Optional[TimestampSigner]:
    secret = settings.cookie_secret
    if not secret:
        return None
    return TimestampSigner(secret, salt="admin-auth")


def check_credentials(settings: Settings, username: str, password: str) -> bool:
    """
    Compare submitted credentials with the configured admin pair.

    Raises:
        HTTPException 500 if no admin credentials are configured
    """
    if not settings.admin_configured:
        logger.error("Login attempted but ADMIN_USERNAME/ADMIN_PASSWORD are not set")
        raise HTTPException(status_code=500, detail="Admin credentials not configured")

    username_ok = secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return username_ok and password_ok


def issue_token(settings: Settings) -> str:
    return _signer(settings).sign(settings.ADMIN_USERNAME).decode()


def verify_token(settings: Settings, token: Optional[str]) -> bool:
    """True if the cookie value is a valid, unexpired admin token."""
    signer = _signer(settings)
    if not token or signer is None or not settings.admin_configured:
        return False
    try:
        username = signer.unsign(
            token, max_age=settings.AUTH_COOKIE_MAX_AGE_SECONDS
        ).decode()
    except SignatureExpired:
        logger.info("Expired admin cookie rejected")
        return False
    except BadSignature:
        return False
    return secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())


def set_auth_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        issue_token(settings),
        max_age=settings.AUTH_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")


def is_admin(request: Request, settings: Settings) -> bool:
    return verify_token(settings, request.cookies.get(settings.AUTH_COOKIE_NAME))


def require_admin(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> bool:
    """
    Dependency for admin-only routes.

    Usage:
        @router.post("/notes")
        def create(_: AdminDep): ...
    """
    if not is_admin(request, settings):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return True


AdminDep = Annotated[bool, Depends(require_admin)]
