from datetime import datetime, timezone

from fastapi import Response

from bom_service.app.core.settings import get_settings

settings = get_settings()


def set_session_cookie(response: Response, token: str, expires_at: datetime) -> None:
    """Attach the session token cookie, expiring together with the session."""
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        expires=expires_at,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def delete_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
