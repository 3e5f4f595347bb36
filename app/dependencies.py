"""Request-scoped dependencies for FastAPI routes."""

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.services.authorization import Principal

SESSION_COOKIE_NAME = "session_id"


def get_context(request: Request) -> AppContext:
    """The application context built at startup."""
    return request.app.state.context


def get_current_principal(
    request: Request,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Principal:
    """Resolve the session cookie to a principal. Raises 401 if missing, malformed or expired."""
    return ctx.sessions.resolve(db, request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, ctx: AppContext, session_id: str) -> None:
    """Set the session cookie for a freshly created session."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        path="/",
        httponly=True,
        samesite="lax",
        secure=ctx.settings.SESSION_COOKIE_SECURE,
        max_age=ctx.sessions.max_age_seconds,
    )


def clear_session_cookie(response: Response, ctx: AppContext) -> None:
    """Expire the session cookie in the browser."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=ctx.settings.SESSION_COOKIE_SECURE,
    )
