"""API routers."""

from app.routers.admin import router as admin_router
from app.routers.audit import router as audit_router
from app.routers.auth import router as auth_router
from app.routers.events import router as events_router
from app.routers.organizers import router as organizers_router

__all__ = ["auth_router", "admin_router", "organizers_router", "events_router", "audit_router"]
