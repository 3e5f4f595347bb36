"""Event API endpoints. Every mutation is written to the audit log."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.dependencies import get_context, get_current_principal
from app.models.event import Event
from app.schemas.event import EventCreateRequest, EventResponse, EventUpdateRequest
from app.services.authorization import Principal

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


@router.post("", response_model=EventResponse, status_code=201)
def create_event(
    body: EventCreateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Event:
    return ctx.events.create_event(db, principal, body)


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Event:
    return ctx.events.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: int,
    body: EventUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Event:
    """Apply the supplied fields; omitted fields keep their values."""
    return ctx.events.update_event(db, principal, event_id, body)


@router.delete("/{event_id}", status_code=204)
def delete_event(
    event_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    ctx.events.delete_event(db, principal, event_id)
    return Response(status_code=204)
