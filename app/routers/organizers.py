"""Organizer management endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.dependencies import get_context, get_current_principal
from app.models.account import AccountType, Organizer
from app.schemas.account import (
    CreateOrganizerRequest,
    OrganizerAdminItem,
    OrganizerResponse,
    UpdateOrganizerRequest,
)
from app.schemas.auth import SetupTokenResponse
from app.services.authorization import Principal, ensure_self_or_admin, require_admin
from app.services.invitation import invite_status

router = APIRouter(prefix="/api/v1/organizers", tags=["Organizers"])


@router.get("", response_model=list[OrganizerResponse])
def list_organizers(db: Session = Depends(get_db)) -> list[Organizer]:
    """Public list of organizers."""
    return list(db.execute(select(Organizer).order_by(Organizer.name)).scalars().all())


@router.post("", response_model=SetupTokenResponse, status_code=201)
def create_organizer(
    body: CreateOrganizerRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> SetupTokenResponse:
    """Create an organizer together with its pending account and return the setup token."""
    require_admin(principal)
    result = ctx.invitations.invite(
        db,
        AccountType.ORGANIZER,
        body.name,
        body.email,
        organizer_name=body.name,
        newsletter=body.newsletter,
    )
    return SetupTokenResponse(setup_token=result.setup_token)


@router.get("/admin", response_model=list[OrganizerAdminItem])
def list_organizers_admin(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> list[OrganizerAdminItem]:
    """Organizers with the setup state of their accounts."""
    require_admin(principal)
    accounts = {account.organizer_id: account for account in ctx.credentials.list_by_type(db, AccountType.ORGANIZER)}
    items = []
    for organizer in db.execute(select(Organizer).order_by(Organizer.name)).scalars():
        account = accounts.get(organizer.id)
        items.append(
            OrganizerAdminItem(
                id=organizer.id,
                name=organizer.name,
                newsletter=organizer.newsletter,
                account_id=account.id if account else None,
                email=account.email if account else None,
                invite_status=invite_status(account),
                created_at=organizer.created_at,
            )
        )
    return items


@router.post("/{organizer_id}/setup-token", response_model=SetupTokenResponse)
def regenerate_setup_token(
    organizer_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> SetupTokenResponse:
    """Issue a fresh setup token for an organizer account that is not set up yet."""
    ensure_self_or_admin(principal, organizer_id=organizer_id)
    ctx.organizers.get_organizer(db, organizer_id)
    return SetupTokenResponse(setup_token=ctx.invitations.regenerate_setup_token(db, organizer_id))


@router.get("/{organizer_id}", response_model=OrganizerResponse)
def get_organizer(
    organizer_id: int,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Organizer:
    return ctx.organizers.get_organizer(db, organizer_id)


@router.put("/{organizer_id}", response_model=OrganizerResponse)
def update_organizer(
    organizer_id: int,
    body: UpdateOrganizerRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Organizer:
    """Edit an organizer profile. Organizers may edit only their own."""
    return ctx.organizers.update_organizer(db, principal, organizer_id, body)


@router.delete("/{organizer_id}", status_code=204)
def delete_organizer(
    organizer_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """Remove an organizer with its events and account."""
    ctx.organizers.delete_organizer(db, principal, organizer_id)
    return Response(status_code=204)
