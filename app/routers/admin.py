"""Admin account management endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.dependencies import get_context, get_current_principal
from app.models.account import AccountType
from app.schemas.account import AdminListItem, InviteAdminRequest
from app.schemas.auth import SetupTokenResponse
from app.services.authorization import Principal, require_admin
from app.services.invitation import invite_status

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


@router.post("/invite", response_model=SetupTokenResponse, status_code=201)
def invite_admin(
    body: InviteAdminRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> SetupTokenResponse:
    """Invite another admin. The setup link is mailed and also returned."""
    require_admin(principal)
    result = ctx.invitations.invite(db, AccountType.ADMIN, body.display_name, body.email)
    return SetupTokenResponse(setup_token=result.setup_token)


@router.get("/list", response_model=list[AdminListItem])
def list_admins(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> list[AdminListItem]:
    require_admin(principal)
    return [
        AdminListItem(
            account_id=account.id,
            display_name=account.display_name,
            email=account.email,
            invite_status=invite_status(account),
            created_at=account.created_at,
        )
        for account in ctx.credentials.list_by_type(db, AccountType.ADMIN)
    ]
