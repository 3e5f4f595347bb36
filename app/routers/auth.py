"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import get_db
from app.dependencies import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    get_context,
    get_current_principal,
    set_session_cookie,
)
from app.rate_limit import limiter
from app.schemas.auth import (
    AuthUserResponse,
    ChangePasswordRequest,
    InitAccountRequest,
    LoginRequest,
    RequestPasswordResetRequest,
    ResetPasswordRequest,
    SetupTokenInfoResponse,
    SetupTokenLookupRequest,
)
from app.services.auth import principal_for
from app.services.authorization import Principal

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/login", response_model=AuthUserResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> AuthUserResponse:
    """Check e-mail and password and open a session."""
    result = ctx.auth.login(db, body.email, body.password)
    set_session_cookie(response, ctx, str(result.session_id))
    return AuthUserResponse.model_validate(ctx.auth.describe(db, result.principal))


@router.post("/register-info", response_model=SetupTokenInfoResponse)
@limiter.limit("10/minute")
def register_info(
    request: Request,
    body: SetupTokenLookupRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> SetupTokenInfoResponse:
    """Name and type of the account a setup token belongs to."""
    pending = ctx.invitations.lookup_pending(db, body.token)
    return SetupTokenInfoResponse(account_name=pending.display_name, account_type=pending.account_type)


@router.post("/init", response_model=AuthUserResponse)
@limiter.limit("5/minute")
def init_account(
    request: Request,
    response: Response,
    body: InitAccountRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> AuthUserResponse:
    """Redeem a setup token: choose e-mail and password, and sign in."""
    account, session_id = ctx.invitations.complete(db, body.token, body.email, body.password)
    set_session_cookie(response, ctx, str(session_id))
    return AuthUserResponse.model_validate(ctx.auth.describe(db, principal_for(account)))


@router.post("/logout", status_code=204)
def logout(
    request: Request,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """End the current session. Works without a valid session too."""
    ctx.auth.logout(db, request.cookies.get(SESSION_COOKIE_NAME))
    response = Response(status_code=204)
    clear_session_cookie(response, ctx)
    return response


@router.get("/me", response_model=AuthUserResponse)
def me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> AuthUserResponse:
    return AuthUserResponse.model_validate(ctx.auth.describe(db, principal))


@router.post("/change-password", status_code=204)
def change_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """Replace the password and sign the account out everywhere, this browser included."""
    ctx.auth.change_password(db, principal, body.current_password, body.new_password)
    response = Response(status_code=204)
    clear_session_cookie(response, ctx)
    return response


@router.post("/request-password-reset", status_code=204)
@limiter.limit("3/minute")
def request_password_reset(
    request: Request,
    body: RequestPasswordResetRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """Mail a reset link if the address belongs to an active account.

    The response is the same whether or not an account was found.
    """
    ctx.password_resets.request(db, body.email)
    return Response(status_code=204)


@router.post("/reset-password", status_code=204)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """Set a new password with a reset token; every existing session is revoked."""
    ctx.password_resets.confirm(db, body.token, body.new_password)
    response = Response(status_code=204)
    clear_session_cookie(response, ctx)
    return response
