"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.context import AppContext
from app.database import Base, get_db
from app.models.account import Account, AccountType, Organizer  # noqa: F401
from app.models.audit_log import AuditLogEntry  # noqa: F401
from app.models.event import Event  # noqa: F401
from app.models.password_reset import PasswordResetToken  # noqa: F401
from app.models.session import AuthSession  # noqa: F401

STRONG_PASSWORD = "Correct-Horse-Battery-Staple-42"
OTHER_PASSWORD = "Glacier-Tangerine-Obelisk-77!"
NEW_PASSWORD = "Quiet-Lantern-Nebula-Orchid-5"


class RecordingNotifier:
    """Notifier that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.invitations: list[dict] = []
        self.welcomes: list[dict] = []
        self.resets: list[dict] = []

    def send_invitation(self, email, display_name, account_type, setup_token) -> None:
        self.invitations.append(
            {"email": email, "display_name": display_name, "account_type": account_type, "token": setup_token}
        )

    def send_welcome(self, email, display_name, account_type) -> None:
        self.welcomes.append({"email": email, "display_name": display_name, "account_type": account_type})

    def send_password_reset(self, email, display_name, reset_token) -> None:
        self.resets.append({"email": email, "display_name": display_name, "token": reset_token})


@pytest.fixture(name="session_factory")
def session_factory_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(name="db_session")
def db_session_fixture(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(name="notifier")
def notifier_fixture() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(name="ctx")
def ctx_fixture(session_factory, notifier) -> AppContext:
    """Application context with cheap hashing and cookies usable over plain HTTP."""
    settings = Settings()
    settings.SESSION_COOKIE_SECURE = False
    settings.ARGON2_TIME_COST = 1
    settings.ARGON2_MEMORY_COST = 8
    settings.ARGON2_PARALLELISM = 1
    settings.BOOTSTRAP_ADMIN_EMAIL = ""
    return AppContext.build(settings, session_factory=session_factory, notifier=notifier)


@pytest.fixture(name="client")
def client_fixture(ctx: AppContext, db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import create_app

    app = create_app(ctx)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


def activate_account(
    ctx: AppContext,
    db: Session,
    account_type: AccountType,
    name: str,
    email: str,
    password: str = STRONG_PASSWORD,
) -> Account:
    """Invite an account and complete its setup, as the invitee would."""
    result = ctx.invitations.invite(db, account_type, name, email)
    account, _ = ctx.invitations.complete(db, result.setup_token, email, password)
    return account


@pytest.fixture(name="admin")
def admin_fixture(ctx: AppContext, db_session: Session) -> Account:
    return activate_account(ctx, db_session, AccountType.ADMIN, "Site Admin", "admin@uni.example")


@pytest.fixture(name="organizer")
def organizer_fixture(ctx: AppContext, db_session: Session) -> Account:
    return activate_account(ctx, db_session, AccountType.ORGANIZER, "Chess Society", "chess@uni.example")


@pytest.fixture(name="other_organizer")
def other_organizer_fixture(ctx: AppContext, db_session: Session) -> Account:
    return activate_account(ctx, db_session, AccountType.ORGANIZER, "Film Club", "film@uni.example")


@pytest.fixture(name="sign_in")
def sign_in_fixture(client: TestClient, ctx: AppContext, db_session: Session):
    """Return a function that opens a session for an account and puts it in the client's cookie jar."""

    def _sign_in(account: Account) -> str:
        session_id = ctx.sessions.create(db_session, account.id)
        db_session.commit()
        client.cookies.clear()
        client.cookies.set("session_id", str(session_id))
        return str(session_id)

    return _sign_in
