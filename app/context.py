"""Application context: every collaborator a request handler needs, wired once.

The context is built at startup, stored on ``app.state.context`` and reached
through the ``get_context`` dependency. Tests build their own with an
in-memory database and cheap hashing parameters.
"""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session, sessionmaker

from app.config import Settings
from app.database import build_engine, build_session_factory
from app.services.audit import AuditTrailRecorder
from app.services.auth import AuthService
from app.services.credentials import CredentialStore
from app.services.events import EventService
from app.services.invitation import InvitationService
from app.services.notifications import LogNotifier, Notifier
from app.services.organizers import OrganizerService
from app.services.password_reset import PasswordResetService
from app.services.security import PasswordHashing
from app.services.sessions import SessionManager


@dataclass
class AppContext:
    settings: Settings
    session_factory: sessionmaker[Session]
    notifier: Notifier
    credentials: CredentialStore
    sessions: SessionManager
    invitations: InvitationService
    password_resets: PasswordResetService
    auth: AuthService
    audit: AuditTrailRecorder
    events: EventService
    organizers: OrganizerService

    @classmethod
    def build(
        cls,
        settings: Settings,
        session_factory: sessionmaker[Session] | None = None,
        notifier: Notifier | None = None,
    ) -> "AppContext":
        if session_factory is None:
            session_factory = build_session_factory(build_engine(settings))
        if notifier is None:
            notifier = LogNotifier(settings.REGISTRATION_BASE_URL, settings.PASSWORD_RESET_BASE_URL)

        hashing = PasswordHashing(
            time_cost=settings.ARGON2_TIME_COST,
            memory_cost=settings.ARGON2_MEMORY_COST,
            parallelism=settings.ARGON2_PARALLELISM,
        )
        credentials = CredentialStore()
        sessions = SessionManager(ttl=timedelta(hours=settings.SESSION_TTL_HOURS))
        audit = AuditTrailRecorder()
        policy = {
            "min_password_length": settings.PASSWORD_MIN_LENGTH,
            "min_entropy_bits": settings.PASSWORD_MIN_ENTROPY_BITS,
        }

        return cls(
            settings=settings,
            session_factory=session_factory,
            notifier=notifier,
            credentials=credentials,
            sessions=sessions,
            invitations=InvitationService(
                credentials,
                sessions,
                hashing,
                notifier,
                token_ttl=timedelta(days=settings.SETUP_TOKEN_TTL_DAYS),
                **policy,
            ),
            password_resets=PasswordResetService(
                credentials,
                sessions,
                hashing,
                notifier,
                token_ttl=timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
                **policy,
            ),
            auth=AuthService(credentials, sessions, hashing, **policy),
            audit=audit,
            events=EventService(audit),
            organizers=OrganizerService(credentials, sessions, audit),
        )
