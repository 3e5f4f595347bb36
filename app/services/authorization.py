"""Role and ownership checks for authenticated principals.

Admins may act on anything. Organizer accounts may act only on their own
organizer and the events it owns. Every denial is an UnauthorizedError so a
permission failure is never reported as a missing resource.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.errors import UnauthorizedError
from app.models.account import AccountType, Organizer
from app.models.event import Event


@dataclass(frozen=True)
class Principal:
    """Authenticated account resolved from a session."""

    account_id: int
    account_type: AccountType
    display_name: str
    organizer_id: int | None = None

    def __post_init__(self) -> None:
        if self.account_type == AccountType.ORGANIZER and self.organizer_id is None:
            raise ValueError("organizer principal requires an organizer_id")
        if self.account_type == AccountType.ADMIN and self.organizer_id is not None:
            raise ValueError("admin principal cannot carry an organizer_id")

    @property
    def is_admin(self) -> bool:
        return self.account_type == AccountType.ADMIN

    def owns_organizer(self, organizer_id: int) -> bool:
        return self.organizer_id is not None and self.organizer_id == organizer_id


def require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise UnauthorizedError("insufficient permissions")


def ensure_organizer_access(principal: Principal, organizer_id: int) -> None:
    """Allow admins and the organizer's own account."""
    if principal.is_admin or principal.owns_organizer(organizer_id):
        return
    raise UnauthorizedError("cannot act on another organizer")


def ensure_event_access(principal: Principal, event: Event) -> None:
    """Allow admins and the account owning the event's organizer."""
    if principal.is_admin or principal.owns_organizer(event.organizer_id):
        return
    raise UnauthorizedError("cannot modify another organizer's event")


def ensure_self_or_admin(
    principal: Principal,
    account_id: int | None = None,
    organizer_id: int | None = None,
) -> None:
    """Self-service check: the target must be the principal's own account or organizer."""
    if principal.is_admin:
        return
    if account_id is not None and account_id == principal.account_id:
        return
    if organizer_id is not None and principal.owns_organizer(organizer_id):
        return
    raise UnauthorizedError("cannot act on behalf of another account")


def scope_organizer_filter(principal: Principal, requested: int | None) -> int | None:
    """Organizer filter for listings: admins keep theirs, organizers are pinned to their own."""
    if principal.is_admin:
        return requested
    if requested is not None and requested != principal.organizer_id:
        raise UnauthorizedError("cannot view other organizers' records")
    return principal.organizer_id


def can_access_newsletter(db: Session, principal: Principal) -> bool:
    if principal.is_admin:
        return True
    organizer = db.get(Organizer, principal.organizer_id)
    return bool(organizer and organizer.newsletter)
