"""Outbound account notifications.

Mail transport lives outside this service; anything implementing Notifier can
be plugged into the application context. LogNotifier is the default and
writes the links to the log so an operator can forward them by hand.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from app.models.account import AccountType

logger = logging.getLogger("campus_events")


class Notifier(Protocol):
    def send_invitation(self, email: str, display_name: str, account_type: AccountType, setup_token: str) -> None: ...

    def send_welcome(self, email: str, display_name: str, account_type: AccountType) -> None: ...

    def send_password_reset(self, email: str, display_name: str, reset_token: str) -> None: ...


def link_with_token(base_url: str, token: str) -> str:
    """Append ``token=...`` to a base URL that may already carry a query string."""
    trimmed = base_url.rstrip("?")
    separator = "&" if "?" in trimmed else "?"
    return f"{trimmed}{separator}token={token}"


class LogNotifier:
    """Notifier that logs registration and reset links instead of mailing them."""

    def __init__(self, registration_base_url: str, reset_base_url: str) -> None:
        self.registration_base_url = registration_base_url
        self.reset_base_url = reset_base_url

    def send_invitation(self, email: str, display_name: str, account_type: AccountType, setup_token: str) -> None:
        logger.warning(
            "INVITATION (%s) for %s <%s>: %s",
            account_type.value,
            display_name,
            email,
            link_with_token(self.registration_base_url, setup_token),
        )

    def send_welcome(self, email: str, display_name: str, account_type: AccountType) -> None:
        logger.info("Welcome notification for %s <%s> (%s)", display_name, email, account_type.value)

    def send_password_reset(self, email: str, display_name: str, reset_token: str) -> None:
        logger.warning(
            "PASSWORD RESET for %s <%s>: %s",
            display_name,
            email,
            link_with_token(self.reset_base_url, reset_token),
        )


def deliver(description: str, send: Callable[..., None], *args) -> bool:
    """Run a notifier call; a delivery failure is logged and never raised."""
    try:
        send(*args)
    except Exception:
        logger.exception("Failed to send %s; the operation itself succeeded", description)
        return False
    return True
