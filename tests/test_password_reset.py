"""Tests for the password reset flow."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.context import AppContext
from app.database import utcnow
from app.errors import UnauthorizedError, ValidationError
from app.models.account import Account, AccountType
from app.models.password_reset import PasswordResetToken
from app.services.security import hash_token

from tests.conftest import NEW_PASSWORD, STRONG_PASSWORD


def _tokens(db: Session, account_id: int) -> list[PasswordResetToken]:
    return list(
        db.execute(select(PasswordResetToken).where(PasswordResetToken.account_id == account_id)).scalars().all()
    )


class TestRequestReset:
    """Tests for issuing reset tokens."""

    def test_request_issues_token_and_mails_it(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        ctx.password_resets.request(db_session, "chess@uni.example")

        sent = notifier.resets[-1]
        assert sent["email"] == "chess@uni.example"
        [row] = _tokens(db_session, organizer.id)
        assert row.token_hash == hash_token(sent["token"])
        assert row.used_at is None
        assert row.expires_at <= utcnow() + timedelta(minutes=ctx.settings.PASSWORD_RESET_TTL_MINUTES)

    def test_new_request_replaces_unused_token(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        ctx.password_resets.request(db_session, "chess@uni.example")
        first = notifier.resets[-1]["token"]
        ctx.password_resets.request(db_session, "chess@uni.example")

        [row] = _tokens(db_session, organizer.id)
        assert row.token_hash != hash_token(first)
        with pytest.raises(ValidationError):
            ctx.password_resets.confirm(db_session, first, NEW_PASSWORD)

    def test_storage_failure_is_logged_not_raised(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        failure = OperationalError("INSERT INTO password_reset_tokens", {}, Exception("database is locked"))
        with patch.object(Session, "commit", side_effect=failure):
            ctx.password_resets.request(db_session, "chess@uni.example")

        assert notifier.resets == []
        assert _tokens(db_session, organizer.id) == []

    def test_lost_race_counts_as_issued(self, ctx: AppContext, db_session: Session, organizer: Account, notifier):
        """A concurrent request that stored its token first wins; this one sends nothing."""
        duplicate = IntegrityError("INSERT INTO password_reset_tokens", {}, Exception("UNIQUE constraint failed"))
        with patch.object(Session, "commit", side_effect=duplicate):
            ctx.password_resets.request(db_session, "chess@uni.example")

        assert notifier.resets == []

    def test_second_unused_token_for_account_is_refused(
        self, ctx: AppContext, db_session: Session, organizer: Account
    ):
        ctx.password_resets.request(db_session, "chess@uni.example")
        db_session.add(
            PasswordResetToken(
                account_id=organizer.id,
                token_hash=hash_token("sneaked-in"),
                expires_at=utcnow() + timedelta(minutes=5),
            )
        )
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
        assert len(_tokens(db_session, organizer.id)) == 1

    def test_used_tokens_do_not_block_new_ones(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        ctx.password_resets.request(db_session, "chess@uni.example")
        ctx.password_resets.confirm(db_session, notifier.resets[-1]["token"], NEW_PASSWORD)
        ctx.password_resets.request(db_session, "chess@uni.example")

        rows = _tokens(db_session, organizer.id)
        assert len(rows) == 2
        assert [row.used_at is None for row in rows].count(True) == 1

    def test_unknown_email_is_a_no_op(self, ctx: AppContext, db_session: Session, notifier):
        ctx.password_resets.request(db_session, "nobody@uni.example")
        assert notifier.resets == []
        assert db_session.execute(select(PasswordResetToken)).first() is None

    def test_pending_account_gets_no_token(self, ctx: AppContext, db_session: Session, notifier):
        ctx.invitations.invite(db_session, AccountType.ORGANIZER, "Debate Club", "club@uni.example")
        ctx.password_resets.request(db_session, "club@uni.example")
        assert notifier.resets == []


class TestConfirmReset:
    """Tests for redeeming reset tokens."""

    def test_confirm_sets_password_and_revokes_sessions(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        session_id = ctx.sessions.create(db_session, organizer.id)
        db_session.commit()
        ctx.password_resets.request(db_session, "chess@uni.example")

        account_id = ctx.password_resets.confirm(db_session, notifier.resets[-1]["token"], NEW_PASSWORD)

        assert account_id == organizer.id
        assert ctx.auth.authenticate(db_session, "chess@uni.example", NEW_PASSWORD).id == organizer.id
        with pytest.raises(UnauthorizedError):
            ctx.auth.authenticate(db_session, "chess@uni.example", STRONG_PASSWORD)
        with pytest.raises(UnauthorizedError):
            ctx.sessions.resolve(db_session, str(session_id))

    def test_token_is_single_use(self, ctx: AppContext, db_session: Session, organizer: Account, notifier):
        ctx.password_resets.request(db_session, "chess@uni.example")
        token = notifier.resets[-1]["token"]
        ctx.password_resets.confirm(db_session, token, NEW_PASSWORD)

        with pytest.raises(ValidationError) as exc:
            ctx.password_resets.confirm(db_session, token, "Another-Fresh-Passphrase-31")
        assert exc.value.message == "invalid or expired reset token"

    def test_expired_token_rejected(self, ctx: AppContext, db_session: Session, organizer: Account, notifier):
        ctx.password_resets.request(db_session, "chess@uni.example")
        [row] = _tokens(db_session, organizer.id)
        row.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

        with pytest.raises(ValidationError):
            ctx.password_resets.confirm(db_session, notifier.resets[-1]["token"], NEW_PASSWORD)

    def test_weak_password_keeps_token_usable(
        self, ctx: AppContext, db_session: Session, organizer: Account, notifier
    ):
        ctx.password_resets.request(db_session, "chess@uni.example")
        token = notifier.resets[-1]["token"]

        with pytest.raises(ValidationError) as exc:
            ctx.password_resets.confirm(db_session, token, "weak")
        assert "at least 20 characters" in exc.value.message
        ctx.password_resets.confirm(db_session, token, NEW_PASSWORD)

    def test_purge_expired_tokens(self, ctx: AppContext, db_session: Session, organizer: Account):
        ctx.password_resets.request(db_session, "chess@uni.example")
        [row] = _tokens(db_session, organizer.id)
        row.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert ctx.password_resets.purge_expired(db_session) == 1
        db_session.commit()
        assert _tokens(db_session, organizer.id) == []
