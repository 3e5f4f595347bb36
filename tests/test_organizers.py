"""Tests for admin and organizer management endpoints."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import UnauthorizedError
from app.models.account import Account, AccountType, Organizer
from app.models.audit_log import AuditType
from app.models.event import Event
from app.models.password_reset import PasswordResetToken
from app.schemas.event import EventCreateRequest
from app.services.auth import principal_for

from tests.conftest import STRONG_PASSWORD


class TestAdminRoutes:
    """Tests for inviting and listing admins."""

    def test_invite_admin(self, client: TestClient, admin: Account, sign_in, notifier):
        sign_in(admin)
        response = client.post("/api/v1/admin/invite", json={"display_name": "Deputy", "email": "deputy@uni.example"})
        assert response.status_code == 201
        token = response.json()["setup_token"]
        assert notifier.invitations[-1]["token"] == token

        listing = client.get("/api/v1/admin/list").json()
        statuses = {item["display_name"]: item["invite_status"] for item in listing}
        assert statuses == {"Site Admin": "active", "Deputy": "pending"}

    def test_invite_duplicate_email(self, client: TestClient, admin: Account, sign_in):
        sign_in(admin)
        response = client.post("/api/v1/admin/invite", json={"display_name": "Twin", "email": "admin@uni.example"})
        assert response.status_code == 409

    def test_organizer_cannot_invite_admin(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        response = client.post("/api/v1/admin/invite", json={"display_name": "Sneaky", "email": "s@uni.example"})
        assert response.status_code == 401
        assert client.get("/api/v1/admin/list").status_code == 401


class TestOrganizerRoutes:
    """Tests for organizer listings and setup tokens."""

    def test_public_list(self, client: TestClient, organizer: Account, other_organizer: Account):
        response = client.get("/api/v1/organizers")
        assert response.status_code == 200
        assert [o["name"] for o in response.json()] == ["Chess Society", "Film Club"]

    def test_create_organizer_with_newsletter(self, client: TestClient, admin: Account, sign_in):
        sign_in(admin)
        response = client.post(
            "/api/v1/organizers",
            json={"name": "Debate Club", "email": "club@uni.example", "newsletter": True},
        )
        assert response.status_code == 201

        listing = client.get("/api/v1/organizers/admin").json()
        [club] = [item for item in listing if item["name"] == "Debate Club"]
        assert club["newsletter"] is True
        assert club["email"] == "club@uni.example"
        assert club["invite_status"] == "pending"

    @pytest.mark.parametrize("email", ["a@.", "a b@c.d", "x@y@z.com", "a@b..c"])
    def test_create_organizer_rejects_malformed_address(self, client: TestClient, admin: Account, sign_in, email: str):
        sign_in(admin)
        response = client.post("/api/v1/organizers", json={"name": "Debate Club", "email": email})
        assert response.status_code == 400
        assert client.get("/api/v1/organizers").json() == []

    def test_admin_listing_requires_admin(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        assert client.get("/api/v1/organizers/admin").status_code == 401

    def test_admin_regenerates_setup_token(self, client: TestClient, admin: Account, sign_in, ctx, db_session: Session):
        result = ctx.invitations.invite(db_session, AccountType.ORGANIZER, "Debate Club", "club@uni.example")
        sign_in(admin)

        response = client.post(f"/api/v1/organizers/{result.account.organizer_id}/setup-token")
        assert response.status_code == 200
        fresh = response.json()["setup_token"]

        client.cookies.clear()
        assert client.post("/api/v1/auth/register-info", json={"token": result.setup_token}).status_code == 400
        assert client.post("/api/v1/auth/register-info", json={"token": fresh}).status_code == 200

    def test_active_organizer_cannot_regenerate(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        response = client.post(f"/api/v1/organizers/{organizer.organizer_id}/setup-token")
        assert response.status_code == 400
        assert response.json() == {"message": "account already initialized"}

    def test_organizer_cannot_regenerate_for_another(
        self, client: TestClient, organizer: Account, other_organizer: Account, sign_in
    ):
        sign_in(organizer)
        response = client.post(f"/api/v1/organizers/{other_organizer.organizer_id}/setup-token")
        assert response.status_code == 401

    def test_regenerate_unknown_organizer(self, client: TestClient, admin: Account, sign_in):
        sign_in(admin)
        assert client.post("/api/v1/organizers/999/setup-token").status_code == 404


class TestOrganizerProfile:
    """Tests for reading, editing and deleting a single organizer."""

    def test_get_organizer_is_public(self, client: TestClient, organizer: Account):
        response = client.get(f"/api/v1/organizers/{organizer.organizer_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Chess Society"
        assert response.json()["website_url"] is None

    def test_get_unknown_organizer(self, client: TestClient):
        response = client.get("/api/v1/organizers/999")
        assert response.status_code == 404
        assert response.json() == {"message": "Organizer not found"}

    def test_organizer_edits_own_profile(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        response = client.put(
            f"/api/v1/organizers/{organizer.organizer_id}",
            json={"name": "Chess & Go Society", "website_url": "https://chess.uni.example", "location": "Room 101"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Chess & Go Society"
        assert data["website_url"] == "https://chess.uni.example"
        assert data["location"] == "Room 101"
        assert data["newsletter"] is False
        assert client.get("/api/v1/auth/me").json()["display_name"] == "Chess & Go Society"

    def test_organizer_cannot_edit_another(
        self, client: TestClient, organizer: Account, other_organizer: Account, sign_in
    ):
        sign_in(organizer)
        response = client.put(f"/api/v1/organizers/{other_organizer.organizer_id}", json={"name": "Hijacked"})
        assert response.status_code == 401
        assert client.get(f"/api/v1/organizers/{other_organizer.organizer_id}").json()["name"] == "Film Club"

    def test_newsletter_access_is_admin_only(self, client: TestClient, organizer: Account, admin: Account, sign_in):
        sign_in(organizer)
        response = client.put(f"/api/v1/organizers/{organizer.organizer_id}", json={"newsletter": True})
        assert response.status_code == 401

        sign_in(admin)
        response = client.put(f"/api/v1/organizers/{organizer.organizer_id}", json={"newsletter": True})
        assert response.status_code == 200
        assert response.json()["newsletter"] is True

    def test_update_requires_fields(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        response = client.put(f"/api/v1/organizers/{organizer.organizer_id}", json={})
        assert response.status_code == 400
        assert response.json() == {"message": "No fields supplied for update"}

    def test_update_rejects_null_name_and_unknown_fields(self, client: TestClient, organizer: Account, sign_in):
        sign_in(organizer)
        response = client.put(f"/api/v1/organizers/{organizer.organizer_id}", json={"name": None})
        assert response.status_code == 400
        assert response.json() == {"message": "name cannot be null"}

        response = client.put(f"/api/v1/organizers/{organizer.organizer_id}", json={"email": "x@uni.example"})
        assert response.status_code == 400

    def test_admin_updates_unknown_organizer(self, client: TestClient, admin: Account, sign_in):
        sign_in(admin)
        assert client.put("/api/v1/organizers/999", json={"name": "Ghost"}).status_code == 404

    def test_admin_delete_cascades(
        self, client: TestClient, admin: Account, organizer: Account, sign_in, ctx, db_session: Session
    ):
        account_id, organizer_id = organizer.id, organizer.organizer_id
        device = ctx.sessions.create(db_session, account_id)
        db_session.commit()
        event = ctx.events.create_event(
            db_session,
            principal_for(organizer),
            EventCreateRequest(
                title_de="Schachturnier",
                title_en="Chess tournament",
                start_date_time=datetime(2026, 11, 1, 18, 0),
            ),
        )
        event_id = event.id
        ctx.password_resets.request(db_session, "chess@uni.example")

        sign_in(admin)
        response = client.delete(f"/api/v1/organizers/{organizer_id}")
        assert response.status_code == 204
        assert response.content == b""

        with pytest.raises(UnauthorizedError):
            ctx.sessions.resolve(db_session, str(device))
        assert db_session.get(Account, account_id) is None
        assert db_session.get(Organizer, organizer_id) is None
        assert db_session.get(Event, event_id) is None
        assert db_session.execute(select(PasswordResetToken)).first() is None
        entries = ctx.audit.list_entries(db_session, event_id=event_id)
        assert [entry.type for entry in entries].count(AuditType.DELETE) == 1
        assert client.get(f"/api/v1/organizers/{organizer_id}").status_code == 404

    def test_organizer_deletes_itself(self, client: TestClient, organizer: Account, sign_in):
        organizer_id = organizer.organizer_id
        sign_in(organizer)

        assert client.delete(f"/api/v1/organizers/{organizer_id}").status_code == 204
        assert client.get("/api/v1/auth/me").status_code == 401
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "chess@uni.example", "password": STRONG_PASSWORD},
        )
        assert response.status_code == 401

    def test_organizer_cannot_delete_another(
        self, client: TestClient, organizer: Account, other_organizer: Account, sign_in
    ):
        sign_in(organizer)
        response = client.delete(f"/api/v1/organizers/{other_organizer.organizer_id}")
        assert response.status_code == 401
        assert client.get(f"/api/v1/organizers/{other_organizer.organizer_id}").status_code == 200

    def test_admin_deletes_unknown_organizer(self, client: TestClient, admin: Account, sign_in):
        sign_in(admin)
        response = client.delete("/api/v1/organizers/999")
        assert response.status_code == 404
        assert response.json() == {"message": "Organizer not found"}
