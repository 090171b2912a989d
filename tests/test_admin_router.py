"""Tests for admin-only endpoints."""

from datetime import datetime, timedelta

import pytest

from familytree.models.audit_log import AuditLog
from familytree.models.enums import ProfileStatus, Role
from familytree.models.user import User


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role=Role.ADMIN)


def test_non_admin_is_forbidden(client, make_user, auth_headers):
    member = make_user("member@example.com", role=Role.MEMBER)
    for path in ("/api/admin/stats", "/api/admin/users", "/api/admin/profiles/pending"):
        assert client.get(path, headers=auth_headers(member)).status_code == 403


class TestApproval:
    def test_pending_then_approve(self, client, db, admin, make_user, make_person, auth_headers):
        person = make_person("Pat", "Pending", profile_status=ProfileStatus.PENDING.value)
        make_user("pat@example.com", person=person)
        make_person("Dana", "Draft")

        pending = client.get("/api/admin/profiles/pending", headers=auth_headers(admin)).json()
        assert [p["id"] for p in pending] == [person.id]
        assert pending[0]["user"]["email"] == "pat@example.com"

        resp = client.post(f"/api/admin/profiles/{person.id}/approve", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["person"]["profile_status"] == "APPROVED"

        entry = db.query(AuditLog).one()
        assert entry.changes["previous_status"] == "PENDING"

    def test_reject_needs_reason(self, client, admin, make_person, auth_headers):
        person = make_person("Pat", "Pending", profile_status=ProfileStatus.PENDING.value)

        blank = client.post(f"/api/admin/profiles/{person.id}/reject", json={"reason": "  "},
                            headers=auth_headers(admin))
        assert blank.status_code == 400

        resp = client.post(f"/api/admin/profiles/{person.id}/reject", json={"reason": " Wrong dates "},
                           headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["person"]["profile_status"] == "REJECTED"
        assert resp.json()["person"]["rejection_reason"] == "Wrong dates"

    def test_approve_missing(self, client, admin, auth_headers):
        resp = client.post("/api/admin/profiles/missing/approve", headers=auth_headers(admin))
        assert resp.status_code == 404


class TestUsers:
    def test_list_and_search(self, client, admin, make_user, make_person, auth_headers):
        person = make_person("Zelda", "Quinn")
        make_user("zq@example.com", person=person)
        make_user("other@example.com")

        resp = client.get("/api/admin/users?search=zelda", headers=auth_headers(admin))
        body = resp.json()
        assert [u["email"] for u in body["users"]] == ["zq@example.com"]
        assert body["users"][0]["person"]["first_name"] == "Zelda"
        assert body["pagination"]["total"] == 1

    def test_deactivate(self, client, db, admin, make_user, auth_headers):
        user = make_user("u@example.com")
        resp = client.put(f"/api/admin/users/{user.id}/status", json={"is_active": False},
                          headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["message"] == "User deactivated successfully"
        db.refresh(user)
        assert user.is_active is False

    def test_status_must_be_boolean(self, client, admin, make_user, auth_headers):
        user = make_user("u@example.com")
        resp = client.put(f"/api/admin/users/{user.id}/status", json={"is_active": "no"},
                          headers=auth_headers(admin))
        assert resp.status_code == 422

    def test_cannot_deactivate_or_delete_self(self, client, admin, auth_headers):
        headers = auth_headers(admin)
        assert client.put(f"/api/admin/users/{admin.id}/status", json={"is_active": False},
                          headers=headers).status_code == 400
        assert client.delete(f"/api/admin/users/{admin.id}", headers=headers).status_code == 400

    def test_delete_user_keeps_person(self, client, db, admin, make_user, make_person, auth_headers):
        person = make_person("Kept", "Person")
        user = make_user("gone@example.com", person=person)
        user_id = user.id

        resp = client.delete(f"/api/admin/users/{user_id}", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert db.query(User).filter(User.id == user_id).first() is None
        assert client.get(f"/api/people/{person.id}", headers=auth_headers(admin)).status_code == 200


def test_stats(client, db, admin, make_user, make_person, auth_headers):
    make_person("A", "Draft")
    make_person("B", "Pending", profile_status=ProfileStatus.PENDING.value)
    recent = make_user("recent@example.com")
    recent.last_login_at = datetime.utcnow() - timedelta(days=1)
    stale = make_user("stale@example.com")
    stale.last_login_at = datetime.utcnow() - timedelta(days=30)
    db.commit()

    stats = client.get("/api/admin/stats", headers=auth_headers(admin)).json()
    assert stats == {
        "total_users": 3,
        "total_people": 2,
        "pending_profiles": 1,
        "approved_profiles": 0,
        "rejected_profiles": 0,
        "draft_profiles": 1,
        "recent_logins": 1,
    }


def test_audit_logs_newest_first(client, admin, make_person, auth_headers):
    person = make_person("A", "Viewed")
    headers = auth_headers(admin)
    client.get(f"/api/people/{person.id}", headers=headers)
    client.post(f"/api/admin/profiles/{person.id}/approve", headers=headers)

    body = client.get("/api/admin/audit-logs", headers=headers).json()
    assert [log["action"] for log in body["logs"]] == ["UPDATE", "VIEW"]
    assert body["logs"][0]["user_email"] == "admin@example.com"


class TestManualRegistration:
    def test_generation_suggestion(self, client, admin, make_person, auth_headers):
        grandpa = make_person("G", "Root")
        dad = make_person("D", "Mid", biological_father_id=grandpa.id)
        mom = make_person("M", "Root")

        resp = client.get(
            "/api/admin/register/generation-suggestion",
            params={"biological_father_id": dad.id, "biological_mother_id": mom.id},
            headers=auth_headers(admin),
        )
        assert resp.json() == {"suggestedGeneration": 3}

        root = client.get("/api/admin/register/generation-suggestion", headers=auth_headers(admin))
        assert root.json() == {"suggestedGeneration": 1}

    def test_cycle_reports_conflict(self, client, db, admin, make_person, auth_headers):
        a = make_person("A", "Loop")
        b = make_person("B", "Loop", biological_father_id=a.id)
        a.biological_father_id = b.id
        db.commit()

        resp = client.get(
            "/api/admin/register/generation-suggestion",
            params={"biological_father_id": a.id},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 409

    def test_register_person_is_approved(self, client, admin, make_person, auth_headers):
        mom = make_person("M", "Root")
        resp = client.post("/api/admin/register/person", json={
            "first_name": "New", "last_name": "Born", "biological_mother_id": mom.id,
        }, headers=auth_headers(admin))

        assert resp.status_code == 201
        body = resp.json()
        assert body["generation"] == 2
        assert body["person"]["generation"] == 2
        assert body["person"]["profile_status"] == "APPROVED"

    def test_register_person_blank_parent_is_null(self, client, db, admin, auth_headers):
        resp = client.post("/api/admin/register/person", json={
            "first_name": "New",
            "last_name": "Born",
            "biological_mother_id": "",
            "biological_father_id": "",
            "city": "",
        }, headers=auth_headers(admin))

        assert resp.status_code == 201
        body = resp.json()
        assert body["generation"] == 1
        assert body["person"]["biological_mother_id"] is None
        assert body["person"]["biological_father_id"] is None
        assert body["person"]["city"] is None
