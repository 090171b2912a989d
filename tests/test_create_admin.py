"""Tests for the familytree-create-admin command."""

import getpass

import pytest

from familytree.auth import verify_password
from familytree.models.enums import Role
from familytree.models.user import User
from familytree.scripts import create_admin as cli


@pytest.fixture
def run_cli(monkeypatch, db, engine):
    """Run main() against the test session with scripted prompt answers."""
    monkeypatch.setattr(cli, "SessionLocal", lambda: db)
    monkeypatch.setattr(cli, "engine", engine)

    def _run(answers=(), passwords=()):
        answers = iter(answers)
        passwords = iter(passwords)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        monkeypatch.setattr(getpass, "getpass", lambda prompt="": next(passwords))
        return cli.main()

    return _run


class TestCreateAdmin:
    def test_creates_admin(self, db):
        admin = cli.create_admin(db, "root@example.com", "longenough")

        assert admin.role == Role.ADMIN.value
        assert verify_password("longenough", admin.hashed_password)

    def test_short_password_rejected(self, db):
        with pytest.raises(ValueError, match="at least 8 characters"):
            cli.create_admin(db, "root@example.com", "short")
        assert db.query(User).count() == 0

    def test_existing_email_rejected(self, db, make_user):
        make_user("root@example.com")
        with pytest.raises(ValueError, match="User already exists"):
            cli.create_admin(db, "root@example.com", "longenough")

    def test_upgrade_to_admin(self, db, make_user):
        user = make_user("member@example.com", role=Role.MEMBER)
        cli.upgrade_to_admin(db, user)

        db.refresh(user)
        assert user.role == Role.ADMIN.value


class TestMain:
    def test_new_admin(self, db, run_cli):
        code = run_cli(answers=["root@example.com"], passwords=["longenough", "longenough"])

        assert code == 0
        user = db.query(User).filter(User.email == "root@example.com").one()
        assert user.role == Role.ADMIN.value

    def test_password_mismatch(self, db, run_cli):
        code = run_cli(answers=["root@example.com"], passwords=["longenough", "different1"])

        assert code == 1
        assert db.query(User).count() == 0

    def test_short_password(self, db, run_cli):
        code = run_cli(answers=["root@example.com"], passwords=["short", "short"])

        assert code == 1
        assert db.query(User).count() == 0

    def test_invalid_email(self, db, run_cli):
        assert run_cli(answers=["not-an-email"]) == 1
        assert db.query(User).count() == 0

    def test_upgrade_existing_user(self, db, make_user, run_cli):
        make_user("member@example.com", role=Role.MEMBER)

        code = run_cli(answers=["member@example.com", "yes"])

        assert code == 0
        user = db.query(User).filter(User.email == "member@example.com").one()
        assert user.role == Role.ADMIN.value

    def test_upgrade_declined(self, db, make_user, run_cli):
        make_user("member@example.com", role=Role.MEMBER)

        assert run_cli(answers=["member@example.com", "no"]) == 0

        user = db.query(User).filter(User.email == "member@example.com").one()
        assert user.role == Role.MEMBER.value

    def test_already_admin(self, db, make_user, run_cli):
        make_user("root@example.com", role=Role.ADMIN)

        # no confirmation prompt, no password prompt
        assert run_cli(answers=["root@example.com"]) == 0

        user = db.query(User).filter(User.email == "root@example.com").one()
        assert user.role == Role.ADMIN.value
