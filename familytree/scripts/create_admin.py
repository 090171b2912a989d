"""
Create an ADMIN user, or upgrade an existing user to ADMIN.

    familytree-create-admin
"""
import getpass
import logging
import sys

from familytree.auth import MIN_PASSWORD_LENGTH, register_user
from familytree.database import Base, SessionLocal, engine
from familytree.models.enums import Role
from familytree.models import person, marriage, story, audit_log  # noqa: F401
from familytree.models.user import User

logger = logging.getLogger(__name__)


def create_admin(db, email: str, password: str) -> User:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError("Password must be at least 8 characters long")
    return register_user(db, email=email, password=password, role=Role.ADMIN)


def upgrade_to_admin(db, user: User) -> User:
    user.role = Role.ADMIN.value
    db.commit()
    db.refresh(user)
    return user


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    Base.metadata.create_all(bind=engine)

    print("=== Create Admin User ===\n")

    db = SessionLocal()
    try:
        email = input("Enter admin email: ").strip()
        if "@" not in email:
            logger.error("Invalid email address")
            return 1

        existing = db.query(User).filter(User.email == email).first()
        if existing:
            if existing.role == Role.ADMIN:
                logger.info("User %s is already an admin.", email)
                return 0

            answer = input("User already exists. Upgrade to ADMIN? (yes/no): ")
            if answer.strip().lower() in ("y", "yes"):
                upgrade_to_admin(db, existing)
                logger.info("User %s upgraded to ADMIN.", email)
            return 0

        password = getpass.getpass(f"Enter admin password (min {MIN_PASSWORD_LENGTH} characters): ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            logger.error("Passwords do not match")
            return 1

        try:
            admin = create_admin(db, email, password)
        except ValueError as e:
            logger.error(str(e))
            return 1

        logger.info("Admin user created: %s (%s)", admin.email, admin.id)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
