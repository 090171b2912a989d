import os

# keep the app's own engine off the filesystem
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from familytree.auth import create_access_token, hash_password
from familytree.database import Base, get_db
from familytree.main import app
from familytree.models.enums import Role
from familytree.models.marriage import Marriage
from familytree.models.person import Person
from familytree.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ------------------------------------------------------------
# builders
# ------------------------------------------------------------

@pytest.fixture
def make_person(db):
    def _make(first_name="Test", last_name="Person", **fields):
        person = Person(first_name=first_name, last_name=last_name, **fields)
        db.add(person)
        db.commit()
        db.refresh(person)
        return person

    return _make


@pytest.fixture
def marry(db):
    def _marry(a, b, **fields):
        marriage = Marriage(spouse1_id=a.id, spouse2_id=b.id, **fields)
        db.add(marriage)
        db.commit()
        return marriage

    return _marry


@pytest.fixture
def make_user(db):
    def _make(email, role=Role.GUEST, person=None, password="password123", is_active=True):
        user = User(
            email=email,
            hashed_password=hash_password(password),
            role=role.value,
            person_id=person.id if person else None,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}

    return _headers
