"""
Shared fixtures: in-memory SQLite, a test client and a seeded event.

DATABASE_URL must be set before anything under app/ is imported, because the
engine is built at import time.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models.event import CrewEventAccess, Event
from app.models.event_guest import EventGuest, GuestType
from app.models.user import User, UserRole
from app.seed import seed_app_config
from app.services.access import StaffContext
from app.services.auth import create_access_token, get_password_hash

# 1x1 PNG
SIGNATURE_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
STAFF_PASSWORD = "Password123!"

NDA_NO = "Alt du ser og hører på arrangementet er konfidensielt."
NDA_EN = "Everything you see and hear at the event is confidential."


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(STAFF_PASSWORD)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


def _user(db, username, role, password_hash):
    user = User(username=username, hashed_password=password_hash, role=role, full_name=username.title())
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def seed(db, password_hash):
    """Two events owned by one organizer; two crew with a grant on the first only."""
    admin = _user(db, "anna.admin", UserRole.admin, password_hash)
    organizer = _user(db, "olav.org", UserRole.organizer, password_hash)
    crew = _user(db, "cato.crew", UserRole.crew, password_hash)
    crew2 = _user(db, "cecilie.crew", UserRole.crew, password_hash)
    outsider = _user(db, "otto.crew", UserRole.crew, password_hash)

    event = Event(name="Sommerfest", nda_text_no=NDA_NO, nda_text_en=NDA_EN, created_by=organizer.id)
    other_event = Event(name="Vinterfest", nda_text_no=NDA_NO, nda_text_en=NDA_EN, created_by=organizer.id)
    db.add_all([event, other_event])
    db.flush()

    db.add_all([
        CrewEventAccess(event_id=event.id, crew_user_id=crew.id),
        CrewEventAccess(event_id=event.id, crew_user_id=crew2.id),
        EventGuest(
            event_id=event.id,
            sm_username="ola.nordmann",
            first_name="Ola",
            last_name="Nordmann",
            guest_type=GuestType.par,
        ),
        EventGuest(
            event_id=event.id,
            sm_username="kari.nordmann",
            first_name="Kari",
            last_name="Nordmann",
            phone="4790000001",
            email="kari@example.com",
            guest_type=GuestType.vip,
        ),
    ])
    seed_app_config(db)
    db.commit()

    return SimpleNamespace(
        admin=StaffContext(admin.id, UserRole.admin),
        organizer=StaffContext(organizer.id, UserRole.organizer),
        crew=StaffContext(crew.id, UserRole.crew),
        crew2=StaffContext(crew2.id, UserRole.crew),
        outsider=StaffContext(outsider.id, UserRole.crew),
        event_id=event.id,
        other_event_id=other_event.id,
        usernames={
            "admin": admin.username,
            "organizer": organizer.username,
            "crew": crew.username,
        },
    )


@pytest.fixture
def auth_headers():
    def headers(staff: StaffContext, username: str = "staff"):
        token = create_access_token(staff.user_id, username, staff.role)
        return {"Authorization": f"Bearer {token}"}
    return headers


@pytest.fixture
def make_payload():
    def payload(event_id, **overrides):
        data = {
            "event_id": event_id,
            "sm_username": "Ola.Nordmann",
            "phone": "+47 464 27 042",
            "first_name": "Ola",
            "last_name": "Nordmann",
            "email": "ola@example.com",
            "location": "Oslo",
            "language": "no",
            "read_confirmed": True,
            "privacy_accepted": True,
            "signature_png_base64": SIGNATURE_PNG_B64,
        }
        data.update(overrides)
        return data
    return payload
