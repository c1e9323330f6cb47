"""
Create an admin, an organizer and a crew member plus a demo event with a small guest list.
Use for local testing of the kiosk flow without an admin UI.

Run from project root:
  python scripts/create_staff_users.py

Credentials are printed at the end.
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import Base, SessionLocal, engine
from app.models import CrewEventAccess, Event, EventGuest, User
from app.models.event_guest import GuestType
from app.models.user import UserRole
from app.seed import seed_app_config
from app.services.auth import get_password_hash

# Default credentials (change if you want)
PASSWORD = "Password123!"
STAFF = [
    ("admin.demo", UserRole.admin, "Demo Admin"),
    ("organizer.demo", UserRole.organizer, "Demo Organizer"),
    ("crew.demo", UserRole.crew, "Demo Crew"),
]
EVENT_NAME = "Demo Event"
GUESTS = [
    ("ola.nordmann", "Ola", "Nordmann", None, GuestType.par),
    ("kari.nordmann", "Kari", "Nordmann", "4790000001", GuestType.vip),
]


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_app_config(db)
        users = {}
        for username, role, full_name in STAFF:
            user = db.query(User).filter(User.username == username).first()
            if user:
                print(f"User already exists: {username}")
            else:
                user = User(
                    username=username,
                    hashed_password=get_password_hash(PASSWORD),
                    role=role,
                    full_name=full_name,
                )
                db.add(user)
                db.flush()
                print(f"Created {role.value}: {username}")
            users[role] = user

        event = db.query(Event).filter(Event.name == EVENT_NAME).first()
        if event:
            print(f"Event already exists: {EVENT_NAME}")
        else:
            event = Event(
                name=EVENT_NAME,
                nda_text_no="Alt du ser og hører på arrangementet er konfidensielt.",
                nda_text_en="Everything you see and hear at the event is confidential.",
                created_by=users[UserRole.organizer].id,
            )
            db.add(event)
            db.flush()
            db.add(CrewEventAccess(event_id=event.id, crew_user_id=users[UserRole.crew].id))
            for sm_username, first_name, last_name, phone, guest_type in GUESTS:
                db.add(EventGuest(
                    event_id=event.id,
                    sm_username=sm_username,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    guest_type=guest_type,
                ))
            print(f"Created event: {EVENT_NAME} (id={event.id})")

        db.commit()

        print("\n--- Staff users ---")
        for username, role, _ in STAFF:
            print(f"  {role.value:<10} {username} / {PASSWORD}")
        print(f"\nStart a kiosk with POST /kiosk/sessions {{\"event_id\": {event.id}}}")
        print("\nDone.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
