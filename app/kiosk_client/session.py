"""The device's current kiosk session, persisted between calls and dropped once expired."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from app.kiosk_client.store import KeyValueStore

logger = logging.getLogger(__name__)

KIOSK_SESSION_KEY = "sm_nda_kiosk_session"


@dataclass(frozen=True)
class KioskDeviceSession:
    token: str
    session_id: int
    event_id: int
    event_name: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(timezone.utc))


def save_session(store: KeyValueStore, session: KioskDeviceSession) -> None:
    data = asdict(session)
    data["expires_at"] = session.expires_at.isoformat()
    store.set(KIOSK_SESSION_KEY, data)


def load_session(store: KeyValueStore, now: datetime | None = None) -> KioskDeviceSession | None:
    raw = store.get(KIOSK_SESSION_KEY)
    if not raw:
        return None
    try:
        expires_at = datetime.fromisoformat(raw["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        session = KioskDeviceSession(
            token=raw["token"],
            session_id=int(raw["session_id"]),
            event_id=int(raw["event_id"]),
            event_name=raw.get("event_name") or "",
            expires_at=expires_at,
        )
    except (KeyError, TypeError, ValueError):
        logger.warning("stored kiosk session is unreadable; clearing it")
        store.delete(KIOSK_SESSION_KEY)
        return None
    if session.is_expired(now):
        store.delete(KIOSK_SESSION_KEY)
        return None
    return session


def clear_session(store: KeyValueStore) -> None:
    store.delete(KIOSK_SESSION_KEY)
