"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User
from app.models.event import Event, CrewEventAccess
from app.models.guest import Guest, GuestPhoneHistory
from app.models.event_guest import EventGuest
from app.models.kiosk_session import KioskSession
from app.models.nda_signature import NdaSignature
from app.models.app_config import AppConfig
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Event",
    "CrewEventAccess",
    "Guest",
    "GuestPhoneHistory",
    "EventGuest",
    "KioskSession",
    "NdaSignature",
    "AppConfig",
    "AuditLog",
]
