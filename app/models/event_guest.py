"""Per-event guest-list entry and its pipeline status."""
from sqlalchemy import Column, Integer, String, ForeignKey, Enum as SQLEnum, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class EventGuestStatus(str, enum.Enum):
    invited = "invited"
    signed_pending_verification = "signed_pending_verification"
    verified = "verified"


class GuestType(str, enum.Enum):
    par = "par"
    single_mann = "single_mann"
    single_kvinne = "single_kvinne"
    vip = "vip"


class EventGuest(Base):
    __tablename__ = "event_guests"
    __table_args__ = (UniqueConstraint("event_id", "sm_username", name="uq_event_guests_event_username"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    sm_username = Column(String(32), nullable=False, index=True)

    # Optional prefilled contact fields from the organizer's list
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    phone = Column(String(15), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    guest_type = Column(SQLEnum(GuestType), nullable=True)

    status = Column(SQLEnum(EventGuestStatus), nullable=False, default=EventGuestStatus.invited)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    event = relationship("Event")
