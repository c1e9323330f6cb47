"""Global guest directory, keyed by canonical phone number."""
from sqlalchemy import Column, Integer, String, ForeignKey, Enum as SQLEnum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class PhoneChangeVia(str, enum.Enum):
    kiosk = "kiosk"
    admin = "admin"


class Guest(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(15), unique=True, index=True, nullable=False)  # digits only, 8-15

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    sm_username = Column(String(32), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    phone_history = relationship("GuestPhoneHistory", back_populates="guest", order_by="GuestPhoneHistory.id")


class GuestPhoneHistory(Base):
    """Append-only. No updates or deletes."""
    __tablename__ = "guests_phone_history"

    id = Column(Integer, primary_key=True, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    old_phone = Column(String(15), nullable=False)
    new_phone = Column(String(15), nullable=False)
    changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    changed_via = Column(SQLEnum(PhoneChangeVia), nullable=False)

    guest = relationship("Guest", back_populates="phone_history")
