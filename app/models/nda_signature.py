"""Signed NDAs with frozen NDA/privacy text snapshots and the attestation outcome."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, Text, String, LargeBinary, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class Language(str, enum.Enum):
    no = "no"
    en = "en"


class NdaSignature(Base):
    __tablename__ = "nda_signatures"
    __table_args__ = (UniqueConstraint("event_id", "guest_id", name="uq_nda_signatures_event_guest"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    # Guest-list entry the signature was made against; survives later username edits on the guest
    event_guest_id = Column(Integer, ForeignKey("event_guests.id", ondelete="SET NULL"), nullable=True, index=True)

    language = Column(SQLEnum(Language), nullable=False)
    nda_text_snapshot = Column(Text, nullable=False)
    read_confirmed = Column(Boolean, nullable=False)
    privacy_accepted = Column(Boolean, nullable=False)
    privacy_text_snapshot = Column(Text, nullable=False)
    privacy_version = Column(Integer, nullable=False)

    signed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    signature_png = Column(LargeBinary, nullable=False)

    # Filled on first PDF generation, then reused
    signed_pdf_bytes = Column(LargeBinary, nullable=True)
    pdf_sha256 = Column(String(64), nullable=True)

    # Attestation: transitions exactly once from NULL
    verified_at = Column(DateTime(timezone=True), nullable=True, index=True)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    event = relationship("Event")
    guest = relationship("Guest")
    event_guest = relationship("EventGuest")
    verifier = relationship("User")
