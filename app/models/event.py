"""Events and crew access grants. The kiosk core only reads these rows."""
from datetime import date

from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False, default=date.today)
    end_date = Column(Date, nullable=False, default=date.today)

    # Localized NDA text; snapshotted into each signature at sign time
    nda_text_no = Column(Text, nullable=False, default="")
    nda_text_en = Column(Text, nullable=False, default="")

    # Owning organizer (null for admin-created events)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    creator = relationship("User")

    def nda_text(self, language: str) -> str:
        return self.nda_text_no if language == "no" else self.nda_text_en


class CrewEventAccess(Base):
    __tablename__ = "crew_event_access"
    __table_args__ = (UniqueConstraint("event_id", "crew_user_id", name="uq_crew_event_access"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    crew_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
