"""Single-row platform config: privacy text provider and kiosk device settings."""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime
from sqlalchemy.sql import func
from app.database import Base

APP_CONFIG_ID = 1


class AppConfig(Base):
    __tablename__ = "app_config"

    id = Column(Integer, primary_key=True, default=APP_CONFIG_ID)
    privacy_text_no = Column(Text, nullable=False)
    privacy_text_en = Column(Text, nullable=False)
    privacy_version = Column(Integer, nullable=False, default=1)  # bumped on every text edit

    auto_lock_enabled = Column(Boolean, nullable=False, default=True)
    auto_lock_minutes = Column(Integer, nullable=False, default=2)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def privacy_text(self, language: str) -> str:
        return self.privacy_text_no if language == "no" else self.privacy_text_en
