"""Seed the single app_config row (privacy texts, kiosk lock settings) from settings."""
from sqlalchemy.orm import Session
from app.config import get_settings
from app.models.app_config import AppConfig, APP_CONFIG_ID


def seed_app_config(db: Session) -> AppConfig:
    existing = db.query(AppConfig).filter(AppConfig.id == APP_CONFIG_ID).first()
    if existing:
        return existing
    settings = get_settings()
    config = AppConfig(
        id=APP_CONFIG_ID,
        privacy_text_no=settings.privacy_text_no,
        privacy_text_en=settings.privacy_text_en,
        privacy_version=settings.privacy_version,
        auto_lock_enabled=settings.auto_lock_enabled,
        auto_lock_minutes=settings.auto_lock_minutes,
    )
    db.add(config)
    db.flush()
    return config
