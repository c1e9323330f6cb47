"""Privacy-text provider: current text per language plus its version."""
from sqlalchemy.orm import Session

from app.models.app_config import AppConfig, APP_CONFIG_ID
from app.seed import seed_app_config


def get_app_config(db: Session) -> AppConfig:
    config = db.query(AppConfig).filter(AppConfig.id == APP_CONFIG_ID).first()
    if config is None:
        config = seed_app_config(db)
    return config


def update_privacy_text(db: Session, privacy_text_no: str, privacy_text_en: str) -> AppConfig:
    """Replace both privacy texts and bump the version. Past signatures keep their snapshot."""
    config = get_app_config(db)
    config.privacy_text_no = privacy_text_no
    config.privacy_text_en = privacy_text_en
    config.privacy_version = (config.privacy_version or 0) + 1
    db.flush()
    return config
