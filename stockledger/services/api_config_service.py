import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import get_settings
from stockledger.models.api_config import ApiConfig
from stockledger.services.catalog_client import CatalogClient, validate_base_url

logger = logging.getLogger(__name__)


def get_active_config(db: Session) -> Optional[ApiConfig]:
    return (
        db.execute(select(ApiConfig).order_by(ApiConfig.updated_at.desc(), ApiConfig.id.desc()))
        .scalars()
        .first()
    )


def token_hint(token) -> Optional[str]:
    if not token:
        return None
    token = str(token)
    if len(token) <= 4:
        return "****"
    return "****" + token[-4:]


def describe_config(config: Optional[ApiConfig]) -> dict:
    if config is None:
        return {"configured": False}
    return {
        "configured": True,
        "base_url": config.base_url,
        "token_hint": token_hint(config.token),
        "updated_at": config.updated_at,
    }


def save_config(db: Session, base_url, token) -> ApiConfig:
    """Replace the stored catalog credentials with a single validated row."""
    base_url = validate_base_url(base_url)
    token = str(token or "").strip()
    if not token:
        raise ValueError("API URL and Token are required")

    config = ApiConfig(base_url=base_url, token=token)
    try:
        db.execute(delete(ApiConfig))
        db.add(config)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(config)
    logger.info("Catalog API configuration saved for %s", base_url)
    return config


def delete_config(db: Session) -> None:
    try:
        db.execute(delete(ApiConfig))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def resolve_catalog_credentials(db: Session) -> tuple[str, str]:
    """Environment settings win over the stored configuration."""
    settings = get_settings()
    if settings.CATALOG_API_URL and settings.CATALOG_API_TOKEN:
        return settings.CATALOG_API_URL, settings.CATALOG_API_TOKEN
    config = get_active_config(db)
    if config is None:
        raise ValueError("Catalog API is not configured")
    return config.base_url, config.token


def build_catalog_client(db: Session) -> CatalogClient:
    base_url, token = resolve_catalog_credentials(db)
    return CatalogClient(base_url, token)
