from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from stockledger.config import get_settings
from stockledger.database.engine import engine

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    settings = get_settings()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "time": datetime.now(timezone.utc).isoformat(),
    }
