import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from stockledger.config import Settings, get_settings
from stockledger.core.constants import GENERIC_ERROR
from stockledger.core.logging import setup_logging
from stockledger.database import Base, engine, ensure_sqlite_schema
from stockledger.models import import_all_models
from stockledger.routers import (
    api_config_router,
    cash_flow_router,
    catalog_router,
    categories_router,
    health_router,
    marketplaces_router,
    payables_router,
    receivables_router,
    reports_router,
    snapshots_router,
)

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": GENERIC_ERROR})


app.include_router(health_router)
app.include_router(snapshots_router)
app.include_router(payables_router)
app.include_router(receivables_router)
app.include_router(cash_flow_router)
app.include_router(categories_router)
app.include_router(marketplaces_router)
app.include_router(api_config_router)
app.include_router(reports_router)
app.include_router(catalog_router)


__all__ = ["app"]
