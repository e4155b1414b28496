import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.constants import GENERIC_ERROR
from stockledger.dependencies import get_db, require_auth
from stockledger.schemas.snapshot import (
    SnapshotRead,
    SnapshotTriggerRequest,
    SnapshotTriggerResponse,
    StockTrendPoint,
)
from stockledger.services.catalog_client import CatalogAPIError
from stockledger.services.snapshot_service import (
    get_snapshot,
    list_snapshots,
    save_daily_snapshot,
    stock_trend,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/snapshots", tags=["Snapshots"])


@router.post("/daily", response_model=SnapshotTriggerResponse)
def save_today_snapshot(
    payload: SnapshotTriggerRequest,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    try:
        result = save_daily_snapshot(db, payload.api_url, payload.api_token)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (CatalogAPIError, SQLAlchemyError) as exc:
        logger.exception("Daily snapshot failed", extra={"status_code": getattr(exc, "status_code", None)})
        raise HTTPException(status_code=500, detail=GENERIC_ERROR) from exc
    return {"success": True, "snapshot": result["snapshot"], "stats": result["stats"]}


@router.get("", response_model=list[SnapshotRead])
def recent_snapshots(
    limit: int = Query(30, ge=1, le=366, description="Max snapshots, newest first"),
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return list_snapshots(db, limit=limit)


@router.get("/trend", response_model=list[StockTrendPoint])
def snapshot_trend(
    days: int = Query(30, ge=1, le=366, description="Days back from today"),
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return stock_trend(db, days=days)


@router.get("/{snapshot_date}", response_model=SnapshotRead)
def snapshot_for_date(
    snapshot_date: date,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    snapshot = get_snapshot(db, snapshot_date)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found.")
    return snapshot


__all__ = ["router"]
