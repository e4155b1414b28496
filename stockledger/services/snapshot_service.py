"""Daily stock snapshot: fetch the whole catalog, aggregate, upsert by date."""
import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.config import get_settings
from stockledger.core.dates import utc_today
from stockledger.database.upsert import upsert_row
from stockledger.models.daily_stock_snapshot import DailyStockSnapshot
from stockledger.services.catalog_client import CatalogClient

logger = logging.getLogger(__name__)

STAT_FIELDS = (
    "total_products",
    "total_stock",
    "total_value",
    "low_stock_products",
    "out_of_stock_products",
)


def as_number(value):
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    try:
        number = float(str(value).strip())
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def compute_stats(products, low_stock_threshold: Optional[int] = None) -> dict:
    if low_stock_threshold is None:
        low_stock_threshold = get_settings().LOW_STOCK_THRESHOLD

    total_stock = 0
    total_value = 0.0
    low_stock = 0
    out_of_stock = 0
    for product in products:
        product = product if isinstance(product, dict) else {}
        quantity = as_number(product.get("availableQuantity"))
        price = as_number(product.get("price"))
        total_stock += quantity
        total_value += price * quantity
        if quantity == 0:
            out_of_stock += 1
        elif 0 < quantity <= low_stock_threshold:
            low_stock += 1

    return {
        "total_products": len(products),
        "total_stock": total_stock,
        "total_value": total_value,
        "low_stock_products": low_stock,
        "out_of_stock_products": out_of_stock,
    }


def get_snapshot(db: Session, snapshot_date: date) -> Optional[DailyStockSnapshot]:
    return (
        db.execute(select(DailyStockSnapshot).where(DailyStockSnapshot.date == snapshot_date))
        .scalars()
        .first()
    )


def upsert_snapshot(db: Session, snapshot_date: date, stats: dict) -> DailyStockSnapshot:
    """Insert or overwrite the row for ``snapshot_date``; last write wins."""
    now = datetime.now(timezone.utc)
    values = {field: stats[field] for field in STAT_FIELDS}
    values["updated_at"] = now

    try:
        upsert_row(
            db,
            DailyStockSnapshot,
            key={"date": snapshot_date},
            values=values,
            insert_only={"created_at": now},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.expire_all()
    return get_snapshot(db, snapshot_date)


def save_daily_snapshot(
    db: Session,
    api_url=None,
    api_token=None,
    *,
    snapshot_date: Optional[date] = None,
    client: Optional[CatalogClient] = None,
) -> dict:
    """Run the job once: nothing is written unless every page was fetched."""
    if client is None:
        if not api_url or not api_token:
            raise ValueError("API URL and Token are required")
        client = CatalogClient(api_url, api_token)

    products, pages_fetched = client.fetch_all_products()
    stats = compute_stats(products)

    snapshot_date = snapshot_date or utc_today()
    snapshot = upsert_snapshot(db, snapshot_date, stats)
    logger.info(
        "Snapshot saved for %s: %d products, %d page(s)",
        snapshot_date.isoformat(),
        stats["total_products"],
        pages_fetched,
        extra={"snapshot_date": snapshot_date.isoformat()},
    )
    return {"snapshot": snapshot, "stats": stats, "pages_fetched": pages_fetched}


def list_snapshots(db: Session, limit: int = 30) -> list[DailyStockSnapshot]:
    rows = (
        db.execute(
            select(DailyStockSnapshot)
            .order_by(DailyStockSnapshot.date.desc())
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return list(rows)


def stock_trend(db: Session, days: int = 30, *, today: Optional[date] = None) -> list[dict]:
    today = today or utc_today()
    start = today - timedelta(days=max(1, days) - 1)
    rows = (
        db.execute(
            select(DailyStockSnapshot)
            .where(DailyStockSnapshot.date >= start, DailyStockSnapshot.date <= today)
            .order_by(DailyStockSnapshot.date.asc())
        )
        .scalars()
        .all()
    )
    return [
        {"date": row.date, "stock": row.total_stock, "value": row.total_value}
        for row in rows
    ]
