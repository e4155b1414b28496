from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.database.upsert import upsert_row
from stockledger.models.product_marketplace import ProductMarketplace

FLAG_FIELDS = ("amazon", "mercado_livre", "image_edited")


def _normalize_product_id(product_id) -> str:
    value = str(product_id if product_id is not None else "").strip()
    if not value:
        raise ValueError("product_id is required")
    return value


def get_flags(db: Session, product_id) -> dict:
    product_id = _normalize_product_id(product_id)
    row = (
        db.execute(select(ProductMarketplace).where(ProductMarketplace.product_id == product_id))
        .scalars()
        .first()
    )
    flags = {field: bool(getattr(row, field)) if row else False for field in FLAG_FIELDS}
    return {"product_id": product_id, **flags}


def save_flags(db: Session, product_id, flags) -> dict:
    product_id = _normalize_product_id(product_id)
    now = datetime.now(timezone.utc)
    values = {field: bool(flags.get(field, False)) for field in FLAG_FIELDS}
    values["updated_at"] = now
    try:
        upsert_row(
            db,
            ProductMarketplace,
            key={"product_id": product_id},
            values=values,
            insert_only={"created_at": now},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.expire_all()
    return get_flags(db, product_id)


def list_flagged(db: Session) -> list[dict]:
    rows = db.execute(select(ProductMarketplace).order_by(ProductMarketplace.product_id)).scalars().all()
    return [
        {"product_id": row.product_id, **{field: bool(getattr(row, field)) for field in FLAG_FIELDS}}
        for row in rows
    ]
