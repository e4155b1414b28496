from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.models.cash_flow import CashFlowEntry


def list_entries(
    db: Session,
    *,
    limit: Optional[int] = 100,
    entry_type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[CashFlowEntry]:
    query = select(CashFlowEntry).order_by(CashFlowEntry.date.desc(), CashFlowEntry.id.desc())
    if entry_type:
        query = query.where(CashFlowEntry.type == entry_type)
    if date_from is not None:
        query = query.where(CashFlowEntry.date >= date_from)
    if date_to is not None:
        query = query.where(CashFlowEntry.date <= date_to)
    if limit:
        query = query.limit(limit)
    return list(db.execute(query).scalars().all())


def create_entry(db: Session, payload) -> CashFlowEntry:
    entry = CashFlowEntry(**payload.model_dump())
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(entry)
    return entry


def get_entry(db: Session, entry_id: int) -> Optional[CashFlowEntry]:
    return db.get(CashFlowEntry, entry_id)


def delete_entry(db: Session, entry: CashFlowEntry) -> None:
    db.delete(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
