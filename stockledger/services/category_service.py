from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.models.financial_category import FinancialCategory


def list_categories(db: Session, category_type: Optional[str] = None) -> list[FinancialCategory]:
    query = select(FinancialCategory).order_by(FinancialCategory.name.asc())
    if category_type:
        query = query.where(FinancialCategory.type == category_type)
    return list(db.execute(query).scalars().all())


def create_category(db: Session, payload) -> FinancialCategory:
    category = FinancialCategory(**payload.model_dump())
    db.add(category)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(category)
    return category


def get_category(db: Session, category_id: int) -> Optional[FinancialCategory]:
    return db.get(FinancialCategory, category_id)


def delete_category(db: Session, category: FinancialCategory) -> None:
    db.delete(category)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
