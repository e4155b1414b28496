from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from stockledger.database.base import Base


class FinancialCategory(Base):
    __tablename__ = "financial_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    type = Column(String(10), nullable=False)
    description = Column(String(500))

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


__all__ = ["FinancialCategory"]
