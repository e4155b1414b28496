from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, String

from stockledger.database.base import Base


class CashFlowEntry(Base):
    __tablename__ = "cash_flow"

    id = Column(Integer, primary_key=True)
    type = Column(String(10), nullable=False)
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)

    category = Column(String(100))
    payment_method = Column(String(100))

    # Set when the entry settles an account; deleting the account removes it.
    reference_id = Column(Integer)
    reference_type = Column(String(40))

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_cash_flow_date", "date"),
        Index("idx_cash_flow_reference", "reference_type", "reference_id"),
    )


__all__ = ["CashFlowEntry"]
