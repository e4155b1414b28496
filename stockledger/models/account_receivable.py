from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, String

from stockledger.database.base import Base


class AccountReceivable(Base):
    __tablename__ = "accounts_receivable"

    id = Column(Integer, primary_key=True)
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False)
    due_date = Column(Date, nullable=False)

    customer = Column(String(255))
    payment_method = Column(String(100))
    category = Column(String(100))
    notes = Column(String(1000))
    document_number = Column(String(100))

    status = Column(String(20), nullable=False, default="pending")
    received_date = Column(Date)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_receivable_due_date", "due_date"),
        Index("idx_receivable_status", "status"),
    )


__all__ = ["AccountReceivable"]
