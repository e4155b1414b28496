from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Integer, UniqueConstraint

from stockledger.database.base import Base


class DailyStockSnapshot(Base):
    __tablename__ = "daily_stock_snapshots"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)

    total_products = Column(Integer, nullable=False, default=0)
    total_stock = Column(Float, nullable=False, default=0)
    total_value = Column(Float, nullable=False, default=0)
    low_stock_products = Column(Integer, nullable=False, default=0)
    out_of_stock_products = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("date", name="uq_daily_stock_snapshots_date"),
    )


__all__ = ["DailyStockSnapshot"]
