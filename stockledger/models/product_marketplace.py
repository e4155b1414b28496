from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from stockledger.database.base import Base


class ProductMarketplace(Base):
    __tablename__ = "product_marketplaces"

    id = Column(Integer, primary_key=True)
    product_id = Column(String(64), nullable=False)

    amazon = Column(Boolean, nullable=False, default=False)
    mercado_livre = Column(Boolean, nullable=False, default=False)
    image_edited = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("product_id", name="uq_product_marketplaces_product"),
    )


__all__ = ["ProductMarketplace"]
