from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from stockledger.database.base import Base


class ApiConfig(Base):
    __tablename__ = "api_config"

    id = Column(Integer, primary_key=True)
    base_url = Column(String, nullable=False)
    token = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


__all__ = ["ApiConfig"]
