"""SQLAlchemy ORM model for the markets table.

Used for type reference only: persistence.py uses raw text() SQL.
Alembic migrations (003_create_markets.py, 006_add_market_labels.py) are the
authoritative DDL source.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.pm_common.database import Base


class MarketORM(Base):
    __tablename__ = "markets"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    question_title: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    outcome_type: Mapped[str] = mapped_column(String(20), nullable=False)
    creator_username: Mapped[str] = mapped_column(String(64), nullable=False)
    resolution_date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    utc_offset: Mapped[int] = mapped_column(Integer, nullable=False)
    yes_label: Mapped[str] = mapped_column(String(20), nullable=False)
    no_label: Mapped[str] = mapped_column(String(20), nullable=False)
    initial_probability: Mapped[float] = mapped_column(Float, nullable=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False)
    resolution_result: Mapped[str | None] = mapped_column(String(3))
    final_resolution_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
