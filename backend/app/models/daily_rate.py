"""
DailyRate: today's selling rate for one (category, brand, size).

Rates are keyed by day. Updating a rate touches only today's row; an older
day's row is history and is never edited by voice commands.
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime
from sqlalchemy.sql import func
from app.db.base import Base


class DailyRate(Base):
    __tablename__ = "daily_rates"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(32), nullable=False, index=True)  # tmt | cement | pipe | ...
    brand = Column(String(128), nullable=False)
    size = Column(String(32), nullable=True)  # "8mm", "40x40"; None for cement
    price = Column(Numeric(10, 2), nullable=False)
    unit = Column(String(16), nullable=False, default="kg")  # kg | bag
    rate_date = Column(Date, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
