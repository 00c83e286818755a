"""Daily rates: lookup and upsert for today's date."""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ai.command_schema import ProductCategory
from app.models.daily_rate import DailyRate

logger = logging.getLogger(__name__)


def rate_unit(category: Optional[str]) -> str:
    """Cement is sold per bag, everything else per kg."""
    return "bag" if category == ProductCategory.CEMENT.value else "kg"


def size_digits(size: Optional[str]) -> str:
    """'8mm' -> '8'. Matching on the number lets '8 mm' and '8mm' rows meet."""
    if not size:
        return ""
    return size.lower().replace("mm", "").strip()


def find_today_rates(
    db: Session,
    category: Optional[str],
    brand: Optional[str] = None,
    size: Optional[str] = None,
    rate_date: Optional[date] = None,
    exact: bool = False,
) -> List[DailyRate]:
    """
    Today's rows for a category.

    Browsing (exact=False): brand contains, size contains its digits, so
    "8" also hits "18mm". Writing (exact=True): the (category, brand, size)
    key, brand case-insensitive, size compared on its digits ("8 mm" == "8mm").
    """
    query = db.query(DailyRate).filter(
        DailyRate.rate_date == (rate_date or date.today()),
        DailyRate.category == (category or ProductCategory.TMT.value),
    )
    digits = size_digits(size)

    if exact:
        if brand:
            query = query.filter(func.lower(DailyRate.brand) == brand.lower())
        rows = query.order_by(DailyRate.id).all()
        return [r for r in rows if size_digits(r.size) == digits]

    if brand:
        query = query.filter(DailyRate.brand.ilike(f"%{brand}%"))
    if digits:
        query = query.filter(DailyRate.size.ilike(f"%{digits}%"))
    return query.order_by(DailyRate.brand, DailyRate.size, DailyRate.id).all()


def insert_rate(
    db: Session,
    category: Optional[str],
    brand: str,
    size: Optional[str],
    price: float,
    rate_date: Optional[date] = None,
) -> DailyRate:
    category = category or ProductCategory.TMT.value
    rate = DailyRate(
        category=category,
        brand=brand,
        size=size,
        price=Decimal(str(price)),
        unit=rate_unit(category),
        rate_date=rate_date or date.today(),
    )
    db.add(rate)
    db.flush()
    logger.info(f"Inserted rate {rate.id}: {category} {brand} {size} = {price}")
    return rate


def update_rate_price(db: Session, rate: DailyRate, price: float) -> DailyRate:
    old = rate.price
    rate.price = Decimal(str(price))
    db.flush()
    logger.info(f"Updated rate {rate.id}: {rate.brand} {rate.size} {old} -> {price}")
    return rate
