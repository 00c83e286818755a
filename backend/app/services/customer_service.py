"""Customer lookup from spoken hints. A hint is never used as a key."""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.customer import Customer
from app.services.entity_resolver import normalize_name, phone_digits

logger = logging.getLogger(__name__)

# Shortest phone fragment worth matching on
MIN_PHONE_SUFFIX = 4


def find_customers(db: Session, name_hint: Optional[str] = None, phone_hint: Optional[str] = None) -> List[Customer]:
    """Customers whose name contains the hint or whose phone ends with the spoken digits."""
    filters = []

    name = normalize_name(name_hint)
    if name:
        filters.append(Customer.name.ilike(f"%{name}%"))

    digits = phone_digits(phone_hint)
    if len(digits) >= MIN_PHONE_SUFFIX:
        filters.append(Customer.phone.like(f"%{digits}"))

    if not filters:
        return []

    customers = db.query(Customer).filter(or_(*filters)).order_by(Customer.name, Customer.id).all()
    logger.info(f"Customer lookup name='{name}' phone='{digits}': {len(customers)} match(es)")
    return customers
