"""Ledger entries. Keeps Customer.current_balance in step with every line."""
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from app.models.customer import Customer
from app.models.ledger import Ledger


def add_ledger_entry(
    db: Session,
    customer: Customer,
    debit: Decimal | float = Decimal("0"),
    credit: Decimal | float = Decimal("0"),
    payment_mode: str | None = None,
    description: str | None = None,
) -> Ledger:
    """Caller commits. Balance moves by debit - credit."""
    debit = Decimal(str(debit))
    credit = Decimal(str(credit))
    entry = Ledger(
        customer_id=customer.id,
        debit=debit,
        credit=credit,
        payment_mode=payment_mode,
        description=description,
    )
    db.add(entry)
    customer.current_balance = Decimal(str(customer.current_balance or 0)) + debit - credit
    db.flush()
    return entry


def record_payment(db: Session, customer: Customer, amount: float, mode: str | None = None) -> Ledger:
    return add_ledger_entry(
        db,
        customer,
        credit=amount,
        payment_mode=mode,
        description=f"Payment received ({mode or 'unspecified'})",
    )


def recent_entries(db: Session, customer_id: int, limit: int = 10) -> List[Ledger]:
    return (
        db.query(Ledger)
        .filter(Ledger.customer_id == customer_id)
        .order_by(Ledger.created_at.desc(), Ledger.id.desc())
        .limit(limit)
        .all()
    )
