"""
Executor tests against an in-memory SQLite database.

- UPDATE_RATE: 0 rows -> insert, 1 row -> update, many -> ask, no mutation
- Customer intents: not found / ambiguous / single
- Every intent has a handler
"""
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from ai.command_schema import (
    UOM,
    CanonicalCommand,
    Intent,
    ParsedCustomer,
    ParsedFinancials,
    ParsedItem,
    PaymentMode,
    ProductCategory,
)
from app.agent.command_parser import parse_command
from app.agent.executor import HANDLERS, ExecutionStatus, execute_command
from app.db.base import Base
from app.models import Customer, DailyRate, Ledger


def setup_test_db():
    """Create in-memory DB with customers and no rates."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    db = Session(engine)

    db.add(Customer(id=1, name="Ramesh Kumar", phone="9876543210", current_balance=Decimal("12500")))
    db.add(Customer(id=2, name="Rajan Yadav", phone="9123456780", current_balance=Decimal("8000")))
    db.add(Customer(id=3, name="Suresh", phone=None, current_balance=Decimal("1500")))
    db.commit()
    return db


def _rate(db, brand, size, price, rate_date=None, category="tmt"):
    row = DailyRate(category=category, brand=brand, size=size, price=Decimal(str(price)), unit="kg",
                    rate_date=rate_date or date.today())
    db.add(row)
    db.commit()
    return row


def test_every_intent_has_a_handler():
    assert set(HANDLERS) == set(Intent), f"Missing: {set(Intent) - set(HANDLERS)}"

    db = setup_test_db()
    for intent in (Intent.CREATE_ORDER, Intent.CHECK_STOCK, Intent.GENERATE_RATE_BANNER):
        result = execute_command(db, CanonicalCommand(intent=intent))
        assert result.status == ExecutionStatus.FAILED
        assert "not handled by voice" in result.message

    result = execute_command(db, CanonicalCommand(intent=Intent.CANCEL_ACTION))
    assert result.success is True
    print("  PASS: exhaustive dispatch")


def test_update_rate_inserts_when_no_row():
    print("\n" + "=" * 70)
    print("TEST: UPDATE_RATE 0 / 1 / many")
    print("=" * 70)
    db = setup_test_db()
    # Yesterday's row is history, not a match
    _rate(db, "Ankur", "8mm", 60, rate_date=date.today() - timedelta(days=1))

    result = execute_command(db, parse_command("ankur 8mm ka rate 65 kar do").command)

    assert result.success is True
    assert result.data["action"] == "inserted"
    today_rows = db.query(DailyRate).filter(DailyRate.rate_date == date.today()).all()
    assert len(today_rows) == 1
    assert today_rows[0].brand == "Ankur"
    assert today_rows[0].size == "8mm"
    assert today_rows[0].unit == "kg"
    assert float(today_rows[0].price) == 65
    print(f"  0 rows -> {result.message}")


def test_update_rate_updates_single_row():
    db = setup_test_db()
    row = _rate(db, "Ankur", "8mm", 62)

    result = execute_command(db, parse_command("ankur 8mm ka rate 65 kar do").command)

    assert result.success is True
    assert result.data["action"] == "updated"
    assert result.data["rate_id"] == row.id
    assert db.query(DailyRate).count() == 1
    db.refresh(row)
    assert float(row.price) == 65
    print(f"  1 row -> {result.message}")


def test_update_rate_many_rows_asks_and_does_not_mutate():
    db = setup_test_db()
    # Same key entered twice today ("8mm" and "8 mm"); another brand stays out of it
    first = _rate(db, "Ankur", "8mm", 62)
    second = _rate(db, "ankur", "8 mm", 64)
    other = _rate(db, "Ankur Gold", "8mm", 70)
    command = parse_command("ankur 8mm ka rate 65 kar do").command

    result = execute_command(db, command)

    assert result.success is False
    assert result.status == ExecutionStatus.NEEDS_SELECTION
    assert sorted(o.id for o in result.options) == sorted([first.id, second.id])
    db.refresh(first)
    db.refresh(second)
    assert float(first.price) == 62 and float(second.price) == 64, "No mutation on ambiguity"
    assert db.query(DailyRate).count() == 3

    # Owner picks one
    result = execute_command(db, command, selected_id=second.id)
    assert result.success is True
    db.refresh(first)
    db.refresh(second)
    db.refresh(other)
    assert float(first.price) == 62
    assert float(second.price) == 65
    assert float(other.price) == 70
    print(f"  many rows -> selection, then {result.message}")


def test_update_rate_never_touches_a_neighbouring_row():
    db = setup_test_db()
    sixteen = _rate(db, "Ankur", "16mm", 58)
    power = _rate(db, "Bangur Power", None, 400, category="cement")

    result = execute_command(db, parse_command("ankur 6mm ka rate 60 kar do").command)
    assert result.data["action"] == "inserted"

    result = execute_command(db, parse_command("bangur cement ka rate 380 kar do").command)
    assert result.data["action"] == "inserted"

    db.refresh(sixteen)
    db.refresh(power)
    assert float(sixteen.price) == 58, "6mm must not update 16mm"
    assert float(power.price) == 400, "Bangur must not update Bangur Power"
    assert db.query(DailyRate).count() == 4
    print("  PASS: 6mm != 16mm, Bangur != Bangur Power")


def test_update_rate_refuses_missing_fields():
    db = setup_test_db()
    no_price = CanonicalCommand(intent=Intent.UPDATE_RATE, items=[ParsedItem(brand="Ankur", size="8mm")])
    no_brand = CanonicalCommand(
        intent=Intent.UPDATE_RATE,
        items=[ParsedItem(category=ProductCategory.TMT, size="8mm")],
        financials=ParsedFinancials(amount=65),
    )

    for command in (no_price, no_brand):
        result = execute_command(db, command)
        assert result.status == ExecutionStatus.NEEDS_CLARIFICATION
    assert db.query(DailyRate).count() == 0


def test_cement_rate_unit_is_bag():
    db = setup_test_db()
    command = CanonicalCommand(
        intent=Intent.UPDATE_RATE,
        items=[ParsedItem(category=ProductCategory.CEMENT, brand="ACC")],
        financials=ParsedFinancials(amount=420),
    )
    result = execute_command(db, command)

    assert result.success is True
    assert db.query(DailyRate).one().unit == "bag"


def test_check_rate_lists_matches():
    db = setup_test_db()
    _rate(db, "Ankur", "8mm", 62)
    _rate(db, "Ankur", "12mm", 60)

    command = CanonicalCommand(intent=Intent.CHECK_RATE, items=[ParsedItem(category=ProductCategory.TMT, brand="Ankur")])
    result = execute_command(db, command)

    assert result.success is True
    assert [(r["size"], r["price"]) for r in result.data["rates"]] == [("12mm", 60.0), ("8mm", 62.0)]

    missing = CanonicalCommand(intent=Intent.CHECK_RATE, items=[ParsedItem(brand="Jindal")])
    assert execute_command(db, missing).status == ExecutionStatus.FAILED


def test_reminder_builds_whatsapp_link():
    db = setup_test_db()
    result = execute_command(db, parse_command("ramesh ko reminder bhejo").command)

    assert result.success is True
    assert result.data["amount"] == 12500
    assert "₹12,500" in result.data["reminder_text"]
    assert "Namaste Ramesh Kumar ji" in result.data["reminder_text"]
    assert result.data["whatsapp_link"].startswith("https://wa.me/919876543210?text=")
    print(f"  reminder -> {result.data['whatsapp_link'][:40]}...")


def test_reminder_without_phone_still_prepared():
    db = setup_test_db()
    command = CanonicalCommand(intent=Intent.SHARE_LEDGER, customer=ParsedCustomer(name_hint="suresh"))
    result = execute_command(db, command)

    assert result.success is True
    assert result.data["whatsapp_link"] is None


def test_customer_not_found_and_ambiguous():
    db = setup_test_db()

    unknown = CanonicalCommand(intent=Intent.CHECK_LEDGER, customer=ParsedCustomer(name_hint="mahesh"))
    assert execute_command(db, unknown).status == ExecutionStatus.FAILED

    db.add(Customer(id=4, name="Ramesh Yadav", phone="9000000001", current_balance=Decimal("300")))
    db.commit()
    ambiguous = CanonicalCommand(intent=Intent.CHECK_LEDGER, customer=ParsedCustomer(name_hint="ramesh"))
    result = execute_command(db, ambiguous)
    assert result.status == ExecutionStatus.NEEDS_SELECTION
    assert sorted(o.id for o in result.options) == [1, 4]

    result = execute_command(db, ambiguous, selected_id=4)
    assert result.success is True
    assert result.data["balance"] == 300

    no_customer = CanonicalCommand(intent=Intent.CHECK_LEDGER)
    assert execute_command(db, no_customer).status == ExecutionStatus.NEEDS_CLARIFICATION
    print("  PASS: customer 0 / 1 / many")


def test_add_payment_updates_ledger_and_balance():
    db = setup_test_db()
    result = execute_command(db, parse_command("rajan ka ₹5000 jama cash").command)

    assert result.success is True
    assert result.data["balance"] == 3000
    entry = db.query(Ledger).one()
    assert entry.customer_id == 2
    assert float(entry.credit) == 5000
    assert entry.payment_mode == PaymentMode.CASH.value
    assert float(db.get(Customer, 2).current_balance) == 3000


def test_add_payment_requires_amount():
    db = setup_test_db()
    command = CanonicalCommand(intent=Intent.ADD_PAYMENT, customer=ParsedCustomer(name_hint="rajan"))
    assert execute_command(db, command).status == ExecutionStatus.NEEDS_CLARIFICATION
    assert db.query(Ledger).count() == 0


def test_calculate_weight():
    db = setup_test_db()
    command = CanonicalCommand(
        intent=Intent.CALCULATE_WEIGHT,
        items=[ParsedItem(category=ProductCategory.TMT, size="10mm", qty=5, uom=UOM.PCS)],
    )
    result = execute_command(db, command)

    assert result.success is True
    assert result.data["weight_kg"] == 37.04
    assert result.data["formula"] == "(10²/162) × 12m × 5"

    bundle = CanonicalCommand(
        intent=Intent.CALCULATE_WEIGHT,
        items=[ParsedItem(category=ProductCategory.TMT, size="10mm", qty=5, uom=UOM.BUNDLE)],
    )
    assert execute_command(db, bundle).status == ExecutionStatus.NEEDS_CLARIFICATION


if __name__ == "__main__":
    test_every_intent_has_a_handler()
    test_update_rate_inserts_when_no_row()
    test_update_rate_updates_single_row()
    test_update_rate_many_rows_asks_and_does_not_mutate()
    test_update_rate_never_touches_a_neighbouring_row()
    test_update_rate_refuses_missing_fields()
    test_cement_rate_unit_is_bag()
    test_check_rate_lists_matches()
    test_reminder_builds_whatsapp_link()
    test_reminder_without_phone_still_prepared()
    test_customer_not_found_and_ambiguous()
    test_add_payment_updates_ledger_and_balance()
    test_add_payment_requires_amount()
    test_calculate_weight()
    print("\nALL EXECUTOR TESTS PASSED")
