"""
Execute a canonical command against the books.

Called for CONFIRMED drafts (and for direct runs of clauses that need no
clarification). Every intent has exactly one handler in HANDLERS; intents
whose screens are not part of the voice backend answer "unsupported"
instead of falling through silently.

SAFETY MODEL:
- Missing required fields refuse execution. No defaults are substituted.
- Ambiguous lookups (many rate rows, many customers) return candidates and
  mutate nothing. The caller re-invokes with `selected_id`.
- Database errors roll back and come back as a failed result.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ai.command_schema import UOM, CanonicalCommand, Intent, ParsedItem, ProductCategory
from app.agent.lexicon import INTENT_DISPLAY
from app.core.config import settings
from app.services import customer_service, ledger_service, rate_service
from app.services.entity_resolver import Resolution, ResolvedEntity, resolve_single
from app.services.tmt_calculator import (
    calculate_tmt_weight,
    conversion_formula,
    format_weight,
    is_known_diameter,
    parse_size_mm,
)
from app.services.whatsapp import format_amount, format_reminder_message, whatsapp_link

logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    NEEDS_SELECTION = "needs_selection"
    NEEDS_CLARIFICATION = "needs_clarification"
    FAILED = "failed"
    UNPARSED = "unparsed"
    PENDING_CONFIRMATION = "pending_confirmation"


class SelectionOption(BaseModel):
    id: int
    label: str


class ExecutionResult(BaseModel):
    success: bool
    status: ExecutionStatus
    message: str
    message_hi: str
    options: List[SelectionOption] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)


def _ok(message: str, message_hi: str, **data) -> ExecutionResult:
    return ExecutionResult(success=True, status=ExecutionStatus.SUCCESS, message=message, message_hi=message_hi, data=data)


def _failed(message: str, message_hi: str) -> ExecutionResult:
    return ExecutionResult(success=False, status=ExecutionStatus.FAILED, message=message, message_hi=message_hi)


def _needs_info(message: str, message_hi: str) -> ExecutionResult:
    return ExecutionResult(
        success=False, status=ExecutionStatus.NEEDS_CLARIFICATION, message=message, message_hi=message_hi
    )


def _needs_selection(message: str, message_hi: str, options: List[SelectionOption]) -> ExecutionResult:
    return ExecutionResult(
        success=False,
        status=ExecutionStatus.NEEDS_SELECTION,
        message=message,
        message_hi=message_hi,
        options=options,
    )


def _first_item(command: CanonicalCommand) -> ParsedItem:
    return command.items[0] if command.items else ParsedItem()


def _item_label(brand: Optional[str], size: Optional[str]) -> str:
    return " ".join(p for p in (brand, size) if p)


# ==============================================================================
# RATES
# ==============================================================================

def _rate_option(rate) -> SelectionOption:
    return SelectionOption(id=rate.id, label=f"{_item_label(rate.brand, rate.size)} ₹{format_amount(rate.price)}/{rate.unit}")


def _update_rate(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    item = _first_item(command)
    price = command.price
    if not item.brand:
        return _needs_info("Brand not specified", "ब्रांड नहीं बताया")
    if price is None:
        return _needs_info("Rate not specified", "रेट नहीं बताया")

    category = item.category.value if item.category else None
    rows = rate_service.find_today_rates(db, category, item.brand, item.size, exact=True)
    resolved = resolve_single(rows, selected_id)
    label = _item_label(item.brand, item.size)

    if resolved.resolution == Resolution.MANY:
        return _needs_selection(
            f"{len(resolved.candidates)} rates match '{label}'. Which one?",
            f"'{label}' के {len(resolved.candidates)} रेट मिले। कौन सा?",
            [_rate_option(r) for r in resolved.candidates],
        )

    if resolved.resolution == Resolution.NONE:
        if selected_id is not None:
            return _failed("Selected rate no longer exists", "चुना हुआ रेट नहीं मिला")
        rate = rate_service.insert_rate(db, category, item.brand, item.size, price)
        return _ok(
            f"{label} rate set to ₹{format_amount(price)}",
            f"{label} का रेट ₹{format_amount(price)} सेट",
            rate_id=rate.id, action="inserted",
        )

    rate = rate_service.update_rate_price(db, resolved.match, price)
    return _ok(
        f"{_item_label(rate.brand, rate.size)} rate updated to ₹{format_amount(price)}",
        f"{_item_label(rate.brand, rate.size)} का रेट ₹{format_amount(price)} अपडेट",
        rate_id=rate.id, action="updated",
    )


def _check_rate(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    item = _first_item(command)
    category = item.category.value if item.category else None
    rows = rate_service.find_today_rates(db, category, item.brand, item.size)
    if selected_id is not None:
        rows = [r for r in rows if r.id == selected_id]

    if not rows:
        label = _item_label(item.brand, item.size) or "this item"
        return _failed(f"No rate set today for {label}", f"आज {label} का कोई रेट नहीं है")

    rates = [{"id": r.id, "brand": r.brand, "size": r.size, "price": float(r.price), "unit": r.unit} for r in rows]
    lines = ", ".join(f"{_item_label(r['brand'], r['size'])} ₹{format_amount(r['price'])}/{r['unit']}" for r in rates)
    return _ok(f"Today's rate: {lines}", f"आज का रेट: {lines}", rates=rates)


# ==============================================================================
# CUSTOMERS & LEDGER
# ==============================================================================

def _resolve_customer(db: Session, command: CanonicalCommand, selected_id: Optional[int]):
    """(ResolvedEntity, None) when exactly one customer matched, else (None, result to return)."""
    customer = command.customer
    if customer is None or not (customer.name_hint or customer.phone_hint):
        return None, _needs_info("Customer name not specified", "ग्राहक का नाम नहीं बताया")

    candidates = customer_service.find_customers(db, customer.name_hint, customer.phone_hint)
    resolved: ResolvedEntity = resolve_single(candidates, selected_id)
    hint = customer.name_hint or customer.phone_hint

    if resolved.resolution == Resolution.NONE:
        return None, _failed(f"Customer '{hint}' not found", f"ग्राहक '{hint}' नहीं मिला")
    if resolved.resolution == Resolution.MANY:
        options = [
            SelectionOption(id=c.id, label=f"{c.name} ({c.phone})" if c.phone else c.name)
            for c in resolved.candidates
        ]
        return None, _needs_selection(
            f"{len(options)} customers match '{hint}'. Which one?",
            f"'{hint}' नाम के {len(options)} ग्राहक मिले। कौन सा?",
            options,
        )
    return resolved, None


def _share_ledger(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    """Payment reminder: balance (or the spoken amount) sent as a WhatsApp message."""
    resolved, early = _resolve_customer(db, command, selected_id)
    if early:
        return early
    customer = resolved.match

    amount = command.price if command.price is not None else float(customer.current_balance or 0)
    if amount <= 0:
        return _failed(f"{customer.name} has no pending balance", f"{customer.name} का कोई बकाया नहीं है")

    message = format_reminder_message(customer.name, amount)
    link = whatsapp_link(customer.phone, message)
    if link is None:
        logger.warning(f"Customer {customer.id} has no usable phone for WhatsApp reminder")
        return ExecutionResult(
            success=True,
            status=ExecutionStatus.SUCCESS,
            message=f"Reminder ready for {customer.name}, but no phone number on file",
            message_hi=f"{customer.name} का रिमाइंडर तैयार, लेकिन फ़ोन नंबर नहीं है",
            data={"customer_id": customer.id, "amount": amount, "reminder_text": message, "whatsapp_link": None},
        )

    return _ok(
        f"Reminder for ₹{format_amount(amount)} ready for {customer.name}",
        f"{customer.name} को ₹{format_amount(amount)} का रिमाइंडर तैयार",
        customer_id=customer.id, amount=amount, reminder_text=message, whatsapp_link=link,
    )


def _check_ledger(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    resolved, early = _resolve_customer(db, command, selected_id)
    if early:
        return early
    customer = resolved.match
    balance = float(customer.current_balance or 0)
    entries = [
        {
            "id": e.id,
            "debit": float(e.debit or 0),
            "credit": float(e.credit or 0),
            "description": e.description,
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
        for e in ledger_service.recent_entries(db, customer.id)
    ]
    return _ok(
        f"{customer.name}: balance ₹{format_amount(balance)}",
        f"{customer.name}: बकाया ₹{format_amount(balance)}",
        customer_id=customer.id, balance=balance, entries=entries,
    )


def _add_payment(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    amount = command.price
    if amount is None:
        return _needs_info("Payment amount not specified", "रकम नहीं बताई")

    resolved, early = _resolve_customer(db, command, selected_id)
    if early:
        return early
    customer = resolved.match

    mode = command.financials.mode.value if command.financials and command.financials.mode else None
    entry = ledger_service.record_payment(db, customer, amount, mode)
    balance = float(customer.current_balance or 0)
    return _ok(
        f"₹{format_amount(amount)} received from {customer.name}. Balance ₹{format_amount(balance)}",
        f"{customer.name} से ₹{format_amount(amount)} जमा। बकाया ₹{format_amount(balance)}",
        customer_id=customer.id, ledger_id=entry.id, balance=balance,
    )


# ==============================================================================
# CALCULATORS & SYSTEM
# ==============================================================================

def _calculate_weight(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    item = _first_item(command)
    diameter = parse_size_mm(item.size)
    if item.uom == UOM.BUNDLE:
        return _needs_info("Rods per bundle needed", "एक बंडल में कितने रॉड?")
    if item.category not in (None, ProductCategory.TMT) or not is_known_diameter(diameter):
        return _needs_info("TMT size (mm) needed", "सरिया का साइज (mm) बताएं")
    if item.qty is None or item.uom not in (None, UOM.PCS):
        return _needs_info("Number of pieces needed", "कितने पीस?")

    length = settings.TMT_STANDARD_LENGTH_M
    weight = calculate_tmt_weight(diameter, item.qty, length)
    formula = conversion_formula(diameter, length, item.qty)
    return _ok(
        f"{diameter}mm × {item.qty:g} pcs = {format_weight(weight)}",
        f"{diameter}mm × {item.qty:g} पीस = {format_weight(weight)}",
        weight_kg=round(weight, 2), formula=formula,
    )


def _cancel(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    return _ok("Cancelled", "रद्द कर दिया")


def _unsupported(db: Session, command: CanonicalCommand, selected_id: Optional[int]) -> ExecutionResult:
    display = INTENT_DISPLAY[command.intent]
    return _failed(
        f"'{display['en']}' is not handled by voice yet. Please use the app screen.",
        f"'{display['hi']}' अभी आवाज़ से नहीं होता। ऐप स्क्रीन इस्तेमाल करें।",
    )


Handler = Callable[[Session, CanonicalCommand, Optional[int]], ExecutionResult]

HANDLERS: Dict[Intent, Handler] = {
    Intent.UPDATE_RATE: _update_rate,
    Intent.CHECK_RATE: _check_rate,
    Intent.SHARE_LEDGER: _share_ledger,
    Intent.CHECK_LEDGER: _check_ledger,
    Intent.ADD_PAYMENT: _add_payment,
    Intent.CALCULATE_WEIGHT: _calculate_weight,
    Intent.CANCEL_ACTION: _cancel,
    Intent.CREATE_ESTIMATE: _unsupported,
    Intent.CREATE_ORDER: _unsupported,
    Intent.SHARE_QUOTE: _unsupported,
    Intent.CHECK_STOCK: _unsupported,
    Intent.ADD_STOCK_MANUAL: _unsupported,
    Intent.ADD_PURCHASE_DRAFT: _unsupported,
    Intent.TRANSFER_STOCK: _unsupported,
    Intent.GENERATE_RATE_BANNER: _unsupported,
    Intent.CALCULATE_PRICE: _unsupported,
}


def execute_command(
    db: Session,
    command: CanonicalCommand,
    selected_id: Optional[int] = None,
    auto_commit: bool = True,
) -> ExecutionResult:
    """
    Run one command.

    Args:
        db: Database session
        command: Validated canonical command
        selected_id: Candidate picked after a previous needs_selection answer
        auto_commit: If False, the caller owns the transaction (draft posting)
    """
    handler = HANDLERS[command.intent]
    logger.info(f"Executing {command.intent.value} (selected_id={selected_id})")

    try:
        result = handler(db, command, selected_id)
        if result.success and auto_commit:
            db.commit()
        return result
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error executing {command.intent.value}: {e}", exc_info=True)
        return _failed("Could not save. Please try again.", "सेव नहीं हो सका। दोबारा कोशिश करें।")
