"""
Payment reminder text and wa.me deep link.

The link only opens WhatsApp with the message filled in; the owner presses send.
"""
from urllib.parse import quote

from app.core.config import settings
from app.services.entity_resolver import phone_digits


def format_amount(amount: float) -> str:
    """12500.0 -> '12,500', 99.5 -> '99.50'"""
    amount = float(amount)
    if amount.is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def format_reminder_message(customer_name: str, amount: float) -> str:
    return (
        f"{settings.SHOP_NAME} – Payment Reminder\n\n"
        f"Namaste {customer_name} ji,\n"
        f"Aapka ₹{format_amount(amount)} ka payment abhi baki hai.\n"
        f"Kripya jaldi se jama kar dein.\n\n"
        f"– {settings.SHOP_NAME}, {settings.SHOP_ADDRESS}"
    )


def whatsapp_link(phone: str | None, message: str) -> str | None:
    """wa.me link for an Indian mobile number. None if no usable number."""
    digits = phone_digits(phone)
    if len(digits) < 10:
        return None
    return f"https://wa.me/{settings.WHATSAPP_COUNTRY_CODE}{digits[-10:]}?text={quote(message)}"
