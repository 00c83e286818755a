"""Canonical command schema - the single contract for both parse paths.

The rule engine and the LLM fallback MUST produce this structure.
LLM output that does not validate against it triggers the rule result.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class Intent(str, Enum):
    """Allowed intents - FROZEN. Validator and executor switch over all 16."""
    # Sales & quotes
    CREATE_ESTIMATE = "CREATE_ESTIMATE"
    CREATE_ORDER = "CREATE_ORDER"
    SHARE_QUOTE = "SHARE_QUOTE"
    CHECK_STOCK = "CHECK_STOCK"
    # Ledger & payments
    CHECK_LEDGER = "CHECK_LEDGER"
    ADD_PAYMENT = "ADD_PAYMENT"
    SHARE_LEDGER = "SHARE_LEDGER"  # also payment reminders
    # Purchase & inventory
    ADD_STOCK_MANUAL = "ADD_STOCK_MANUAL"
    ADD_PURCHASE_DRAFT = "ADD_PURCHASE_DRAFT"
    TRANSFER_STOCK = "TRANSFER_STOCK"
    # Rates
    CHECK_RATE = "CHECK_RATE"
    UPDATE_RATE = "UPDATE_RATE"
    GENERATE_RATE_BANNER = "GENERATE_RATE_BANNER"
    # Calculators
    CALCULATE_WEIGHT = "CALCULATE_WEIGHT"
    CALCULATE_PRICE = "CALCULATE_PRICE"
    # System
    CANCEL_ACTION = "CANCEL_ACTION"


RATE_INTENTS = frozenset({Intent.CHECK_RATE, Intent.UPDATE_RATE, Intent.GENERATE_RATE_BANNER})
STOCK_INTENTS = frozenset({Intent.CHECK_STOCK, Intent.ADD_STOCK_MANUAL, Intent.TRANSFER_STOCK})


class ProductCategory(str, Enum):
    TMT = "tmt"
    CEMENT = "cement"
    PIPE = "pipe"
    SHEET = "sheet"
    STRUCTURAL = "structural"
    WIRE = "wire"
    SERVICE = "service"


class UOM(str, Enum):
    PCS = "PCS"
    KGS = "KGS"
    BAG = "BAG"
    BUNDLE = "BUNDLE"
    TON = "TON"


class GodownHint(str, Enum):
    MAIN = "main"
    SUTRAHI = "sutrahi"


class PaymentMode(str, Enum):
    CASH = "Cash"
    ONLINE = "Online"
    CHEQUE = "Cheque"


class ParseSource(str, Enum):
    REGEX_RULE = "REGEX_RULE"
    LLM_FALLBACK = "LLM_FALLBACK"
    MANUAL_ENTRY = "MANUAL_ENTRY"


class DraftStatus(str, Enum):
    DRAFT = "DRAFT"
    NEEDS_CLARIFICATION = "NEEDS_CLARIFICATION"
    CONFIRMED = "CONFIRMED"
    POSTED = "POSTED"
    REJECTED = "REJECTED"


class ClarificationCode(str, Enum):
    MISSING_BRAND = "MISSING_BRAND"
    MISSING_SIZE = "MISSING_SIZE"
    UOM_MISMATCH = "UOM_MISMATCH"
    CONFIRM_WEIGHT = "CONFIRM_WEIGHT"
    GODOWN_AMBIGUOUS = "GODOWN_AMBIGUOUS"
    CUSTOMER_AMBIGUOUS = "CUSTOMER_AMBIGUOUS"
    LOW_STOCK = "LOW_STOCK"
    NEGATIVE_STOCK_DEFAULT = "NEGATIVE_STOCK_DEFAULT"
    UNKNOWN_ITEM = "UNKNOWN_ITEM"
    BUNDLE_RODS_NEEDED = "BUNDLE_RODS_NEEDED"


def _clean_optional_str(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


class ParsedItem(BaseModel):
    """One product line. Every attribute is optional."""
    raw_text: str = ""
    category: Optional[ProductCategory] = None
    brand: Optional[str] = None
    size: Optional[str] = None
    qty: Optional[float] = None
    uom: Optional[UOM] = None
    godown_hint: Optional[GodownHint] = None

    @field_validator("brand", "size", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _clean_optional_str(v)

    @field_validator("qty")
    @classmethod
    def validate_qty(cls, v: Optional[float]) -> Optional[float]:
        """Zero or negative quantities are treated as not spoken (LLM puts 0 for unknown)."""
        if v is not None and v <= 0:
            return None
        return v

    @model_validator(mode="after")
    def unit_requires_quantity(self):
        """A unit never exists without a quantity. A bare quantity is allowed."""
        if self.uom is not None and self.qty is None:
            self.uom = None
        return self


class ParsedCustomer(BaseModel):
    """Heuristic hints only. Never used as a direct key."""
    name_hint: Optional[str] = None
    phone_hint: Optional[str] = None
    address_hint: Optional[str] = None

    @field_validator("name_hint", "phone_hint", "address_hint", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _clean_optional_str(v)

    def is_empty(self) -> bool:
        return not (self.name_hint or self.phone_hint or self.address_hint)


class ParsedFinancials(BaseModel):
    amount: Optional[float] = None
    mode: Optional[PaymentMode] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            return None
        return v

    def is_empty(self) -> bool:
        return self.amount is None and self.mode is None


class CanonicalCommand(BaseModel):
    """Output of either parse path. The rest of the system does not care which."""
    intent: Intent
    items: List[ParsedItem] = Field(default_factory=list)
    customer: Optional[ParsedCustomer] = None
    financials: Optional[ParsedFinancials] = None
    needs_clarification: bool = False
    clarification_reason: Optional[str] = None

    @model_validator(mode="after")
    def drop_empty_sections(self):
        """LLM often returns empty objects for unknown sections."""
        if self.customer is not None and self.customer.is_empty():
            self.customer = None
        if self.financials is not None and self.financials.is_empty():
            self.financials = None
        return self

    @property
    def price(self) -> Optional[float]:
        return self.financials.amount if self.financials else None


class ClarificationOption(BaseModel):
    label: str
    value: str


class Clarification(BaseModel):
    """A missing-information prompt blocking confirmation of a draft."""
    reason_code: ClarificationCode
    prompt: str
    options: List[ClarificationOption] = Field(default_factory=list)
    item_index: Optional[int] = None


class ParseResult(BaseModel):
    """A canonical command plus how it was produced."""
    raw_text: str
    command: CanonicalCommand
    confidence: float
    parse_source: ParseSource = ParseSource.REGEX_RULE
