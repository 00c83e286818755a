"""
Validator / Clarification Generator.

Turns a CanonicalCommand into a draft-ready ValidationResult:
- clarifications for anything the owner must answer before confirming
- render data for the draft card (line items, converted weight, checklist)

Rules, per item, in order:
1. MISSING_BRAND      - brand-requiring intent and no brand
2. MISSING_SIZE       - TMT without a size
3. BUNDLE_RODS_NEEDED - unit BUNDLE (rods per bundle is never assumed)
4. CONFIRM_WEIGHT     - pipe sold in pieces
A brand-requiring intent with zero items gets one command-level MISSING_BRAND.

TMT quantities in PCS with a known diameter are converted to kg with the
(d²/162) × length formula. The formula string is shown next to the result.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from ai.command_schema import (
    UOM,
    CanonicalCommand,
    Clarification,
    ClarificationCode,
    ClarificationOption,
    DraftStatus,
    Intent,
    ParsedItem,
    ParseSource,
    ProductCategory,
)
from app.agent.lexicon import GODOWN_DISPLAY, INTENT_DISPLAY
from app.core.config import settings
from app.services.tmt_calculator import (
    COMMON_DIAMETERS,
    calculate_tmt_weight,
    conversion_formula,
    is_known_diameter,
    parse_size_mm,
)

logger = logging.getLogger(__name__)

BRAND_REQUIRED_INTENTS = frozenset({Intent.UPDATE_RATE, Intent.CHECK_RATE, Intent.ADD_STOCK_MANUAL})

BRAND_OPTIONS = {
    ProductCategory.TMT: ("Kamdhenu", "Jindal", "Ankur", "TATA"),
    ProductCategory.CEMENT: ("Bangur", "Mycem", "Dalmia", "ACC"),
}

RODS_PER_BUNDLE_OPTIONS = (6, 8, 10, 12)

PROMPTS = {
    ClarificationCode.MISSING_BRAND: {"hi": "कौन सा ब्रांड?", "en": "Which brand?"},
    ClarificationCode.MISSING_SIZE: {"hi": "कौन सा साइज (mm)?", "en": "Which size (mm)?"},
    ClarificationCode.BUNDLE_RODS_NEEDED: {"hi": "एक बंडल में कितने रॉड?", "en": "Rods per bundle?"},
    ClarificationCode.CONFIRM_WEIGHT: {
        "hi": "पाइप पीस में है, वजन पक्का करें?",
        "en": "Pipe is in pieces. Confirm the weight?",
    },
}

CHECKLIST_LABELS = {
    "brand": {"hi": "ब्रांड", "en": "Brand"},
    "size": {"hi": "साइज", "en": "Size"},
    "qty": {"hi": "मात्रा", "en": "Quantity"},
    "price": {"hi": "रेट", "en": "Rate"},
    "customer": {"hi": "ग्राहक", "en": "Customer"},
    "amount": {"hi": "रकम", "en": "Amount"},
}

# Fields the owner should see ticked off before confirming
REQUIRED_FIELDS = {
    Intent.UPDATE_RATE: ("brand", "size", "price"),
    Intent.CHECK_RATE: ("brand",),
    Intent.GENERATE_RATE_BANNER: (),
    Intent.ADD_STOCK_MANUAL: ("brand", "size", "qty"),
    Intent.ADD_PURCHASE_DRAFT: ("brand", "qty"),
    Intent.TRANSFER_STOCK: ("qty",),
    Intent.CHECK_STOCK: (),
    Intent.CREATE_ESTIMATE: ("brand", "size", "qty"),
    Intent.CREATE_ORDER: ("brand", "size", "qty", "customer"),
    Intent.SHARE_QUOTE: ("customer",),
    Intent.CHECK_LEDGER: ("customer",),
    Intent.ADD_PAYMENT: ("customer", "amount"),
    Intent.SHARE_LEDGER: ("customer",),
    Intent.CALCULATE_WEIGHT: ("size", "qty"),
    Intent.CALCULATE_PRICE: ("qty",),
    Intent.CANCEL_ACTION: (),
}


class LineItem(BaseModel):
    index: int
    description: str
    category: Optional[str] = None
    brand: Optional[str] = None
    size: Optional[str] = None
    qty: Optional[float] = None
    uom: Optional[str] = None
    godown: Optional[str] = None
    converted_qty: Optional[float] = None
    converted_uom: Optional[str] = None
    formula: Optional[str] = None


class ChecklistEntry(BaseModel):
    field: str
    label: str
    done: bool


class RenderData(BaseModel):
    intent: Intent
    intent_display: str
    raw_input: str
    parse_source: ParseSource
    confidence: float
    line_items: List[LineItem] = Field(default_factory=list)
    customer: Optional[str] = None
    amount: Optional[float] = None
    checklist: List[ChecklistEntry] = Field(default_factory=list)


class ValidationResult(BaseModel):
    status: DraftStatus
    clarifications: List[Clarification] = Field(default_factory=list)
    render_data: RenderData


def _lang(language: Optional[str]) -> str:
    language = language or settings.DEFAULT_LANGUAGE
    return language if language in ("hi", "en") else "en"


def _prompt(code: ClarificationCode, lang: str) -> str:
    return PROMPTS[code][lang]


def _brand_clarification(category: Optional[ProductCategory], lang: str, item_index: Optional[int]) -> Clarification:
    # No category yet: TMT is the shop's main line
    brands = BRAND_OPTIONS.get(category or ProductCategory.TMT, ())
    return Clarification(
        reason_code=ClarificationCode.MISSING_BRAND,
        prompt=_prompt(ClarificationCode.MISSING_BRAND, lang),
        options=[ClarificationOption(label=b, value=b) for b in brands],
        item_index=item_index,
    )


def _size_clarification(lang: str, item_index: int) -> Clarification:
    return Clarification(
        reason_code=ClarificationCode.MISSING_SIZE,
        prompt=_prompt(ClarificationCode.MISSING_SIZE, lang),
        options=[ClarificationOption(label=f"{d}mm", value=f"{d}mm") for d in COMMON_DIAMETERS],
        item_index=item_index,
    )


def _bundle_clarification(lang: str, item_index: int) -> Clarification:
    suffix = "रॉड" if lang == "hi" else "rods"
    return Clarification(
        reason_code=ClarificationCode.BUNDLE_RODS_NEEDED,
        prompt=_prompt(ClarificationCode.BUNDLE_RODS_NEEDED, lang),
        options=[ClarificationOption(label=f"{n} {suffix}", value=str(n)) for n in RODS_PER_BUNDLE_OPTIONS],
        item_index=item_index,
    )


def _weight_clarification(lang: str, item_index: int) -> Clarification:
    return Clarification(
        reason_code=ClarificationCode.CONFIRM_WEIGHT,
        prompt=_prompt(ClarificationCode.CONFIRM_WEIGHT, lang),
        options=[ClarificationOption(label="हाँ, सही है" if lang == "hi" else "Yes, confirm", value="confirm")],
        item_index=item_index,
    )


def item_clarifications(intent: Intent, item: ParsedItem, index: int, lang: str) -> List[Clarification]:
    """Clarifications for one item, in rule order."""
    clarifications = []
    if intent in BRAND_REQUIRED_INTENTS and not item.brand:
        clarifications.append(_brand_clarification(item.category, lang, index))
    if item.category == ProductCategory.TMT and not item.size:
        clarifications.append(_size_clarification(lang, index))
    if item.uom == UOM.BUNDLE:
        clarifications.append(_bundle_clarification(lang, index))
    if item.category == ProductCategory.PIPE and item.uom == UOM.PCS:
        clarifications.append(_weight_clarification(lang, index))
    return clarifications


def build_line_item(item: ParsedItem, index: int) -> LineItem:
    parts = [item.brand, item.category.value.upper() if item.category else None, item.size]
    line = LineItem(
        index=index,
        description=" ".join(p for p in parts if p) or item.raw_text,
        category=item.category.value if item.category else None,
        brand=item.brand,
        size=item.size,
        qty=item.qty,
        uom=item.uom.value if item.uom else None,
        godown=GODOWN_DISPLAY.get(item.godown_hint) if item.godown_hint else None,
    )

    if item.category == ProductCategory.TMT and item.uom == UOM.PCS and item.qty is not None:
        diameter = parse_size_mm(item.size)
        if is_known_diameter(diameter):
            length = settings.TMT_STANDARD_LENGTH_M
            line.converted_qty = round(calculate_tmt_weight(diameter, item.qty, length), 2)
            line.converted_uom = UOM.KGS.value
            line.formula = conversion_formula(diameter, length, item.qty)
    return line


def build_checklist(command: CanonicalCommand, lang: str) -> List[ChecklistEntry]:
    items = command.items
    present = {
        "brand": bool(items) and all(i.brand for i in items),
        "size": bool(items) and all(i.size for i in items),
        "qty": bool(items) and all(i.qty is not None for i in items),
        "price": command.price is not None,
        "customer": command.customer is not None,
        "amount": command.price is not None,
    }
    return [
        ChecklistEntry(field=f, label=CHECKLIST_LABELS[f][lang], done=present[f])
        for f in REQUIRED_FIELDS[command.intent]
    ]


async def validate_parsed_command(
    command: CanonicalCommand,
    raw_text: str,
    parse_source: ParseSource,
    confidence: float,
    language: Optional[str] = None,
) -> ValidationResult:
    """Generate clarifications and draft render data. Never touches the database."""
    lang = _lang(language)

    clarifications: List[Clarification] = []
    if not command.items and command.intent in BRAND_REQUIRED_INTENTS:
        clarifications.append(_brand_clarification(None, lang, None))
    for index, item in enumerate(command.items):
        clarifications.extend(item_clarifications(command.intent, item, index, lang))

    customer = None
    if command.customer is not None:
        customer = command.customer.name_hint or command.customer.phone_hint

    render_data = RenderData(
        intent=command.intent,
        intent_display=INTENT_DISPLAY[command.intent][lang],
        raw_input=raw_text,
        parse_source=parse_source,
        confidence=confidence,
        line_items=[build_line_item(item, i) for i, item in enumerate(command.items)],
        customer=customer,
        amount=command.price,
        checklist=build_checklist(command, lang),
    )

    status = DraftStatus.NEEDS_CLARIFICATION if clarifications else DraftStatus.DRAFT
    logger.info(
        f"Validated {command.intent.value}: status={status.value}, "
        f"clarifications={[c.reason_code.value for c in clarifications]}"
    )
    return ValidationResult(status=status, clarifications=clarifications, render_data=render_data)
