"""
Rule Extractor - deterministic field extraction. NO AI.

Every function here is pure: same text in, same result out.
Matching is substring/regex containment on the lowered text, so English,
Hinglish and Devanagari tokens are handled the same way.

Returns an Extraction:
{
    intent, intent_confidence,
    category?, brand?, size?, godown_hint?, qty?, uom?,
    price?, amount?, payment_mode?,
    customer_name_hint?, customer_phone_hint?
}
"""
import re
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ai.command_schema import GodownHint, Intent, PaymentMode, ProductCategory, UOM
from app.agent import lexicon

logger = logging.getLogger(__name__)

LEDGER_INTENTS = frozenset({Intent.ADD_PAYMENT, Intent.SHARE_LEDGER, Intent.CHECK_LEDGER})

_BRAND_PUNCTUATION = re.compile(r"[.,:;\-_/]+")


@dataclass(frozen=True)
class Extraction:
    intent: Intent
    intent_confidence: float
    category: Optional[ProductCategory] = None
    brand: Optional[str] = None
    size: Optional[str] = None
    godown_hint: Optional[GodownHint] = None
    qty: Optional[float] = None
    uom: Optional[UOM] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    payment_mode: Optional[PaymentMode] = None
    customer_name_hint: Optional[str] = None
    customer_phone_hint: Optional[str] = None


@dataclass(frozen=True)
class IntentMatcher:
    """One step of the intent cascade. Evaluated in order, first hit wins."""
    name: str
    intent: Intent
    confidence: float
    matches: Callable[[str], bool]


def _keyword_matcher(phrases: Tuple[str, ...]) -> Callable[[str], bool]:
    lowered = tuple(p.lower() for p in phrases)
    return lambda text: any(p in text for p in lowered)


def _is_rate_query(text: str) -> bool:
    return bool(lexicon.RATE_WORD.search(text) and lexicon.RATE_QUERY_WORD.search(text))


def _is_rate_update(text: str) -> bool:
    return bool(
        lexicon.RATE_WORD.search(text)
        and lexicon.ANY_NUMBER.search(text)
        and lexicon.RATE_UPDATE_VERB.search(text)
    )


INTENT_MATCHERS = (
    IntentMatcher("rate_query_heuristic", Intent.CHECK_RATE,
                  lexicon.RATE_HEURISTIC_CONFIDENCE, _is_rate_query),
    IntentMatcher("rate_update_heuristic", Intent.UPDATE_RATE,
                  lexicon.RATE_HEURISTIC_CONFIDENCE, _is_rate_update),
    *(
        IntentMatcher(f"keywords:{intent.value}", intent, lexicon.KEYWORD_CONFIDENCE, _keyword_matcher(phrases))
        for intent, phrases in lexicon.INTENT_KEYWORDS
    ),
    IntentMatcher("quantity_hint", Intent.CREATE_ESTIMATE,
                  lexicon.QTY_HINT_CONFIDENCE, lambda text: bool(lexicon.QTY_OR_SIZE_HINT.search(text))),
)


def detect_intent(text: str) -> Tuple[Intent, float]:
    """Run the matcher cascade. Never returns 'no intent': ambiguity is a low confidence."""
    lowered = text.lower()
    for matcher in INTENT_MATCHERS:
        if matcher.matches(lowered):
            logger.debug(f"Intent matcher hit: {matcher.name} -> {matcher.intent.value}")
            return matcher.intent, matcher.confidence
    return Intent.CREATE_ESTIMATE, lexicon.DEFAULT_CONFIDENCE


def _scan_aliases(text: str, table):
    lowered = text.lower()
    for alias, value in table:
        if alias in lowered:
            return value
    return None


def extract_category(text: str) -> Optional[ProductCategory]:
    category = _scan_aliases(text, lexicon.CATEGORY_ALIASES)
    if category:
        return category

    # "8mm" said without "TMT/सरिया"
    if lexicon.SIZE_PATTERNS[0][1].search(text):
        return ProductCategory.TMT

    if lexicon.CEMENT_WORDS.search(text):
        return ProductCategory.CEMENT

    return None


def extract_brand(text: str) -> Optional[str]:
    # STT sometimes inserts punctuation inside brand names
    normalized = _BRAND_PUNCTUATION.sub(" ", text.lower())

    brand = _scan_aliases(normalized, lexicon.BRAND_ALIASES)
    if brand:
        return brand

    # Unknown brand spoken before a category word: keep the token as-is
    m = lexicon.BRAND_BEFORE_CATEGORY.search(normalized.strip())
    if m:
        return m.group(1)

    return None


def extract_godown(text: str) -> Optional[GodownHint]:
    return _scan_aliases(text, lexicon.GODOWN_ALIASES)


def extract_payment_mode(text: str) -> Optional[PaymentMode]:
    return _scan_aliases(text, lexicon.PAYMENT_MODE_ALIASES)


def extract_size(text: str) -> Optional[str]:
    for _family, pattern, fmt in lexicon.SIZE_PATTERNS:
        m = pattern.search(text)
        if m:
            return fmt(m)
    return None


def extract_quantity_uom(text: str) -> Tuple[Optional[float], Optional[UOM]]:
    """Quantity and unit are fixed together. A bare number stays unitless."""
    for uom, pattern in lexicon.UOM_PATTERNS:
        m = pattern.search(text)
        if m:
            return float(m.group(1)), uom

    m = lexicon.BARE_NUMBER.search(text)
    if m:
        return float(m.group(1)), None

    return None, None


def extract_price(text: str) -> Optional[float]:
    for pattern in lexicon.PRICE_PATTERNS:
        m = pattern.search(text)
        if m:
            return float(m.group(1))
    return None


def extract_amount(text: str) -> Optional[float]:
    """Rupee amount for payment and ledger commands."""
    price = extract_price(text)
    if price is not None:
        return price
    for pattern in lexicon.AMOUNT_PATTERNS:
        m = pattern.search(text)
        if m:
            return float(m.group(1))
    return None


def _clean_name(raw: str) -> Optional[str]:
    words = [w for w in raw.split() if w.lower() not in lexicon.NAME_STOP_WORDS]
    return " ".join(words) or None


def extract_customer_hint(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Low-precision customer hints: (name, phone).

    The name is the 1-2 words in front of ka/ke/ko, else the words after
    English to/for/of. Only ever used for fuzzy lookup, never as a key.
    """
    phone_match = lexicon.PHONE_PATTERN.search(text)
    phone = phone_match.group(1) if phone_match else None

    name = None
    for pattern in (lexicon.CUSTOMER_NAME_HI, lexicon.CUSTOMER_NAME_EN):
        m = pattern.search(text)
        if m:
            name = _clean_name(m.group(1))
            if name:
                break

    return name, phone


def extract(text: str) -> Extraction:
    """Extract every field from one clause. Empty text gives the default intent."""
    text = (text or "").strip()
    intent, intent_confidence = detect_intent(text)
    qty, uom = extract_quantity_uom(text)
    price = extract_price(text)
    amount = extract_amount(text) if intent in LEDGER_INTENTS else None
    name_hint, phone_hint = extract_customer_hint(text)

    return Extraction(
        intent=intent,
        intent_confidence=intent_confidence,
        category=extract_category(text),
        brand=extract_brand(text),
        size=extract_size(text),
        godown_hint=extract_godown(text),
        qty=qty,
        uom=uom,
        price=price,
        amount=amount,
        payment_mode=extract_payment_mode(text),
        customer_name_hint=name_hint,
        customer_phone_hint=phone_hint,
    )
