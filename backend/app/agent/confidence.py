"""
Confidence Scorer - turns "which fields were found" into one number.

Rules:
- Start from the intent matcher's confidence.
- +0.1 (cap 1.0) for each of: category, brand, size, (qty AND unit).
- Rate intent with neither price nor brand: -0.2 (floor 0.3).
- Stock intent without qty: -0.2 (floor 0.3).

needs_clarification is a set of independent trip-wires, NOT a threshold.
Any one of them trips regardless of the overall confidence.
"""
from dataclasses import dataclass
from typing import Optional

from ai.command_schema import Intent, RATE_INTENTS, STOCK_INTENTS, UOM
from app.agent.rule_extractor import Extraction

FIELD_BOOST = 0.1
MISSING_FIELD_PENALTY = 0.2
CONFIDENCE_FLOOR = 0.3
CONFIDENCE_CAP = 1.0


@dataclass(frozen=True)
class Score:
    confidence: float
    needs_clarification: bool
    reason: Optional[str] = None


def _boost(confidence: float) -> float:
    return min(confidence + FIELD_BOOST, CONFIDENCE_CAP)


def _penalize(confidence: float) -> float:
    return max(confidence - MISSING_FIELD_PENALTY, CONFIDENCE_FLOOR)


def clarification_reason(extraction: Extraction, item_count: int) -> Optional[str]:
    """First tripped wire, as a human-readable reason. None if nothing tripped."""
    intent = extraction.intent

    if intent == Intent.UPDATE_RATE and not extraction.brand:
        return "Brand not detected"
    if intent == Intent.UPDATE_RATE and extraction.price is None:
        return "Price not detected"
    if extraction.uom == UOM.BUNDLE:
        return "Rods per bundle needed"
    if intent == Intent.ADD_STOCK_MANUAL and not extraction.category:
        return "Category not detected"
    if intent == Intent.ADD_STOCK_MANUAL and extraction.qty is None:
        return "Quantity not detected"
    if intent == Intent.CREATE_ESTIMATE and item_count == 0:
        return "No item detected"
    return None


def score(extraction: Extraction, item_count: int) -> Score:
    confidence = extraction.intent_confidence

    if extraction.category:
        confidence = _boost(confidence)
    if extraction.brand:
        confidence = _boost(confidence)
    if extraction.size:
        confidence = _boost(confidence)
    if extraction.qty is not None and extraction.uom is not None:
        confidence = _boost(confidence)

    if extraction.intent in RATE_INTENTS and extraction.price is None and not extraction.brand:
        confidence = _penalize(confidence)
    if extraction.intent in STOCK_INTENTS and extraction.qty is None:
        confidence = _penalize(confidence)

    reason = clarification_reason(extraction, item_count)
    return Score(
        confidence=round(confidence, 4),
        needs_clarification=reason is not None,
        reason=reason,
    )
