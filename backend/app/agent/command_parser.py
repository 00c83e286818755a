"""
Command Assembler - rule path entry point.

parse_command("ankur 8mm ka rate 65 kar do") ->
    ParseResult(command=CanonicalCommand(intent=UPDATE_RATE, items=[Ankur 8mm tmt], ...),
                confidence=1.0, parse_source=REGEX_RULE)

Multi-command: "... aur ..." / "... and ..." is split into clauses, each
parsed independently, order preserved.
"""
import logging
from typing import List

from ai.command_schema import (
    CanonicalCommand,
    ParsedCustomer,
    ParsedFinancials,
    ParsedItem,
    ParseResult,
    ParseSource,
)
from app.agent import lexicon
from app.agent.confidence import score
from app.agent.rule_extractor import Extraction, extract

logger = logging.getLogger(__name__)


def build_items(extraction: Extraction, raw_text: str) -> List[ParsedItem]:
    """One item if category, brand or qty was found. Never a placeholder item."""
    if not (extraction.category or extraction.brand or extraction.qty is not None):
        return []
    return [
        ParsedItem(
            raw_text=raw_text,
            category=extraction.category,
            brand=extraction.brand,
            size=extraction.size,
            qty=extraction.qty,
            uom=extraction.uom,
            godown_hint=extraction.godown_hint,
        )
    ]


def _build_customer(extraction: Extraction):
    if not (extraction.customer_name_hint or extraction.customer_phone_hint):
        return None
    return ParsedCustomer(
        name_hint=extraction.customer_name_hint,
        phone_hint=extraction.customer_phone_hint,
    )


def _build_financials(extraction: Extraction):
    amount = extraction.amount if extraction.amount is not None else extraction.price
    if amount is None and extraction.payment_mode is None:
        return None
    return ParsedFinancials(amount=amount, mode=extraction.payment_mode)


def parse_command(raw_text: str) -> ParseResult:
    """Rule-only parse of a single clause. Never raises, even on empty input."""
    text = (raw_text or "").strip()
    extraction = extract(text)
    items = build_items(extraction, text)
    result = score(extraction, len(items))

    command = CanonicalCommand(
        intent=extraction.intent,
        items=items,
        customer=_build_customer(extraction),
        financials=_build_financials(extraction),
        needs_clarification=result.needs_clarification,
        clarification_reason=result.reason,
    )

    logger.info(
        f"Rule parse: intent={command.intent.value}, items={len(items)}, "
        f"confidence={result.confidence}, needs_clarification={result.needs_clarification}"
    )
    return ParseResult(
        raw_text=text,
        command=command,
        confidence=result.confidence,
        parse_source=ParseSource.REGEX_RULE,
    )


def split_clauses(raw_text: str) -> List[str]:
    """Split on "aur" / "और" / "and". Empty clauses are dropped."""
    text = (raw_text or "").strip()
    clauses = [c.strip() for c in lexicon.CLAUSE_SPLIT.split(text)]
    clauses = [c for c in clauses if c]
    return clauses or [text]


def parse_multi_command(raw_text: str) -> List[ParseResult]:
    return [parse_command(clause) for clause in split_clauses(raw_text)]
