"""
Entity resolution: 0 / 1 / many.

Every executor lookup (rate rows, customers) ends in the same three-way
branch, so it lives here once:
- NONE  -> nothing matched (insert, or report not found)
- ONE   -> act on it
- MANY  -> ask the owner to pick; nothing is mutated

A `selected_id` from a previous MANY answer narrows the candidates to that row.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)


# Filler words dropped before fuzzy name matching
NOISE_WORDS = {
    "ji", "bhai", "sir", "seth", "sahab", "babu", "bhaiya",
    "जी", "भाई", "सेठ", "साहब", "भैया",
}


class Resolution(str, Enum):
    NONE = "none"
    ONE = "one"
    MANY = "many"


@dataclass
class ResolvedEntity:
    resolution: Resolution
    match: Optional[Any] = None
    candidates: List[Any] = field(default_factory=list)


def normalize_name(text: Optional[str]) -> str:
    """
    "Ramesh ji" -> "ramesh"
    "ramesh-kumar" -> "ramesh kumar"
    """
    if not text:
        return ""
    text = re.sub(r"[^\w\s]", " ", text.lower().strip())
    return " ".join(w for w in text.split() if w not in NOISE_WORDS)


def phone_digits(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


def resolve_single(candidates: Sequence[Any], selected_id: Optional[int] = None) -> ResolvedEntity:
    """Three-way branch over already-fetched candidates (objects with `.id`)."""
    candidates = list(candidates)

    if selected_id is not None:
        chosen = [c for c in candidates if c.id == selected_id]
        if not chosen:
            logger.warning(f"[EntityResolver] selected_id={selected_id} not among {len(candidates)} candidates")
            return ResolvedEntity(Resolution.NONE)
        return ResolvedEntity(Resolution.ONE, match=chosen[0], candidates=chosen)

    if not candidates:
        return ResolvedEntity(Resolution.NONE)
    if len(candidates) == 1:
        return ResolvedEntity(Resolution.ONE, match=candidates[0], candidates=candidates)

    logger.info(f"[EntityResolver] Ambiguous: {len(candidates)} candidates")
    return ResolvedEntity(Resolution.MANY, candidates=candidates)
