"""
Fallback Gate - deterministic first, AI second.

Policy:
1. ALWAYS run the rule engine (cheap, offline, deterministic).
2. confidence >= threshold -> accept the rule result.
3. confidence <  threshold -> ask the AI parser for the same canonical JSON.
   - success: adopt it, source LLM_FALLBACK, confidence fixed at 0.75
   - any failure: keep the rule result, silently (logged, never raised)

Degraded-but-available beats blocked: the AI path can never stop the user.
"""
import logging
from typing import List, Optional

from ai.command_schema import ParseResult, ParseSource
from ai.groq_client import GroqClient
from ai.llm_parser import parse_with_ai
from app.agent.command_parser import parse_command, split_clauses
from app.core.config import settings

logger = logging.getLogger(__name__)


async def resolve_command(raw_text: str, client: Optional[GroqClient] = None) -> ParseResult:
    """Full two-tier parse of one clause."""
    rule_result = parse_command(raw_text)

    if rule_result.confidence >= settings.AI_FALLBACK_THRESHOLD:
        return rule_result

    logger.info(
        f"Rule confidence {rule_result.confidence} below {settings.AI_FALLBACK_THRESHOLD}, "
        f"trying AI fallback"
    )
    ai_command = await parse_with_ai(rule_result.raw_text, client=client)

    if ai_command is None:
        logger.warning("AI fallback unavailable or failed - keeping rule result")
        return rule_result

    return ParseResult(
        raw_text=rule_result.raw_text,
        command=ai_command,
        confidence=settings.AI_FALLBACK_CONFIDENCE,
        parse_source=ParseSource.LLM_FALLBACK,
    )


async def resolve_multi_command(raw_text: str, client: Optional[GroqClient] = None) -> List[ParseResult]:
    """Resolve each clause in order. One clause never affects another."""
    results = []
    for clause in split_clauses(raw_text):
        results.append(await resolve_command(clause, client=client))
    return results
