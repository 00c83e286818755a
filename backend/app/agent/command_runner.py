"""
Command Runner - one utterance, many clauses, in order.

"ankur 8mm ka rate 65 kar do aur ramesh ko reminder bhejo"
    clause 1 -> UPDATE_RATE  -> draft / execute
    clause 2 -> SHARE_LEDGER -> draft / execute

Every clause gets its own outcome. A failed or ambiguous clause never stops
the clauses after it.
"""
import logging
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ai.command_schema import DraftStatus, Intent, ParseSource
from ai.groq_client import GroqClient
from app.agent.command_parser import split_clauses
from app.agent.decision_engine import confirm_draft, create_draft
from app.agent.executor import ExecutionResult, ExecutionStatus
from app.agent.fallback_gate import resolve_command

logger = logging.getLogger(__name__)


class ClauseOutcome(BaseModel):
    index: int
    clause: str
    intent: Optional[Intent] = None
    confidence: float = 0.0
    parse_source: Optional[ParseSource] = None
    status: ExecutionStatus
    draft_id: Optional[int] = None
    draft_status: Optional[DraftStatus] = None
    result: Optional[ExecutionResult] = None


async def run_utterance(
    db: Session,
    raw_text: str,
    client: Optional[GroqClient] = None,
    language: Optional[str] = None,
    auto_execute: bool = False,
) -> List[ClauseOutcome]:
    """
    Parse every clause, draft it, and (auto_execute) run drafts that need no answers.

    Without auto_execute, clean drafts come back as pending_confirmation.
    """
    outcomes: List[ClauseOutcome] = []

    for index, clause in enumerate(split_clauses(raw_text)):
        parsed = await resolve_command(clause, client=client)
        outcome = ClauseOutcome(
            index=index,
            clause=clause,
            intent=parsed.command.intent,
            confidence=parsed.confidence,
            parse_source=parsed.parse_source,
            status=ExecutionStatus.UNPARSED,
        )

        try:
            draft = await create_draft(db, parsed, language)
            if draft is None:
                outcomes.append(outcome)
                continue

            outcome.draft_id = draft.id
            if draft.status == DraftStatus.NEEDS_CLARIFICATION.value:
                outcome.status = ExecutionStatus.NEEDS_CLARIFICATION
            elif auto_execute:
                outcome.result = confirm_draft(db, draft)
                outcome.status = outcome.result.status
            else:
                outcome.status = ExecutionStatus.PENDING_CONFIRMATION
            outcome.draft_status = DraftStatus(draft.status)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Clause {index} '{clause}' failed: {e}", exc_info=True)
            outcome.status = ExecutionStatus.FAILED

        outcomes.append(outcome)

    summary = ", ".join(o.status.value for o in outcomes)
    logger.info(f"Ran {len(outcomes)} clause(s): {summary}")
    return outcomes
