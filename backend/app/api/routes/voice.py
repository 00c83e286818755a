"""
Voice commands: parse, draft, clarify, confirm, reject.
Trust: nothing reaches the books without an explicit confirm
(or auto_execute on a clause that needed no answers).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ai.command_schema import ParseResult
from app.agent import decision_engine
from app.agent.command_runner import ClauseOutcome, run_utterance
from app.agent.fallback_gate import resolve_command
from app.api.deps import get_db
from app.core.exceptions import BusinessError, DraftStateError
from app.models.draft import DraftCard
from app.schemas.voice import (
    ClarificationAnswer,
    CommandRequest,
    ConfirmRequest,
    ConfirmResponse,
    DraftResponse,
    UtteranceRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _load_draft(db: Session, draft_id: int) -> DraftCard:
    draft = decision_engine.get_draft(db, draft_id)
    if not draft:
        raise BusinessError.not_found("Draft", f"id={draft_id}")
    return draft


@router.post("/parse", response_model=ParseResult)
async def parse_utterance(request: UtteranceRequest):
    """Parse one clause (rules, then AI on low confidence). No side effects."""
    return await resolve_command(request.text)


@router.post("/commands", response_model=list[ClauseOutcome])
async def run_command(request: CommandRequest, db: Session = Depends(get_db)):
    """Split into clauses, draft each, optionally execute the clean ones. One outcome per clause."""
    return await run_utterance(
        db,
        request.text,
        language=request.language,
        auto_execute=request.auto_execute,
    )


@router.get("/drafts", response_model=list[DraftResponse])
def list_drafts(status: Optional[str] = None, limit: int = 50, db: Session = Depends(get_db)):
    """Recent drafts, newest first. Filter by status for the pending tray."""
    return decision_engine.list_drafts(db, status=status, limit=limit)


@router.get("/drafts/{draft_id}", response_model=DraftResponse)
def get_draft(draft_id: int, db: Session = Depends(get_db)):
    return _load_draft(db, draft_id)


@router.post("/drafts/{draft_id}/clarifications/{clarification_id}", response_model=DraftResponse)
async def answer_clarification(
    draft_id: int,
    clarification_id: int,
    answer: ClarificationAnswer,
    db: Session = Depends(get_db),
):
    """Owner answers one question. The draft is re-validated."""
    draft = _load_draft(db, draft_id)
    clarification = decision_engine.get_clarification(draft, clarification_id)
    if not clarification:
        raise BusinessError.not_found("Clarification", f"id={clarification_id} draft={draft_id}")

    try:
        return await decision_engine.resolve_clarification(db, draft, clarification, answer.value, answer.language)
    except DraftStateError as e:
        raise BusinessError.invalid_state(e)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))


@router.post("/drafts/{draft_id}/confirm", response_model=ConfirmResponse)
def confirm_draft(draft_id: int, request: Optional[ConfirmRequest] = None, db: Session = Depends(get_db)):
    """Confirm and execute. Refused while questions are open."""
    draft = _load_draft(db, draft_id)
    selected_id = request.selected_id if request else None
    try:
        result = decision_engine.confirm_draft(db, draft, selected_id=selected_id)
    except DraftStateError as e:
        raise BusinessError.invalid_state(e)
    return ConfirmResponse(draft=DraftResponse.model_validate(draft), result=result)


@router.post("/drafts/{draft_id}/reject", response_model=DraftResponse)
def reject_draft(draft_id: int, db: Session = Depends(get_db)):
    """Owner dismisses the draft. No execution."""
    draft = _load_draft(db, draft_id)
    try:
        return decision_engine.reject_draft(db, draft)
    except DraftStateError as e:
        raise BusinessError.invalid_state(e)
