"""
Decision Engine - draft lifecycle.

THIS MODULE CREATES DRAFTS. Execution happens only on explicit confirm.

Flow:
1. Fallback gate produces a ParseResult (rules or AI)
2. create_draft validates it and stores a DraftCard (+ open clarifications)
3. Owner answers clarifications one by one (resolve_clarification)
   - the answer is merged into the command, then the draft is re-validated
4. Owner confirms (confirm_draft) -> CONFIRMED -> executor -> POSTED
   or rejects (reject_draft) -> REJECTED

Rules:
- Drafts are only created above the reject floor
- Confirm is refused while any clarification is open
- CONFIRMED only moves to POSTED; POSTED and REJECTED never change
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ai.command_schema import (
    UOM,
    CanonicalCommand,
    ClarificationCode,
    DraftStatus,
    ParsedItem,
    ParseResult,
    ParseSource,
)
from app.agent.executor import ExecutionResult, execute_command
from app.agent.validator import ValidationResult, validate_parsed_command
from app.core.config import settings
from app.core.exceptions import DraftStateError, UnresolvedClarificationsError
from app.models.draft import DraftCard, DraftClarification

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (DraftStatus.DRAFT.value, DraftStatus.NEEDS_CLARIFICATION.value)


# ==============================================================================
# READ
# ==============================================================================

def get_draft(db: Session, draft_id: int) -> Optional[DraftCard]:
    return db.query(DraftCard).filter(DraftCard.id == draft_id).first()


def list_drafts(db: Session, status: Optional[str] = None, limit: int = 50) -> List[DraftCard]:
    query = db.query(DraftCard)
    if status:
        query = query.filter(DraftCard.status == status)
    return query.order_by(DraftCard.created_at.desc(), DraftCard.id.desc()).limit(limit).all()


def get_clarification(draft: DraftCard, clarification_id: int) -> Optional[DraftClarification]:
    for clarification in draft.clarifications:
        if clarification.id == clarification_id:
            return clarification
    return None


def open_clarifications(draft: DraftCard) -> List[DraftClarification]:
    return [c for c in draft.clarifications if c.resolved_value is None]


def draft_command(draft: DraftCard) -> CanonicalCommand:
    return CanonicalCommand.model_validate(draft.parsed_json)


# ==============================================================================
# CREATE
# ==============================================================================

def _sync_clarifications(draft: DraftCard, validation: ValidationResult) -> None:
    """
    Reconcile stored clarifications with a fresh validation.

    Answered rows stay as history and are not asked again. Open rows the new
    validation no longer produces are dropped; new ones are added.
    """
    answered = {(c.reason_code, c.item_index) for c in draft.clarifications if c.resolved_value is not None}
    still_open = {(c.reason_code, c.item_index): c for c in open_clarifications(draft)}
    wanted = set()

    for clarification in validation.clarifications:
        key = (clarification.reason_code.value, clarification.item_index)
        if key in answered:
            continue
        wanted.add(key)
        if key not in still_open:
            draft.clarifications.append(
                DraftClarification(
                    reason_code=key[0],
                    prompt=clarification.prompt,
                    options=[o.model_dump() for o in clarification.options],
                    item_index=clarification.item_index,
                )
            )

    for key, row in still_open.items():
        if key not in wanted:
            draft.clarifications.remove(row)

    draft.render_json = validation.render_data.model_dump(mode="json")
    draft.status = (
        DraftStatus.NEEDS_CLARIFICATION.value if open_clarifications(draft) else DraftStatus.DRAFT.value
    )


async def create_draft(db: Session, parse_result: ParseResult, language: Optional[str] = None) -> Optional[DraftCard]:
    """Validate and store a draft. None if the parse is too weak to show the owner."""
    if parse_result.confidence <= settings.REJECT_FLOOR:
        logger.info(
            f"[DecisionEngine] Not drafting '{parse_result.raw_text}': "
            f"confidence {parse_result.confidence} <= {settings.REJECT_FLOOR}"
        )
        return None

    command = parse_result.command
    validation = await validate_parsed_command(
        command,
        parse_result.raw_text,
        parse_result.parse_source,
        parse_result.confidence,
        language,
    )

    draft = DraftCard(
        raw_input=parse_result.raw_text,
        intent=command.intent.value,
        parse_source=parse_result.parse_source.value,
        parse_confidence=parse_result.confidence,
        parsed_json=command.model_dump(mode="json"),
    )
    _sync_clarifications(draft, validation)
    db.add(draft)
    db.commit()
    db.refresh(draft)

    logger.info(
        f"[DecisionEngine] Draft {draft.id} created: intent={draft.intent}, status={draft.status}, "
        f"source={draft.parse_source}, open={len(open_clarifications(draft))}"
    )
    return draft


# ==============================================================================
# CLARIFY
# ==============================================================================

def _normalize_size(value: str) -> str:
    value = value.strip()
    return f"{value}mm" if value.replace(".", "", 1).isdigit() else value


def merge_clarification(command: CanonicalCommand, reason_code: str, item_index: Optional[int], value: str) -> CanonicalCommand:
    """
    Fold one answer into the command.

    Raises:
        ValueError: answer cannot be applied (e.g. rods per bundle not a number)
    """
    merged = command.model_copy(deep=True)
    code = ClarificationCode(reason_code)

    if item_index is None:
        if code == ClarificationCode.MISSING_BRAND:
            if merged.items:
                for item in merged.items:
                    item.brand = item.brand or value
            else:
                merged.items.append(ParsedItem(raw_text=value, brand=value))
        return merged

    if item_index >= len(merged.items):
        raise ValueError(f"Item {item_index} does not exist")
    item = merged.items[item_index]

    if code == ClarificationCode.MISSING_BRAND:
        item.brand = value
    elif code == ClarificationCode.MISSING_SIZE:
        item.size = _normalize_size(value)
    elif code == ClarificationCode.BUNDLE_RODS_NEEDED:
        try:
            rods = int(value)
        except ValueError:
            raise ValueError(f"Rods per bundle must be a whole number, got '{value}'")
        if rods <= 0:
            raise ValueError("Rods per bundle must be positive")
        if item.qty is not None:
            item.qty = item.qty * rods
            item.uom = UOM.PCS
    # CONFIRM_WEIGHT and the stock/customer codes only record the answer
    return merged


async def resolve_clarification(
    db: Session,
    draft: DraftCard,
    clarification: DraftClarification,
    value: str,
    language: Optional[str] = None,
) -> DraftCard:
    """Record an explicit answer, merge it, and re-validate the draft."""
    if draft.status not in EDITABLE_STATUSES:
        raise DraftStateError(draft.id, draft.status, "clarify")
    if clarification.resolved_value is not None:
        raise DraftStateError(draft.id, draft.status, f"re-answer clarification {clarification.id} of")

    value = (value or "").strip()
    if not value:
        raise ValueError("Answer must not be empty")

    command = merge_clarification(draft_command(draft), clarification.reason_code, clarification.item_index, value)
    clarification.resolved_value = value
    clarification.resolved_at = datetime.now(timezone.utc)

    validation = await validate_parsed_command(
        command,
        draft.raw_input,
        ParseSource(draft.parse_source),
        draft.parse_confidence,
        language,
    )
    draft.parsed_json = command.model_dump(mode="json")
    _sync_clarifications(draft, validation)
    db.commit()
    db.refresh(draft)

    logger.info(
        f"[DecisionEngine] Draft {draft.id}: {clarification.reason_code}='{value}', "
        f"status={draft.status}, open={len(open_clarifications(draft))}"
    )
    return draft


# ==============================================================================
# CONFIRM / REJECT
# ==============================================================================

def confirm_draft(db: Session, draft: DraftCard, selected_id: Optional[int] = None) -> ExecutionResult:
    """
    Confirm and execute.

    A CONFIRMED draft whose execution needed a selection is confirmed again
    with `selected_id`; that re-run is the only thing CONFIRMED accepts.
    """
    if draft.status not in EDITABLE_STATUSES and draft.status != DraftStatus.CONFIRMED.value:
        raise DraftStateError(draft.id, draft.status, "confirm")

    pending = open_clarifications(draft)
    if pending:
        raise UnresolvedClarificationsError(draft.id, draft.status, [c.prompt for c in pending])

    draft.status = DraftStatus.CONFIRMED.value
    db.commit()
    logger.info(f"[DecisionEngine] Draft {draft.id} confirmed")

    result = execute_command(db, draft_command(draft), selected_id=selected_id, auto_commit=False)
    draft.result_json = result.model_dump(mode="json")
    if result.success:
        draft.status = DraftStatus.POSTED.value
    db.commit()
    db.refresh(draft)

    logger.info(f"[DecisionEngine] Draft {draft.id} execution: {result.status.value}, status={draft.status}")
    return result


def reject_draft(db: Session, draft: DraftCard) -> DraftCard:
    if draft.status not in EDITABLE_STATUSES:
        raise DraftStateError(draft.id, draft.status, "reject")
    draft.status = DraftStatus.REJECTED.value
    db.commit()
    db.refresh(draft)
    logger.info(f"[DecisionEngine] Draft {draft.id} rejected")
    return draft
