from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.agent.executor import ExecutionResult


class UtteranceRequest(BaseModel):
    """Transcribed speech or typed text."""
    text: str = Field(..., min_length=1, max_length=1000)
    language: Optional[str] = None  # "hi" | "en"; defaults to settings


class CommandRequest(UtteranceRequest):
    auto_execute: bool = False


class ClarificationAnswer(BaseModel):
    value: str = Field(..., min_length=1, max_length=255)
    language: Optional[str] = None


class ConfirmRequest(BaseModel):
    """selected_id answers a previous needs_selection result."""
    selected_id: Optional[int] = None


class DraftClarificationResponse(BaseModel):
    id: int
    reason_code: str
    prompt: str
    options: Optional[List[dict]] = None
    item_index: Optional[int] = None
    resolved_value: Optional[str] = None

    class Config:
        from_attributes = True


class DraftResponse(BaseModel):
    id: int
    raw_input: str
    intent: str
    parse_source: str
    parse_confidence: float
    parsed_json: dict
    render_json: Optional[dict] = None
    status: str
    result_json: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    clarifications: List[DraftClarificationResponse] = []

    class Config:
        from_attributes = True


class ConfirmResponse(BaseModel):
    draft: DraftResponse
    result: ExecutionResult
