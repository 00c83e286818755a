"""
DraftCard: a parsed voice command waiting for the owner.
Nothing reaches the books without an explicit confirm.

Status flow:
    DRAFT / NEEDS_CLARIFICATION -> CONFIRMED -> POSTED
    DRAFT / NEEDS_CLARIFICATION -> REJECTED
"""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from app.db.base import Base


class DraftCard(Base):
    __tablename__ = "draft_cards"

    id = Column(Integer, primary_key=True, index=True)
    raw_input = Column(Text, nullable=False)
    intent = Column(String(64), nullable=False)
    parse_source = Column(String(32), nullable=False)  # REGEX_RULE | LLM_FALLBACK | MANUAL_ENTRY
    parse_confidence = Column(Float, nullable=False)
    parsed_json = Column(JSON, nullable=False)  # CanonicalCommand as dict
    render_json = Column(JSON, nullable=True)  # last validator render data
    status = Column(String(32), nullable=False, default="DRAFT")
    result_json = Column(JSON, nullable=True)  # executor outcome once POSTED
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    clarifications = relationship(
        "DraftClarification",
        back_populates="draft",
        cascade="all, delete-orphan",
        order_by="DraftClarification.id",
    )


class DraftClarification(Base):
    __tablename__ = "draft_clarifications"

    id = Column(Integer, primary_key=True, index=True)
    draft_id = Column(Integer, ForeignKey("draft_cards.id", ondelete="CASCADE"), nullable=False)
    reason_code = Column(String(64), nullable=False)
    prompt = Column(String(255), nullable=False)
    options = Column(JSON, nullable=True)  # [{"label": ..., "value": ...}]
    item_index = Column(Integer, nullable=True)  # None = command-level
    resolved_value = Column(String(255), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    draft = relationship("DraftCard", back_populates="clarifications")
