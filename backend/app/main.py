"""
Geeta Traders voice backend.

ARCHITECTURE:
- Rule engine parses Hindi/English commands (offline, deterministic)
- Groq LLM only as a fallback for low-confidence parses
- Every command becomes a Draft; the owner confirms before anything is written
- SQLite DB: daily rates, customers, ledger, drafts
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import voice
from app.core.config import settings
from app.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    logger.info("Initializing database...")
    init_db()
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY not set - AI fallback disabled, rule results only")
    yield


app = FastAPI(
    title="Geeta Traders Voice API",
    description="Voice/text commands for the shop. Parse → Draft → Confirm → Post.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin"],
    max_age=600,
)

app.include_router(voice.router, prefix="/voice", tags=["voice"])


@app.get("/health")
def health():
    return {"status": "ok", "ai_fallback": "enabled" if settings.GROQ_API_KEY else "disabled"}
