"""Application configuration.

Environment variables override all defaults.
GROQ_API_KEY is optional: without it the AI fallback is disabled and
rule-based results are used as-is.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./geeta.db")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Groq API (Must be set via .env, never in code)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "8"))

    # Two-tier parsing policy
    AI_FALLBACK_THRESHOLD: float = float(os.getenv("AI_FALLBACK_THRESHOLD", "0.5"))
    # Flat confidence for AI results: paid for, probably right
    AI_FALLBACK_CONFIDENCE: float = 0.75
    # Drafts are only created above this confidence
    REJECT_FLOOR: float = 0.3

    # TMT conversion: standard rod length in meters
    TMT_STANDARD_LENGTH_M: float = float(os.getenv("TMT_STANDARD_LENGTH_M", "12"))

    # Prompts and messages
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "hi")
    SHOP_NAME: str = os.getenv("SHOP_NAME", "Geeta Traders")
    SHOP_ADDRESS: str = os.getenv("SHOP_ADDRESS", "Mohammadabad Gohna")
    WHATSAPP_COUNTRY_CODE: str = os.getenv("WHATSAPP_COUNTRY_CODE", "91")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()
