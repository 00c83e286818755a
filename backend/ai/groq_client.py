"""
Groq API Client - async wrapper for the AI fallback parser.

================================================================================
LLM ROLE: COMMAND PARSER ONLY, AND ONLY ON LOW CONFIDENCE
================================================================================

The rule engine handles the common commands offline. This client is
called only when the rule result scores below the fallback threshold.

THIS CLIENT DOES NOT:
- Touch the database
- Update any rate or ledger row
- Send any message to customers

It returns raw assistant text, or None on ANY failure. None is the
"Err" side of the boundary: the caller keeps its rule-based result.
================================================================================
"""

import asyncio
import logging
from typing import Optional
from groq import AsyncGroq, APIError, APITimeoutError, RateLimitError

from app.core.config import settings

# NEVER log API keys
logger = logging.getLogger(__name__)


class GroqClient:
    """
    Minimal wrapper for Groq chat completions.

    - Temperature 0: same utterance, same JSON
    - Max tokens 512: a canonical command is small
    - Timeout: fail fast, the user is waiting on a voice command
    """

    TEMPERATURE = 0
    MAX_TOKENS = 512

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.model = model or settings.GROQ_MODEL

        if not api_key:
            logger.warning(
                "GROQ_API_KEY not found in environment. "
                "AI fallback parsing is DISABLED; rule results will be used as-is."
            )
            self.client = None
        else:
            try:
                self.client = AsyncGroq(api_key=api_key, timeout=settings.AI_TIMEOUT_SECONDS)
                logger.info("Groq client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Groq client: {e}")
                self.client = None

    def is_available(self) -> bool:
        return self.client is not None

    async def complete(self, system_prompt: str, user_text: str, max_retries: int = 1) -> Optional[str]:
        """
        Send system prompt + user utterance, return the assistant text.

        Returns None on timeout, rate limit/quota, API error or empty reply.
        """
        if not self.is_available():
            logger.debug("Groq client not available - skipping AI call")
            return None

        for attempt in range(max_retries + 1):
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_text},
                    ],
                    temperature=self.TEMPERATURE,
                    max_tokens=self.MAX_TOKENS,
                    stream=False,
                )

                if response.choices and response.choices[0].message.content:
                    content = response.choices[0].message.content
                    logger.debug(f"AI response received: {len(content)} chars (attempt {attempt + 1})")
                    return content

                logger.warning("AI returned empty response")
                return None

            except APITimeoutError:
                if attempt < max_retries:
                    wait_time = 0.5 * (2 ** attempt)
                    logger.warning(f"Groq timeout, retry {attempt + 1}/{max_retries} after {wait_time}s")
                    await asyncio.sleep(wait_time)
                else:
                    logger.warning(f"Groq API timeout after {max_retries} retries")
                    return None

            except RateLimitError:
                # Quota is money: do not hammer the API, keep the rule result
                logger.warning("Groq rate limit / quota exceeded")
                return None

            except APIError as e:
                logger.error(f"Groq API error: {e}")
                return None

            except Exception as e:
                logger.error(f"Unexpected error calling Groq: {e}")
                return None

        return None


# Singleton instance
_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
