"""
LLM-based command parser - the expensive second tier.

Called by the fallback gate only when the rule engine is unsure.
LLM OUTPUT IS NEVER TRUSTED BLINDLY:
- Markdown fences are stripped
- JSON is validated against the CanonicalCommand schema
- Any failure returns None, so the caller keeps the rule result
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from .command_schema import CanonicalCommand
from .groq_client import GroqClient, get_groq_client
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def strip_code_fences(llm_response: str) -> str:
    """Remove ```json ... ``` wrapping the model sometimes adds."""
    response_clean = llm_response.strip()

    if response_clean.startswith("```") and "\n" in response_clean:
        lines = response_clean.split("\n")
        if lines[0].strip().startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        response_clean = "\n".join(lines).strip()

    # Single-line form: ```json {...}```
    if response_clean.startswith("```json"):
        response_clean = response_clean[len("```json"):]
    elif response_clean.startswith("```"):
        response_clean = response_clean[3:]
    if response_clean.endswith("```"):
        response_clean = response_clean[:-3]

    return response_clean.strip()


def parse_llm_response(llm_response: str) -> Optional[CanonicalCommand]:
    """Decode and validate one assistant reply. None if unusable."""
    try:
        data = json.loads(strip_code_fences(llm_response))
        return CanonicalCommand.model_validate(data)

    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON from LLM: {e}")
        return None

    except ValidationError as e:
        logger.warning(f"LLM output failed schema validation: {e.error_count()} errors")
        return None


async def parse_with_ai(message: str, client: Optional[GroqClient] = None) -> Optional[CanonicalCommand]:
    """
    Ask the LLM for a canonical command.

    Returns:
        Validated CanonicalCommand, or None on any failure
        (client unavailable, network, quota, empty reply, bad JSON, bad schema)
    """
    message = message.strip()
    if not message:
        return None

    client = client or get_groq_client()
    if not client.is_available():
        logger.debug("LLM not available - keeping rule result")
        return None

    try:
        llm_response = await client.complete(SYSTEM_PROMPT, message)
    except Exception as e:
        logger.error(f"Error in LLM call: {e}")
        return None

    if not llm_response:
        logger.debug("LLM returned nothing - keeping rule result")
        return None

    command = parse_llm_response(llm_response)
    if command is not None:
        logger.info(f"LLM parsed: intent={command.intent.value}, items={len(command.items)}")
    return command
