"""AI Module for the Groq LLM fallback parser.

Used ONLY when the rule engine's confidence is low.
If the LLM fails in any way, the rule-based result is kept.
"""

from .llm_parser import parse_with_ai, parse_llm_response, strip_code_fences
from .groq_client import GroqClient, get_groq_client

__all__ = ["parse_with_ai", "parse_llm_response", "strip_code_fences", "GroqClient", "get_groq_client"]
