"""
Fallback gate tests: rules first, AI only on low confidence.

The Groq client is replaced by FakeClient (same is_available/complete
surface), so these tests never touch the network.
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from ai.command_schema import Intent, ParseSource, ProductCategory
from ai.llm_parser import parse_llm_response, strip_code_fences
from app.agent.fallback_gate import resolve_command, resolve_multi_command

LOW_CONFIDENCE_TEXT = "kuch bhi"
AI_REPLY = '{"intent": "CHECK_STOCK", "items": [{"category": "cement", "brand": "ACC"}]}'


class FakeClient:
    """Records calls and returns a canned reply (None = failure)."""

    def __init__(self, reply=None, available=True, error=None):
        self.reply = reply
        self.available = available
        self.error = error
        self.calls = []

    def is_available(self):
        return self.available

    async def complete(self, system_prompt, user_text, max_retries=1):
        self.calls.append(user_text)
        if self.error:
            raise self.error
        return self.reply


def test_strip_code_fences():
    print("\n" + "=" * 70)
    print("TEST: code fence stripping")
    print("=" * 70)

    assert strip_code_fences(f"```json\n{AI_REPLY}\n```") == AI_REPLY
    assert strip_code_fences(f"```\n{AI_REPLY}\n```") == AI_REPLY
    assert strip_code_fences(f"```json {AI_REPLY}```") == AI_REPLY
    assert strip_code_fences(f"  {AI_REPLY}  ") == AI_REPLY
    print("  PASS")


def test_parse_llm_response_validates_schema():
    command = parse_llm_response(f"```json\n{AI_REPLY}\n```")
    assert command is not None
    assert command.intent == Intent.CHECK_STOCK
    assert command.items[0].category == ProductCategory.CEMENT

    assert parse_llm_response("sorry, I cannot help") is None
    assert parse_llm_response('{"intent": "DELETE_EVERYTHING"}') is None
    assert parse_llm_response('{"items": []}') is None
    assert parse_llm_response("[1, 2, 3]") is None
    print("  PASS: bad JSON and bad schema rejected")


def test_high_confidence_skips_ai():
    client = FakeClient(reply=AI_REPLY)
    result = asyncio.run(resolve_command("ankur 8mm ka rate 65 kar do", client=client))

    assert client.calls == [], "AI must not be called for confident rule parses"
    assert result.parse_source == ParseSource.REGEX_RULE
    assert result.command.intent == Intent.UPDATE_RATE
    print("  PASS: no AI call above threshold")


def test_low_confidence_adopts_ai_result():
    client = FakeClient(reply=f"```json\n{AI_REPLY}\n```")
    result = asyncio.run(resolve_command(LOW_CONFIDENCE_TEXT, client=client))

    assert client.calls == [LOW_CONFIDENCE_TEXT]
    assert result.parse_source == ParseSource.LLM_FALLBACK
    assert result.confidence == 0.75
    assert result.command.intent == Intent.CHECK_STOCK
    assert result.raw_text == LOW_CONFIDENCE_TEXT
    print("  PASS: AI result adopted at exactly 0.75")


def test_ai_failures_keep_rule_result():
    failing_clients = [
        FakeClient(reply=None),
        FakeClient(reply=""),
        FakeClient(reply="not json at all"),
        FakeClient(reply='{"intent": "NOT_AN_INTENT"}'),
        FakeClient(reply=AI_REPLY, available=False),
        FakeClient(error=RuntimeError("connection reset")),
    ]
    for client in failing_clients:
        result = asyncio.run(resolve_command(LOW_CONFIDENCE_TEXT, client=client))
        assert result.parse_source == ParseSource.REGEX_RULE
        assert result.confidence == 0.3
        assert result.command.intent == Intent.CREATE_ESTIMATE
    print("  PASS: every failure mode falls back silently")


def test_multi_command_resolves_each_clause():
    client = FakeClient(reply=AI_REPLY)
    results = asyncio.run(
        resolve_multi_command(f"ankur 8mm ka rate 65 kar do aur {LOW_CONFIDENCE_TEXT}", client=client)
    )

    assert [r.parse_source for r in results] == [ParseSource.REGEX_RULE, ParseSource.LLM_FALLBACK]
    assert client.calls == [LOW_CONFIDENCE_TEXT]
    print("  PASS: only the weak clause went to the AI")


if __name__ == "__main__":
    test_strip_code_fences()
    test_parse_llm_response_validates_schema()
    test_high_confidence_skips_ai()
    test_low_confidence_adopts_ai_result()
    test_ai_failures_keep_rule_result()
    test_multi_command_resolves_each_clause()
    print("\nALL FALLBACK GATE TESTS PASSED")
