"""
Validator tests: clarifications, TMT conversion and draft render data.

10mm × 5 pcs must come out as 37.04 kg with the formula shown.
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from ai.command_schema import (
    UOM,
    CanonicalCommand,
    ClarificationCode,
    DraftStatus,
    Intent,
    ParsedItem,
    ParseSource,
    ProductCategory,
)
from app.agent.command_parser import parse_command
from app.agent.validator import validate_parsed_command


def _validate(command, language="hi", raw_text="test", source=ParseSource.REGEX_RULE, confidence=0.9):
    return asyncio.run(validate_parsed_command(command, raw_text, source, confidence, language))


def _codes(result):
    return [c.reason_code for c in result.clarifications]


def test_tmt_pieces_converted_to_kg():
    print("\n" + "=" * 70)
    print("TEST: 10mm × 5 pcs -> kg")
    print("=" * 70)

    command = CanonicalCommand(
        intent=Intent.CREATE_ESTIMATE,
        items=[ParsedItem(category=ProductCategory.TMT, brand="Kamdhenu", size="10mm", qty=5, uom=UOM.PCS)],
    )
    result = _validate(command)
    line = result.render_data.line_items[0]
    print(f"  {line.description}: {line.converted_qty} {line.converted_uom} = {line.formula}")

    assert result.status == DraftStatus.DRAFT
    assert result.clarifications == []
    assert line.converted_qty == 37.04
    assert line.converted_uom == "KGS"
    assert line.formula == "(10²/162) × 12m × 5"
    print("  PASS")


def test_unknown_diameter_not_converted():
    command = CanonicalCommand(
        intent=Intent.CREATE_ESTIMATE,
        items=[ParsedItem(category=ProductCategory.TMT, brand="Ankur", size="14mm", qty=5, uom=UOM.PCS)],
    )
    line = _validate(command).render_data.line_items[0]
    assert line.converted_qty is None
    assert line.formula is None


def test_bundle_always_asks_rods_per_bundle():
    result = _validate(parse_command("ankur 10mm 5 bundle").command)

    assert result.status == DraftStatus.NEEDS_CLARIFICATION
    assert _codes(result) == [ClarificationCode.BUNDLE_RODS_NEEDED]
    clarification = result.clarifications[0]
    assert clarification.item_index == 0
    assert [o.value for o in clarification.options] == ["6", "8", "10", "12"]
    assert clarification.prompt == "एक बंडल में कितने रॉड?"
    # Never converted while rods per bundle is unknown
    assert result.render_data.line_items[0].converted_qty is None
    print("  PASS: bundle blocks conversion")


def test_rate_query_without_brand_asks_brand():
    parsed = parse_command("rate kitna hai")
    result = _validate(parsed.command, confidence=parsed.confidence)

    assert result.status == DraftStatus.NEEDS_CLARIFICATION
    assert _codes(result) == [ClarificationCode.MISSING_BRAND]
    clarification = result.clarifications[0]
    assert clarification.item_index is None, "Zero items: one command-level question"
    assert [o.value for o in clarification.options] == ["Kamdhenu", "Jindal", "Ankur", "TATA"]
    print("  PASS: command-level MISSING_BRAND")


def test_missing_brand_options_follow_category():
    command = CanonicalCommand(
        intent=Intent.ADD_STOCK_MANUAL,
        items=[ParsedItem(category=ProductCategory.CEMENT, qty=100, uom=UOM.BAG)],
    )
    result = _validate(command, language="en")

    assert _codes(result) == [ClarificationCode.MISSING_BRAND]
    assert result.clarifications[0].prompt == "Which brand?"
    assert [o.value for o in result.clarifications[0].options] == ["Bangur", "Mycem", "Dalmia", "ACC"]


def test_tmt_missing_size():
    command = CanonicalCommand(
        intent=Intent.UPDATE_RATE,
        items=[ParsedItem(category=ProductCategory.TMT, brand="Jindal")],
    )
    result = _validate(command, language="en")

    assert _codes(result) == [ClarificationCode.MISSING_SIZE]
    assert result.clarifications[0].prompt == "Which size (mm)?"
    assert result.clarifications[0].options[0].value == "8mm"


def test_rule_order_within_item():
    command = CanonicalCommand(
        intent=Intent.ADD_STOCK_MANUAL,
        items=[ParsedItem(category=ProductCategory.TMT, qty=4, uom=UOM.BUNDLE)],
    )
    result = _validate(command)
    assert _codes(result) == [
        ClarificationCode.MISSING_BRAND,
        ClarificationCode.MISSING_SIZE,
        ClarificationCode.BUNDLE_RODS_NEEDED,
    ]


def test_pipe_pieces_confirm_weight():
    result = _validate(parse_command("jindal pipe 40x40 10 pcs").command)

    assert _codes(result) == [ClarificationCode.CONFIRM_WEIGHT]
    assert result.clarifications[0].options[0].value == "confirm"


def test_render_data():
    parsed = parse_command("ankur 8mm ka rate 65 kar do")
    result = _validate(
        parsed.command,
        language="en",
        raw_text=parsed.raw_text,
        confidence=parsed.confidence,
    )
    render = result.render_data

    assert result.status == DraftStatus.DRAFT
    assert render.intent == Intent.UPDATE_RATE
    assert render.intent_display == "Update Rate"
    assert render.raw_input == "ankur 8mm ka rate 65 kar do"
    assert render.parse_source == ParseSource.REGEX_RULE
    assert render.confidence == 1.0
    assert render.amount == 65
    assert render.line_items[0].description == "Ankur TMT 8mm"
    assert [(c.field, c.done) for c in render.checklist] == [("brand", True), ("size", True), ("price", True)]
    print("  PASS: render data")


def test_ai_commands_validated_the_same_way():
    command = CanonicalCommand(intent=Intent.CHECK_RATE)
    result = _validate(command, source=ParseSource.LLM_FALLBACK, confidence=0.75)

    assert _codes(result) == [ClarificationCode.MISSING_BRAND]
    assert result.render_data.parse_source == ParseSource.LLM_FALLBACK


if __name__ == "__main__":
    test_tmt_pieces_converted_to_kg()
    test_unknown_diameter_not_converted()
    test_bundle_always_asks_rods_per_bundle()
    test_rate_query_without_brand_asks_brand()
    test_missing_brand_options_follow_category()
    test_tmt_missing_size()
    test_rule_order_within_item()
    test_pipe_pieces_confirm_weight()
    test_render_data()
    test_ai_commands_validated_the_same_way()
    print("\nALL VALIDATOR TESTS PASSED")
