import pytest

from po_router.core.rules import DEFAULT_RESTRICTED_PREFIXES, RoutingRules
from po_router.core.schemas import ExtractionResult, LineItem, Page, PageItem
from po_router.routing.restrictions import GLOBAL_KEYWORD_REASON, detect_restriction
from po_router.routing.trail import DecisionTrail


def _item(line: str, part: str, prefixes: list[str], page: int = 1) -> LineItem:
    return LineItem(line_number=line, page_number=page, part_number=part, prefixes=prefixes, quantity=1)


def _detect(extraction: ExtractionResult, rules: RoutingRules | None = None):
    trail = DecisionTrail()
    return detect_restriction(extraction, rules or RoutingRules(), trail), trail


@pytest.mark.parametrize("prefix", DEFAULT_RESTRICTED_PREFIXES)
def test_each_restricted_prefix_matches(prefix: str) -> None:
    extraction = ExtractionResult(line_items=[_item("1", "8804 ETL", [prefix])])

    match, trail = _detect(extraction)

    assert match is not None
    assert match.reason == f"Restricted Prefix '{prefix}'"
    assert f"Prefix: [{prefix}]" in match.evidence
    assert any(prefix in entry for entry in trail.entries)


def test_prefix_is_normalized_before_comparison() -> None:
    extraction = ExtractionResult(line_items=[_item("1", "8804", ["5-9."])])

    match, _ = _detect(extraction)

    assert match is not None
    assert match.token == "59"


def test_evidence_cites_line_page_and_part() -> None:
    extraction = ExtractionResult(line_items=[_item("7", "AD-PE8406 ETL", ["82"], page=3)])

    match, trail = _detect(extraction)

    assert match is not None
    assert match.evidence == "Line: 7\nPage: 3\nPart: AD-PE8406 ETL\nPrefix: [82]"
    assert trail.entries == ["Restricted prefix '82' found on page 3"]


def test_false_positive_rule_suppresses_item() -> None:
    extraction = ExtractionResult(line_items=[_item("1", "3100-X", ["AL"])])

    match, trail = _detect(extraction)

    assert match is None
    assert len(trail.entries) == 1
    assert "3100-X" in trail.entries[0]


def test_false_positive_rule_skips_whole_item_and_continues() -> None:
    extraction = ExtractionResult(
        line_items=[
            _item("1", "3100-X", ["al", "59"]),
            _item("2", "8804", ["10"], page=2),
        ]
    )

    match, _ = _detect(extraction)

    assert match is not None
    assert match.token == "10"
    assert "Line: 2" in match.evidence


def test_al_prefix_on_other_parts_still_matches() -> None:
    extraction = ExtractionResult(line_items=[_item("1", "1300-X", ["AL"])])

    match, _ = _detect(extraction)

    assert match is not None
    assert match.reason == "Restricted Prefix 'AL'"


def test_first_matching_line_item_wins() -> None:
    extraction = ExtractionResult(
        line_items=[
            _item("1", "8804", ["12"]),
            _item("2", "8806", ["59"], page=2),
            _item("3", "8808", ["10"], page=3),
        ]
    )

    match, trail = _detect(extraction)

    assert match is not None
    assert match.token == "59"
    assert "Line: 2" in match.evidence
    assert len(trail.entries) == 1


def test_line_item_match_precedes_keyword_match() -> None:
    extraction = ExtractionResult(
        line_items=[_item("1", "8804", ["21"])],
        pages=[Page(page_number=1, summary="Master key system")],
    )

    match, _ = _detect(extraction)

    assert match is not None
    assert match.kind == "prefix"


def test_keyword_match_is_case_insensitive_substring() -> None:
    extraction = ExtractionResult(
        line_items=[_item("1", "8804", ["12"])],
        pages=[Page(page_number=1, summary="Customer requests a master key system")],
    )

    match, trail = _detect(extraction)

    assert match is not None
    assert match.reason == GLOBAL_KEYWORD_REASON
    assert match.evidence == "MASTER KEY"
    assert trail.entries == ["Restricted keyword 'MASTER KEY' found in document text"]


def test_keyword_found_in_page_item_description() -> None:
    extraction = ExtractionResult(
        pages=[Page(page_number=2, items_on_page=[PageItem(qty=2, desc="Cylinder, keyed alike")])]
    )

    match, _ = _detect(extraction)

    assert match is not None
    assert match.evidence == "KEYED"


def test_keyword_found_in_routing_keywords() -> None:
    extraction = ExtractionResult(routing_keywords=["keso"])

    match, _ = _detect(extraction)

    assert match is not None
    assert match.reason == GLOBAL_KEYWORD_REASON
    assert match.evidence == "KESO"


def test_no_restriction_is_a_normal_result() -> None:
    extraction = ExtractionResult(
        line_items=[_item("1", "8804", ["12", "55"])],
        pages=[Page(page_number=1, summary="Exit devices and hinges")],
    )

    match, trail = _detect(extraction)

    assert match is None
    assert trail.entries == []


def test_custom_rules_replace_default_sets() -> None:
    rules = RoutingRules(restricted_prefixes=["12"], restricted_keywords=["HINGE"])
    extraction = ExtractionResult(line_items=[_item("1", "8804", ["59", "12"])])

    match, _ = _detect(extraction, rules)

    assert match is not None
    assert match.token == "12"
