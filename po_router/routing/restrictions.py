from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from po_router.core.rules import RoutingRules
from po_router.core.schemas import ExtractionResult, LineItem
from po_router.processing.normalizer import normalize_prefixes
from po_router.routing.trail import DecisionTrail, format_prefix_evidence

GLOBAL_KEYWORD_REASON = "Global Keyword Match"


@dataclass(frozen=True)
class RestrictionMatch:
    kind: Literal["prefix", "keyword"]
    token: str
    reason: str
    evidence: str


def detect_restriction(
    extraction: ExtractionResult,
    rules: RoutingRules,
    trail: DecisionTrail,
) -> RestrictionMatch | None:
    """Return the first restricted signal in document order, or None.

    Line-item prefixes are scanned before any document-level keyword.
    """
    match = _scan_line_items(extraction.line_items, rules, trail)
    if match is not None:
        return match
    return _scan_keywords(extraction, rules, trail)


def _scan_line_items(
    line_items: list[LineItem],
    rules: RoutingRules,
    trail: DecisionTrail,
) -> RestrictionMatch | None:
    for item in line_items:
        prefixes = normalize_prefixes(item.prefixes)

        suppression = rules.suppression_rule_for(item.part_number, prefixes)
        if suppression is not None:
            trail.record(
                f"Ignoring prefix '{suppression.prefix}' on part {item.part_number} "
                f"(known false positive for parts starting with '{suppression.part_number_prefix}')"
            )
            continue

        for prefix in prefixes:
            if rules.is_restricted_prefix(prefix):
                trail.record(f"Restricted prefix '{prefix}' found on page {item.page_number}")
                return RestrictionMatch(
                    kind="prefix",
                    token=prefix,
                    reason=f"Restricted Prefix '{prefix}'",
                    evidence=format_prefix_evidence(
                        line_number=item.line_number,
                        page_number=item.page_number,
                        part_number=item.part_number,
                        prefix=prefix,
                    ),
                )
    return None


def _scan_keywords(
    extraction: ExtractionResult,
    rules: RoutingRules,
    trail: DecisionTrail,
) -> RestrictionMatch | None:
    corpus = build_keyword_corpus(extraction)
    for keyword in rules.restricted_keywords:
        if keyword in corpus:
            trail.record(f"Restricted keyword '{keyword}' found in document text")
            return RestrictionMatch(
                kind="keyword",
                token=keyword,
                reason=GLOBAL_KEYWORD_REASON,
                evidence=keyword,
            )
    return None


def build_keyword_corpus(extraction: ExtractionResult) -> str:
    parts: list[str] = list(extraction.routing_keywords)
    for page in extraction.pages:
        parts.append(page.summary)
        parts.extend(item.desc for item in page.items_on_page)
    return "\n".join(part for part in parts if part).upper()
