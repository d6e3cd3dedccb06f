"""Versioned routing configuration: restricted prefixes, keywords and suppression rules."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from po_router.core.errors import RoutingRulesError
from po_router.core.schemas import Role
from po_router.processing.normalizer import normalize_prefix

logger = logging.getLogger(__name__)

DEFAULT_RESTRICTED_PREFIXES = ["10", "21", "22", "51", "59", "82", "83", "73", "AL"]
DEFAULT_RESTRICTED_KEYWORDS = [
    "MK",
    "GMK",
    "SKD",
    "KA",
    "KEYED",
    "MASTER KEY",
    "GRAND MASTER",
    "KESO",
]


class FalsePositiveRule(BaseModel):
    """Skip a line item whose part number starts with ``part_number_prefix``
    while its normalized prefixes contain ``prefix``."""

    part_number_prefix: str = Field(min_length=1)
    prefix: str = Field(min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("prefix")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_prefix(value)

    def matches(self, part_number: str, normalized_prefixes: list[str]) -> bool:
        return part_number.startswith(self.part_number_prefix) and self.prefix in normalized_prefixes


class RoutingRules(BaseModel):
    version: str = "1"
    restricted_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_RESTRICTED_PREFIXES))
    restricted_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_RESTRICTED_KEYWORDS))
    false_positive_rules: list[FalsePositiveRule] = Field(
        default_factory=lambda: [FalsePositiveRule(part_number_prefix="31", prefix="AL")]
    )
    generalist_role: Role = Role.ORDER_ENTRY
    specialist_role: Role = Role.KEYING
    specialist_fallback_label: str = "Keying Dept"
    high_volume_line_threshold: int = Field(default=10, ge=1)
    low_volume_line_threshold: int = Field(default=3, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("restricted_prefixes")
    @classmethod
    def _normalize_prefixes(cls, values: list[str]) -> list[str]:
        normalized: list[str] = []
        for value in values:
            token = normalize_prefix(value)
            if token and token not in normalized:
                normalized.append(token)
        return normalized

    @field_validator("restricted_keywords")
    @classmethod
    def _upper_keywords(cls, values: list[str]) -> list[str]:
        return [value.strip().upper() for value in values if value.strip()]

    @model_validator(mode="after")
    def _check_thresholds(self) -> "RoutingRules":
        if self.low_volume_line_threshold >= self.high_volume_line_threshold:
            raise ValueError(
                "low_volume_line_threshold must be lower than high_volume_line_threshold"
            )
        return self

    def is_restricted_prefix(self, prefix: str) -> bool:
        return prefix in self.restricted_prefixes

    def suppression_rule_for(
        self, part_number: str, normalized_prefixes: list[str]
    ) -> FalsePositiveRule | None:
        for rule in self.false_positive_rules:
            if rule.matches(part_number, normalized_prefixes):
                return rule
        return None


def load_routing_rules(path: Path | None = None) -> RoutingRules:
    if path is None:
        return RoutingRules()

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RoutingRulesError(f"Unable to read routing rules from {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise RoutingRulesError(f"Routing rules file {path} must contain a JSON object")

    try:
        rules = RoutingRules.model_validate(payload)
    except ValidationError as exc:
        raise RoutingRulesError(f"Invalid routing rules in {path}: {exc}") from exc

    logger.info(
        "Routing rules loaded",
        extra={
            "event": "routing_rules_loaded",
            "path": str(path),
            "version": rules.version,
            "restricted_prefixes": rules.restricted_prefixes,
            "restricted_keywords": rules.restricted_keywords,
        },
    )
    return rules
