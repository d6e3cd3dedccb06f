from __future__ import annotations

import json
import math
import re
from collections.abc import Callable
from typing import Any

from pydantic.alias_generators import to_camel

_NULLISH = {
    "",
    "-",
    "n/a",
    "na",
    "none",
    "null",
    "nil",
    "unknown",
    "not specified",
    "not available",
}
_WHITESPACE_RE = re.compile(r"\s+")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_LIST_SPLIT_RE = re.compile(r"[,;]")
_CURRENCY_WORD_RE = re.compile(r"(?i)\b(usd|us\$|dollars?|eur|euro|gbp|pounds?)\b")

_MISSING = object()


def clean_extraction_payload(payload: Any) -> dict[str, Any]:
    """Coerce raw extraction JSON into the shape accepted by ``ExtractionResult``.

    Nullish placeholders such as ``"N/A"`` become empty strings, or are dropped
    for numeric fields so that model defaults apply. Numeric strings are parsed
    and scalar strings are split into lists where a list is expected.
    """
    if not isinstance(payload, dict):
        raise ValueError("Extraction payload is not a JSON object")
    return _clean_object(payload, _EXTRACTION_FIELDS)


def _clean_object(payload: dict[str, Any], fields: dict[str, Callable[[Any], Any]]) -> dict[str, Any]:
    aliases = {to_camel(name): name for name in fields}
    aliases.update({name: name for name in fields})

    cleaned: dict[str, Any] = {}
    for key, value in payload.items():
        field_name = aliases.get(key)
        if field_name is None:
            continue
        coerced = fields[field_name](value)
        if coerced is _MISSING:
            continue
        cleaned[field_name] = coerced
    return cleaned


def _to_text(value: Any) -> str:
    if value is None:
        return ""

    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=True)
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)

    text = _WHITESPACE_RE.sub(" ", text).strip()
    if text.lower() in _NULLISH:
        return ""
    return text


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        parsed = float(value)
        return parsed if math.isfinite(parsed) else None

    text = str(value).strip()
    if not text or text.lower() in _NULLISH:
        return None

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1].strip()

    text = text.replace(",", "")
    text = _CURRENCY_WORD_RE.sub("", text)
    text = text.replace("$", " ")
    text = _WHITESPACE_RE.sub(" ", text).strip()

    match = _NUMBER_RE.search(text)
    if not match:
        return None

    parsed = float(match.group(0))
    if negative:
        parsed *= -1.0
    return parsed if math.isfinite(parsed) else None


def _to_int_or_missing(value: Any) -> Any:
    parsed = _to_number(value)
    if parsed is None or parsed < 0:
        return _MISSING
    return round(parsed)


def _to_quantity(value: Any) -> float:
    parsed = _to_number(value)
    return parsed if parsed is not None else 0.0


def _to_optional_number(value: Any) -> float | None:
    return _to_number(value)


def _to_text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        candidates: list[Any] = _LIST_SPLIT_RE.split(value)
    elif isinstance(value, (list, tuple)):
        candidates = list(value)
    else:
        candidates = [value]

    texts = (_to_text(candidate) for candidate in candidates)
    return [text for text in texts if text]


def _to_object_list(fields: dict[str, Callable[[Any], Any]]) -> Callable[[Any], list[dict[str, Any]]]:
    def _coerce(value: Any) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [_clean_object(entry, fields) for entry in value if isinstance(entry, dict)]

    return _coerce


def _to_customer(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        return {}
    return _clean_object(value, _CUSTOMER_FIELDS)


_CUSTOMER_FIELDS: dict[str, Callable[[Any], Any]] = {
    "name": _to_text,
    "email": _to_text,
    "source": _to_text,
    "address": _to_text,
}

_LINE_ITEM_FIELDS: dict[str, Callable[[Any], Any]] = {
    "line_number": _to_text,
    "page_number": _to_int_or_missing,
    "part_number": _to_text,
    "prefixes": _to_text_list,
    "quantity": _to_quantity,
    "description": _to_text,
    "unit_price": _to_optional_number,
}

_PAGE_ITEM_FIELDS: dict[str, Callable[[Any], Any]] = {
    "qty": _to_quantity,
    "desc": _to_text,
}

_PAGE_FIELDS: dict[str, Callable[[Any], Any]] = {
    "page_number": _to_int_or_missing,
    "type": _to_text,
    "summary": _to_text,
    "items_on_page": _to_object_list(_PAGE_ITEM_FIELDS),
}

_EXTRACTION_FIELDS: dict[str, Callable[[Any], Any]] = {
    "customer_info": _to_customer,
    "po_number": _to_text,
    "order_number": _to_text,
    "quote_number": _to_text,
    "page_count": _to_int_or_missing,
    "total_line_count": _to_int_or_missing,
    "routing_keywords": _to_text_list,
    "line_items": _to_object_list(_LINE_ITEM_FIELDS),
    "pages": _to_object_list(_PAGE_FIELDS),
}
