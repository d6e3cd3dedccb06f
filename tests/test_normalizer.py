import pytest

from po_router.processing.normalizer import normalize_prefix, normalize_prefixes


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("59", "59"),
        ("al", "AL"),
        (" a-l. ", "AL"),
        ("(82)", "82"),
        ("5 9", "59"),
        ("--", ""),
    ],
)
def test_normalize_prefix(raw: str, expected: str) -> None:
    assert normalize_prefix(raw) == expected


def test_normalize_prefixes_drops_tokens_that_normalize_to_empty() -> None:
    assert normalize_prefixes(["al", "#", "10-"]) == ["AL", "10"]
