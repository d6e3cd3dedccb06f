import re
from collections.abc import Iterable

_NON_ALNUM_RE = re.compile(r"[^0-9A-Z]")


def normalize_prefix(token: str) -> str:
    """Upper-case ``token`` and drop everything outside ``[0-9A-Z]``."""
    return _NON_ALNUM_RE.sub("", str(token).upper())


def normalize_prefixes(tokens: Iterable[str]) -> list[str]:
    normalized = (normalize_prefix(token) for token in tokens)
    return [token for token in normalized if token]
