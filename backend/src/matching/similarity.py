import re
from difflib import SequenceMatcher
from typing import Optional


def string_similarity(first: Optional[str], second: Optional[str]) -> float:
    """
    Symmetric closeness of two strings in [0, 1].

    Comparison is case-insensitive and ignores surrounding whitespace.
    Identical strings score 1.0; an empty or missing side scores 0.0.

    Examples:
        >>> string_similarity("Acme Corp", "acme corp ")
        1.0
        >>> string_similarity("Acme", "")
        0.0
    """
    a = (first or "").strip().lower()
    b = (second or "").strip().lower()

    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    # ratio() depends on argument order for some inputs; average both ways.
    forward = SequenceMatcher(None, a, b).ratio()
    backward = SequenceMatcher(None, b, a).ratio()
    return (forward + backward) / 2


def normalize_phone(phone: Optional[str]) -> str:
    """Keep digits only: "+48 (600) 100-200" -> "48600100200"."""
    if not phone:
        return ""
    return re.sub(r"\D", "", phone)
