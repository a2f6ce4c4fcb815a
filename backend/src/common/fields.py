from collections.abc import Mapping
from typing import Any


def read_field(source: Any, *names: str) -> Any:
    """
    Read the first non-None field among ``names``.

    Works for mappings (LLM output, request payloads) as well as objects with
    attributes (ORM rows, pydantic models), so callers can accept either.

    Examples:
        >>> read_field({"taxAmount": "1.00"}, "tax_amount", "taxAmount")
        '1.00'
    """
    if source is None:
        return None
    for name in names:
        if isinstance(source, Mapping):
            value = source.get(name)
        else:
            value = getattr(source, name, None)
        if value is not None:
            return value
    return None
