"""
Sequential document numbering.

Produces the next human readable identifier for a user's invoice or quote
(``INV-0008`` after ``INV-0007``, ``Q-00001`` for the first quote).

The counter is best effort: the latest identifier is read, incremented and
written back without a lock, so two concurrent creates for the same user may
get the same number. Identifiers are display labels, not keys.

If the lookup fails, times out or returns something that cannot be
incremented, a time based identifier ``<PREFIX>-<unix millis>`` is used
instead. Numbering never blocks document creation.
"""
import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from src.common.outcome import Outcome
from src.documents.types import DocumentType

logger = logging.getLogger(__name__)

LookupLatest = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]

DEFAULT_LOOKUP_TIMEOUT = 5.0


def fallback_identifier(document_type: DocumentType) -> str:
    return f"{document_type.prefix}-{int(time.time() * 1000)}"


def increment_identifier(latest: str, document_type: DocumentType) -> str:
    """
    Increment the numeric suffix of an identifier.

    Args:
        latest: Existing identifier, e.g. "INV-0007"
        document_type: Type whose zero padding should be applied

    Returns:
        Next identifier, e.g. "INV-0008"

    Raises:
        ValueError: If the identifier has no separator or a non-numeric suffix
    """
    parts = latest.split("-")
    if len(parts) < 2:
        raise ValueError(f"Identifier without separator: {latest!r}")
    suffix = parts[1].strip()
    if not suffix.isdigit():
        raise ValueError(f"Identifier with non-numeric suffix: {latest!r}")
    next_number = int(suffix) + 1
    return f"{document_type.prefix}-{next_number:0{document_type.number_width}d}"


async def _call_lookup(lookup_latest: LookupLatest) -> Optional[str]:
    result: Any = lookup_latest()
    if inspect.isawaitable(result):
        result = await result
    return result


async def resolve_next_identifier(
    user_id: str,
    document_type: DocumentType,
    lookup_latest: LookupLatest,
    timeout: float = DEFAULT_LOOKUP_TIMEOUT,
) -> Outcome[str]:
    """
    Compute the next identifier for ``user_id``.

    Args:
        user_id: Owner of the documents
        document_type: Invoice or quote
        lookup_latest: Sync or async callable returning the user's latest
            identifier of this type, or None when there is none yet
        timeout: Seconds to wait for the lookup

    Returns:
        Ok(identifier), or Degraded(timestamp identifier, reason) when the
        lookup failed or the latest identifier was malformed
    """
    try:
        latest = await asyncio.wait_for(_call_lookup(lookup_latest), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Latest {document_type.value} lookup timed out for user {user_id} after {timeout}s")
        return Outcome.degraded(fallback_identifier(document_type), "lookup timed out")
    except Exception as e:
        logger.error(f"Latest {document_type.value} lookup failed for user {user_id}: {e}", exc_info=True)
        return Outcome.degraded(fallback_identifier(document_type), f"lookup failed: {e}")

    if not latest:
        return Outcome.ok(document_type.seed)

    try:
        return Outcome.ok(increment_identifier(str(latest), document_type))
    except ValueError as e:
        logger.warning(f"Cannot increment {document_type.value} number for user {user_id}: {e}")
        return Outcome.degraded(fallback_identifier(document_type), str(e))


async def next_document_identifier(
    user_id: str,
    document_type: DocumentType,
    lookup_latest: LookupLatest,
    timeout: float = DEFAULT_LOOKUP_TIMEOUT,
) -> str:
    """Same as ``resolve_next_identifier`` but returns the identifier only."""
    outcome = await resolve_next_identifier(user_id, document_type, lookup_latest, timeout)
    return outcome.value
