"""
Weighted fuzzy matching of extracted entities against stored records.

Clients are scored on name, email, phone, address and tax number; products
on name and description. The three best candidates are returned together
with a confidence tier computed from the top score.
"""
import logging
from typing import Any, Iterable

from src.common.fields import read_field
from src.matching.schemas import Confidence, EntityKind, MatchResult
from src.matching.similarity import normalize_phone, string_similarity

logger = logging.getLogger(__name__)

MAX_MATCHES = 3

CLIENT_NAME_WEIGHT = 3.0
CLIENT_EMAIL_BONUS = 5.0
CLIENT_PHONE_BONUS = 4.0
CLIENT_ADDRESS_WEIGHT = 2.0
CLIENT_TAX_NUMBER_BONUS = 4.0

PRODUCT_NAME_WEIGHT = 4.0
PRODUCT_DESCRIPTION_WEIGHT = 3.0

# (high, medium) thresholds, both exclusive
CONFIDENCE_THRESHOLDS = {
    EntityKind.CLIENT: (8.0, 4.0),
    EntityKind.PRODUCT: (3.0, 1.5),
}


def _text(source: Any, *names: str) -> str:
    value = read_field(source, *names)
    return str(value).strip() if value is not None else ""


def score_client(partial: Any, candidate: Any) -> float:
    score = 0.0

    name = _text(partial, "name")
    candidate_name = _text(candidate, "name")
    if name and candidate_name:
        score += string_similarity(name, candidate_name) * CLIENT_NAME_WEIGHT

    email = _text(partial, "email")
    candidate_email = _text(candidate, "email")
    if email and candidate_email and email.lower() == candidate_email.lower():
        score += CLIENT_EMAIL_BONUS

    phone = normalize_phone(_text(partial, "phone"))
    candidate_phone = normalize_phone(_text(candidate, "phone"))
    if phone and candidate_phone and phone == candidate_phone:
        score += CLIENT_PHONE_BONUS

    address = _text(partial, "address")
    candidate_address = _text(candidate, "address")
    if address and candidate_address:
        score += string_similarity(address, candidate_address) * CLIENT_ADDRESS_WEIGHT

    tax_number = _text(partial, "tax_number", "taxNumber")
    candidate_tax_number = _text(candidate, "tax_number", "taxNumber")
    if tax_number and candidate_tax_number and tax_number == candidate_tax_number:
        score += CLIENT_TAX_NUMBER_BONUS

    return score


def score_product(partial: Any, candidate: Any) -> float:
    # An extracted line item usually only has a description; use it for both.
    name_query = _text(partial, "name") or _text(partial, "description")
    description_query = _text(partial, "description") or _text(partial, "name")

    score = 0.0

    candidate_name = _text(candidate, "name")
    if name_query and candidate_name:
        score += string_similarity(name_query, candidate_name) * PRODUCT_NAME_WEIGHT

    candidate_description = _text(candidate, "description")
    if description_query and candidate_description:
        score += string_similarity(description_query, candidate_description) * PRODUCT_DESCRIPTION_WEIGHT

    return score


def confidence_for(top_score: float, kind: EntityKind) -> Confidence:
    high, medium = CONFIDENCE_THRESHOLDS[kind]
    if top_score > high:
        return Confidence.HIGH
    if top_score > medium:
        return Confidence.MEDIUM
    return Confidence.LOW


def match_entities(partial: Any, candidates: Iterable[Any], kind: EntityKind) -> MatchResult:
    """
    Rank ``candidates`` against an extracted ``partial`` entity.

    Args:
        partial: Extracted client or product; any field may be missing
        candidates: All stored records of the same kind for the user
        kind: EntityKind.CLIENT or EntityKind.PRODUCT

    Returns:
        MatchResult with up to three candidates, best first. Equal scores keep
        the input order. With no candidates the result is empty and ``low``.
    """
    kind = EntityKind(kind)
    scorer = score_client if kind is EntityKind.CLIENT else score_product

    scored = [(scorer(partial, candidate), candidate) for candidate in candidates or []]
    if not scored:
        return MatchResult(matches=[], confidence=Confidence.LOW, scores=[])

    # sorted() is stable, so the first seen candidate wins ties
    ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)[:MAX_MATCHES]
    confidence = confidence_for(ranked[0][0], kind)

    logger.debug(f"Matched {kind.value} against {len(scored)} candidates: top score {ranked[0][0]:.2f} ({confidence.value})")

    return MatchResult(
        matches=[candidate for _, candidate in ranked],
        confidence=confidence,
        scores=[round(score, 4) for score, _ in ranked],
    )
