"""Quote validator: ground each claim against the document or demote it."""

import logging
from collections.abc import Sequence

from keyterms.core.extraction_spec import MatchSettings
from keyterms.grounding.locator import locate_quote
from keyterms.grounding.models import Claim, Document, VerifiedExtraction

logger = logging.getLogger(__name__)

UNVERIFIED_REASONING = "Quote could not be verified in the source document"


# ── Page Lookup ──────────────────────────────────────────────────────


def page_for_offset(offset: int, page_offsets: Sequence[int]) -> int:
    """1-based page whose half-open bracket contains ``offset``.

    Offsets past every boundary fall on the last page.
    """
    for i in range(len(page_offsets) - 1):
        if page_offsets[i] <= offset < page_offsets[i + 1]:
            return i + 1
    return max(1, len(page_offsets) - 1)


# ── Single Claim ─────────────────────────────────────────────────────


def validate_claim(
    claim: Claim,
    document: Document,
    settings: MatchSettings | None = None,
) -> VerifiedExtraction:
    """Ground one claim. Never raises for an unverifiable quote."""
    if claim.status == "not_found" or not claim.quote or not claim.quote.strip():
        return _pass_through(claim, document)

    span = locate_quote(claim.quote, document.text, settings)

    if span is None:
        logger.warning(
            "Quote validation failed for field %r: %r...",
            claim.field, claim.quote[:100],
        )
        return VerifiedExtraction.not_found(
            claim.field, reasoning=claim.reasoning or UNVERIFIED_REASONING
        )

    page = claim.page
    if page is None or not 1 <= page <= document.page_count:
        page = page_for_offset(span.start, document.page_offsets)

    return VerifiedExtraction(
        field=claim.field,
        status=claim.status,
        quote=span.text,
        reasoning=claim.reasoning,
        page=page,
        start=span.start,
        end=span.end,
        confidence=max(0.0, claim.confidence - span.penalty),
    )


def _pass_through(claim: Claim, document: Document) -> VerifiedExtraction:
    """Keep status and quote of an ungroundable claim, drop unusable locations.

    Offsets are kept only on ``not_found`` claims and only when they lie in
    the text; a found claim without a quote has nothing they could point at.
    """
    start, end = claim.start, claim.end
    in_text = (
        start is not None and end is not None and 0 <= start <= end <= len(document.text)
    )
    if claim.status != "not_found" or not in_text:
        start = end = None

    page = claim.page
    if page is not None and not 1 <= page <= document.page_count:
        page = None

    return VerifiedExtraction(
        field=claim.field,
        status=claim.status,
        quote=claim.quote,
        reasoning=claim.reasoning,
        page=page,
        start=start,
        end=end,
        confidence=claim.confidence,
    )


# ── Batch ────────────────────────────────────────────────────────────


def validate_claims(
    claims: list[Claim],
    document: Document,
    settings: MatchSettings | None = None,
) -> list[VerifiedExtraction]:
    """Validate every claim, preserving order."""
    return [validate_claim(c, document, settings) for c in claims]
