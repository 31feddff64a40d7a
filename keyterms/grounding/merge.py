"""Merge per-chunk claims into one grounded extraction per field."""

import logging

from keyterms.grounding.locator import locate_exact
from keyterms.grounding.models import Claim, Document, VerifiedExtraction
from keyterms.grounding.validator import UNVERIFIED_REASONING, page_for_offset

logger = logging.getLogger(__name__)

NO_CANDIDATE_REASONING = "No chunk reported this field as found"


# ── Candidate Selection ──────────────────────────────────────────────


def _candidate_key(claim: Claim) -> tuple:
    """Longest quote first; ties go to higher confidence, then quote, then reasoning."""
    return (-len(claim.quote), -claim.confidence, claim.quote, claim.reasoning or "")


def select_best_claims(claim_sets: list[list[Claim]]) -> list[Claim]:
    """Group claims by field across chunks and keep the best found one.

    Fields are returned in order of first appearance. A field with no found
    candidate gets a ``not_found`` placeholder claim.
    """
    by_field: dict[str, list[Claim]] = {}
    for claim_set in claim_sets:
        for claim in claim_set:
            by_field.setdefault(claim.field, []).append(claim)

    selected: list[Claim] = []
    for field, candidates in by_field.items():
        found = sorted(
            (c for c in candidates if c.status == "found" and c.quote.strip()),
            key=_candidate_key,
        )
        if found:
            selected.append(found[0])
        else:
            selected.append(
                Claim(field=field, status="not_found", quote="", confidence=0.0)
            )

    return selected


# ── Merge ────────────────────────────────────────────────────────────


def merge_chunk_claims(
    claim_sets: list[list[Claim]],
    document: Document,
) -> list[VerifiedExtraction]:
    """Collapse chunk claim sets to one verified extraction per field.

    Only exact-match grounding is attempted: chunks are verbatim slices of
    the document, so a quote that is not an exact substring was fabricated.
    """
    merged: list[VerifiedExtraction] = []

    for best in select_best_claims(claim_sets):
        if best.status != "found":
            merged.append(VerifiedExtraction.not_found(best.field, NO_CANDIDATE_REASONING))
            continue

        span = locate_exact(best.quote, document.text)
        if span is None:
            logger.info(
                "Could not find exact match for field %r: %r...",
                best.field, best.quote[:50],
            )
            merged.append(
                VerifiedExtraction.not_found(best.field, best.reasoning or UNVERIFIED_REASONING)
            )
            continue

        merged.append(
            VerifiedExtraction(
                field=best.field,
                status="found",
                quote=span.text,
                reasoning=best.reasoning,
                page=page_for_offset(span.start, document.page_offsets),
                start=span.start,
                end=span.end,
                confidence=best.confidence,
            )
        )

    found = sum(1 for e in merged if e.status == "found")
    logger.info(
        "Merged %d chunk(s) into %d fields — %d found",
        len(claim_sets), len(merged), found,
    )
    return merged
