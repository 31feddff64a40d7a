"""Grounding convenience function."""

import logging

from keyterms.core.extraction_spec import ExtractionSpec
from keyterms.grounding.merge import merge_chunk_claims, select_best_claims
from keyterms.grounding.models import Claim, Document, GroundingResult, VerifiedExtraction
from keyterms.grounding.report import generate_validation_report
from keyterms.grounding.validator import validate_claims

logger = logging.getLogger(__name__)


def ground_claims(
    claim_sets: list[list[Claim]],
    document: Document,
    spec: ExtractionSpec | None = None,
) -> GroundingResult:
    """Verify claims from one or more chunks and report demotions.

    A single claim set is validated claim by claim with the full three-tier
    locator. Several claim sets are merged per field with exact grounding.
    """
    settings = spec.matching if spec else None

    if len(claim_sets) > 1:
        originals = select_best_claims(claim_sets)
        extractions = merge_chunk_claims(claim_sets, document)
        merged = True
    else:
        originals = list(claim_sets[0]) if claim_sets else []
        extractions = validate_claims(originals, document, settings)
        merged = False

    report = generate_validation_report(originals, extractions)
    logger.info(
        "Grounded %d claims: %d valid, %d demoted%s",
        report.total,
        report.valid_count,
        report.invalid_count,
        f" ({', '.join(report.invalid_fields)})" if report.invalid_fields else "",
    )

    if spec:
        extractions = order_by_fields(extractions, spec.field_names())

    return GroundingResult(extractions=extractions, report=report, merged=merged)


def order_by_fields(
    extractions: list[VerifiedExtraction], field_names: list[str]
) -> list[VerifiedExtraction]:
    """Sort into ``field_names`` order; unknown fields follow in input order."""
    rank = {name: i for i, name in enumerate(field_names)}
    return sorted(extractions, key=lambda e: rank.get(e.field, len(rank)))
