"""Validation report: how often grounding caught a hallucinated quote."""

from keyterms.grounding.models import Claim, ValidationReport


def generate_validation_report(
    original_claims: list[Claim],
    verified: list[Claim],
) -> ValidationReport:
    """Compare claims with their verified counterparts, pairwise by index.

    Only a ``found`` -> ``not_found`` transition counts as invalid; claims that
    were already ``not_found`` or ``inferred`` never do.
    """
    if len(original_claims) != len(verified):
        raise ValueError(
            f"Cannot pair {len(original_claims)} claims with {len(verified)} verified extractions"
        )

    invalid_fields = [
        original.field
        for original, result in zip(original_claims, verified)
        if original.status == "found" and result.status == "not_found"
    ]

    return ValidationReport(
        total=len(original_claims),
        valid_count=len(original_claims) - len(invalid_fields),
        invalid_count=len(invalid_fields),
        invalid_fields=invalid_fields,
    )
