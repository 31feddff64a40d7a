"""Shared data models for quote grounding."""

import logging
import math
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

ClaimStatus = Literal["found", "not_found", "inferred"]
MatchMethod = Literal["exact", "normalized", "fuzzy"]


# ── Document ─────────────────────────────────────────────────────────


class Document(BaseModel):
    """Flat contract text plus page-boundary offsets.

    ``page_offsets[i]`` is the first character of page ``i + 1`` and the final
    entry equals ``len(text)``.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    page_offsets: tuple[int, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def sanitize_offsets(cls, data):
        """Clamp, sort and bracket offsets instead of rejecting them."""
        if not isinstance(data, dict):
            return data
        text = data.get("text") or ""
        length = len(text)
        raw = list(data.get("page_offsets") or [])

        offsets = sorted(min(max(int(o), 0), length) for o in raw)
        if not offsets or offsets[0] != 0:
            offsets.insert(0, 0)
        if offsets[-1] != length:
            offsets.append(length)
        if len(offsets) < 2:
            offsets = [0, length]

        if raw and offsets != raw:
            logger.warning(
                "Page offsets %s violate document bounds (length %d) — using %s",
                raw[:10], length, offsets[:10],
            )
        return {**data, "text": text, "page_offsets": tuple(offsets)}

    @property
    def page_count(self) -> int:
        return len(self.page_offsets) - 1

    @classmethod
    def single_page(cls, text: str) -> "Document":
        """Document for a format with no native page concept."""
        return cls(text=text, page_offsets=[0, len(text)])

    @classmethod
    def from_form_feeds(cls, text: str, page_count: int | None = None) -> "Document":
        """Derive page boundaries from form-feed characters.

        Each ``\\f`` starts a new page right after it. Without form feeds, the
        text is divided evenly across ``page_count`` pages when one is known.
        """
        if "\f" in text:
            offsets = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\f"]
            if offsets[-1] != len(text):
                offsets.append(len(text))
        elif page_count and page_count > 1:
            per_page = math.ceil(len(text) / page_count)
            offsets = [min(i * per_page, len(text)) for i in range(page_count + 1)]
        else:
            offsets = [0, len(text)]
        return cls(text=text, page_offsets=offsets)


# ── Claims & Extractions ─────────────────────────────────────────────


class Claim(BaseModel):
    """A model-proposed extraction for one field, not yet verified."""

    field: str
    status: ClaimStatus
    quote: str = ""
    reasoning: Optional[str] = None
    page: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class VerifiedExtraction(Claim):
    """Grounded output record: offsets and page are real or None."""

    @classmethod
    def not_found(cls, field: str, reasoning: str | None = None) -> "VerifiedExtraction":
        return cls(
            field=field,
            status="not_found",
            quote="",
            reasoning=reasoning,
            page=None,
            start=None,
            end=None,
            confidence=0.0,
        )


class LocatedSpan(BaseModel):
    """A span of the source text matched to a claimed quote."""

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    text: str
    method: MatchMethod
    penalty: float = Field(ge=0.0, le=1.0)


# ── Reporting ────────────────────────────────────────────────────────


class ValidationReport(BaseModel):
    """How many found claims were demoted during grounding."""

    total: int
    valid_count: int
    invalid_count: int
    invalid_fields: list[str] = Field(default_factory=list)


class GroundingResult(BaseModel):
    """Verified extractions for one document plus the validation report."""

    extractions: list[VerifiedExtraction]
    report: ValidationReport
    merged: bool = False
