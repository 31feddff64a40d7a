"""Decode raw LLM JSON into Claim records.

Two response shapes are accepted:

* list shape -- ``{"extractions": [{field, status, quote, page, start, end,
  confidence}, ...]}`` (or a bare list of those records);
* keyed shape -- ``{"extractions": {field_slug: {field, status, quote, page,
  relevance}}}`` as produced by batched per-field schemas.

Everything downstream only ever sees normalized ``Claim`` objects.
"""

import json
import logging
import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from keyterms.grounding.models import Claim

logger = logging.getLogger(__name__)

RELEVANCE_CONFIDENCE = {"high": 0.9, "medium": 0.6, "low": 0.3}
_STATUSES = ("found", "not_found", "inferred")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


class ClaimDecodeError(ValueError):
    """Raised when a model response cannot be read as claims."""


# ── Raw Record ───────────────────────────────────────────────────────


class RawExtraction(BaseModel):
    """Permissive view of one extraction as the model emitted it."""

    model_config = ConfigDict(extra="ignore")

    field: Optional[str] = None
    status: str = "not_found"
    quote: Optional[str] = ""
    reasoning: Optional[str] = None
    page: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None
    confidence: Optional[float] = None
    relevance: Optional[Literal["high", "medium", "low"]] = None


# ── Public API ───────────────────────────────────────────────────────


def field_slug(name: str) -> str:
    """Schema key for a field name: lowercase, non-alphanumerics to ``_``."""
    return _SLUG_RE.sub("_", name.lower())


def decode_claims(
    payload: str | bytes | dict | list,
    fields: list[str] | None = None,
) -> list[Claim]:
    """Turn one model response into claims.

    When ``fields`` is given, every requested field missing from the response
    is returned as a ``not_found`` claim after the decoded ones.
    """
    data = _load(payload)

    if isinstance(data, dict) and "extractions" in data:
        data = data["extractions"]

    slug_names = {field_slug(f): f for f in fields or []}

    if isinstance(data, list):
        records = [(None, None, item) for item in data]
    elif isinstance(data, dict):
        records = [(slug_names.get(key), key, item) for key, item in data.items()]
    else:
        raise ClaimDecodeError(f"Unsupported extraction payload type: {type(data).__name__}")

    claims: list[Claim] = []
    for requested_name, key, item in records:
        if not isinstance(item, dict):
            raise ClaimDecodeError(f"Extraction record is not an object: {item!r}")
        try:
            raw = RawExtraction.model_validate(item)
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed extraction %r: %d validation error(s) — %s",
                item.get("field") or key, exc.error_count(), exc.errors()[0]["msg"],
            )
            continue

        claim = _to_claim(raw, requested_name, key)
        if claim is None:
            logger.warning("Dropping extraction with no field name: %r", item)
            continue
        claims.append(claim)

    if fields:
        seen = {c.field for c in claims}
        for name in fields:
            if name not in seen:
                claims.append(Claim(field=name, status="not_found", quote="", confidence=0.0))

    return claims


# ── Helpers ──────────────────────────────────────────────────────────


def _load(payload):
    if isinstance(payload, (str, bytes)):
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ClaimDecodeError(f"Model response is not valid JSON: {exc}") from exc
    return payload


def _to_claim(
    raw: RawExtraction, requested_name: str | None, key: str | None
) -> Claim | None:
    name = requested_name or raw.field or key
    if not name:
        return None

    status = raw.status if raw.status in _STATUSES else "not_found"
    if status != raw.status:
        logger.debug("Field %r: unknown status %r treated as not_found", name, raw.status)

    if raw.confidence is not None:
        confidence = raw.confidence
    else:
        confidence = RELEVANCE_CONFIDENCE[raw.relevance or "medium"]

    start = raw.start if raw.start is not None and raw.start >= 0 else None
    end = raw.end if raw.end is not None and raw.end >= 0 else None
    if start is not None and end is not None and end < start:
        start = end = None

    return Claim(
        field=name,
        status=status,
        quote=raw.quote or "",
        reasoning=raw.reasoning,
        page=raw.page if raw.page and raw.page > 0 else None,
        start=start,
        end=end,
        confidence=min(max(confidence, 0.0), 1.0),
    )
