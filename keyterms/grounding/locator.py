"""Span locator: find where a claimed quote actually sits in the source text.

Three tiers, tried in order, first success wins:

1. Exact substring match (no penalty).
2. Whitespace-normalized match, mapped back to original offsets.
3. Fuzzy prefix/suffix anchors for short quotes the model may have truncated
   or lightly altered in the middle.

Each tier carries a confidence penalty proportional to how much
reconstruction it needed.
"""

import logging
import math

from keyterms.core.extraction_spec import MatchSettings
from keyterms.grounding.models import LocatedSpan
from keyterms.grounding.normalize import normalize

logger = logging.getLogger(__name__)

_DEFAULT_SETTINGS = MatchSettings()


# ── Public API ───────────────────────────────────────────────────────


def locate_quote(
    quote: str,
    source_text: str,
    settings: MatchSettings | None = None,
) -> LocatedSpan | None:
    """Return the best-available span for ``quote`` in ``source_text``, or None."""
    settings = settings or _DEFAULT_SETTINGS
    if not quote or not quote.strip() or not source_text:
        return None

    span = locate_exact(quote, source_text, penalty=settings.exact_penalty)
    if span:
        return span

    span = _locate_normalized(quote, source_text, settings)
    if span:
        logger.debug("Normalized match for %r at %d-%d", quote[:50], span.start, span.end)
        return span

    span = _locate_fuzzy(quote, source_text, settings)
    if span:
        logger.debug("Fuzzy anchor match for %r at %d-%d", quote[:50], span.start, span.end)
        return span

    return None


def locate_exact(quote: str, source_text: str, penalty: float = 0.0) -> LocatedSpan | None:
    """First verbatim occurrence of ``quote``, or None."""
    if not quote:
        return None
    start = source_text.find(quote)
    if start == -1:
        return None
    end = start + len(quote)
    return LocatedSpan(
        start=start, end=end, text=source_text[start:end], method="exact", penalty=penalty
    )


# ── Tier 2: Whitespace-Normalized ────────────────────────────────────


def _locate_normalized(
    quote: str, source_text: str, settings: MatchSettings
) -> LocatedSpan | None:
    norm_quote = normalize(quote)
    norm_index = normalize(source_text).find(norm_quote)
    if not norm_quote or norm_index == -1:
        return None

    if settings.normalized_end == "exact":
        bounds = _map_normalized_span(source_text, norm_index, len(norm_quote))
        if bounds is None:
            return None
        start, end = bounds
    else:
        start = _nth_non_whitespace(source_text, norm_index)
        if start is None:
            return None
        end = min(start + settings.normalized_end_factor * len(quote), len(source_text))

    return LocatedSpan(
        start=start,
        end=end,
        text=source_text[start:end],
        method="normalized",
        penalty=settings.normalized_penalty,
    )


def _nth_non_whitespace(text: str, n: int) -> int | None:
    """Offset of the n-th (0-based) non-whitespace character of ``text``."""
    count = 0
    for i, ch in enumerate(text):
        if ch.isspace():
            continue
        if count == n:
            return i
        count += 1
    return None


def _map_normalized_span(text: str, norm_start: int, norm_length: int) -> tuple[int, int] | None:
    """Walk ``text`` to find the original span of a normalized-text match."""
    norm_end = norm_start + norm_length
    pos = 0
    start = None
    seen_text = False
    i = 0
    n = len(text)

    while i < n:
        if text[i].isspace():
            j = i
            while j < n and text[j].isspace():
                j += 1
            # Leading and trailing runs vanish; inner runs become one space
            if seen_text and j < n:
                pos += 1
            i = j
            continue

        if pos == norm_start and start is None:
            start = i
        pos += 1
        seen_text = True
        if start is not None and pos == norm_end:
            return start, i + 1
        i += 1

    return None


# ── Tier 3: Fuzzy Anchors ────────────────────────────────────────────


def _locate_fuzzy(quote: str, source_text: str, settings: MatchSettings) -> LocatedSpan | None:
    if len(quote) >= settings.fuzzy_max_quote_length:
        return None

    anchor = min(settings.anchor_max_length, math.floor(len(quote) * settings.anchor_ratio))
    if anchor == 0 or len(quote) < anchor * 2:
        return None

    prefix = quote[:anchor]
    suffix = quote[-anchor:]

    start = source_text.find(prefix)
    if start == -1:
        return None

    window_end = min(start + len(quote) * settings.fuzzy_window_factor, len(source_text))
    suffix_index = source_text.find(suffix, start + anchor)
    if suffix_index == -1 or suffix_index > window_end:
        return None

    end = suffix_index + anchor
    return LocatedSpan(
        start=start,
        end=end,
        text=source_text[start:end],
        method="fuzzy",
        penalty=settings.fuzzy_penalty,
    )
