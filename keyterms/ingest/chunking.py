"""Split long contract text into overlapping chunks for extraction."""

import logging
import math

from keyterms.core.extraction_spec import ChunkSettings
from keyterms.ingest.models import TextChunk

logger = logging.getLogger(__name__)

_CHARS_PER_TOKEN = 4


def chunk_text(text: str, settings: ChunkSettings | None = None) -> list[TextChunk]:
    """Split ``text`` into windows of ``chunk_size`` chars sharing ``overlap`` chars.

    A non-final window is pulled back to a page marker in its last stretch,
    or failing that to the end of a nearby blank line.
    """
    settings = settings or ChunkSettings()
    size = settings.chunk_size

    if len(text) <= size:
        return [TextChunk(text=text, start_offset=0, end_offset=len(text))]

    chunks: list[TextChunk] = []
    offset = 0

    while offset < len(text):
        chunk_end = min(offset + size, len(text))

        if chunk_end < len(text):
            chunk_end = _break_point(text, offset, chunk_end, settings)

        chunks.append(
            TextChunk(text=text[offset:chunk_end], start_offset=offset, end_offset=chunk_end)
        )
        if chunk_end >= len(text):
            break

        offset = chunk_end - settings.overlap

    logger.debug("Split %d chars into %d chunks", len(text), len(chunks))
    return chunks


def _break_point(text: str, offset: int, chunk_end: int, settings: ChunkSettings) -> int:
    """Preferred end for the window ``[offset, chunk_end)``.

    Candidates inside the overlap are ignored so the next window moves on.
    """
    floor = offset + settings.overlap

    marker_pos = text.rfind(settings.page_marker, 0, chunk_end)
    if marker_pos > floor and marker_pos > chunk_end - settings.chunk_size * settings.marker_window_ratio:
        return marker_pos

    newline_pos = text.rfind("\n\n", 0, chunk_end)
    if newline_pos > floor and newline_pos > chunk_end - settings.paragraph_window:
        return newline_pos + 2

    return chunk_end


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters."""
    return math.ceil(len(text) / _CHARS_PER_TOKEN)
