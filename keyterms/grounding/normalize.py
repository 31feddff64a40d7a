"""Whitespace normalization used when comparing quotes to source text."""

import re

_WS_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Collapse every whitespace run to one space and strip the ends."""
    return _WS_RE.sub(" ", text).strip()
