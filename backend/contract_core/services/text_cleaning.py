"""Whitespace normalization for text handed over by document decoders."""

from __future__ import annotations

import re

_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_INLINE_SPACES_RE = re.compile(r"[ \t]+")


def clean_text(text: str) -> str:
    """Normalize line breaks and collapse runs of spaces/tabs."""
    text = text.replace("\r\n", "\n")
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    text = _INLINE_SPACES_RE.sub(" ", text)
    return text.strip()
