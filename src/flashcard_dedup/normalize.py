"""Text normalization for card comparison.

Policy:
- Replace markup tags with a space (rich-text fields carry HTML).
- Decode the entities the editor emits: &nbsp; &amp; &lt; &gt;.
- Lowercase, collapse whitespace, trim.
"""

from __future__ import annotations

import re
from functools import lru_cache

# Tag-shaped markup only; a bare "<" or ">" (as in "3 < 5") is text.
_TAG_RE = re.compile(r"<[A-Za-z/!][^>]*>")
_WS_RE = re.compile(r"\s+")

_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


def _strip_markup(text: str) -> str:
    t = _TAG_RE.sub(" ", text)
    for entity, replacement in _ENTITIES:
        t = t.replace(entity, replacement)
    return t


@lru_cache(maxsize=8192)
def _normalize_cached(text: str) -> str:
    # Decoding can produce new tags or entities ("&lt;b&gt;", "&amp;lt;"),
    # so repeat until stable to keep the function idempotent.
    # Lowercase first: "&NBSP;" must not turn into an entity on a second pass.
    previous = None
    t = text.lower()
    while t != previous:
        previous = t
        t = _strip_markup(t)
    return _WS_RE.sub(" ", t).strip()


def normalize_text(text: object) -> str:
    """Normalize card text for matching (safe for None and non-string inputs)."""
    if text is None:
        return ""
    return _normalize_cached(str(text))
