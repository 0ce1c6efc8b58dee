from __future__ import annotations

"""
Text normalisation helpers shared by search parsing and identity matching.

Public helpers:

* basic_clean(text) -> str
    Light-weight clean for text scraped out of result cells and page titles.

* normalize_title(text) -> str
    Identity key for titles: diacritics stripped, letters/digits only,
    lower-cased. Two titles denote the same string iff their keys are equal.

* normalize_person_name(text) -> str
    Same pipeline for director names, keeping word boundaries.

* extract_year / years_match / parse_seed_year
    4-digit year helpers used by both validation and prioritization.
"""

import re
import unicodedata
from typing import Optional

from .pipeline_types import SeedYear, YearUnknown, YearValue

_YEAR_RE = re.compile(r"\b(\d{4})\b")
_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def _normalise_unicode(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    # Replace fancy quotes / dashes with ASCII variants
    text = text.replace("‘", "'").replace("’", "'")
    text = text.replace("“", '"').replace("”", '"')
    text = text.replace("–", "-").replace("—", "-")
    return text


def _strip_marks(text: str) -> str:
    """NFD-decompose and drop non-spacing combining marks (é -> e, ř -> r)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def basic_clean(text: str | None) -> str:
    """Normalise unicode punctuation and collapse whitespace."""
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = _normalise_unicode(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_title(title: str | None) -> str:
    if not title or not title.strip():
        return ""
    return "".join(ch.lower() for ch in _strip_marks(title) if ch.isalpha() or ch.isdecimal())


def normalize_person_name(name: str | None) -> str:
    if not name or not name.strip():
        return ""
    kept = "".join(ch.lower() for ch in _strip_marks(name) if ch.isalpha() or ch.isspace())
    return _WHITESPACE_RE.sub(" ", kept).strip()


def extract_year(text: str | None) -> Optional[str]:
    """First standalone 4-digit number in *text*, if any."""
    if not text:
        return None
    m = _YEAR_RE.search(text)
    return m.group(1) if m else None


def years_match(left: str | None, right: str | None, tolerance: int) -> bool:
    """
    Exact string match, or both integers within *tolerance* years.
    """
    if left is None or right is None:
        return False
    left, right = left.strip(), right.strip()
    if left == right:
        return bool(left)
    try:
        return abs(int(left) - int(right)) <= tolerance
    except ValueError:
        return False


def parse_seed_year(raw: str | None) -> SeedYear:
    year = extract_year(raw)
    return YearValue(year) if year else YearUnknown()
