from __future__ import annotations

"""
Search titles and title/year matching against a seed record.

IMDb indexes titles by their English or origin-country name, so those
localized titles are tried before the Czech distribution title.
"""

import re
from typing import Iterable, List, Optional, Set

from .config import (
    ENGLISH_TITLE_KEYS,
    PRIORITIZATION_YEAR_TOLERANCE,
    UK_TITLE_KEYS,
    USA_TITLE_KEYS,
    SearchCandidate,
    SeedRecord,
)
from .normalize import extract_year, normalize_title, years_match

_ORIGIN_SPLIT_RE = re.compile(r"[/,]")
_YEAR_TOKEN_RE = re.compile(r"^\d{4}$")
_ANY_YEAR_RE = re.compile(r"\b(\d{4})\b")


def split_origin(origin: str | None) -> List[str]:
    """'USA / Velká Británie' -> ['USA', 'Velká Británie']"""
    if not origin:
        return []
    return [part.strip() for part in _ORIGIN_SPLIT_RE.split(origin) if part.strip()]


def _dedupe_titles(titles: Iterable[Optional[str]]) -> List[str]:
    """Trim, drop blanks, de-duplicate case-insensitively; first seen wins."""
    seen: Set[str] = set()
    out: List[str] = []
    for title in titles:
        if not title or not title.strip():
            continue
        trimmed = title.strip()
        key = trimmed.casefold()
        if key in seen:
            continue
        seen.add(key)
        out.append(trimmed)
    return out


def search_titles(seed: SeedRecord) -> List[str]:
    """
    Priority-ordered titles to search IMDb with.

    Order: English title, origin-country titles (last listed country first),
    USA title, UK title, the seed title, then every other localized title.
    """
    candidates: List[Optional[str]] = [
        seed.localized_title(*USA_TITLE_KEYS),
        seed.localized_title(*UK_TITLE_KEYS),
        seed.title,
    ]

    for country in split_origin(seed.origin):
        origin_title = seed.localized_title(country)
        if origin_title:
            candidates.insert(0, origin_title)

    english_title = seed.localized_title(*ENGLISH_TITLE_KEYS)
    if english_title:
        candidates.insert(0, english_title)

    candidates.extend(seed.localized_titles.values())
    return _dedupe_titles(candidates)


def query_title(query: str) -> str:
    """Search query with standalone year tokens removed."""
    parts = [p for p in query.split() if not _YEAR_TOKEN_RE.match(p)]
    return " ".join(parts).strip()


def acceptance_set(seed: SeedRecord, current_query: str | None = None) -> Set[str]:
    """
    Normalized titles a search hit may carry to count as a title match:
    the seed title, the title currently being searched, and all localized titles.
    """
    titles: List[Optional[str]] = [seed.title, current_query]
    titles.extend(seed.localized_titles.values())
    return {key for key in (normalize_title(t) for t in titles) if key}


def title_matches(candidate: SearchCandidate, accepted: Set[str]) -> bool:
    if not accepted:
        return False
    return normalize_title(candidate.title) in accepted


def titles_share_year(
    seed_year: str | None,
    candidate: SearchCandidate,
    tolerance: int = PRIORITIZATION_YEAR_TOLERANCE,
) -> bool:
    """
    True when the hit's year is within *tolerance* of the seed year.

    Falls back to every 4-digit number in the hit's raw text: episodes list
    the series run next to their own air year.
    """
    if not seed_year or not seed_year.strip():
        return True
    seed_year = extract_year(seed_year) or seed_year.strip()

    if candidate.year and candidate.year.strip():
        if years_match(seed_year, candidate.year, tolerance):
            return True

    if candidate.raw_text:
        for found in _ANY_YEAR_RE.findall(candidate.raw_text):
            if years_match(seed_year, found, tolerance):
                return True

    return False
