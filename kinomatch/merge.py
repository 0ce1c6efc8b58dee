from __future__ import annotations

"""
Combine a ČSFD seed, a TMDB record and the IMDb resolution into one MergedRecord.

Precedence: ČSFD for text data, TMDB for media and audience stats, IMDb only
for its id and rating. The merge is pure: same inputs, same output.
"""

import re
from datetime import date
from typing import Callable, Iterable, List, Optional

from .config import MergedRecord, ResolutionResult, SeedRecord, SupplementalMovie
from .country_codes import map_to_iso_alpha2
from .title_candidates import split_origin

CountryMapper = Callable[[Iterable[str]], List[str]]

_ISO_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")


def _first_non_blank(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value
    return None


def parse_release_date(raw: str | None) -> Optional[date]:
    """'2023-05-17' or '2023-05-17T00:00:00Z' -> date(2023, 5, 17); anything else -> None."""
    if not raw:
        return None
    m = _ISO_DATE_RE.match(raw)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def merge_records(
    seed: SeedRecord,
    supplemental: Optional[SupplementalMovie] = None,
    resolution: Optional[ResolutionResult] = None,
    country_mapper: CountryMapper = map_to_iso_alpha2,
) -> MergedRecord:
    tmdb = supplemental
    imdb = resolution or ResolutionResult()
    origins = seed.origins or split_origin(seed.origin)

    return MergedRecord(
        csfd_id=seed.csfd_id,
        tmdb_id=tmdb.tmdb_id if tmdb else None,
        imdb_id=imdb.imdb_id,
        tmdb_title=tmdb.title if tmdb else None,
        title=_first_non_blank(seed.title, tmdb.title if tmdb else None),
        original_title=_first_non_blank(seed.original_title, tmdb.original_title if tmdb else None),
        year=seed.year,
        duration=seed.duration,
        rating=seed.rating,
        imdb_rating=imdb.rating,
        imdb_rating_count=imdb.rating_count,
        description_cs=seed.description,
        description_en=tmdb.overview if tmdb else None,
        origin=seed.origin,
        origin_country_codes=list(country_mapper(origins)),
        genres=list(seed.genres),
        directors=list(seed.directors),
        cast=list(seed.cast),
        localized_titles=dict(seed.localized_titles),
        poster_url=_first_non_blank(tmdb.full_poster_url if tmdb else None, seed.poster_url),
        csfd_poster_url=seed.poster_url,
        backdrop_url=tmdb.full_backdrop_url if tmdb else None,
        vote_average=tmdb.vote_average if tmdb else None,
        vote_count=tmdb.vote_count if tmdb else None,
        popularity=tmdb.popularity if tmdb else None,
        original_language=tmdb.original_language if tmdb else None,
        adult=tmdb.adult if tmdb else None,
        homepage=tmdb.homepage if tmdb else None,
        trailer_url=tmdb.trailer_url if tmdb else None,
        credits=[c.model_copy() for c in tmdb.credits] if tmdb else [],
        release_date=parse_release_date(tmdb.release_date) if tmdb else None,
    )


def carry_over_existing(merged: MergedRecord, existing: Optional[MergedRecord]) -> MergedRecord:
    """
    Refresh helper: keep identifiers and IMDb data from the stored record
    when the new merge came back without them. Returns a new record.
    """
    if existing is None:
        return merged

    updates = {}
    if merged.tmdb_id is None and existing.tmdb_id is not None:
        updates["tmdb_id"] = existing.tmdb_id
    if not _first_non_blank(merged.imdb_id) and _first_non_blank(existing.imdb_id):
        updates["imdb_id"] = existing.imdb_id
    if not _first_non_blank(merged.csfd_poster_url) and _first_non_blank(existing.csfd_poster_url):
        updates["csfd_poster_url"] = existing.csfd_poster_url
    if not merged.origin_country_codes and existing.origin_country_codes:
        updates["origin_country_codes"] = list(existing.origin_country_codes)
    if merged.imdb_rating is None and existing.imdb_rating is not None:
        # rating and its vote count travel together
        updates["imdb_rating"] = existing.imdb_rating
        updates["imdb_rating_count"] = existing.imdb_rating_count
    if not _first_non_blank(merged.trailer_url) and _first_non_blank(existing.trailer_url):
        updates["trailer_url"] = existing.trailer_url

    if not updates:
        return merged
    return merged.model_copy(update=updates)
