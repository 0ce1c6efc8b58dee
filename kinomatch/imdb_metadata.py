from __future__ import annotations

"""
IMDb title page -> TitleMetadata, and the accept/reject decision for a
candidate against the ČSFD seed.

Extraction is JSON-LD first. When no ld+json node yields a year, the page
<title> ("Krysař (1985) - IMDb", "Foo (TV Series 2020- ) - IMDb") is used for
year and type; the last rating seen in a year-less JSON-LD node is kept.
"""

import json
import re
from typing import Any, Iterator, List, Optional, Set, Tuple

from bs4 import BeautifulSoup
from loguru import logger

from .config import IMDB_TITLE_URL, MatchSettings, SeedRecord, TitleMetadata
from .http_client import Transport, TransportError
from .imdb_search import canonical_title_type, is_rejected_title_type
from .normalize import basic_clean, extract_year, normalize_person_name, parse_seed_year, years_match
from .pipeline_types import (
    FetchFailed,
    MetadataAbsent,
    MetadataOutcome,
    MetadataPresent,
    Validation,
    YearUnknown,
)
from .romanization import transliterate_to_english

_TITLE_YEAR_RE = re.compile(r"\((?:[A-Za-z][A-Za-z ]*\s)?(\d{4})[^()]*\)")

# Type markers in the page <title>; longer labels before their prefixes
_PAGE_TITLE_TYPES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\(Podcast Series\b", re.I), "PodcastSeries"),
    (re.compile(r"\(Podcast Episode\b", re.I), "PodcastEpisode"),
    (re.compile(r"\(TV Series\b", re.I), "TVSeries"),
    (re.compile(r"\(TV Episode\b", re.I), "TVEpisode"),
    (re.compile(r"\(TV Mini Series\b", re.I), "TVMiniSeries"),
    (re.compile(r"\(TV Movie\b", re.I), "TVMovie"),
    (re.compile(r"\(TV Special\b", re.I), "TVSpecial"),
    (re.compile(r"\(TV Short\b", re.I), "TVShort"),
    (re.compile(r"\(Video Game\b", re.I), "VideoGame"),
    (re.compile(r"\(Video\b", re.I), "Video"),
    (re.compile(r"\(Short\b", re.I), "Short"),
    (re.compile(r"\(Music Video\b", re.I), "MusicVideoObject"),
]


def title_page_url(imdb_id: str) -> str:
    return f"{IMDB_TITLE_URL}{imdb_id}/"


# ---------------------------------------------------------------------------
# JSON-LD helpers
# ---------------------------------------------------------------------------


def _iter_nodes(data: Any) -> Iterator[dict]:
    """Depth-first over a JSON-LD document: top-level arrays and @graph children before the node itself."""
    if isinstance(data, list):
        for item in data:
            yield from _iter_nodes(item)
        return
    if not isinstance(data, dict):
        return
    graph = data.get("@graph")
    if isinstance(graph, list):
        for node in graph:
            yield from _iter_nodes(node)
    yield data


def _year_from_node(node: dict) -> Optional[str]:
    for key in ("datePublished", "releaseDate"):
        value = node.get(key)
        if isinstance(value, str):
            year = extract_year(value)
            if year:
                return year

    events = node.get("releasedEvent")
    if isinstance(events, list):
        for event in events:
            if isinstance(event, dict) and isinstance(event.get("startDate"), str):
                year = extract_year(event["startDate"])
                if year:
                    return year
    return None


def _person_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        name = value.get("name")
        return name if isinstance(name, str) else None
    if isinstance(value, str):
        return value
    return None


def _directors_from_node(node: dict) -> List[str]:
    raw = node.get("director")
    items = raw if isinstance(raw, list) else [raw]
    names: List[str] = []
    for item in items:
        name = _person_name(item)
        if name and name.strip():
            names.append(name.strip())
    return names


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip().replace(",", ""))
        except ValueError:
            return None
    return None


def _rating_from_node(node: dict) -> Tuple[Optional[float], Optional[int]]:
    agg = node.get("aggregateRating")
    if not isinstance(agg, dict):
        return None, None
    return _as_float(agg.get("ratingValue")), _as_int(agg.get("ratingCount"))


def _metadata_from_node(node: dict) -> Optional[TitleMetadata]:
    """Metadata for a typed node, or None when it carries no year."""
    node_type = node.get("@type")
    if not isinstance(node_type, str) or not node_type.strip():
        return None
    year = _year_from_node(node)
    if year is None:
        return None
    rating, rating_count = _rating_from_node(node)
    return TitleMetadata(
        year=year,
        directors=_directors_from_node(node),
        rating=rating,
        rating_count=rating_count,
        title_type=node_type.strip(),
    )


def _type_from_page_title(title_text: str | None) -> Optional[str]:
    if not title_text or not title_text.strip():
        return None
    for pattern, type_name in _PAGE_TITLE_TYPES:
        if pattern.search(title_text):
            return type_name
    return None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_title_metadata(html: str) -> Optional[TitleMetadata]:
    """
    Parse a title page. None when neither JSON-LD nor the page title says anything.
    """
    soup = BeautifulSoup(html, "lxml")

    rating: Optional[float] = None
    rating_count: Optional[int] = None

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug("Skipping malformed ld+json block: {}", e)
            continue

        for node in _iter_nodes(data):
            metadata = _metadata_from_node(node)
            if metadata is not None:
                return metadata
            node_rating, node_count = _rating_from_node(node)
            if node_rating is not None or node_count is not None:
                rating, rating_count = node_rating, node_count

    title_node = soup.find("title")
    title_text = basic_clean(title_node.get_text()) if title_node is not None else ""
    logger.debug("No JSON-LD year; falling back to page title '{}'", title_text)
    if not title_text:
        return None

    m = _TITLE_YEAR_RE.search(title_text)
    year = m.group(1) if m else None
    title_type = _type_from_page_title(title_text)
    if year is None and title_type is None:
        return None

    return TitleMetadata(
        year=year,
        directors=[],
        rating=rating,
        rating_count=rating_count,
        title_type=title_type,
    )


# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------


def is_title_type_acceptable(title_type: str | None) -> bool:
    """Missing or unknown types pass; only known non-movie types fail."""
    if not title_type or not title_type.strip():
        return True
    return not is_rejected_title_type(title_type)


def is_year_valid(
    seed_year: str | None,
    candidate_year: str | None,
    year_hint: str | None = None,
    tolerance: int = 1,
) -> bool:
    """
    Seed year vs title-page year, then vs the search-result year.

    A seed without a 4-digit year validates anything.
    """
    parsed = parse_seed_year(seed_year)
    if isinstance(parsed, YearUnknown):
        return True

    for other in (candidate_year, year_hint):
        other_year = extract_year(other)
        if other_year and years_match(parsed.year, other_year, tolerance):
            return True
    return False


def _name_keys(name: str) -> Set[str]:
    """Order-independent keys for a person name, plus its romanized spelling."""
    keys: Set[str] = set()
    base = normalize_person_name(name)
    if not base:
        return keys
    keys.add(" ".join(sorted(base.split())))
    romanized = normalize_person_name(transliterate_to_english(name.lower()))
    if romanized:
        keys.add(" ".join(sorted(romanized.split())))
    return keys


def are_directors_valid(seed_directors: List[str] | None, candidate_directors: List[str]) -> bool:
    """Every seed director must appear among the candidate's directors."""
    if not seed_directors:
        return True
    if not candidate_directors:
        return False

    candidate_keys: Set[str] = set()
    for name in candidate_directors:
        candidate_keys |= _name_keys(name)
    if not candidate_keys:
        return False

    for director in seed_directors:
        keys = _name_keys(director)
        if not keys:
            continue
        if not keys & candidate_keys:
            return False
    return True


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class MetadataValidator:
    def __init__(self, transport: Transport, settings: Optional[MatchSettings] = None) -> None:
        self.transport = transport
        self.settings = settings or MatchSettings()

    def fetch_title_metadata(self, imdb_id: str) -> MetadataOutcome:
        try:
            html = self.transport.get_text(title_page_url(imdb_id))
        except TransportError as e:
            logger.warning("Title page fetch failed for {}: {}", imdb_id, e)
            return FetchFailed(str(e))

        metadata = extract_title_metadata(html)
        if metadata is None:
            return MetadataAbsent()
        return MetadataPresent(metadata)

    def validate(self, imdb_id: str, seed: SeedRecord, year_hint: str | None = None) -> bool:
        return self.validate_and_get_metadata(imdb_id, seed, year_hint).accepted

    def validate_and_get_metadata(
        self,
        imdb_id: str,
        seed: SeedRecord,
        year_hint: str | None = None,
    ) -> Validation:
        outcome = self.fetch_title_metadata(imdb_id)

        if isinstance(outcome, FetchFailed):
            # nothing to contradict the seed
            logger.warning("Validation: title page for {} unavailable ({}), accepting by default", imdb_id, outcome.reason)
            return Validation(True)

        if isinstance(outcome, MetadataAbsent):
            logger.info("Validation: no metadata on {}, accepting by default", imdb_id)
            return Validation(True)

        metadata = outcome.metadata
        if not is_title_type_acceptable(metadata.title_type):
            logger.info(
                "Validation: rejecting {} (incompatible title type '{}')",
                imdb_id,
                canonical_title_type(metadata.title_type),
            )
            return Validation(False)

        has_year = bool(seed.year and seed.year.strip())
        has_directors = bool(seed.directors)
        if not has_year and not has_directors:
            return Validation(True, metadata)

        year_valid = is_year_valid(
            seed.year,
            metadata.year,
            year_hint,
            tolerance=self.settings.validation_year_tolerance,
        )
        directors_valid = are_directors_valid(seed.directors, metadata.directors)
        logger.info(
            "Validation for {}: type='{}' year={} (ČSFD {} vs IMDb {}, hint {}) directors={}",
            imdb_id,
            metadata.title_type,
            year_valid,
            seed.year,
            metadata.year,
            year_hint,
            directors_valid,
        )

        if has_year and has_directors:
            if year_valid and not directors_valid and not metadata.directors:
                logger.info("Accepting {}: year matches, page had no director data", imdb_id)
                return Validation(True, metadata)
            accepted = year_valid and directors_valid
        elif has_year:
            accepted = year_valid
        else:
            accepted = directors_valid

        return Validation(accepted, metadata if accepted else None)
