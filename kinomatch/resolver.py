from __future__ import annotations

"""
ČSFD seed -> IMDb id (+ rating).

resolve_external_id
    1. direct IMDb link on the ČSFD page, validated first
    2. for each search title: search, drop incompatible types, validate
       title matches first and year-only matches second
    3. empty ResolutionResult when nothing validates

fetch_rating
    Re-read rating for a known id: no search, vacuous year/director checks.

resolve_batch
    Independent resolutions in a thread pool, one session each.
"""

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from loguru import logger

from .config import MatchSettings, SearchCandidate, SeedRecord, ResolutionResult
from .http_client import BrowserSession, Transport
from .imdb_metadata import MetadataValidator
from .imdb_search import ImdbSearchClient, is_rejected_title_type
from .title_candidates import acceptance_set, query_title, search_titles, title_matches, titles_share_year

SourceDocument = Union[str, BeautifulSoup, None]
ResolutionJob = Tuple[SourceDocument, SeedRecord]

_IMDB_ID_RE = re.compile(r"tt\d+")


class ResolutionCancelled(RuntimeError):
    """Raised when the caller's cancel event is set between HTTP calls."""


def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise ResolutionCancelled("IMDb resolution cancelled")


def find_direct_imdb_id(source_document: SourceDocument) -> Optional[str]:
    """IMDb id from the first imdb.com/title link on the ČSFD page, if any."""
    if source_document is None:
        return None
    soup = source_document if isinstance(source_document, BeautifulSoup) else BeautifulSoup(source_document, "lxml")
    link = soup.select_one('a[href*="imdb.com/title/tt"]')
    if link is None:
        return None
    m = _IMDB_ID_RE.search(link.get("href", "") or "")
    return m.group(0) if m else None


def partition_candidates(
    candidates: Sequence[SearchCandidate],
    seed: SeedRecord,
    query: str,
    tolerance: int,
) -> Tuple[List[SearchCandidate], List[SearchCandidate]]:
    """
    Split search hits into (title matches, year-only matches).

    Incompatible types are dropped before either list is built. Hits with
    neither a title nor a year match are discarded.
    """
    accepted = acceptance_set(seed, query_title(query))
    prioritized: List[SearchCandidate] = []
    secondary: List[SearchCandidate] = []

    for cand in candidates:
        if is_rejected_title_type(cand.title_type):
            logger.debug("Skipping {} '{}': type {}", cand.imdb_id, cand.title, cand.title_type)
            continue
        if title_matches(cand, accepted):
            prioritized.append(cand)
        elif titles_share_year(seed.year, cand, tolerance):
            secondary.append(cand)

    return prioritized, secondary


class ExternalIdResolver:
    """
    Sequential resolver bound to one transport. Not thread-safe; use one per
    concurrent resolution.
    """

    def __init__(
        self,
        transport: Transport,
        settings: Optional[MatchSettings] = None,
    ) -> None:
        self.settings = settings or MatchSettings()
        self.search_client = ImdbSearchClient(transport)
        self.validator = MetadataValidator(transport, self.settings)

    def resolve_external_id(
        self,
        source_document: SourceDocument,
        seed: SeedRecord,
        cancel: Optional[threading.Event] = None,
    ) -> ResolutionResult:
        direct_id = find_direct_imdb_id(source_document)
        if direct_id:
            logger.info("Direct IMDb link on ČSFD page: {}", direct_id)
            _check_cancel(cancel)
            accepted, metadata = self.validator.validate_and_get_metadata(direct_id, seed)
            if accepted:
                return ResolutionResult.from_metadata(direct_id, metadata)
            logger.info("Direct link {} rejected, falling back to search", direct_id)

        for title in search_titles(seed):
            result = self._search_title(title, seed, cancel)
            if result is not None:
                return result

        logger.info("No IMDb match for '{}' ({})", seed.title, seed.year)
        return ResolutionResult()

    def fetch_rating(self, imdb_id: str, cancel: Optional[threading.Event] = None) -> ResolutionResult:
        """
        Fresh rating for an already-resolved id. Only the type gate applies.
        """
        _check_cancel(cancel)
        accepted, metadata = self.validator.validate_and_get_metadata(imdb_id, SeedRecord())
        if not accepted:
            logger.info("Rating refresh: {} not accepted", imdb_id)
            return ResolutionResult()
        return ResolutionResult.from_metadata(imdb_id, metadata)

    def _search_title(
        self,
        title: str,
        seed: SeedRecord,
        cancel: Optional[threading.Event],
    ) -> Optional[ResolutionResult]:
        _check_cancel(cancel)
        logger.info("Searching IMDb for: '{}'", title)
        results = self.search_client.search(title)
        if not results:
            return None

        prioritized, secondary = partition_candidates(
            results,
            seed,
            title,
            self.settings.prioritization_year_tolerance,
        )
        logger.debug("'{}': {} title matches, {} year matches", title, len(prioritized), len(secondary))

        for cand in prioritized + secondary:
            _check_cancel(cancel)
            accepted, metadata = self.validator.validate_and_get_metadata(cand.imdb_id, seed, cand.year)
            if accepted:
                logger.info("Resolved '{}' -> {} ('{}')", seed.title, cand.imdb_id, cand.title)
                return ResolutionResult.from_metadata(cand.imdb_id, metadata)
        return None


def resolve_batch(
    jobs: Sequence[ResolutionJob],
    session_factory: Callable[[], BrowserSession] = BrowserSession,
    max_workers: int = 4,
    settings: Optional[MatchSettings] = None,
    cancel: Optional[threading.Event] = None,
) -> List[ResolutionResult]:
    """
    Resolve many seeds concurrently. Results come back in job order.

    Each job opens its own session so cookies and delays never leak between
    movies. Cancellation propagates as ResolutionCancelled.
    """

    def _run(job: ResolutionJob) -> ResolutionResult:
        source_document, seed = job
        with session_factory() as session:
            resolver = ExternalIdResolver(session, settings)
            return resolver.resolve_external_id(source_document, seed, cancel)

    if not jobs:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        return list(pool.map(_run, jobs))
