from __future__ import annotations

import re
from typing import Dict, List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup
from bs4.element import Tag
from loguru import logger

from .config import IMDB_FIND_URL, TITLE_TYPE_HINTS, REJECTED_TITLE_TYPES, SearchCandidate
from .http_client import Transport, TransportError
from .normalize import basic_clean

_IMDB_ID_RE = re.compile(r"tt\d+")
_PAREN_YEAR_RE = re.compile(r"\((\d{4})\)")
_YEAR_RE = re.compile(r"\b(\d{4})\b")
_ARIA_PREFIX_RE = re.compile(r"^(?:View title page for )?(.+)$", re.S)
_TYPE_HINT_RE = re.compile(
    r"\b(" + "|".join(re.escape(h) for h in TITLE_TYPE_HINTS) + r")\b",
    re.I,
)

# Search hints and JSON-LD @type values share one vocabulary after this map
_TITLE_TYPE_CANON: Dict[str, str] = {
    "movie": "Movie",
    "tvseries": "TVSeries",
    "tvminiseries": "TVMiniSeries",
    "tvmovie": "TVMovie",
    "tvepisode": "TVEpisode",
    "tvspecial": "TVSpecial",
    "tvshort": "TVShort",
    "podcastseries": "PodcastSeries",
    "podcastepisode": "PodcastEpisode",
    "videogame": "VideoGame",
    "video": "Video",
    "short": "Short",
    "musicvideo": "MusicVideoObject",
    "musicvideoobject": "MusicVideoObject",
}


def canonical_title_type(label: str | None) -> Optional[str]:
    """'TV Series' / 'tvseries' / 'TVSeries' -> 'TVSeries'; unknown labels pass through trimmed."""
    if not label or not label.strip():
        return None
    key = re.sub(r"[\s\-]+", "", label).lower()
    return _TITLE_TYPE_CANON.get(key, label.strip())


def is_rejected_title_type(label: str | None) -> bool:
    return canonical_title_type(label) in REJECTED_TITLE_TYPES


def title_type_from_text(text: str | None) -> Optional[str]:
    """First recognised type hint ('TV Series', 'Podcast Episode', ...) in *text*."""
    if not text or not text.strip():
        return None
    m = _TYPE_HINT_RE.search(text)
    return m.group(1) if m else None


def build_search_url(query: str, title_type: str | None = None) -> str:
    url = f"{IMDB_FIND_URL}?q={quote(query, safe='')}"
    if title_type:
        url += f"&s=tt&ttype={quote(title_type, safe='')}"
    return url


def _imdb_id_from_href(link: Tag) -> Optional[str]:
    m = _IMDB_ID_RE.search(link.get("href", "") or "")
    return m.group(0) if m else None


# ---------------------------------------------------------------------------
# Layout parsers
# ---------------------------------------------------------------------------


def _parse_legacy_results(soup: BeautifulSoup) -> List[SearchCandidate]:
    """Old ``table.findList`` layout: one text cell holding link, year and type."""
    rows: List[SearchCandidate] = []
    for tr in soup.select("table.findList tr"):
        cell = tr.find("td", class_="result_text")
        link = cell.find("a") if cell is not None else None
        if cell is None or link is None:
            continue

        imdb_id = _imdb_id_from_href(link)
        if not imdb_id:
            continue

        raw_text = basic_clean(cell.get_text(" "))
        year_match = _PAREN_YEAR_RE.search(raw_text)
        rows.append(
            SearchCandidate(
                imdb_id=imdb_id,
                title=basic_clean(link.get_text()),
                year=year_match.group(1) if year_match else None,
                raw_text=raw_text,
                title_type=title_type_from_text(raw_text),
            )
        )
    return rows


def _results_section(soup: BeautifulSoup) -> Optional[Tag]:
    sections = soup.select('section[data-testid="find-results-section-title"]')
    # "Movies" when the search was type-filtered, "Titles" otherwise
    for heading in ("Movies", "Titles"):
        for section in sections:
            h3 = section.find("h3")
            if h3 is not None and h3.get_text(strip=True) == heading:
                return section
    return None


def _parse_modern_results(soup: BeautifulSoup) -> List[SearchCandidate]:
    """Card layout: aria-labelled title link plus metadata spans."""
    section = _results_section(soup)
    if section is None:
        return []

    rows: List[SearchCandidate] = []
    for item in section.select('li[class*="ipc-metadata-list-summary-item"]'):
        link = item.select_one('a[href*="/title/tt"]')
        if link is None:
            continue
        imdb_id = _imdb_id_from_href(link)
        if not imdb_id:
            continue

        title = ""
        aria = (link.get("aria-label") or "").strip()
        if aria:
            m = _ARIA_PREFIX_RE.match(aria)
            if m:
                title = basic_clean(m.group(1))
        if not title:
            title = basic_clean(link.get_text())

        year: Optional[str] = None
        bits: List[str] = []
        for span in item.select('span[class*="cli-title-metadata-item"], span[class*="ipc-metadata-list-summary-item__li"]'):
            text = basic_clean(span.get_text(" "))
            if not text:
                continue
            bits.append(text)
            if year is None:
                m = _YEAR_RE.search(text)
                if m:
                    year = m.group(1)
        raw_text = " ".join(bits)

        title_type: Optional[str] = None
        label = item.select_one(
            'span[class*="ipc-metadata-list-summary-item__tl"], label[class*="ipc-metadata-list-summary-item__tl"]'
        )
        if label is not None:
            title_type = basic_clean(label.get_text()) or None
        if not title_type:
            title_type = title_type_from_text(raw_text)

        rows.append(
            SearchCandidate(
                imdb_id=imdb_id,
                title=title,
                year=year,
                raw_text=raw_text,
                title_type=title_type,
            )
        )
    return rows


def parse_search_results(html: str) -> List[SearchCandidate]:
    """
    Union of both layouts, de-duplicated by IMDb id. Legacy rows come first,
    so on a duplicate id the legacy parse wins.
    """
    soup = BeautifulSoup(html, "lxml")
    seen = set()
    out: List[SearchCandidate] = []
    for cand in _parse_legacy_results(soup) + _parse_modern_results(soup):
        key = cand.imdb_id.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(cand)
    return out


class ImdbSearchClient:
    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def search(self, query: str, title_type: str | None = None) -> List[SearchCandidate]:
        """
        Search IMDb. Transport failures read as "no results".
        """
        url = build_search_url(query, title_type)
        try:
            html = self.transport.get_text(url)
        except TransportError as e:
            logger.warning("IMDb search failed for '{}': {}", query, e)
            return []

        results = parse_search_results(html)
        logger.info("IMDb search '{}': {} results", query, len(results))
        for r in results[:3]:
            logger.debug("  - {}: '{}' ({}) type={} raw='{}'", r.imdb_id, r.title, r.year, r.title_type, r.raw_text)
        return results
