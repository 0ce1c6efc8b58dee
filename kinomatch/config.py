from __future__ import annotations

import os
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------
# Endpoints
# ---------------------------

IMDB_BASE_URL = "https://www.imdb.com"
IMDB_FIND_URL = f"{IMDB_BASE_URL}/find/"
IMDB_TITLE_URL = f"{IMDB_BASE_URL}/title/"

CSFD_FILM_URL = "https://www.csfd.cz/film/"
TMDB_MOVIE_URL = "https://www.themoviedb.org/movie/"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"


# ---------------------------
# HTTP / anti-blocking
# ---------------------------

# Randomized politeness delay before every request (seconds)
MIN_REQUEST_DELAY = float(os.getenv("KINOMATCH_MIN_DELAY", "1.0"))
MAX_REQUEST_DELAY = float(os.getenv("KINOMATCH_MAX_DELAY", "3.0"))

# Wait before the single retry after a 202 soft block
SOFT_BLOCK_WAIT = float(os.getenv("KINOMATCH_SOFT_BLOCK_WAIT", "2.0"))

HTTP_CONNECT_TIMEOUT = float(os.getenv("KINOMATCH_CONNECT_TIMEOUT", "5.0"))
HTTP_READ_TIMEOUT = float(os.getenv("KINOMATCH_READ_TIMEOUT", "15.0"))
HTTP_MAX_REDIRECTS = 5
HTTP_MAX_BYTES = 5_000_000  # IMDb title pages run ~1-2 MB

HTTP_ACCEPT_LANGUAGE = "en-US,en;q=0.9"

USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.0.0",
]


# ---------------------------
# Matching policy
# ---------------------------

# Detail-page year vs seed year
VALIDATION_YEAR_TOLERANCE = 1
# Search-result year vs seed year when picking secondary candidates
PRIORITIZATION_YEAR_TOLERANCE = 2

# Search result type hints as printed by IMDb
TITLE_TYPE_HINTS: List[str] = [
    "TV Series",
    "TV Mini Series",
    "TV Movie",
    "TV Episode",
    "TV Special",
    "TV Short",
    "Podcast Series",
    "Podcast Episode",
    "Video Game",
    "Video",
    "Short",
    "Music Video",
]

# JSON-LD @type values that can never be a cinema release
REJECTED_TITLE_TYPES = frozenset(
    {
        "PodcastSeries",
        "PodcastEpisode",
        "TVSeries",
        "TVEpisode",
        "VideoGame",
        "MusicVideoObject",
    }
)


# ---------------------------
# Localized title keys (ČSFD flag titles, case-insensitive)
# ---------------------------

USA_TITLE_KEYS = ("USA", "United States", "Spojené státy")
UK_TITLE_KEYS = ("Velká Británie", "United Kingdom", "UK", "Spojené království")
ENGLISH_TITLE_KEYS = ("angličtina", "English", "USA", "United States", "UK", "United Kingdom")


# ---------------------------
# Settings models
# ---------------------------

class HttpSettings(BaseModel):
    """
    Transport knobs for one browser-like session.
    """

    min_delay: float = Field(default=MIN_REQUEST_DELAY, ge=0)
    max_delay: float = Field(default=MAX_REQUEST_DELAY, ge=0)
    soft_block_wait: float = Field(default=SOFT_BLOCK_WAIT, ge=0)
    connect_timeout: float = Field(default=HTTP_CONNECT_TIMEOUT, gt=0)
    read_timeout: float = Field(default=HTTP_READ_TIMEOUT, gt=0)
    max_redirects: int = Field(default=HTTP_MAX_REDIRECTS, ge=0)
    max_bytes: int = Field(default=HTTP_MAX_BYTES, gt=0)
    accept_language: str = HTTP_ACCEPT_LANGUAGE
    user_agents: List[str] = Field(default_factory=lambda: list(USER_AGENTS), min_length=1)

    @model_validator(mode="after")
    def _check_delay_window(self) -> "HttpSettings":
        if self.min_delay > self.max_delay:
            raise ValueError("min_delay must not exceed max_delay")
        return self


class MatchSettings(BaseModel):
    validation_year_tolerance: int = Field(default=VALIDATION_YEAR_TOLERANCE, ge=0)
    prioritization_year_tolerance: int = Field(default=PRIORITIZATION_YEAR_TOLERANCE, ge=0)


# ---------------------------
# Records
# ---------------------------

class SeedRecord(BaseModel):
    """
    A movie as scraped from ČSFD, before IMDb resolution.

    Only the first block of fields drives resolution; the rest is carried
    for the merge step.
    """

    model_config = ConfigDict(frozen=True)

    csfd_id: int = 0
    title: Optional[str] = None
    original_title: Optional[str] = None
    year: Optional[str] = None
    directors: List[str] = Field(default_factory=list)
    localized_titles: Dict[str, str] = Field(default_factory=dict)
    origin: Optional[str] = None

    origins: List[str] = Field(default_factory=list)
    duration: Optional[str] = None
    rating: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    cast: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    poster_url: Optional[str] = None

    @field_validator("localized_titles")
    @classmethod
    def _drop_blank_titles(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {k: v for k, v in value.items() if isinstance(v, str) and v.strip()}

    def localized_title(self, *keys: str) -> Optional[str]:
        """Return the first localized title stored under any of *keys* (case-insensitive)."""
        lowered = {k.casefold(): v for k, v in self.localized_titles.items()}
        for key in keys:
            title = lowered.get(key.casefold())
            if title and title.strip():
                return title
        return None


class SearchCandidate(BaseModel):
    imdb_id: str
    title: str = ""
    year: Optional[str] = None
    raw_text: Optional[str] = None
    title_type: Optional[str] = None


class TitleMetadata(BaseModel):
    """Snapshot of an IMDb title page."""

    year: Optional[str] = None
    directors: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    title_type: Optional[str] = None


class ResolutionResult(BaseModel):
    imdb_id: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None

    @property
    def found(self) -> bool:
        return bool(self.imdb_id)

    @classmethod
    def from_metadata(cls, imdb_id: str, metadata: Optional[TitleMetadata]) -> "ResolutionResult":
        if metadata is None:
            return cls(imdb_id=imdb_id)
        return cls(imdb_id=imdb_id, rating=metadata.rating, rating_count=metadata.rating_count)


class CrewMember(BaseModel):
    tmdb_id: int
    name: str = ""
    role: str = ""
    photo_url: Optional[str] = None

    @property
    def profile_url(self) -> str:
        return f"https://www.themoviedb.org/person/{self.tmdb_id}"


class SupplementalMovie(BaseModel):
    """
    TMDB movie as returned by the supplemental-source client.
    """

    tmdb_id: int
    title: Optional[str] = None
    original_title: Optional[str] = None
    overview: Optional[str] = None
    release_date: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    original_language: Optional[str] = None
    adult: Optional[bool] = None
    homepage: Optional[str] = None
    trailer_url: Optional[str] = None
    credits: List[CrewMember] = Field(default_factory=list)

    @property
    def full_poster_url(self) -> Optional[str]:
        return f"{TMDB_IMAGE_BASE_URL}{self.poster_path}" if self.poster_path else None

    @property
    def full_backdrop_url(self) -> Optional[str]:
        return f"{TMDB_IMAGE_BASE_URL}{self.backdrop_path}" if self.backdrop_path else None


class MergedRecord(BaseModel):
    """
    Final movie record: ČSFD text data, IMDb id/rating, TMDB media and stats.
    """

    csfd_id: int
    tmdb_id: Optional[int] = None
    imdb_id: Optional[str] = None
    tmdb_title: Optional[str] = None

    title: Optional[str] = None
    original_title: Optional[str] = None
    year: Optional[str] = None
    duration: Optional[str] = None
    rating: Optional[str] = None
    imdb_rating: Optional[float] = None
    imdb_rating_count: Optional[int] = None
    description_cs: Optional[str] = None
    description_en: Optional[str] = None
    origin: Optional[str] = None
    origin_country_codes: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    directors: List[str] = Field(default_factory=list)
    cast: List[str] = Field(default_factory=list)
    localized_titles: Dict[str, str] = Field(default_factory=dict)

    poster_url: Optional[str] = None
    csfd_poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None

    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    original_language: Optional[str] = None
    adult: Optional[bool] = None
    homepage: Optional[str] = None
    trailer_url: Optional[str] = None
    credits: List[CrewMember] = Field(default_factory=list)
    release_date: Optional[date] = None

    @property
    def csfd_url(self) -> str:
        return f"{CSFD_FILM_URL}{self.csfd_id}"

    @property
    def tmdb_url(self) -> str:
        return f"{TMDB_MOVIE_URL}{self.tmdb_id}" if self.tmdb_id is not None else ""

    @property
    def imdb_url(self) -> str:
        return f"{IMDB_TITLE_URL}{self.imdb_id}" if self.imdb_id else ""
