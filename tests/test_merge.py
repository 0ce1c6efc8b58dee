from datetime import date

from kinomatch.config import CrewMember, MergedRecord, ResolutionResult, SeedRecord, SupplementalMovie
from kinomatch.merge import carry_over_existing, merge_records, parse_release_date


def _seed(**extra):
    params = dict(
        csfd_id=4711,
        title="Krysař",
        original_title="Krysař",
        year="1985",
        duration="53 min",
        rating="84%",
        directors=["Jiří Barta"],
        genres=["Animovaný", "Fantasy"],
        cast=["Oldřich Kaiser"],
        description="Loutkový film podle Viktora Dyka.",
        origin="Československo",
        localized_titles={"USA": "The Pied Piper"},
        poster_url="https://image.pmgstatic.com/krysar.jpg",
    )
    params.update(extra)
    return SeedRecord(**params)


def _tmdb(**extra):
    params = dict(
        tmdb_id=42,
        title="The Pied Piper",
        original_title="Krysař",
        overview="A stop-motion retelling of the Hamelin legend.",
        release_date="1986-02-01",
        poster_path="/poster.jpg",
        backdrop_path="/backdrop.jpg",
        vote_average=7.2,
        vote_count=120,
        popularity=3.5,
        original_language="cs",
        adult=False,
        homepage="https://example.org/krysar",
        trailer_url="https://youtube.com/watch?v=x",
        credits=[CrewMember(tmdb_id=1, name="Jiří Barta", role="Director")],
    )
    params.update(extra)
    return SupplementalMovie(**params)


def test_seed_wins_text_fields_and_supplemental_wins_media():
    merged = merge_records(_seed(), _tmdb(), ResolutionResult(imdb_id="tt0089427", rating=7.5, rating_count=2400))

    assert merged.csfd_id == 4711
    assert merged.title == "Krysař"
    assert merged.tmdb_title == "The Pied Piper"
    assert merged.year == "1985"
    assert merged.duration == "53 min"
    assert merged.rating == "84%"
    assert merged.description_cs.startswith("Loutkový")
    assert merged.description_en.startswith("A stop-motion")
    assert merged.directors == ["Jiří Barta"]
    assert merged.localized_titles == {"USA": "The Pied Piper"}
    assert merged.imdb_id == "tt0089427"
    assert merged.imdb_rating == 7.5
    assert merged.imdb_rating_count == 2400
    assert merged.poster_url == "https://image.tmdb.org/t/p/original/poster.jpg"
    assert merged.csfd_poster_url == "https://image.pmgstatic.com/krysar.jpg"
    assert merged.backdrop_url == "https://image.tmdb.org/t/p/original/backdrop.jpg"
    assert merged.vote_count == 120
    assert merged.adult is False
    assert merged.credits[0].name == "Jiří Barta"
    assert merged.release_date == date(1986, 2, 1)
    assert merged.origin_country_codes == ["CS"]


def test_blank_seed_titles_fall_back_to_supplemental():
    merged = merge_records(_seed(title="  ", original_title=None), _tmdb())
    assert merged.title == "The Pied Piper"
    assert merged.original_title == "Krysař"


def test_seed_poster_used_without_supplemental_poster():
    merged = merge_records(_seed(), _tmdb(poster_path=None))
    assert merged.poster_url == "https://image.pmgstatic.com/krysar.jpg"


def test_merge_without_supplemental_or_resolution():
    merged = merge_records(_seed())
    assert merged.tmdb_id is None
    assert merged.imdb_id is None
    assert merged.description_en is None
    assert merged.poster_url == merged.csfd_poster_url
    assert merged.credits == []
    assert merged.release_date is None


def test_origins_list_preferred_over_origin_string():
    merged = merge_records(_seed(origin="Francie / Německo"), None)
    assert merged.origin_country_codes == ["FR", "DE"]

    merged = merge_records(_seed(origins=["Japonsko"]), None)
    assert merged.origin_country_codes == ["JP"]


def test_country_mapper_can_be_injected():
    merged = merge_records(_seed(), country_mapper=lambda names: [n.upper() for n in names])
    assert merged.origin_country_codes == ["ČESKOSLOVENSKO"]


def test_merge_is_deterministic():
    seed, tmdb = _seed(), _tmdb()
    resolution = ResolutionResult(imdb_id="tt0089427", rating=7.5, rating_count=2400)
    first = merge_records(seed, tmdb, resolution)
    second = merge_records(seed, tmdb, resolution)
    assert first.model_dump_json() == second.model_dump_json()


def test_parse_release_date():
    assert parse_release_date("2023-05-17") == date(2023, 5, 17)
    assert parse_release_date("2023-05-17T20:30:00Z") == date(2023, 5, 17)
    assert parse_release_date("2023-02-30") is None
    assert parse_release_date("soon") is None
    assert parse_release_date("") is None
    assert parse_release_date(None) is None


def test_unparsable_supplemental_date_gives_no_release_date():
    assert merge_records(_seed(), _tmdb(release_date="TBA")).release_date is None


def test_carry_over_fills_missing_fields_from_existing():
    existing = MergedRecord(
        csfd_id=4711,
        tmdb_id=42,
        imdb_id="tt0089427",
        csfd_poster_url="https://image.pmgstatic.com/old.jpg",
        origin_country_codes=["CS"],
        imdb_rating=7.5,
        imdb_rating_count=2400,
        trailer_url="https://youtube.com/watch?v=old",
    )
    fresh = merge_records(_seed(poster_url=None, origin=None))

    merged = carry_over_existing(fresh, existing)
    assert merged.tmdb_id == 42
    assert merged.imdb_id == "tt0089427"
    assert merged.csfd_poster_url == "https://image.pmgstatic.com/old.jpg"
    assert merged.origin_country_codes == ["CS"]
    assert merged.imdb_rating == 7.5
    assert merged.imdb_rating_count == 2400
    assert merged.trailer_url == "https://youtube.com/watch?v=old"
    # the fresh record is left alone
    assert fresh.imdb_id is None


def test_carry_over_keeps_fresh_values():
    fresh = merge_records(_seed(), _tmdb(), ResolutionResult(imdb_id="tt0089427", rating=7.6, rating_count=2500))
    existing = MergedRecord(csfd_id=4711, tmdb_id=1, imdb_id="tt0000001", imdb_rating=5.0, imdb_rating_count=10)

    merged = carry_over_existing(fresh, existing)
    assert merged.tmdb_id == 42
    assert merged.imdb_id == "tt0089427"
    assert merged.imdb_rating == 7.6
    assert merged.imdb_rating_count == 2500
    assert carry_over_existing(fresh, None) is fresh
