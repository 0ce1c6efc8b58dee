from kinomatch.normalize import (
    basic_clean,
    extract_year,
    normalize_person_name,
    normalize_title,
    parse_seed_year,
    years_match,
)
from kinomatch.pipeline_types import YearUnknown, YearValue


def test_normalize_title_strips_diacritics_and_punctuation():
    assert normalize_title("Amélie") == "amelie"
    assert normalize_title("Krysař") == "krysar"
    assert normalize_title("The Pied Piper!") == "thepiedpiper"
    assert normalize_title("Se7en") == "se7en"
    # numeric symbols are not digits
    assert normalize_title("8½") == "8"
    assert normalize_title("E=mc²") == "emc"


def test_normalize_title_is_idempotent():
    for text in ["Amélie", "Žluťoučký kůň", "  Léon: The Professional ", "Ça"]:
        once = normalize_title(text)
        assert normalize_title(once) == once


def test_normalize_title_blank():
    assert normalize_title(None) == ""
    assert normalize_title("   ") == ""


def test_normalize_person_name_keeps_word_boundaries():
    assert normalize_person_name("Jan  Svěrák") == "jan sverak"
    assert normalize_person_name("Jiří Barta") == "jiri barta"
    # hyphen and apostrophe dropped, letters kept
    assert normalize_person_name("Kar-wai Wong") == "karwai wong"


def test_basic_clean_collapses_whitespace_and_quotes():
    assert basic_clean("  Hello \n  world ") == "Hello world"
    assert basic_clean("It’s – fine") == "It's - fine"
    assert basic_clean(None) == ""


def test_extract_year():
    assert extract_year("1985") == "1985"
    assert extract_year("(TV Series 2010–2015)") == "2010"
    assert extract_year("no year here") is None
    assert extract_year(None) is None


def test_years_match_within_tolerance():
    assert years_match("1999", "2000", tolerance=2)
    assert years_match("1999", "2001", tolerance=2)
    assert not years_match("1999", "2003", tolerance=2)
    assert years_match("1999", "1999", tolerance=0)
    assert not years_match("1999", "2000", tolerance=0)


def test_years_match_rejects_missing_or_non_numeric():
    assert not years_match(None, "1999", tolerance=1)
    assert not years_match("1999", None, tolerance=1)
    assert not years_match("abcd", "1999", tolerance=1)


def test_parse_seed_year_variants():
    assert parse_seed_year("1985") == YearValue("1985")
    assert parse_seed_year("1985").value == 1985
    assert parse_seed_year("(1985)") == YearValue("1985")
    assert isinstance(parse_seed_year(""), YearUnknown)
    assert isinstance(parse_seed_year(None), YearUnknown)
    assert isinstance(parse_seed_year("n/a"), YearUnknown)
