from kinomatch.http_client import TransportError
from kinomatch.imdb_search import (
    ImdbSearchClient,
    build_search_url,
    canonical_title_type,
    is_rejected_title_type,
    parse_search_results,
    title_type_from_text,
)

LEGACY_HTML = """
<html><body>
<table class="findList">
  <tr class="findResult odd">
    <td class="primary_photo"><a href="/title/tt0089427/"><img src="x.jpg"></a></td>
    <td class="result_text"> <a href="/title/tt0089427/?ref_=fn_al_tt_1">The Pied Piper</a> (1985) </td>
  </tr>
  <tr class="findResult even">
    <td class="result_text"> <a href="/title/tt0111111/?ref_=fn_al_tt_2">Krysar</a> (2010) (TV Series) </td>
  </tr>
  <tr class="findResult odd">
    <td class="result_text"> <a href="/name/nm0000001/">Not a title</a> </td>
  </tr>
</table>
</body></html>
"""

MODERN_HTML = """
<html><body>
<section data-testid="find-results-section-title">
  <h3 class="ipc-title__text">Titles</h3>
  <ul class="ipc-metadata-list">
    <li class="ipc-metadata-list-summary-item ipc-metadata-list-summary-item--click find-result-item">
      <div class="ipc-metadata-list-summary-item__c">
        <a class="ipc-metadata-list-summary-item__t" href="/title/tt0089427/?ref_=fn_all_ttl_1"
           aria-label="View title page for The Pied Piper">The Pied Piper</a>
        <ul class="ipc-inline-list">
          <li class="ipc-inline-list__item"><span class="ipc-metadata-list-summary-item__li">1985</span></li>
        </ul>
      </div>
    </li>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <a href="/title/tt2222222/?ref_=fn_all_ttl_2" aria-label="View title page for Krysař">Krysař</a>
      <span class="cli-title-metadata-item">2014–2016</span>
      <span class="ipc-metadata-list-summary-item__tl">TV Series</span>
    </li>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <a href="/title/tt3333333/">Krysař: The Legend</a>
      <span class="cli-title-metadata-item">2003</span>
      <span class="cli-title-metadata-item">TV Movie</span>
    </li>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <a href="/title/tt4444444/" aria-label="Amélie">Amelie</a>
    </li>
  </ul>
</section>
</body></html>
"""


class FakeTransport:
    def __init__(self, pages=None, error=None):
        self.pages = pages or {}
        self.error = error
        self.urls = []

    def get_text(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.pages.get(url, "<html></html>")


def test_build_search_url():
    assert build_search_url("The Pied Piper") == "https://www.imdb.com/find/?q=The%20Pied%20Piper"
    assert build_search_url("Krysař") == "https://www.imdb.com/find/?q=Krysa%C5%99"
    assert build_search_url("Krysař", "ft").endswith("?q=Krysa%C5%99&s=tt&ttype=ft")


def test_canonical_title_type():
    assert canonical_title_type("TV Series") == "TVSeries"
    assert canonical_title_type("tvSeries") == "TVSeries"
    assert canonical_title_type("TV Mini-Series") == "TVMiniSeries"
    assert canonical_title_type("Music Video") == "MusicVideoObject"
    assert canonical_title_type(" Documentary ") == "Documentary"
    assert canonical_title_type(None) is None


def test_rejected_title_types():
    for label in ["TV Series", "TVSeries", "TV Episode", "Podcast Series", "Podcast Episode", "Video Game", "Music Video"]:
        assert is_rejected_title_type(label), label
    for label in ["Movie", "TV Movie", "TV Mini Series", "Short", "Video", None, ""]:
        assert not is_rejected_title_type(label), label


def test_title_type_from_text():
    assert title_type_from_text("(2010) (TV Series)") == "TV Series"
    assert title_type_from_text("2003 tv movie") == "tv movie"
    assert title_type_from_text("1985") is None
    assert title_type_from_text(None) is None


def test_parse_legacy_layout():
    results = parse_search_results(LEGACY_HTML)
    assert [r.imdb_id for r in results] == ["tt0089427", "tt0111111"]

    first, second = results
    assert first.title == "The Pied Piper"
    assert first.year == "1985"
    assert first.title_type is None
    assert second.year == "2010"
    assert second.title_type == "TV Series"
    assert "(TV Series)" in second.raw_text


def test_parse_modern_layout():
    results = parse_search_results(MODERN_HTML)
    assert [r.imdb_id for r in results] == ["tt0089427", "tt2222222", "tt3333333", "tt4444444"]

    by_id = {r.imdb_id: r for r in results}
    assert by_id["tt0089427"].title == "The Pied Piper"
    assert by_id["tt0089427"].year == "1985"
    assert by_id["tt2222222"].title == "Krysař"
    assert by_id["tt2222222"].year == "2014"
    assert by_id["tt2222222"].title_type == "TV Series"
    # no aria-label: link text, type pattern-matched from metadata spans
    assert by_id["tt3333333"].title == "Krysař: The Legend"
    assert by_id["tt3333333"].title_type == "TV Movie"
    assert by_id["tt3333333"].raw_text == "2003 TV Movie"
    # aria-label without the prefix is used as-is
    assert by_id["tt4444444"].title == "Amélie"
    assert by_id["tt4444444"].year is None


def test_legacy_rows_win_duplicate_ids():
    legacy = LEGACY_HTML.replace("The Pied Piper</a>", "The Pied Piper (legacy)</a>")
    html = legacy.replace("</body></html>", "") + MODERN_HTML.replace("<html><body>", "")
    results = parse_search_results(html)

    ids = [r.imdb_id for r in results]
    assert ids == ["tt0089427", "tt0111111", "tt2222222", "tt3333333", "tt4444444"]
    assert results[0].title == "The Pied Piper (legacy)"


def test_movies_section_preferred_over_titles():
    html = """
    <section data-testid="find-results-section-title"><h3>Titles</h3>
      <ul><li class="ipc-metadata-list-summary-item"><a href="/title/tt0000002/">Other</a></li></ul>
    </section>
    <section data-testid="find-results-section-title"><h3>Movies</h3>
      <ul><li class="ipc-metadata-list-summary-item"><a href="/title/tt0000001/">Film</a></li></ul>
    </section>
    """
    assert [r.imdb_id for r in parse_search_results(html)] == ["tt0000001"]


def test_no_results_on_unknown_layout():
    assert parse_search_results("<html><body><p>No results</p></body></html>") == []


def test_search_client_fetches_and_parses():
    url = build_search_url("The Pied Piper")
    transport = FakeTransport({url: MODERN_HTML})
    results = ImdbSearchClient(transport).search("The Pied Piper")
    assert transport.urls == [url]
    assert results[0].imdb_id == "tt0089427"


def test_search_client_transport_failure_is_empty():
    transport = FakeTransport(error=TransportError("HTTP 503"))
    assert ImdbSearchClient(transport).search("Krysař") == []
