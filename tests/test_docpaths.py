import pytest

from helpdex.docpaths import docbook_source, help_application, lang_lookup


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_lang_lookup_finds_file_in_preferred_language(tmp_path):
    _touch(tmp_path / "de" / "kate" / "index.html")
    _touch(tmp_path / "en" / "kate" / "index.html")
    found = lang_lookup("kate/index.html", [str(tmp_path)], ["de"])
    assert found == f"{tmp_path}/de/kate/index.html"


def test_lang_lookup_falls_back_to_english(tmp_path):
    _touch(tmp_path / "en" / "kate" / "index.html")
    found = lang_lookup("kate/index.html", [str(tmp_path)], ["fr"])
    assert found == f"{tmp_path}/en/kate/index.html"


def test_lang_lookup_maps_en_us_to_en(tmp_path):
    _touch(tmp_path / "en" / "a.css")
    found = lang_lookup("a.css", [str(tmp_path)], ["en_US"])
    assert found == f"{tmp_path}/en/a.css"


def test_lang_lookup_skips_c_locale(tmp_path):
    _touch(tmp_path / "C" / "a.css")
    assert lang_lookup("a.css", [str(tmp_path)], ["C"]) is None


def test_lang_lookup_directory_order_before_language_order(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    _touch(first / "en" / "page.html")
    _touch(second / "de" / "page.html")
    found = lang_lookup("page.html", [str(first), str(second)], ["de"])
    assert found == f"{first}/en/page.html"


def test_lang_lookup_accepts_index_docbook_beside_missing_page(tmp_path):
    _touch(tmp_path / "en" / "kate" / "index.docbook")
    found = lang_lookup("kate/index.html", [str(tmp_path)], [])
    assert found == f"{tmp_path}/en/kate/index.html"


def test_lang_lookup_ignores_directories(tmp_path):
    (tmp_path / "en" / "kate").mkdir(parents=True)
    assert lang_lookup("kate", [str(tmp_path)], ["en"]) is None


def test_lang_lookup_missing_returns_none(tmp_path):
    assert lang_lookup("nothing.html", [str(tmp_path)], ["de", "en"]) is None


def test_lang_lookup_no_dirs_returns_none():
    assert lang_lookup("kate/index.html", [], ["en"]) is None


def test_help_application_pinned_value():
    assert help_application("help:/kate/index.html") == "/kate"


@pytest.mark.parametrize(
    "app, page",
    [("kate", "index"), ("konsole", "usage"), ("kde/settings", "intro")],
)
def test_help_application_round_trips_into_toc_urls(app, page):
    url = f"help:/{app}/{page}.html"
    assert f"help:{help_application(url)}/{page}.html" == url


def test_help_application_drops_fragment():
    with_fragment = help_application("help:/kate/index.html#anchor")
    assert with_fragment == help_application("help:/kate/index.html")


def test_help_application_keeps_root_slash():
    assert help_application("help:/index.html") == "/"


def test_docbook_source_replaces_html():
    assert docbook_source("/usr/share/doc/HTML/en/kate/index.html") == (
        "/usr/share/doc/HTML/en/kate/index.docbook"
    )


def test_docbook_source_replaces_only_first_occurrence():
    result = docbook_source("a.html/b.html")
    assert result.count(".docbook") == 1
    assert result.endswith("b.html")


def test_docbook_source_leaves_other_paths_alone():
    assert docbook_source("/doc/en/kate/index.docbook") == "/doc/en/kate/index.docbook"


def test_docbook_source_none():
    assert docbook_source(None) is None


def test_lookup_then_docbook_source(tmp_path):
    _touch(tmp_path / "en" / "kate" / "index.docbook")
    found = lang_lookup("kate/index.html", [str(tmp_path)], ["en"])
    assert docbook_source(found) == str(tmp_path / "en" / "kate" / "index.docbook")