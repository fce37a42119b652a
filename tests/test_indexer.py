import bz2
import os

import pytest

from helpdex.index import VALUE_LASTMOD, VALUE_TITLE, get_doc_info, open_db
from helpdex.indexer import (
    analyze_file,
    build_index,
    create_document,
    main,
    relative_path,
    stemmer_for_language,
    walk_files,
)
from helpdex.index import open_writable_db

APPLE = "<html><head><title>Apple Page</title></head><body><p>apple banana</p></body></html>"
CHERRY = "<html><head><title>Cherry Page</title></head><body><p>banana cherry</p></body></html>"


def write_cache(path, pages, mtime=None):
    text = "".join(f'<FILENAME filename="{name}">{html}</FILENAME>' for name, html in pages.items())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bz2.compress(text.encode("utf-8")))
    if mtime is not None:
        os.utime(path, (mtime, mtime))


@pytest.fixture
def docroot(tmp_path):
    root = tmp_path / "docs"
    write_cache(root / "en" / "app" / "index.cache.bz2",
                {"index.html": APPLE, "second.html": CHERRY}, mtime=1_000_000)
    return root


def test_stemmer_for_language():
    assert stemmer_for_language("de") == "german"
    assert stemmer_for_language("nn") == stemmer_for_language("no") == "norwegian"
    assert stemmer_for_language("xx") == "none"


def test_relative_path_strips_separator():
    assert relative_path("/a/b", "/a/b/c/d") == "c/d"
    assert relative_path("/a/b/", "/a/b/c") == "c"


def test_relative_path_requires_prefix():
    with pytest.raises(ValueError):
        relative_path("/a/b", "/x/y")


def test_create_document_terms_and_values():
    doc = create_document("Uapp/index.cache.bz2", "en", "123", "index.html", APPLE.encode())
    assert get_doc_info(doc) == ("en", "app/index.cache.bz2", "index.html")
    assert "Ttext/html" in doc.terms
    assert doc.get_value(VALUE_LASTMOD) == "123"
    assert doc.get_value(VALUE_TITLE).strip() == "Apple Page"
    assert doc.terms["apple"] == 1
    assert doc.terms["banana"] == 1


def test_create_document_without_html_body():
    doc = create_document("Ux", "en", "5", "page.html", b"")
    assert doc.get_value(VALUE_TITLE) == ""
    assert set(doc.terms) == {"Ux", "Ttext/html", "Len", "XHTMLpage.html"}


def test_build_index_adds_pages(tmp_path, docroot):
    handled = build_index(tmp_path / "idx", "app", "en", [docroot])
    with open_db(tmp_path / "idx" / "app") as db:
        assert db.doc_count() == 2
        assert set(db.postlist("Len")) == handled
        pages = {get_doc_info(db.get_document(d))[2] for d in db.postlist("Len")}
    assert pages == {"index.html", "second.html"}


def test_build_index_is_idempotent(tmp_path, docroot):
    first = build_index(tmp_path / "idx", "app", "en", [docroot])
    second = build_index(tmp_path / "idx", "app", "en", [docroot])
    assert first == second
    with open_db(tmp_path / "idx" / "app") as db:
        assert db.doc_count() == 2


def test_newer_cache_updates_and_removes(tmp_path, docroot):
    build_index(tmp_path / "idx", "app", "en", [docroot])
    changed = APPLE.replace("Apple Page", "Renamed")
    write_cache(docroot / "en" / "app" / "index.cache.bz2", {"index.html": changed}, mtime=2_000_000)
    build_index(tmp_path / "idx", "app", "en", [docroot])
    with open_db(tmp_path / "idx" / "app") as db:
        assert db.doc_count() == 1
        doc = db.get_document(db.postlist("Len")[0])
    assert doc.get_value(VALUE_TITLE).strip() == "Renamed"
    assert doc.get_value(VALUE_LASTMOD) == str(2_000_000 * 1000)


def test_removed_cache_file_makes_pages_obsolete(tmp_path, docroot):
    build_index(tmp_path / "idx", "app", "en", [docroot])
    (docroot / "en" / "app" / "index.cache.bz2").unlink()
    handled = build_index(tmp_path / "idx", "app", "en", [docroot])
    assert handled == set()
    with open_db(tmp_path / "idx" / "app") as db:
        assert db.doc_count() == 0


def test_other_languages_are_kept(tmp_path, docroot):
    write_cache(docroot / "de" / "app" / "index.cache.bz2", {"index.html": APPLE})
    build_index(tmp_path / "idx", "app", "de", [docroot])
    build_index(tmp_path / "idx", "app", "C", [docroot])
    with open_db(tmp_path / "idx" / "app") as db:
        assert len(db.postlist("Lde")) == 1
        assert len(db.postlist("Len")) == 2


def test_analyze_file_ignores_unreadable_cache(tmp_path):
    bad = tmp_path / "bad.cache.bz2"
    bad.write_bytes(b"not compressed")
    handled = set()
    with open_writable_db(tmp_path / "idx") as db:
        analyze_file(bad, "bad.cache.bz2", "en", db, handled)
        assert db.doc_count() == 0
    assert handled == set()


def test_walk_files_uses_relative_uids(tmp_path, docroot):
    handled = set()
    with open_writable_db(tmp_path / "idx") as db:
        walk_files(str(docroot / "en") + "/", "en", db, handled)
        assert sorted(db.postlist("Uapp/index.cache.bz2")) == sorted(handled)
    assert len(handled) == 2


def test_main_missing_arguments():
    assert main(["--indexdir", "somewhere"]) == 1


def test_main_builds_index(tmp_path, docroot):
    code = main(["--indexdir", str(tmp_path / "idx"), "--identifier", "app",
                 "--lang", "en", "--docdir", str(docroot)])
    assert code == 0
    with open_db(tmp_path / "idx" / "app") as db:
        assert db.doc_count() == 2