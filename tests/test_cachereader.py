import bz2

import pytest

from helpdex.cachereader import CacheReader

NESTED = (
    '<FILENAME filename="a.html">A1'
    '<FILENAME filename="b.html">B</FILENAME>'
    "A2</FILENAME>"
)


def test_nested_documents_are_split():
    reader = CacheReader()
    reader.parse_text(NESTED)
    assert reader.documents() == {"a.html", "b.html"}
    assert reader.document("a.html") == b"A1A2"
    assert reader.document("b.html") == b"B"


def test_sequential_documents_and_surrounding_junk():
    reader = CacheReader()
    reader.parse_text(
        'junk<FILENAME filename="one.html"><p>x</p></FILENAME>'
        'more<FILENAME filename="two.html"><p>y</p></FILENAME>tail'
    )
    assert reader.documents() == {"one.html", "two.html"}
    assert reader.document("one.html") == b"<p>x</p>"
    assert reader.document("two.html") == b"<p>y</p>"


def test_unknown_document_is_empty():
    reader = CacheReader()
    reader.parse_text(NESTED)
    assert reader.document("missing.html") == b""


def test_empty_document_is_listed():
    reader = CacheReader()
    reader.parse_text('<FILENAME filename="e.html"></FILENAME>')
    assert reader.documents() == {"e.html"}
    assert reader.document("e.html") == b""


def test_non_ascii_content_round_trips():
    content = "Grüße – 日本語"
    reader = CacheReader()
    reader.parse_text(f'<FILENAME filename="u.html">{content}</FILENAME>')
    assert reader.document("u.html").decode("utf-8") == content


def test_parse_reads_bzip2_file(tmp_path):
    path = tmp_path / "index.cache.bz2"
    path.write_bytes(bz2.compress(NESTED.encode("utf-8")))
    reader = CacheReader()
    reader.parse(path)
    assert reader.documents() == {"a.html", "b.html"}
    assert reader.document("a.html") == b"A1A2"


def test_parse_resets_previous_state(tmp_path):
    reader = CacheReader()
    reader.parse_text(NESTED)
    path = tmp_path / "other.cache.bz2"
    path.write_bytes(bz2.compress(b'<FILENAME filename="c.html">C</FILENAME>'))
    reader.parse(path)
    assert reader.documents() == {"c.html"}
    assert reader.document("a.html") == b""


def test_missing_file_raises(tmp_path):
    reader = CacheReader()
    with pytest.raises(FileNotFoundError):
        reader.parse(tmp_path / "absent.cache.bz2")


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "bad.cache.bz2"
    path.write_bytes(b"this is not bzip2 data")
    reader = CacheReader()
    with pytest.raises(OSError):
        reader.parse(path)
    assert reader.documents() == frozenset()


def test_unclosed_document_raises():
    reader = CacheReader()
    with pytest.raises(ValueError):
        reader.parse_text('<FILENAME filename="a.html">A<FILENAME filename="b.html">B</FILENAME>')


def test_stray_end_marker_raises():
    reader = CacheReader()
    with pytest.raises(ValueError):
        reader.parse_text("text</FILENAME>")