"""Builds and refreshes the term index of the documentation cache files."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterable
from pathlib import Path

from helpdex.cachereader import CacheReader
from helpdex.htmltextdump import HtmlDumpError, html_text_dump
from helpdex.index import (
    VALUE_LASTMOD,
    VALUE_TITLE,
    Document,
    IndexDatabase,
    get_doc_info,
    open_writable_db,
)

_log = logging.getLogger(__name__)

_CACHE_SUFFIX = ".cache.bz2"

_STEMMERS = {
    "da": "danish",
    "de": "german",
    "en": "english",
    "es": "spanish",
    "fi": "finnish",
    "fr": "french",
    "hu": "hungarian",
    "it": "italian",
    "nb": "norwegian",
    "nl": "dutch",
    "nn": "norwegian",
    "no": "norwegian",
    "pt": "portuguese",
    "ro": "romanian",
    "ru": "russian",
    "sv": "swedish",
    "tr": "turkish",
}


def stemmer_for_language(lang: str) -> str:
    """Return the stemmer name for a language code, or ``"none"``."""
    return _STEMMERS.get(lang, "none")


def create_document(uid: str, lang: str, mod_time: str, html: str, data: bytes) -> Document:
    """Build the index document of one HTML page of a cache file."""
    doc = Document()
    doc.add_boolean_term(uid)
    doc.add_boolean_term("Ttext/html")
    doc.add_boolean_term("L" + lang)
    doc.add_boolean_term("XHTML" + html)

    doc.add_value(VALUE_LASTMOD, mod_time)

    try:
        title, text = html_text_dump(data)
    except HtmlDumpError as exc:
        _log.warning("cannot extract text of %s: %s", html, exc)
        return doc

    if title:
        doc.add_value(VALUE_TITLE, title)
    doc.index_text(text)
    return doc


def _int_or_zero(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def analyze_file(
    cache_file: str | os.PathLike[str],
    rel_path: str,
    lang: str,
    db: IndexDatabase,
    handled: set[int],
) -> None:
    """Bring the index up to date with one cache file.

    Pages no longer in the file are removed, newer pages are re-indexed and
    new pages are added. The ids of all pages kept or added go to ``handled``.
    """
    cache_path = Path(cache_file)
    uid = "U" + rel_path

    reader = CacheReader()
    try:
        mod_time = cache_path.stat().st_mtime_ns // 1_000_000
        reader.parse(cache_path)
    except (OSError, ValueError) as exc:
        _log.warning("cannot parse cache file %s: %s", cache_path, exc)
        return

    mod_time_text = str(mod_time)
    docs = reader.documents()
    _log.debug("%s => %s", cache_path, sorted(docs))

    to_add = set(docs)
    to_update: dict[str, int] = {}
    to_remove: list[int] = []

    for docid in db.postlist(uid):
        doc = db.get_document(docid)
        doc_lang, _, html = get_doc_info(doc)
        if not doc_lang or doc_lang != lang:
            continue
        if html not in docs:
            to_remove.append(docid)
            continue
        to_add.discard(html)
        handled.add(docid)
        if mod_time > _int_or_zero(doc.get_value(VALUE_LASTMOD)):
            to_update[html] = docid

    _log.debug("  docs to remove: %s", to_remove)
    _log.debug("  docs to add: %s", sorted(to_add))
    _log.debug("  docs to update: %s", sorted(to_update))

    for docid in to_remove:
        db.delete_document(docid)

    for name, docid in to_update.items():
        db.replace_document(
            docid, create_document(uid, lang, mod_time_text, name, reader.document(name))
        )

    for name in sorted(to_add):
        docid = db.add_document(
            create_document(uid, lang, mod_time_text, name, reader.document(name))
        )
        handled.add(docid)


def relative_path(base: str, full: str) -> str:
    """Return ``full`` relative to ``base``, which it must start with."""
    if not full.startswith(base):
        raise ValueError(f"{full!r} is not below {base!r}")
    length = len(base)
    if full[length:length + 1] == "/":
        length += 1
    return full[length:]


def walk_files(
    directory: str | os.PathLike[str],
    lang: str,
    db: IndexDatabase,
    handled: set[int],
) -> None:
    """Index every cache file found below a directory."""
    directory = os.fspath(directory)
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if not name.lower().endswith(_CACHE_SUFFIX):
                continue
            full = os.path.join(root, name)
            analyze_file(full, relative_path(directory, full), lang, db, handled)


def _normalize_lang(lang: str | None) -> str:
    if not lang or lang == "C":
        return "en"
    return lang


def build_index(
    indexdir: str | os.PathLike[str],
    identifier: str,
    lang: str | None,
    doc_dirs: Iterable[str | os.PathLike[str]],
) -> set[int]:
    """Index the cache files of one language and drop obsolete pages.

    Returns the ids of the documents that remain for that language.
    """
    lang = _normalize_lang(lang)
    db_path = os.path.join(os.fspath(indexdir), identifier)
    _log.debug("stemmer for %s: %s", lang, stemmer_for_language(lang))

    local_docs = [
        f"{os.fspath(doc_dir)}/{lang}/"
        for doc_dir in doc_dirs
        if os.path.isdir(f"{os.fspath(doc_dir)}/{lang}/")
    ]
    _log.debug("documentation directories: %s", local_docs)

    handled: set[int] = set()
    with open_writable_db(db_path) as db:
        for path in local_docs:
            walk_files(path, lang, db, handled)

        for docid in db.postlist("L" + lang):
            if docid in handled:
                continue
            _log.debug("obsolete document: %d", docid)
            db.delete_document(docid)

    return handled


def _documentation_dirs() -> list[str]:
    data_home = os.environ.get("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"), ".local", "share"
    )
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    roots = [data_home, *(d for d in data_dirs.split(os.pathsep) if d)]
    return [os.path.join(root, "doc", "HTML") for root in roots]


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point of the indexer."""
    parser = argparse.ArgumentParser(prog="helpdex-index", description="Index documentation.")
    parser.add_argument("--indexdir", default="", metavar="dir", help="Index directory")
    parser.add_argument("--identifier", default="", metavar="identifier", help="Index identifier")
    parser.add_argument("--lang", default="", metavar="lang", help="Language")
    parser.add_argument(
        "--docdir", action="append", default=None, metavar="dir",
        help="Documentation directory (may be repeated)",
    )
    args = parser.parse_args(argv)

    if not args.indexdir or not args.identifier:
        _log.critical("Missing arguments.")
        parser.print_help(sys.stderr)
        return 1

    doc_dirs = args.docdir if args.docdir else _documentation_dirs()
    try:
        build_index(args.indexdir, args.identifier, args.lang, doc_dirs)
    except (OSError, ValueError) as exc:
        _log.critical("index error: %s", exc)
        return 1
    return 0