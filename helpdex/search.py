"""Searches a documentation index and renders the hits as an HTML list."""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass

from helpdex.index import VALUE_TITLE, DatabaseVersionMismatch, get_doc_info, open_db

_log = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\s*\d+\s*")


@dataclass(frozen=True)
class SearchHit:
    """One page found by a search."""

    docid: int
    uid: str
    html: str
    title: str

    @property
    def html_id(self) -> str:
        """The page path: the cache file's directory joined with the page name."""
        slash = self.uid.rfind("/")
        if slash < 0:
            return self.html
        return self.uid[:slash + 1] + self.html

    @property
    def partial_id(self) -> str:
        """The page path without its last component."""
        html_id = self.html_id
        slash = html_id.rfind("/")
        return html_id if slash < 0 else html_id[:slash]


def query_from_wordlist(words: str) -> list[str]:
    """Split a ``+``-joined word list into its words."""
    return words.split("+")


def search_index(
    indexdir: str | os.PathLike[str],
    identifier: str,
    words: str,
    method: str,
    maxnum: int,
    lang: str | None,
) -> list[SearchHit]:
    """Search the index ``indexdir/identifier`` for pages in a language.

    Raises ValueError for an unknown method, FileNotFoundError when the
    index is missing and DatabaseVersionMismatch for another index version.
    """
    if method not in ("and", "or"):
        raise ValueError(f"unrecognized method {method!r}")
    if not lang or lang == "C":
        lang = "en"

    with open_db(os.path.join(os.fspath(indexdir), identifier)) as db:
        found = db.query(lang, query_from_wordlist(words), method, maxnum)

    _log.debug("got %d results", len(found))
    hits = []
    for docid, doc in found:
        _, uid, html = get_doc_info(doc)
        hits.append(SearchHit(docid, uid, html, doc.get_value(VALUE_TITLE)))
    return hits


def format_results(hits: list[SearchHit]) -> str:
    """Render hits as an HTML unordered list."""
    lines = ["<ul>"]
    lines.extend(
        f'<li><a href="help:/{hit.html_id}">{hit.partial_id} - {hit.title}</a></li>'
        for hit in hits
    )
    lines.append("</ul>")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point of the search tool."""
    parser = argparse.ArgumentParser(prog="helpdex-search", description="Search documentation.")
    parser.add_argument("--indexdir", default="", metavar="dir", help="Index directory")
    parser.add_argument("--identifier", default="", metavar="identifier", help="Index identifier")
    parser.add_argument("--words", default="", metavar="words", help="Words to search")
    parser.add_argument("--method", default="", metavar="and|or", help="Method")
    parser.add_argument("--maxnum", default="", metavar="maxnum", help="Maximum number of results")
    parser.add_argument("--lang", default="", metavar="lang", help="Language")
    args = parser.parse_args(argv)

    if not args.indexdir or not args.identifier or not args.words or not args.method:
        _log.critical("Missing arguments.")
        parser.print_help(sys.stderr)
        return 1

    if args.method not in ("and", "or"):
        _log.critical("Unrecognized method: %s", args.method)
        parser.print_help(sys.stderr)
        return 1

    if not _NUMBER_RE.fullmatch(args.maxnum):
        _log.critical("--maxnum is not a number")
        parser.print_help(sys.stderr)
        return 1
    maxnum = int(args.maxnum)

    try:
        hits = search_index(args.indexdir, args.identifier, args.words, args.method, maxnum, args.lang)
    except DatabaseVersionMismatch as exc:
        _log.warning(
            "version mismatch in index: found %d vs wanted %d", exc.version, exc.ref_version
        )
        return 1
    except (OSError, ValueError) as exc:
        _log.critical("index error: %s", exc)
        return 1

    sys.stdout.write(format_results(hits))
    return 0