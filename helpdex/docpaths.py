"""Locating documentation files by language and deriving help URLs."""

from __future__ import annotations

import os
from collections.abc import Iterable
from urllib.parse import urlsplit

_FALLBACK_LANG = "en"


def _is_readable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def _search_languages(languages: Iterable[str]) -> list[str]:
    langs = [lang for lang in [*languages, _FALLBACK_LANG] if lang != "C"]
    # Documentation is installed under en/ while the default language is en_US.
    return [_FALLBACK_LANG if lang == "en_US" else lang for lang in langs]


def lang_lookup(
    fname: str,
    doc_dirs: Iterable[str | os.PathLike[str]],
    languages: Iterable[str],
) -> str | None:
    """Find ``fname`` in the language folders of the documentation directories.

    Directories are searched in order, and within each the languages in
    order, followed by English. A candidate matches when it is a readable
    file, or when an ``index.docbook`` sits readable beside it. Returns the
    candidate path, or None when nothing matches.
    """
    langs = _search_languages(languages)
    candidates = (
        f"{os.fspath(doc_dir)}/{lang}/{fname}" for doc_dir in doc_dirs for lang in langs
    )
    for candidate in candidates:
        if _is_readable_file(candidate):
            return candidate
        index = candidate[: candidate.rfind("/")] + "/index.docbook"
        if _is_readable_file(index):
            return candidate
    return None


def help_application(url: str) -> str:
    """Return a help URL without scheme, file name, trailing slash and fragment.

    ``help:/kate/index.html`` gives ``/kate``.
    """
    parts = urlsplit(url)
    path = parts.path
    slash = path.rfind("/")
    path = path[: slash + 1] if slash >= 0 else ""
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    authority = f"//{parts.netloc}" if parts.netloc else ""
    query = f"?{parts.query}" if parts.query else ""
    return authority + path + query


def docbook_source(path: str | None) -> str | None:
    """Return the DocBook source of a page, replacing its first ``.html``.

    None stays None, for a lookup that found nothing.
    """
    if path is None:
        return None
    return path.replace(".html", ".docbook", 1)