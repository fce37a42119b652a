"""A small on-disk term index for documentation pages.

Each database is a directory holding one JSON file. Documents carry
boolean terms (prefixed identifiers such as ``L<lang>``, ``U<uid>`` and
``XHTML<page>``), text terms with their frequencies, and numbered values.
"""

from __future__ import annotations

import io
import json
import logging
import math
import os
import re
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

_log = logging.getLogger(__name__)

VALUE_LASTMOD = 0
VALUE_TITLE = 1

DB_VERSION = 1
VERSION_KEY = "db-version"

_INDEX_FILE = "index.json"
_FORMAT = "helpdex-index-1"
_MAX_WORD_BYTES = 64
_WORD_RE = re.compile(r"\w+")


class DatabaseVersionMismatch(Exception):
    """The index was written with a different index version."""

    def __init__(self, version: int) -> None:
        super().__init__(f"index version {version}, expected {DB_VERSION}")
        self.version = version
        self.ref_version = DB_VERSION


class _CorruptDatabase(ValueError):
    pass


class _FormatMismatch(ValueError):
    pass


@dataclass
class Document:
    """An indexed page: terms with their frequencies, and numbered values."""

    terms: dict[str, int] = field(default_factory=dict)
    values: dict[int, str] = field(default_factory=dict)

    def add_boolean_term(self, term: str) -> None:
        """Add a term that only filters and does not weigh."""
        if not term:
            raise ValueError("empty terms are not allowed")
        self.terms.setdefault(term, 0)

    def add_value(self, slot: int, value: str) -> None:
        """Store a value in a slot; an empty value clears the slot."""
        if value:
            self.values[slot] = value
        else:
            self.values.pop(slot, None)

    def get_value(self, slot: int) -> str:
        """Return the value in a slot, or an empty string."""
        return self.values.get(slot, "")

    def index_text(self, text: str) -> None:
        """Add the lower-cased words of a text as weighted terms."""
        for word in _WORD_RE.findall(text.lower()):
            if len(word.encode("utf-8")) > _MAX_WORD_BYTES:
                continue
            self.terms[word] = self.terms.get(word, 0) + 1

    def _copy(self) -> Document:
        return Document(dict(self.terms), dict(self.values))

    def _to_json(self) -> dict:
        return {"terms": self.terms, "values": {str(k): v for k, v in self.values.items()}}

    @classmethod
    def _from_json(cls, data: dict) -> Document:
        terms = {str(term): int(wdf) for term, wdf in data["terms"].items()}
        values = {int(slot): str(value) for slot, value in data["values"].items()}
        return cls(terms, values)


def _has_term(doc: Document, term: str) -> bool:
    return term == "" or term in doc.terms


class IndexDatabase:
    """An index stored in a directory; writes become durable on commit."""

    def __init__(self, path: str | os.PathLike[str], *, writable: bool = False) -> None:
        self.path = Path(path)
        self.writable = writable
        self._metadata: dict[str, str] = {}
        self._documents: dict[int, Document] = {}
        self._last_docid = 0
        self._closed = False

        index_file = self.path / _INDEX_FILE
        if writable:
            self.path.mkdir(parents=True, exist_ok=True)
            if index_file.exists():
                self._load(index_file)
        else:
            self._load(index_file)

    def _load(self, index_file: Path) -> None:
        raw = index_file.read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise _CorruptDatabase(f"{index_file}: {exc}") from exc
        if not isinstance(data, dict):
            raise _CorruptDatabase(f"{index_file}: not an index")
        if data.get("format") != _FORMAT:
            raise _FormatMismatch(f"{index_file}: unsupported format {data.get('format')!r}")
        try:
            self._metadata = {str(k): str(v) for k, v in data["metadata"].items()}
            self._last_docid = int(data["last_docid"])
            self._documents = {
                int(docid): Document._from_json(doc) for docid, doc in data["documents"].items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise _CorruptDatabase(f"{index_file}: {exc}") from exc

    def _check_writable(self) -> None:
        if not self.writable:
            raise io.UnsupportedOperation("index database opened read-only")
        if self._closed:
            raise ValueError("index database is closed")

    def doc_count(self) -> int:
        """Return the number of documents."""
        return len(self._documents)

    def get_metadata(self, key: str) -> str:
        """Return a metadata entry, or an empty string."""
        return self._metadata.get(key, "")

    def set_metadata(self, key: str, value: str) -> None:
        """Set a metadata entry; an empty value removes it."""
        self._check_writable()
        if value:
            self._metadata[key] = value
        else:
            self._metadata.pop(key, None)

    def postlist(self, term: str) -> list[int]:
        """Return the sorted ids of documents holding a term (all for '')."""
        return sorted(docid for docid, doc in self._documents.items() if _has_term(doc, term))

    def get_document(self, docid: int) -> Document:
        """Return a copy of a document; KeyError if there is none."""
        try:
            return self._documents[docid]._copy()
        except KeyError:
            raise KeyError(f"document {docid} not found") from None

    def add_document(self, doc: Document) -> int:
        """Store a document under a new id and return the id."""
        self._check_writable()
        self._last_docid += 1
        self._documents[self._last_docid] = doc._copy()
        return self._last_docid

    def replace_document(self, docid: int, doc: Document) -> None:
        """Store a document under a given id, replacing any there."""
        self._check_writable()
        if docid < 1:
            raise ValueError("document ids start at 1")
        self._documents[docid] = doc._copy()
        self._last_docid = max(self._last_docid, docid)

    def delete_document(self, docid: int) -> None:
        """Remove a document; KeyError if there is none."""
        self._check_writable()
        try:
            del self._documents[docid]
        except KeyError:
            raise KeyError(f"document {docid} not found") from None

    def query(
        self, lang: str, words: Iterable[str], operation: str, max_results: int
    ) -> list[tuple[int, Document]]:
        """Find documents in a language matching the words.

        ``operation`` is ``"and"`` or ``"or"``. An empty word matches every
        document. Results are ordered by weight, best first.
        """
        if operation not in ("and", "or"):
            raise ValueError(f"unknown operation {operation!r}")
        if max_results < 0:
            raise ValueError("max_results must not be negative")
        words = list(words)
        if not words or max_results == 0:
            return []

        lang_term = "L" + lang
        match = all if operation == "and" else any
        total = len(self._documents)
        frequencies = {
            word: sum(1 for doc in self._documents.values() if word in doc.terms)
            for word in set(words)
            if word
        }

        hits = []
        for docid, doc in self._documents.items():
            if lang_term not in doc.terms:
                continue
            if not match(_has_term(doc, word) for word in words):
                continue
            score = sum(
                doc.terms.get(word, 0) * math.log(1 + total / frequencies[word])
                for word in words
                if word and frequencies[word]
            )
            hits.append((score, docid, doc))

        hits.sort(key=lambda hit: (-hit[0], hit[1]))
        return [(docid, doc._copy()) for _, docid, doc in hits[:max_results]]

    def commit(self) -> None:
        """Write all changes to disk."""
        self._check_writable()
        data = {
            "format": _FORMAT,
            "metadata": self._metadata,
            "last_docid": self._last_docid,
            "documents": {str(docid): doc._to_json() for docid, doc in self._documents.items()},
        }
        index_file = self.path / _INDEX_FILE
        temp_file = index_file.with_name(_INDEX_FILE + ".tmp")
        temp_file.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(temp_file, index_file)

    def close(self) -> None:
        """Close the database, committing pending changes if writable."""
        if self._closed:
            return
        if self.writable:
            self.commit()
        self._closed = True

    def __enter__(self) -> IndexDatabase:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _database_version(db: IndexDatabase) -> int:
    try:
        return int(db.get_metadata(VERSION_KEY).strip())
    except ValueError:
        return 0


def _open_writable(path: str | os.PathLike[str], check_version: bool) -> IndexDatabase:
    try:
        db = IndexDatabase(path, writable=True)
        if check_version and db.doc_count() > 0:
            version = _database_version(db)
            if version != DB_VERSION:
                raise DatabaseVersionMismatch(version)
        db.set_metadata(VERSION_KEY, str(DB_VERSION))
        return db
    except _CorruptDatabase:
        if not check_version:
            raise
        _log.warning("index database %s corrupted, throwing it away", path)
    except _FormatMismatch:
        if not check_version:
            raise
        _log.warning("index database %s format mismatch, throwing it away", path)
    except DatabaseVersionMismatch as exc:
        _log.warning(
            "index version mismatch in %s: found %d vs wanted %d - throwing it away",
            path, exc.version, exc.ref_version,
        )
    shutil.rmtree(path, ignore_errors=True)
    return _open_writable(path, False)


def open_writable_db(path: str | os.PathLike[str]) -> IndexDatabase:
    """Open or create a writable index, discarding one that is unusable."""
    return _open_writable(path, True)


def open_db(path: str | os.PathLike[str]) -> IndexDatabase:
    """Open an index for reading.

    Raises FileNotFoundError if there is none, ValueError if it is
    unreadable and DatabaseVersionMismatch if it has another version.
    """
    db = IndexDatabase(path)
    version = _database_version(db)
    if version != DB_VERSION:
        raise DatabaseVersionMismatch(version)
    return db


def get_doc_info(doc: Document) -> tuple[str, str, str]:
    """Return the ``(lang, uid, xhtml)`` a document's terms carry."""
    lang = uid = xhtml = ""
    for term in sorted(doc.terms):
        if term.startswith("L"):
            lang = term[1:]
        elif term.startswith("U"):
            uid = term[1:]
        elif len(term) > 5 and term.startswith("XHTML"):
            xhtml = term[5:]
    return lang, uid, xhtml