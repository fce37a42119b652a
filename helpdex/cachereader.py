"""Reader for bzip2-compressed documentation cache files.

A cache file bundles many HTML pages; each page is wrapped in
``<FILENAME filename="...">`` ... ``</FILENAME>`` markers, which may nest.
"""

from __future__ import annotations

import bz2
import logging
import os
from collections import defaultdict

_log = logging.getLogger(__name__)

_PATTERN_START = '<FILENAME filename="'
_PATTERN_END = "</FILENAME>"


class CacheReader:
    """Splits a documentation cache into the HTML documents it holds."""

    def __init__(self) -> None:
        self._text = ""
        self._ranges: dict[str, list[tuple[int, int]]] = {}

    def parse(self, path: str | os.PathLike[str]) -> None:
        """Read and split a bzip2-compressed cache file.

        Raises OSError when the file cannot be read or decompressed and
        ValueError when its markers are malformed.
        """
        self._text = ""
        self._ranges = {}
        try:
            with bz2.open(path, "rb") as handle:
                raw = handle.read()
        except EOFError as exc:
            _log.warning("cannot open %s: %s", path, exc)
            raise OSError(f"cannot open {path}: {exc}") from exc
        except OSError as exc:
            _log.warning("cannot open %s: %s", path, exc)
            raise
        self.parse_text(raw.decode("utf-8", errors="replace"))

    def parse_text(self, text: str) -> None:
        """Split already decompressed cache text into documents."""
        self._text = ""
        self._ranges = {}

        ranges: dict[str, list[tuple[int, int]]] = defaultdict(list)
        stack: list[str] = []
        index = 0
        while index < len(text):
            start = text.find(_PATTERN_START, index)
            end = text.find(_PATTERN_END, index)

            if 0 <= start < end:
                name_start = start + len(_PATTERN_START)
                quote = text.find('"', name_start)
                if quote < 0:
                    raise ValueError(f"unterminated file name at offset {start}")
                name = text[name_start:quote]
                if stack and start > index:
                    ranges[stack[-1]].append((index, start))
                index = quote + 2
                stack.append(name)
            elif end >= 0:
                if not stack:
                    raise ValueError(f"unexpected {_PATTERN_END} at offset {end}")
                ranges[stack[-1]].append((index, end))
                index = end + len(_PATTERN_END)
                stack.pop()
            else:
                break

        if stack:
            raise ValueError(f"unclosed document {stack[-1]!r}")

        self._text = text
        self._ranges = dict(ranges)

    def documents(self) -> frozenset[str]:
        """Return the names of all documents found."""
        return frozenset(self._ranges)

    def document(self, doc_id: str) -> bytes:
        """Return the UTF-8 content of a document, or empty bytes if unknown."""
        pieces = self._ranges.get(doc_id)
        if not pieces:
            return b""
        return "".join(self._text[first:last] for first, last in pieces).encode("utf-8")