"""Search handlers described by ``.desktop`` files.

A handler names the document types it serves and a command line or URL
template used to search them. Templates carry placeholders that are
filled in per search:

``%i`` identifier, ``%w`` words joined by ``+``, ``%m`` maximum results,
``%o`` ``and``/``or``, ``%d`` index directory, ``%l`` language,
``%b`` search binary.
"""

from __future__ import annotations

import enum
import locale
import logging
import os
import shutil
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

_log = logging.getLogger(__name__)

_DESKTOP_GROUP = "Desktop Entry"
_ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


class Operation(enum.Enum):
    """How the words of a search are combined."""

    AND = "and"
    OR = "or"

    @classmethod
    def from_method(cls, method: str) -> Operation:
        """Return OR for ``"or"`` and AND for anything else."""
        return cls.OR if method == "or" else cls.AND


class SearchHandlerError(Exception):
    """A search handler is missing, incomplete or cannot run."""


def _unescape(value: str) -> str:
    out = []
    chars = iter(value)
    for char in chars:
        if char == "\\":
            nxt = next(chars, "")
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
        else:
            out.append(char)
    return "".join(out)


def _split_list(value: str) -> list[str]:
    """Split a comma separated list, honouring ``\\,`` escapes."""
    if not value:
        return []
    items: list[str] = []
    current: list[str] = []
    chars = iter(value)
    for char in chars:
        if char == "\\":
            nxt = next(chars, "")
            current.append("," if nxt == "," else _ESCAPES.get(nxt, "\\" + nxt))
        elif char == ",":
            items.append("".join(current))
            current = []
        else:
            current.append(char)
    items.append("".join(current))
    if items and items[-1] == "":
        items.pop()
    return items


def _read_desktop_group(path: str | os.PathLike[str]) -> dict[str, str]:
    """Return the raw entries of the ``[Desktop Entry]`` group."""
    entries: dict[str, str] = {}
    group = None
    text = Path(path).read_text(encoding="utf-8")
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            group = line[1:-1]
            continue
        if group != _DESKTOP_GROUP or "=" not in line:
            continue
        key, _, value = line.partition("=")
        entries.setdefault(key.strip(), value.strip())
    return entries


def _default_lang() -> str:
    name = locale.getlocale()[0]
    if not name or name in ("C", "POSIX"):
        return "en"
    return name.replace("_", "-")[:2]


def _default_index_directory() -> str:
    cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(
        os.path.expanduser("~"), ".cache"
    )
    return os.path.join(cache_home, "helpdex", "index")


def _find_executable(name: str, paths: Sequence[str] = ()) -> str:
    if not name:
        return ""
    found = shutil.which(name, path=os.pathsep.join(paths)) if paths else shutil.which(name)
    return found or ""


def substitute_search_query(
    query: str,
    identifier: str,
    words: Iterable[str],
    max_results: int,
    operation: Operation,
    lang: str,
    binary: str,
    index_directory: str,
) -> str:
    """Fill the placeholders of a search command or URL template."""
    result = query
    result = result.replace("%i", identifier)
    result = result.replace("%w", "+".join(words))
    result = result.replace("%m", str(max_results))
    result = result.replace("%o", Operation(operation).value)
    result = result.replace("%d", index_directory)
    result = result.replace("%l", lang)
    result = result.replace("%b", binary)
    return result


def check_binary(cmd: str) -> bool:
    """Return whether the program a command line starts with can be found."""
    binary = cmd.split(" ", 1)[0]
    return bool(_find_executable(binary))


@dataclass
class SearchHandler:
    """Search settings for a set of document types."""

    document_types: tuple[str, ...] = ()
    search_command: str = ""
    search_url: str = ""
    index_cmd: str = ""
    try_exec: str = ""
    search_binary: str = ""
    lang: str = "en"
    index_directory: str = ""

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> SearchHandler:
        """Read a handler from the ``[Desktop Entry]`` group of a file."""
        entries = _read_desktop_group(path)
        search_binary = _unescape(entries.get("SearchBinary", ""))
        binary_paths = _split_list(entries.get("SearchBinaryPaths", ""))
        return cls(
            document_types=tuple(_split_list(entries.get("DocumentTypes", ""))),
            search_command=_unescape(entries.get("SearchCommand", "")),
            search_url=_unescape(entries.get("SearchUrl", "")),
            index_cmd=_unescape(entries.get("IndexCommand", "")),
            try_exec=_unescape(entries.get("TryExec", "")),
            search_binary=_find_executable(search_binary, binary_paths),
            lang=_default_lang(),
            index_directory=_default_index_directory(),
        )

    def index_command(self, identifier: str) -> str:
        """Return the index command for an identifier, or '' if there is none."""
        cmd = self.index_cmd
        cmd = cmd.replace("%i", identifier)
        cmd = cmd.replace("%d", self.index_directory)
        cmd = cmd.replace("%l", self.lang)
        return cmd

    def search_query(
        self,
        identifier: str,
        words: Iterable[str],
        max_results: int = 10,
        operation: Operation = Operation.AND,
    ) -> str:
        """Return the search command line, or the search URL if there is no command.

        Raises SearchHandlerError when the handler has neither.
        """
        template = self.search_command or self.search_url
        if not template:
            raise SearchHandlerError("No search command or URL specified.")
        query = substitute_search_query(
            template, identifier, list(words), max_results, operation,
            self.lang, self.search_binary, self.index_directory,
        )
        _log.debug("%s: %s", "CMD" if self.search_command else "URL", query)
        return query

    def check_paths(self) -> None:
        """Raise SearchHandlerError if a program the handler needs is missing."""
        if self.search_command and not check_binary(self.search_command):
            raise SearchHandlerError(
                f"'{self.search_command}' not found, check your installation"
            )
        if self.index_cmd and not check_binary(self.index_cmd):
            raise SearchHandlerError(f"'{self.index_cmd}' not found, check your installation")
        if self.try_exec and not check_binary(self.try_exec):
            raise SearchHandlerError(
                f"'{self.try_exec}' not found, install the package containing it"
            )


def load_search_handlers(
    directories: Iterable[str | os.PathLike[str]],
) -> dict[str, SearchHandler]:
    """Map document types to handlers read from ``*.desktop`` files.

    Directories are read in order and the first handler found for a
    document type wins. Raises SearchHandlerError if none is found.
    """
    handlers: dict[str, SearchHandler] = {}
    for directory in directories:
        base = Path(directory)
        if not base.is_dir():
            continue
        for path in sorted(p for p in base.glob("*.desktop") if p.is_file()):
            _log.debug("search handler file: %s", path)
            try:
                handler = SearchHandler.from_file(path)
            except (OSError, UnicodeDecodeError) as exc:
                _log.warning("Unable to initialize search handler from %s: %s", path, exc)
                continue
            for doc_type in handler.document_types:
                handlers.setdefault(doc_type, handler)

    if not handlers:
        _log.warning("No valid search handler found.")
        raise SearchHandlerError("No valid search handler found.")
    return handlers