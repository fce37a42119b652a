"""Table of contents of a documentation page, cached as XML."""

from __future__ import annotations

import enum
import logging
import os
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable
from pathlib import Path

from helpdex.navitem import NavigatorItem

_log = logging.getLogger(__name__)

Generator = Callable[[str, str], None]


class CacheStatus(enum.Enum):
    """Whether the cached table of contents can be used."""

    NEED_REBUILD = "need-rebuild"
    CACHE_OK = "cache-ok"


def _default_cache_dir() -> str:
    cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(
        os.path.expanduser("~"), ".cache"
    )
    return os.path.join(cache_home, "helpdex")


def _parse_with_comments(path: Path) -> ET.Element:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        return ET.parse(path, parser=parser).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"cannot parse {path}: {exc}") from exc


def _text(element: ET.Element | None) -> str:
    return "" if element is None else "".join(element.itertext())


def _child_element(element: ET.Element, name: str) -> ET.Element | None:
    return next((child for child in element if child.tag == name), None)


def _descendants(element: ET.Element, tag: str) -> list[ET.Element]:
    return [node for node in element.iter(tag) if node is not element]


class TOC:
    """Builds chapter and section items for one application's handbook.

    The XML cache is produced by ``generator(source_file, cache_file)``;
    it is then stamped with the source's change time so later builds can
    reuse it.
    """

    def __init__(
        self,
        parent_item: NavigatorItem,
        application: str = "",
        *,
        cache_dir: str | os.PathLike[str] | None = None,
        doc_dirs: Iterable[str] = (),
        generator: Generator | None = None,
    ) -> None:
        self.parent_item = parent_item
        self.application = application
        self.cache_dir = Path(cache_dir) if cache_dir is not None else Path(_default_cache_dir())
        self.doc_dirs = list(doc_dirs)
        self.generator = generator
        self.source_file: Path | None = None
        self.cache_file: Path | None = None

    def build(self, source_file: str | os.PathLike[str]) -> CacheStatus:
        """Fill the tree from the cache, regenerating it when it is stale.

        Returns the cache status found before building.
        """
        file_name = os.path.abspath(os.fspath(source_file))
        for doc_dir in self.doc_dirs:
            if file_name.startswith(doc_dir):
                file_name = file_name[len(doc_dir):]
                break

        self.cache_file = self.cache_dir / "help" / file_name.replace("/", "__")
        self.source_file = Path(source_file)

        status = self.cache_status()
        if status is CacheStatus.NEED_REBUILD:
            if self.generator is None:
                _log.warning("no table of contents generator for %s", self.source_file)
                return status
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.generator(os.fspath(self.source_file), os.fspath(self.cache_file))
            self.stamp_cache()
        self.fill_tree()
        return status

    def _require_paths(self) -> tuple[Path, Path]:
        if self.source_file is None or self.cache_file is None:
            raise ValueError("no source file set; call build() first")
        return self.source_file, self.cache_file

    def _source_ctime(self) -> int:
        source, _ = self._require_paths()
        return int(os.stat(source).st_ctime)

    def _cached_ctime(self) -> int:
        _, cache = self._require_paths()
        try:
            root = _parse_with_comments(cache)
        except (OSError, ValueError):
            return 0
        children = list(root)
        if not children or children[-1].tag is not ET.Comment:
            return 0
        try:
            return int((children[-1].text or "").strip())
        except ValueError:
            return 0

    def cache_status(self) -> CacheStatus:
        """Return whether the cache exists and matches the source."""
        _, cache = self._require_paths()
        if not cache.exists() or self._source_ctime() != self._cached_ctime():
            return CacheStatus.NEED_REBUILD
        return CacheStatus.CACHE_OK

    def stamp_cache(self) -> None:
        """Append the source's change time to the cache as a comment."""
        _, cache = self._require_paths()
        root = _parse_with_comments(cache)
        root.append(ET.Comment(str(self._source_ctime())))
        ET.ElementTree(root).write(cache, encoding="utf-8", xml_declaration=True)

    def _page_url(self, name: str) -> str:
        return f"help:{self.application}/{name}.html"

    def fill_tree(self) -> list[NavigatorItem]:
        """Add chapter and section items from the cache; return the chapters."""
        _, cache = self._require_paths()
        root = _parse_with_comments(cache)

        chapters = []
        for chapter in _descendants(root, "chapter"):
            title = " ".join(_text(_child_element(chapter, "title")).split())
            anchor = _text(_child_element(chapter, "anchor")).strip()
            chapter_url = self._page_url(anchor)
            chapter_item = NavigatorItem(title, url=chapter_url, parent=self.parent_item)
            chapter_item.expanded = False
            chapters.append(chapter_item)

            for section in _descendants(chapter, "section"):
                sect_title = " ".join(_text(_child_element(section, "title")).split())
                sect_anchor = _text(_child_element(section, "anchor")).strip()
                if chapter_item.children:
                    url = self._page_url(sect_anchor)
                else:
                    url = f"{chapter_url}#{sect_anchor}"
                NavigatorItem(sect_title, icon="text-plain", url=url, parent=chapter_item)

        return chapters