"""Builds navigation items from a ScrollKeeper contents list."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET

from helpdex.navitem import NavigatorItem

_log = logging.getLogger(__name__)


def _text(element: ET.Element) -> str:
    return "".join(element.itertext())


def doc_url(source: str, mime_type: str) -> str:
    """Return the URL of a document given its source and format."""
    if mime_type == "text/html":
        return source
    if mime_type in ("application/xml", "text/xml"):
        if source.startswith("file:"):
            source = source[5:]
        return "ghelp:" + source
    if mime_type.startswith("text/"):
        return "file:" + source
    return source


class ScrollKeeperTreeBuilder:
    """Turns the sections and documents of a contents list into tree items."""

    def __init__(self, show_empty_dirs: bool = False) -> None:
        self.show_empty_dirs = show_empty_dirs
        self.items: list[NavigatorItem] = []

    def build(self, parent: NavigatorItem, contents_list: str | os.PathLike[str]) -> None:
        """Add the sections of a contents list file below ``parent``.

        Raises OSError if the file cannot be read and ValueError if it is
        not well-formed XML.
        """
        try:
            root = ET.parse(contents_list).getroot()
        except ET.ParseError as exc:
            raise ValueError(f"cannot parse {contents_list}: {exc}") from exc

        self.items.append(parent)
        for element in root:
            if element.tag == "sect":
                self._insert_section(parent, element)

    def build_or_hide(self, parent: NavigatorItem, contents_list: str | os.PathLike[str]) -> None:
        """Build below ``parent`` and hide it if nothing was added."""
        try:
            self.build(parent, contents_list)
        except (OSError, ValueError) as exc:
            _log.warning("ScrollKeeper contents unavailable: %s", exc)
        parent.hidden = not parent.children

    def _insert_section(self, parent: NavigatorItem, sect: ET.Element) -> int:
        item = NavigatorItem(icon="help-contents", parent=parent)
        self.items.append(item)

        num_docs = 0
        for element in sect:
            if element.tag == "title":
                item.name = _text(element)
            elif element.tag == "sect":
                num_docs += self._insert_section(item, element)
            elif element.tag == "doc":
                self._insert_doc(item, element)
                num_docs += 1

        if not self.show_empty_dirs and num_docs == 0:
            item.remove()
            dropped = {id(node) for node in item.walk()}
            self.items = [node for node in self.items if id(node) not in dropped]

        return num_docs

    def _insert_doc(self, parent: NavigatorItem, doc: ET.Element) -> None:
        item = NavigatorItem(icon="text-plain", parent=parent)
        self.items.append(item)

        url = ""
        for element in doc:
            if element.tag == "doctitle":
                item.name = _text(element)
            elif element.tag == "docsource":
                url += _text(element)
            elif element.tag == "docformat":
                url = doc_url(url, _text(element))
        item.url = url