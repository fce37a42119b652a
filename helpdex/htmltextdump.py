"""Extraction of the title and body text of an HTML page."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from html.parser import HTMLParser

_VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input",
     "link", "meta", "param", "source", "track", "wbr"}
)
_HEAD_TAGS = frozenset({"title", "meta", "link", "style", "script", "base"})
_RAW_TEXT_TAGS = frozenset({"script", "style"})


class HtmlDumpError(ValueError):
    """Raised when a page has no usable document structure."""


class _Element:
    __slots__ = ("tag", "children")

    def __init__(self, tag: str) -> None:
        self.tag = tag
        self.children: list[_Element | str] = []

    def append_text(self, text: str) -> None:
        if self.children and isinstance(self.children[-1], str):
            self.children[-1] += text
        else:
            self.children.append(text)


class _TreeBuilder(HTMLParser):
    """Builds an html/head/body tree, supplying the implied elements."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.html: _Element | None = None
        self.head: _Element | None = None
        self.body: _Element | None = None
        self.stack: list[_Element] = []

    def _ensure_html(self) -> _Element:
        if self.html is None:
            self.html = _Element("html")
            self.stack = [self.html]
        return self.html

    def _ensure_head(self) -> _Element:
        html = self._ensure_html()
        if self.head is None:
            self.head = _Element("head")
            html.children.append(self.head)
        return self.head

    def _ensure_body(self) -> _Element:
        html = self._ensure_html()
        if self.body is None:
            self.body = _Element("body")
            html.children.append(self.body)
        return self.body

    def _in_prologue(self) -> bool:
        top = self.stack[-1]
        return top is self.html or top is self.head

    def _enter_head(self) -> _Element:
        head = self._ensure_head()
        self.stack = [self.html, head]
        return head

    def _enter_body(self) -> _Element:
        body = self._ensure_body()
        self.stack = [self.html, body]
        return body

    def handle_starttag(self, tag: str, attrs) -> None:
        self._ensure_html()
        if tag == "html":
            return
        if tag == "head":
            if self.body is None:
                self._enter_head()
            return
        if tag == "body":
            if self._in_prologue():
                self._enter_body()
            else:
                self._ensure_body()
            return

        if self._in_prologue():
            if tag in _HEAD_TAGS and self.body is None:
                parent = self._enter_head()
            else:
                parent = self._enter_body()
        else:
            parent = self.stack[-1]

        element = _Element(tag)
        parent.children.append(element)
        if tag not in _VOID_TAGS:
            self.stack.append(element)

    def handle_endtag(self, tag: str) -> None:
        if not self.stack or tag in ("html", "body"):
            return
        if tag == "head":
            if self.stack[-1] is self.head:
                self.stack.pop()
            return
        positions = [pos for pos, element in enumerate(self.stack) if element.tag == tag]
        if positions and positions[-1] > 0:
            del self.stack[positions[-1]:]

    def handle_data(self, data: str) -> None:
        if not self.stack:
            if not data.strip():
                return
            self._ensure_html()
        top = self.stack[-1]
        if top.tag in _RAW_TEXT_TAGS:
            return
        if self._in_prologue():
            if not data.strip():
                return
            top = self._enter_body()
        top.append_text(data)


def _texts(nodes: Iterable[_Element | str]) -> Iterator[str]:
    for node in nodes:
        if isinstance(node, str):
            yield node
        else:
            yield from _texts(node.children)


def _collect_text(nodes: Iterable[_Element | str]) -> str:
    return "".join(" " + text for text in _texts(nodes))


def html_text_dump(data: bytes | str) -> tuple[str, str]:
    """Return ``(title, text)`` of an HTML page.

    Every text fragment is preceded by a single space. The title is empty
    when the page has none. Raises HtmlDumpError when the page has no body.
    """
    source = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data

    builder = _TreeBuilder()
    builder.feed(source)
    builder.close()

    if builder.html is None:
        raise HtmlDumpError("cannot parse html")
    if builder.body is None:
        raise HtmlDumpError("missing <body>")

    text = _collect_text(builder.body.children)

    title = ""
    if builder.head is not None:
        title_element = next(
            (child for child in builder.head.children
             if isinstance(child, _Element) and child.tag == "title"),
            None,
        )
        if title_element is not None:
            title = _collect_text(title_element.children)

    return title, text