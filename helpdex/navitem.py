"""Nodes of the documentation navigation tree."""

from __future__ import annotations

from collections.abc import Iterator


class NavigatorItem:
    """A titled node of the navigation tree, optionally pointing at a page."""

    def __init__(
        self,
        name: str = "",
        icon: str = "",
        url: str = "",
        parent: NavigatorItem | None = None,
    ) -> None:
        self.name = name
        self.icon = icon
        self.url = url
        self.parent: NavigatorItem | None = None
        self.children: list[NavigatorItem] = []
        self.hidden = False
        self.expanded = False
        if parent is not None:
            parent.add_child(self)

    def _ancestors(self) -> Iterator[NavigatorItem]:
        node = self
        while node is not None:
            yield node
            node = node.parent

    def add_child(self, item: NavigatorItem) -> NavigatorItem:
        """Append an item as the last child, detaching it from any old parent."""
        if any(node is item for node in self._ancestors()):
            raise ValueError("an item cannot become a child of itself or its descendants")
        if item.parent is not None:
            item.remove()
        item.parent = self
        self.children.append(item)
        return item

    def remove(self) -> None:
        """Detach this item, with its subtree, from its parent."""
        if self.parent is None:
            return
        self.parent.children = [child for child in self.parent.children if child is not self]
        self.parent = None

    def walk(self) -> Iterator[NavigatorItem]:
        """Yield this item and then its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self) -> str:
        return f"NavigatorItem(name={self.name!r}, url={self.url!r}, children={len(self.children)})"