"""Trees of data identifiers, as shown in the explorer, and their drag payload."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

ID_SEPARATOR = "::"
DRAG_SEPARATOR = "\r\n"

_INT_PATTERN = re.compile(r"\s*([+-]?[0-9]+)\s*", re.ASCII)


@dataclass(eq=False)
class TreeNode:
    """One item of an identifier tree; ``columns`` holds the text of each column."""

    columns: list[str] = field(default_factory=lambda: [""])
    parent: TreeNode | None = field(default=None, repr=False)
    children: list[TreeNode] = field(default_factory=list, repr=False)

    @property
    def text(self) -> str:
        """The text of the first column, one part of an identifier."""
        return self.columns[0] if self.columns else ""

    def column(self, index: int) -> str:
        """The text of column ``index``, '' if the column is empty."""
        return self.columns[index] if 0 <= index < len(self.columns) else ""

    def add_child(self, text: str) -> TreeNode:
        """Append a child whose first column is ``text`` and return it."""
        child = TreeNode([text], parent=self)
        self.children.append(child)
        return child

    def full_id(self) -> str:
        """The identifier of this item: the texts from the root down, joined by '::'."""
        parts = []
        node: TreeNode | None = self
        while node is not None:
            parts.append(node.text)
            node = node.parent
        return ID_SEPARATOR.join(reversed(parts))


def _as_int(text: str) -> int | None:
    match = _INT_PATTERN.fullmatch(text)
    if not match:
        return None
    number = int(match.group(1))
    return number if -(2**31) <= number <= 2**31 - 1 else None


def item_less(a: TreeNode, b: TreeNode, column: int) -> bool:
    """Order two items by ``column``: numerically if both are integers, else as text."""
    left, right = a.column(column), b.column(column)
    left_number, right_number = _as_int(left), _as_int(right)
    if left_number is not None and right_number is not None:
        return left_number < right_number
    return left < right


def drag_text(nodes: Iterable[TreeNode]) -> str:
    """The text dragged out of the tree: the identifiers of the leaves given.

    A separator follows each leaf that is not the last item given.
    """
    items = list(nodes)
    pieces = []
    for position, node in enumerate(items):
        if node.children:
            continue
        pieces.append(node.full_id())
        if position + 1 < len(items):
            pieces.append(DRAG_SEPARATOR)
    return "".join(pieces)


def mime_types() -> list[str]:
    """The mime types the tree offers when dragging."""
    return ["text/uri-list"]