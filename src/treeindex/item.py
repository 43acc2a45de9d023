# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex item class."""

from __future__ import annotations

from typing import Any, Hashable

ItemId = Hashable


class TreeItem:
    """A flat, parent-referencing record held by a TreeIndex.

    Each item has:
    - id: The item's unique key (any hashable scalar, usually int or str)
    - parent: The id of the parent item, or None for a root
    - label: Display text

    Items are values: the index never mutates them in place. An update
    builds a new item with replace() and swaps it in everywhere.

    Example:
        >>> item = TreeItem(2, parent=1, label='Child')
        >>> item.replace(label='Renamed')
        TreeItem(2, parent=1, label='Renamed')
    """

    __slots__ = ('id', 'parent', 'label')

    _fields = ('id', 'parent', 'label')

    def __init__(
        self,
        id: ItemId,
        parent: ItemId | None = None,
        label: str = '',
    ) -> None:
        self.id = id
        self.parent = parent
        self.label = label

    def __repr__(self) -> str:
        return f"TreeItem({self.id!r}, parent={self.parent!r}, label={self.label!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeItem):
            return NotImplemented
        return (
            self.id == other.id
            and self.parent == other.parent
            and self.label == other.label
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_root(self) -> bool:
        """True if this item has no parent."""
        return self.parent is None

    def replace(self, **changes: Any) -> TreeItem:
        """Return a copy of this item with the given fields replaced.

        Args:
            **changes: New values for 'parent' and/or 'label' (or 'id').

        Returns:
            A new TreeItem; this item is left untouched.

        Raises:
            TypeError: If a key is not an item field.
        """
        unknown = set(changes) - set(self._fields)
        if unknown:
            raise TypeError(f"Unknown TreeItem field(s): {', '.join(sorted(map(str, unknown)))}")
        values = {name: getattr(self, name) for name in self._fields}
        values.update(changes)
        return TreeItem(**values)

    def as_dict(self) -> dict[str, Any]:
        """Return the item as a plain {'id', 'parent', 'label'} dict."""
        return {'id': self.id, 'parent': self.parent, 'label': self.label}
