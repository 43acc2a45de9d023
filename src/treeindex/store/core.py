# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex - An in-memory index over flat, parent-referencing records.

This module provides the TreeIndex class, the core container of the
treeindex library. A TreeIndex holds a flat list of TreeItem records, each
pointing at its parent by id, and keeps three lookup structures in sync
with it so that tree queries never scan the whole list.

Key Features:
    - **O(1) lookup**: id -> item and id -> position dicts
    - **O(1) children**: parent id -> ordered list of child items
    - **Subtree and ancestry walks**: get_all_children(), get_all_parents()
    - **Consistent mutation**: add_item(), remove_item(), update_item()
      update every structure before returning
    - **Reactive subscriptions**: insert/update/delete notifications

Internal structures:
    - _items: flat list, insertion order (the list get_all() returns)
    - _by_id: id -> current item
    - _positions: id -> index of the item in _items
    - _children: parent id (None for roots) -> child items, sibling order

Known limitations:
    Parent cycles are neither detected nor prevented: update_item() will
    happily make an item its own ancestor. Read walks carry a visited set
    so they terminate on such a cycle, and log a warning when they hit one.

    A TreeIndex is not thread-safe. Hosts that mutate it from several
    threads must serialize access themselves.

Example:
    Basic usage::

        index = TreeIndex([
            {'id': 1, 'parent': None, 'label': 'Root'},
            {'id': 2, 'parent': 1, 'label': 'A'},
            {'id': 3, 'parent': 2, 'label': 'B'},
        ])
        index.get_children(1)       # [TreeItem(2, ...)]
        index.get_all_parents(3)    # [item 3, item 2, item 1]
        index.update_item(3, parent=1)
        index.remove_item(2)        # True
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Iterator

from ..exceptions import (
    AlreadyExistsError,
    InvalidItemError,
    NotExistsError,
    NotFoundError,
)
from ..item import ItemId, TreeItem
from .loading import coerce_item, load_from_list, load_from_treeindex
from .subscription import SubscriberCallback, SubscriptionMixin

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(('parent', 'label'))


class TreeIndex(SubscriptionMixin):
    """An index over flat records with O(1) lookup by id and by parent.

    TreeIndex provides:
    - get_all(): the live flat list
    - get_item(id) / index[id]: one item
    - get_children(id): direct children (None for the roots)
    - get_all_children(id) / get_all_parents(id): subtree and ancestry
    - add_item(item) / remove_item(id) / update_item(id, **changes)

    Lookups that target one item (get_item, update_item) raise on an
    unknown id; walks (get_children, get_all_children, get_all_parents)
    and remove_item degrade to an empty list or False.

    Example:
        >>> index = TreeIndex([(1, None, 'Root'), (2, 1, 'Child')])
        >>> index.get_item(2).label
        'Child'
        >>> [item.id for item in index.get_all_parents(2)]
        [2, 1]
    """

    __slots__ = (
        '_items', '_by_id', '_positions', '_children', '_strict',
        '_upd_subscribers', '_ins_subscribers', '_del_subscribers',
    )

    def __init__(
        self,
        source: Iterable[Any] | TreeIndex | None = None,
        *,
        strict: bool = False,
    ) -> None:
        """Initialize a TreeIndex.

        Args:
            source: Optional initial records. Can be:
                - an iterable of TreeItem, mappings ({'id', 'parent',
                  'label'}) or (id, parent, label) tuples
                - TreeIndex: copy of another index
                The sequence itself is copied, never aliased.
            strict: If True, a duplicate id in source raises
                AlreadyExistsError. By default the later record wins in the
                id and position maps and both records stay listed.

        Example:
            >>> TreeIndex([TreeItem(1), TreeItem(2, parent=1)])
            >>> TreeIndex([{'id': 'a', 'parent': None, 'label': 'A'}])
            >>> TreeIndex(other_index)  # copy
        """
        self._items: list[TreeItem] = []
        self._by_id: dict[ItemId, TreeItem] = {}
        self._positions: dict[ItemId, int] = {}
        self._children: dict[ItemId | None, list[TreeItem]] = {}
        self._strict = strict
        self._upd_subscribers: dict[str, SubscriberCallback] = {}
        self._ins_subscribers: dict[str, SubscriberCallback] = {}
        self._del_subscribers: dict[str, SubscriberCallback] = {}

        if source is not None:
            self._load_source(source)

    def _load_source(self, source: Iterable[Any] | TreeIndex) -> None:
        """Load data from source into this TreeIndex.

        Raises:
            TypeError: If source is neither a TreeIndex nor an iterable of
                records.
        """
        if isinstance(source, TreeIndex):
            load_from_treeindex(self, source)
        elif isinstance(source, Iterable) and not isinstance(
            source, (str, bytes, Mapping)
        ):
            load_from_list(self, source, strict=self._strict)
        else:
            raise TypeError(
                f"source must be an iterable of items or a TreeIndex, "
                f"not {type(source).__name__}"
            )
        logger.debug("Loaded %d items, %d roots", len(self._items), len(self.roots()))

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing item ids in flat order."""
        return f"TreeIndex({[item.id for item in self._items]!r})"

    def __len__(self) -> int:
        """Return the number of items in the flat list."""
        return len(self._items)

    def __iter__(self) -> Iterator[TreeItem]:
        """Iterate over items in flat order."""
        return iter(self._items)

    def __contains__(self, item_id: ItemId) -> bool:
        """Check if an item with this id is indexed."""
        return item_id in self._by_id

    def __getitem__(self, item_id: ItemId) -> TreeItem:
        """Get item by id, same as get_item()."""
        return self.get_item(item_id)

    @property
    def strict(self) -> bool:
        """True if duplicate ids were rejected at construction."""
        return self._strict

    # ==================== Core API ====================

    def get_all(self) -> list[TreeItem]:
        """Return the flat list of items in current order.

        Warning:
            This is the index's own list, not a copy. Mutating it mutates
            the index and bypasses the lookup structures. Copy it (or use
            as_list()) before handing it to code that may modify it.
        """
        return self._items

    def get_item(self, item_id: ItemId) -> TreeItem:
        """Get the item with the given id.

        Raises:
            NotFoundError: If no item has this id.
        """
        try:
            return self._by_id[item_id]
        except KeyError:
            raise NotFoundError(
                f"Item with id {item_id} not found", item_id=item_id
            ) from None

    def get(self, item_id: ItemId, default: Any = None) -> TreeItem | Any:
        """Get item by id, with default instead of an error."""
        return self._by_id.get(item_id, default)

    def get_children(self, item_id: ItemId | None) -> list[TreeItem]:
        """Get the direct children of an item, in sibling order.

        Args:
            item_id: Parent id. None returns the roots. The id does not need
                to be indexed: items with a dangling parent are listed under
                that parent id.

        Returns:
            A new list; empty for a leaf or an unknown id.
        """
        return list(self._children.get(item_id, ()))

    def roots(self) -> list[TreeItem]:
        """Get the items whose parent is None."""
        return self.get_children(None)

    def get_all_children(self, item_id: ItemId | None) -> list[TreeItem]:
        """Get every descendant of an item, depth-first pre-order.

        The item itself is not included. Returns an empty list for a leaf
        or an unknown id.
        """
        return [item for _depth, item in self._iter_subtree(item_id)]

    def get_all_parents(self, item_id: ItemId) -> list[TreeItem]:
        """Get the ancestry chain of an item.

        Returns:
            [item, parent, grandparent, ..., root]. Empty if item_id is not
            indexed. The walk stops at an item whose parent is None or whose
            parent id is not indexed.
        """
        result: list[TreeItem] = []
        seen: set[ItemId] = set()
        current = item_id
        while current is not None and current in self._by_id:
            if current in seen:
                logger.warning("Parent cycle through item %r", current)
                break
            seen.add(current)
            item = self._by_id[current]
            result.append(item)
            current = item.parent
        return result

    def add_item(self, item: TreeItem | Mapping[str, Any] | tuple) -> TreeItem:
        """Append an item and index it.

        Args:
            item: TreeItem, {'id', 'parent', 'label'} mapping or
                (id, parent, label) tuple.

        Returns:
            The stored TreeItem.

        Raises:
            AlreadyExistsError: If the id is already indexed.
            InvalidItemError: If item cannot be turned into a TreeItem.
        """
        item = coerce_item(item)
        if item.id in self._by_id:
            raise AlreadyExistsError(
                f"Item with id {item.id} already exists", item_id=item.id
            )

        position = len(self._items)
        self._items.append(item)
        self._by_id[item.id] = item
        self._positions[item.id] = position
        self._children.setdefault(item.parent, []).append(item)
        logger.debug("Added item %r under %r at position %d", item.id, item.parent, position)

        self._on_item_inserted(item, position)
        return item

    def remove_item(self, item_id: ItemId) -> bool:
        """Remove an item together with its whole subtree.

        Returns:
            True if the item was indexed and removed, False otherwise.
        """
        if item_id not in self._by_id:
            return False

        doomed = self._collect_subtree(item_id)
        doomed_ids = set(doomed)
        removed: list[TreeItem] = []
        gone: set[int] = set()

        for doomed_id in doomed:
            self._children.pop(doomed_id, None)
            item = self._by_id.pop(doomed_id, None)
            if item is None:
                continue
            removed.append(item)
            if item.parent not in doomed_ids:
                self._detach(item)
            gone.add(self._positions.pop(doomed_id))

        # Compact in place: get_all() callers keep the same list object
        start = min(gone)
        self._items[start:] = [
            item
            for position, item in enumerate(self._items[start:], start)
            if position not in gone
        ]
        self._reindex_positions(start)
        logger.debug("Removed item %r with %d descendants", item_id, len(removed) - 1)

        for item in removed:
            self._on_item_deleted(item, root=item_id)
        return True

    def update_item(self, item_id: ItemId, **changes: Any) -> TreeItem:
        """Replace an item with a copy carrying a new label and/or parent.

        Args:
            item_id: Id of the item to update.
            **changes: 'label' and/or 'parent'. An omitted field keeps its
                value; parent=None moves the item to the roots.

        Returns:
            The new TreeItem, now stored everywhere the old one was.

        Raises:
            NotExistsError: If item_id is not indexed.
            InvalidItemError: If changes holds another key.

        Example:
            >>> index.update_item(3, label='Renamed')
            >>> index.update_item(3, parent=None)  # move to roots
        """
        if item_id not in self._by_id:
            raise NotExistsError(
                f"Item with id {item_id} does not exist", item_id=item_id
            )
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise InvalidItemError(
                f"Cannot update field(s) {sorted(map(str, unknown))} of item {item_id}",
                item_id=item_id,
            )

        old = self._by_id[item_id]
        new = old.replace(**changes)

        if new.parent != old.parent:
            self._detach(old)
            self._children.setdefault(new.parent, []).append(new)
            logger.debug("Moved item %r from %r to %r", item_id, old.parent, new.parent)
        else:
            siblings = self._children.setdefault(old.parent, [])
            i = self._sibling_index(siblings, old)
            if i == -1:
                siblings.append(new)
            else:
                siblings[i] = new

        self._items[self._positions[item_id]] = new
        self._by_id[item_id] = new
        logger.debug("Updated item %r", item_id)

        self._on_item_updated(new, old=old)
        return new

    # ==================== Internal Helpers ====================

    def _iter_subtree(self, item_id: ItemId | None) -> Iterator[tuple[int, TreeItem]]:
        """Yield (depth, item) for every descendant of item_id, pre-order.

        Each id is expanded once. Meeting item_id again means a parent
        cycle: the item is skipped and a warning logged.
        """
        expanded = {item_id}
        stack = [(0, child) for child in reversed(self._children.get(item_id, ()))]
        while stack:
            depth, item = stack.pop()
            if item.id == item_id:
                logger.warning("Parent cycle through item %r", item_id)
                continue
            yield depth, item
            if item.id not in expanded:
                expanded.add(item.id)
                children = self._children.get(item.id, ())
                stack.extend((depth + 1, child) for child in reversed(children))

    def _collect_subtree(self, item_id: ItemId) -> list[ItemId]:
        """Return item_id and the ids of all its descendants."""
        collected: list[ItemId] = []
        seen: set[ItemId] = set()
        stack = [item_id]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            collected.append(current)
            stack.extend(child.id for child in self._children.get(current, ()))
        return collected

    @staticmethod
    def _sibling_index(siblings: list[TreeItem], item: TreeItem) -> int:
        """Position of item (by identity) in a children list, or -1."""
        for i, sibling in enumerate(siblings):
            if sibling is item:
                return i
        return -1

    def _detach(self, item: TreeItem) -> None:
        """Remove item from its parent's children list."""
        siblings = self._children.get(item.parent)
        if siblings is None:
            return
        i = self._sibling_index(siblings, item)
        if i != -1:
            del siblings[i]
        if not siblings:
            del self._children[item.parent]

    def _reindex_positions(self, start: int) -> None:
        """Rewrite the position of every item from start to the end."""
        for position in range(start, len(self._items)):
            item = self._items[position]
            # Skip a shadowed duplicate: its id maps to a later record
            if self._by_id.get(item.id) is item:
                self._positions[item.id] = position

    # ==================== Traversal ====================

    def walk(
        self,
        callback: Callable[[TreeItem], Any] | None = None,
        item_id: ItemId | None = None,
    ) -> Iterator[tuple[int, TreeItem]] | None:
        """Walk a subtree depth-first, optionally calling a callback.

        Args:
            callback: Optional function called on each item. If provided,
                walk returns None.
            item_id: Start below this item. None (default) walks from the
                roots.

        Yields:
            (depth, item) pairs, depth 0 for the first level, if no
            callback is provided.

        Example:
            >>> for depth, item in index.walk():
            ...     print('  ' * depth + item.label)
        """
        if callback is not None:
            for _depth, item in self._iter_subtree(item_id):
                callback(item)
            return None
        return self._iter_subtree(item_id)

    def depth(self, item_id: ItemId) -> int:
        """Number of indexed ancestors of an item (0 for a root).

        Raises:
            NotFoundError: If item_id is not indexed.
        """
        self.get_item(item_id)
        return len(self.get_all_parents(item_id)) - 1

    def get_path(self, item_id: ItemId, separator: str = '/') -> str:
        """Breadcrumb of labels from the top ancestor down to the item.

        Returns an empty string for an unknown id.

        Example:
            >>> index.get_path(4)
            'Root/A/C'
        """
        chain = self.get_all_parents(item_id)
        return separator.join(item.label for item in reversed(chain))

    # ==================== Conversion ====================

    def ids(self) -> list[ItemId]:
        """Return item ids in flat order."""
        return [item.id for item in self._items]

    def as_list(self) -> list[dict[str, Any]]:
        """Return a copy of the flat list as plain dicts."""
        return [item.as_dict() for item in self._items]

    def as_nested(self, item_id: ItemId | None = None) -> list[dict[str, Any]]:
        """Convert a subtree to nested dicts.

        Each entry is item.as_dict() plus a 'children' list, the shape tree
        grids consume.

        Args:
            item_id: Convert the children of this item. None (default)
                starts from the roots.
        """
        return self._nested_children(item_id, {item_id})

    def _nested_children(
        self, parent_id: ItemId | None, expanded: set[ItemId | None]
    ) -> list[dict[str, Any]]:
        result: list[dict[str, Any]] = []
        for child in self._children.get(parent_id, ()):
            entry = child.as_dict()
            if child.id in expanded:
                entry['children'] = []
            else:
                expanded.add(child.id)
                entry['children'] = self._nested_children(child.id, expanded)
            result.append(entry)
        return result
