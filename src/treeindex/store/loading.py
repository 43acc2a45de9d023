# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Loading functions for TreeIndex.

These functions fill a freshly created TreeIndex from a source: a list of
records (TreeItem, mappings or tuples) or another TreeIndex. They write the
flat list and the three lookup structures in a single pass and never alias
the caller's sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TYPE_CHECKING

from ..exceptions import AlreadyExistsError, InvalidItemError
from ..item import TreeItem

if TYPE_CHECKING:
    from .core import TreeIndex


def coerce_item(entry: Any) -> TreeItem:
    """Turn a source entry into a TreeItem.

    Accepted forms:
        - TreeItem: returned as is (same object)
        - Mapping: {'id': ..., 'parent': ..., 'label': ...}; parent and
          label are optional
        - tuple/list: (id, parent) or (id, parent, label)

    Raises:
        InvalidItemError: If the entry has none of the forms above.
    """
    if isinstance(entry, TreeItem):
        return entry

    if isinstance(entry, Mapping):
        if 'id' not in entry:
            raise InvalidItemError(f"Item mapping has no 'id' key: {entry!r}")
        extra = set(entry) - {'id', 'parent', 'label'}
        if extra:
            raise InvalidItemError(
                f"Item mapping has unknown key(s) {sorted(map(str, extra))}",
                item_id=entry['id'],
            )
        return TreeItem(entry['id'], entry.get('parent'), entry.get('label', ''))

    if isinstance(entry, (tuple, list)) and len(entry) in (2, 3):
        return TreeItem(*entry)

    raise InvalidItemError(
        f"Cannot build a TreeItem from {type(entry).__name__}: {entry!r}"
    )


def load_from_list(
    index: TreeIndex, entries: Iterable[Any], strict: bool = False
) -> None:
    """Load records into an empty TreeIndex.

    Duplicate ids are accepted unless strict is set: the later record wins
    in the id and position maps while both stay in the flat list and in
    their parents' children lists.

    Args:
        index: Target TreeIndex (expected empty).
        entries: Records in flat order.
        strict: If True, raise on a duplicate id.

    Raises:
        AlreadyExistsError: On a duplicate id when strict is True.
        InvalidItemError: If an entry cannot be coerced.
    """
    items = index._items
    by_id = index._by_id
    positions = index._positions
    children = index._children

    for entry in entries:
        item = coerce_item(entry)
        if strict and item.id in by_id:
            raise AlreadyExistsError(
                f"Item with id {item.id} already exists", item_id=item.id
            )
        positions[item.id] = len(items)
        items.append(item)
        by_id[item.id] = item
        children.setdefault(item.parent, []).append(item)


def load_from_treeindex(index: TreeIndex, other: TreeIndex) -> None:
    """Copy another TreeIndex into an empty one.

    The flat list and the lookup structures are new containers; the item
    objects themselves are shared, which is safe since items are never
    mutated in place.
    """
    index._items.extend(other._items)
    index._by_id.update(other._by_id)
    index._positions.update(other._positions)
    for parent_id, siblings in other._children.items():
        index._children[parent_id] = list(siblings)
