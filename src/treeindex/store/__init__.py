# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex package - Flat records indexed as a tree.

This package provides the TreeIndex class, an index over flat,
parent-referencing records with O(1) lookup by id and by parent.

The package is organized into:
- core: Main TreeIndex class with lookups, walks, and mutations
- loading: Functions for loading records from lists or another TreeIndex
- subscription: Event subscription and notification system

Example:
    >>> from treeindex import TreeIndex
    >>> index = TreeIndex([(1, None, 'Root'), (2, 1, 'Child')])
    >>> index.get_children(1)
    [TreeItem(2, parent=1, label='Child')]
"""

from .core import TreeIndex
from .loading import coerce_item

__all__ = ["TreeIndex", "coerce_item"]
