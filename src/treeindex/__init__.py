# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""treeindex - In-memory tree index over flat, parent-referencing records.

A lightweight, zero-dependency library that keeps a flat list of
{id, parent, label} records together with id, position and children
lookups, for UI layers that render hierarchies from flat data.
"""

import logging

__version__ = "0.1.0"

from .exceptions import (
    AlreadyExistsError,
    InvalidItemError,
    NotExistsError,
    NotFoundError,
    TreeIndexError,
)
from .item import ItemId, TreeItem
from .store import TreeIndex, coerce_item

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "TreeIndex",
    "TreeItem",
    "ItemId",
    "coerce_item",
    # Exceptions
    "TreeIndexError",
    "NotFoundError",
    "NotExistsError",
    "AlreadyExistsError",
    "InvalidItemError",
]
