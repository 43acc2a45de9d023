# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeIndex exceptions."""

from __future__ import annotations

from typing import Any


class TreeIndexError(Exception):
    """Base exception for TreeIndex errors."""

    def __init__(self, message: str, item_id: Any = None) -> None:
        super().__init__(message)
        self.item_id = item_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ''


class NotFoundError(TreeIndexError, KeyError):
    """Raised when an item is looked up by an id that is not in the index."""

    pass


class NotExistsError(TreeIndexError, KeyError):
    """Raised when an update targets an id that is not in the index."""

    pass


class AlreadyExistsError(TreeIndexError, ValueError):
    """Raised when an item is added with an id that is already in the index."""

    pass


class InvalidItemError(TreeIndexError, TypeError):
    """Raised when a source entry or an update cannot be turned into an item."""

    pass
