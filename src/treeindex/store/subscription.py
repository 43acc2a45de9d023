# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Subscription system for TreeIndex change notifications.

Subscribers register callbacks for three events:
    - 'insert': an item was added
    - 'update': an item was replaced (new label and/or new parent)
    - 'delete': an item was removed (once per item of a removed subtree)

Callbacks run after the index is consistent again and receive keyword
arguments only::

    def on_change(store, item, event, **info):
        ...

    index.subscribe('grid', any=on_change)
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[..., Any]


class SubscriptionMixin:
    """Mixin adding insert/update/delete subscriptions to TreeIndex.

    The host class must define the three subscriber dicts in its
    __init__ (see TreeIndex).
    """

    __slots__ = ()

    _upd_subscribers: dict[str, SubscriberCallback]
    _ins_subscribers: dict[str, SubscriberCallback]
    _del_subscribers: dict[str, SubscriberCallback]

    def subscribe(
        self,
        subscriber_id: str,
        update: SubscriberCallback | None = None,
        insert: SubscriberCallback | None = None,
        delete: SubscriberCallback | None = None,
        any: SubscriberCallback | None = None,
    ) -> None:
        """Register callbacks for change events.

        Registering again with the same subscriber_id replaces the previous
        callback for that event.

        Args:
            subscriber_id: Key used to unsubscribe later.
            update: Called after update_item().
            insert: Called after add_item().
            delete: Called after remove_item(), once per removed item.
            any: Registered for all three events.

        Example:
            >>> index.subscribe('log', any=lambda **kw: print(kw['event']))
        """
        if any is not None:
            update = update or any
            insert = insert or any
            delete = delete or any
        if update is not None:
            self._upd_subscribers[subscriber_id] = update
        if insert is not None:
            self._ins_subscribers[subscriber_id] = insert
        if delete is not None:
            self._del_subscribers[subscriber_id] = delete

    def unsubscribe(
        self,
        subscriber_id: str,
        update: bool = False,
        insert: bool = False,
        delete: bool = False,
        any: bool = False,
    ) -> None:
        """Remove callbacks registered under subscriber_id.

        With no flag set, all of the subscriber's callbacks are removed.
        Unknown subscriber ids are ignored.
        """
        if any or not (update or insert or delete):
            update = insert = delete = True
        if update:
            self._upd_subscribers.pop(subscriber_id, None)
        if insert:
            self._ins_subscribers.pop(subscriber_id, None)
        if delete:
            self._del_subscribers.pop(subscriber_id, None)

    @property
    def has_subscribers(self) -> bool:
        """True if at least one callback is registered."""
        return bool(
            self._upd_subscribers or self._ins_subscribers or self._del_subscribers
        )

    def _notify(
        self,
        subscribers: dict[str, SubscriberCallback],
        event: str,
        item: Any,
        **info: Any,
    ) -> None:
        # Copy: a callback may unsubscribe itself
        for subscriber_id, callback in list(subscribers.items()):
            logger.debug("Notifying %r of %s on item %r", subscriber_id, event, item.id)
            callback(store=self, item=item, event=event, **info)

    def _on_item_inserted(self, item: Any, position: int) -> None:
        self._notify(self._ins_subscribers, 'insert', item, position=position)

    def _on_item_updated(self, item: Any, old: Any) -> None:
        self._notify(self._upd_subscribers, 'update', item, old=old)

    def _on_item_deleted(self, item: Any, root: Any) -> None:
        self._notify(self._del_subscribers, 'delete', item, root=root)
