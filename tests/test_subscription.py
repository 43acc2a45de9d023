# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeIndex change subscriptions."""

import logging

import pytest

from treeindex import TreeIndex, TreeItem


@pytest.fixture
def index():
    return TreeIndex([
        (1, None, 'Root'),
        (2, 1, 'A'),
        (3, 1, 'B'),
        (4, 2, 'C'),
    ])


@pytest.fixture
def events(index):
    received = []

    def record(**kwargs):
        received.append(kwargs)

    index.subscribe('test', any=record)
    return received


class TestSubscribe:
    """Tests for subscribe() and unsubscribe()."""

    def test_insert_event(self, index, events):
        """Test add_item() notifies with the position."""
        item = index.add_item((5, 3, 'D'))
        assert len(events) == 1
        event = events[0]
        assert event['event'] == 'insert'
        assert event['item'] is item
        assert event['position'] == 4
        assert event['store'] is index

    def test_update_event(self, index, events):
        """Test update_item() notifies with the old item."""
        old = index.get_item(3)
        new = index.update_item(3, parent=2)
        assert [e['event'] for e in events] == ['update']
        assert events[0]['item'] is new
        assert events[0]['old'] is old

    def test_delete_event_per_item(self, index, events):
        """Test remove_item() notifies once per removed item."""
        index.remove_item(2)
        assert [e['event'] for e in events] == ['delete', 'delete']
        assert {e['item'].id for e in events} == {2, 4}
        assert all(e['root'] == 2 for e in events)

    def test_no_event_on_failure(self, index, events):
        """Test failed or no-op mutations are silent."""
        index.remove_item(999)
        with pytest.raises(KeyError):
            index.update_item(999, label='x')
        with pytest.raises(ValueError):
            index.add_item(TreeItem(1))
        assert events == []

    def test_state_is_consistent_inside_callback(self, index):
        """Test callbacks see the index after the mutation."""
        seen = []
        index.subscribe('check', delete=lambda store, item, **kw: seen.append(item.id in store))
        index.remove_item(2)
        assert seen == [False, False]

    def test_separate_callbacks(self, index):
        """Test per-event registration."""
        inserted, updated = [], []
        index.subscribe(
            'split',
            insert=lambda item, **kw: inserted.append(item.id),
            update=lambda item, **kw: updated.append(item.id),
        )
        index.add_item((5, None, 'E'))
        index.update_item(5, label='E2')
        index.remove_item(5)
        assert inserted == [5]
        assert updated == [5]

    def test_unsubscribe_all(self, index, events):
        """Test unsubscribe with no flags removes every callback."""
        assert index.has_subscribers is True
        index.unsubscribe('test')
        assert index.has_subscribers is False
        index.add_item((5, None, 'E'))
        assert events == []

    def test_unsubscribe_single_event(self, index, events):
        """Test removing one event keeps the others."""
        index.unsubscribe('test', insert=True)
        index.add_item((5, None, 'E'))
        index.update_item(5, label='E2')
        assert [e['event'] for e in events] == ['update']

    def test_unsubscribe_unknown_is_ignored(self, index):
        """Test unknown subscriber ids are ignored."""
        index.unsubscribe('nobody')

    def test_callback_error_propagates(self, index):
        """Test callback errors reach the caller after the mutation."""
        def boom(**kwargs):
            raise RuntimeError('boom')

        index.subscribe('boom', insert=boom)
        with pytest.raises(RuntimeError, match='boom'):
            index.add_item((5, None, 'E'))
        assert 5 in index


class TestLogging:
    """Tests for log output."""

    def test_mutations_logged_at_debug(self, index, caplog):
        """Test add/update/remove emit debug records."""
        with caplog.at_level(logging.DEBUG, logger='treeindex'):
            index.add_item((5, None, 'E'))
            index.update_item(5, parent=1)
            index.remove_item(5)
        messages = [r.getMessage() for r in caplog.records]
        assert any('Added item 5' in m for m in messages)
        assert any('Moved item 5' in m for m in messages)
        assert any('Removed item 5' in m for m in messages)

    def test_cycle_logged_as_warning(self, index, caplog):
        """Test a parent cycle is reported when a walk meets it."""
        index.update_item(1, parent=4)
        with caplog.at_level(logging.WARNING, logger='treeindex'):
            assert [item.id for item in index.get_all_parents(4)] == [4, 2, 1]
        assert any('cycle' in r.getMessage() for r in caplog.records)
