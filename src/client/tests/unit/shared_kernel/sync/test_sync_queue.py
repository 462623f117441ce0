"""Unit tests for SyncQueue.

These tests use a fake change event source and a mocked outbox store to
test the capture, read and acknowledgement logic without a database.
"""

from types import SimpleNamespace
from unittest.mock import call

import pytest

from shared_kernel.sync.queue import SyncQueue
from shared_kernel.sync.value_objects import ChangeEntry, ChangeType


def _record(record_id):
    return SimpleNamespace(id=record_id)


class TestSyncQueueLifecycle:
    """Tests for enable() and disable()."""

    def test_starts_disabled(self, sync_queue, fake_database):
        assert not sync_queue.is_enabled
        assert fake_database.listeners == {}

    def test_enable_registers_listener(self, sync_queue, fake_database, mock_probe):
        sync_queue.enable()

        assert sync_queue.is_enabled
        assert list(fake_database.listeners.values()) == [sync_queue.on_database_event]
        mock_probe.queue_enabled.assert_called_once_with(1)

    def test_enable_twice_replaces_listener(self, sync_queue, fake_database):
        sync_queue.enable()
        sync_queue.enable()

        assert list(fake_database.listeners) == [2]

    def test_enable_twice_captures_each_change_once(
        self, sync_queue, fake_database, mock_store
    ):
        sync_queue.enable()
        sync_queue.enable()

        fake_database.emit(ChangeType.CREATE, "Transaction", _record("t1"))

        mock_store.add.assert_called_once()

    def test_disable_removes_listener(self, sync_queue, fake_database, mock_probe):
        sync_queue.enable()
        sync_queue.disable()

        assert not sync_queue.is_enabled
        assert fake_database.listeners == {}
        mock_probe.queue_disabled.assert_called_once_with(1)

    def test_disable_when_disabled_is_noop(self, sync_queue, mock_probe):
        sync_queue.disable()

        assert not sync_queue.is_enabled
        mock_probe.queue_disabled.assert_not_called()

    def test_no_capture_after_disable(self, sync_queue, fake_database, mock_store):
        sync_queue.enable()
        sync_queue.disable()

        fake_database.emit(ChangeType.CREATE, "Transaction", _record("t1"))

        mock_store.add.assert_not_called()

    def test_can_be_re_enabled(self, sync_queue, fake_database, mock_store):
        sync_queue.enable()
        sync_queue.disable()
        sync_queue.enable()

        fake_database.emit(ChangeType.CREATE, "Transaction", _record("t1"))

        mock_store.add.assert_called_once()


class TestSyncQueueCapture:
    """Tests for on_database_event()."""

    @pytest.mark.parametrize(
        "record_type",
        [
            "ItemLine",
            "Requisition",
            "RequisitionLine",
            "Stocktake",
            "StocktakeLine",
            "Transaction",
            "TransactionLine",
        ],
    )
    def test_enqueues_whitelisted_record_types(
        self, sync_queue, fake_database, mock_store, record_type
    ):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.CREATE, record_type, _record("r1")
        )

        mock_store.add.assert_called_once()
        entry = mock_store.add.call_args[0][0]
        assert entry.change_type is ChangeType.CREATE
        assert entry.record_type == record_type
        assert entry.record_id == "r1"
        assert entry.change_time == 1_700_000_000_000

    @pytest.mark.parametrize(
        "change_type", [ChangeType.CREATE, ChangeType.UPDATE, ChangeType.DELETE]
    )
    def test_enqueues_each_change_type(
        self, sync_queue, fake_database, mock_store, change_type
    ):
        sync_queue.on_database_event(
            fake_database.context, change_type, "Transaction", _record("t1")
        )

        entry = mock_store.add.call_args[0][0]
        assert entry.change_type is change_type

    def test_ignores_record_types_outside_whitelist(
        self, sync_queue, fake_database, mock_store
    ):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Setting", _record("s1")
        )

        mock_store.find.assert_not_called()
        mock_store.add.assert_not_called()

    def test_ignores_wipe(self, sync_queue, fake_database, mock_store, mock_probe):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.WIPE, "Transaction", None
        )

        mock_store.add.assert_not_called()
        mock_probe.change_ignored.assert_called_once_with(
            ChangeType.WIPE, "Transaction", "unsupported_change"
        )

    @pytest.mark.parametrize("record_id", [None, ""])
    def test_ignores_records_without_id(
        self, sync_queue, fake_database, mock_store, mock_probe, record_id
    ):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Transaction", _record(record_id)
        )

        mock_store.add.assert_not_called()
        mock_probe.change_ignored.assert_called_once_with(
            ChangeType.CREATE, "Transaction", "missing_record_id"
        )

    def test_ignores_records_without_id_attribute(
        self, sync_queue, fake_database, mock_store
    ):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Transaction", object()
        )

        mock_store.add.assert_not_called()

    def test_dedup_lookup_uses_full_key(self, sync_queue, fake_database, mock_store):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.UPDATE, "Transaction", _record("t1")
        )

        mock_store.find.assert_called_once_with(
            ChangeType.UPDATE, "Transaction", "t1"
        )

    def test_non_string_id_is_looked_up_as_stored(
        self, sync_queue, fake_database, mock_store
    ):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.UPDATE, "Transaction", _record(7)
        )

        mock_store.find.assert_called_once_with(ChangeType.UPDATE, "Transaction", "7")
        entry = mock_store.add.call_args[0][0]
        assert entry.record_id == "7"

    def test_skips_duplicate(self, sync_queue, fake_database, mock_store, mock_probe):
        pending = ChangeEntry.create(ChangeType.UPDATE, "Transaction", "t1", 1)
        mock_store.find.return_value = pending

        sync_queue.on_database_event(
            fake_database.context, ChangeType.UPDATE, "Transaction", _record("t1")
        )

        mock_store.add.assert_not_called()
        mock_probe.change_deduplicated.assert_called_once_with(pending)

    def test_store_is_bound_to_event_context(self, fake_database, mock_store):
        contexts = []

        def outbox(context):
            contexts.append(context)
            return mock_store

        queue = SyncQueue(fake_database, outbox=outbox)
        queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Transaction", _record("t1")
        )

        assert contexts == [fake_database.context]

    def test_store_failure_propagates(self, sync_queue, fake_database, mock_store):
        mock_store.add.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError, match="disk full"):
            sync_queue.on_database_event(
                fake_database.context, ChangeType.CREATE, "Transaction", _record("t1")
            )

    def test_custom_whitelist(self, fake_database, mock_store):
        queue = SyncQueue(
            fake_database,
            outbox=lambda context: mock_store,
            synced_record_types=["Setting"],
        )

        queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Transaction", _record("t1")
        )
        queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Setting", _record("s1")
        )

        assert queue.synced_record_types == frozenset({"Setting"})
        mock_store.add.assert_called_once()
        assert mock_store.add.call_args[0][0].record_type == "Setting"

    def test_enqueued_entry_is_reported(self, sync_queue, fake_database, mock_store, mock_probe):
        sync_queue.on_database_event(
            fake_database.context, ChangeType.CREATE, "Transaction", _record("t1")
        )

        entry = mock_store.add.call_args[0][0]
        mock_probe.change_enqueued.assert_called_once_with(entry)


class TestSyncQueueRead:
    """Tests for length() and next()."""

    def test_length_counts_store_entries(self, sync_queue, mock_store):
        mock_store.count.return_value = 3

        assert sync_queue.length() == 3

    def test_next_defaults_to_one(self, sync_queue, mock_store):
        sync_queue.next()

        mock_store.oldest.assert_called_once_with(1)

    def test_next_none_means_one(self, sync_queue, mock_store):
        sync_queue.next(None)

        mock_store.oldest.assert_called_once_with(1)

    def test_next_returns_store_entries(self, sync_queue, mock_store, mock_probe):
        entries = [
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t1", 1),
            ChangeEntry.create(ChangeType.UPDATE, "Transaction", "t1", 2),
        ]
        mock_store.oldest.return_value = entries

        assert sync_queue.next(5) == entries
        mock_store.oldest.assert_called_once_with(5)
        mock_probe.entries_served.assert_called_once_with(requested=5, returned=2)

    @pytest.mark.parametrize("count", [0, -1])
    def test_next_rejects_non_positive_count(self, sync_queue, mock_store, count):
        with pytest.raises(ValueError, match="positive integer"):
            sync_queue.next(count)

        mock_store.oldest.assert_not_called()

    def test_reads_do_not_write(self, sync_queue, fake_database, mock_store):
        sync_queue.length()
        sync_queue.next(2)

        assert fake_database.commits == 0
        mock_store.add.assert_not_called()
        mock_store.remove.assert_not_called()


class TestSyncQueueUse:
    """Tests for use()."""

    def test_removes_each_entry_in_one_transaction(
        self, sync_queue, fake_database, mock_store, mock_probe
    ):
        entries = [
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t1", 1),
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t2", 2),
        ]

        sync_queue.use(entries)

        assert mock_store.remove.call_args_list == [
            call(entries[0].id),
            call(entries[1].id),
        ]
        assert fake_database.commits == 1
        mock_probe.entries_used.assert_called_once_with(removed=2, stale=0)

    def test_counts_stale_entries(self, sync_queue, mock_store, mock_probe):
        mock_store.remove.side_effect = [True, False]
        entries = [
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t1", 1),
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t2", 2),
        ]

        sync_queue.use(entries)

        mock_probe.entries_used.assert_called_once_with(removed=1, stale=1)

    def test_empty_batch(self, sync_queue, fake_database, mock_store, mock_probe):
        sync_queue.use([])

        mock_store.remove.assert_not_called()
        mock_probe.entries_used.assert_called_once_with(removed=0, stale=0)

    def test_removal_failure_rolls_back_batch(
        self, sync_queue, fake_database, mock_store, mock_probe
    ):
        mock_store.remove.side_effect = [True, RuntimeError("locked")]
        entries = [
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t1", 1),
            ChangeEntry.create(ChangeType.CREATE, "Transaction", "t2", 2),
        ]

        with pytest.raises(RuntimeError, match="locked"):
            sync_queue.use(entries)

        assert fake_database.rollbacks == 1
        assert fake_database.commits == 0
        mock_probe.entries_used.assert_not_called()
