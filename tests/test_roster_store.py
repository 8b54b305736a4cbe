import sqlite3

import pytest

from skillhub.crud.roster_store import InsertOutcome, RemoveOutcome, RosterStore
from skillhub.database import timeout_ms
from skillhub.models.participation import ParticipationStatus
from skillhub.services.errors import TransientError


class TestRosterStore:

    def test_try_insert_creates_registered_record(self, store: RosterStore):
        assert store.try_insert("evt-1", "alice") is InsertOutcome.INSERTED

        record = store.get("evt-1", "alice")
        assert record is not None
        assert record.event_id == "evt-1"
        assert record.user_id == "alice"
        assert record.status == ParticipationStatus.REGISTERED.value
        assert record.check_in_time is None
        assert record.feedback_rating is None
        assert record.created_at is not None

    def test_try_insert_duplicate_pair_is_already_exists(self, store: RosterStore):
        assert store.try_insert("evt-1", "alice") is InsertOutcome.INSERTED
        assert store.try_insert("evt-1", "alice") is InsertOutcome.ALREADY_EXISTS
        assert store.count_by_event("evt-1") == 1

    def test_same_user_may_join_different_events(self, store: RosterStore):
        assert store.try_insert("evt-1", "alice") is InsertOutcome.INSERTED
        assert store.try_insert("evt-2", "alice") is InsertOutcome.INSERTED
        assert store.count_by_event("evt-1") == 1
        assert store.count_by_event("evt-2") == 1

    def test_count_by_event_for_unknown_event_is_zero(self, store: RosterStore):
        assert store.count_by_event("nobody-here") == 0

    def test_remove_is_idempotent(self, store: RosterStore):
        store.try_insert("evt-1", "alice")

        assert store.remove("evt-1", "alice") is RemoveOutcome.REMOVED
        assert store.remove("evt-1", "alice") is RemoveOutcome.NOT_FOUND
        assert store.get("evt-1", "alice") is None
        assert store.count_by_event("evt-1") == 0

    def test_remove_only_touches_the_given_pair(self, store: RosterStore):
        store.try_insert("evt-1", "alice")
        store.try_insert("evt-1", "bob")
        store.try_insert("evt-2", "alice")

        store.remove("evt-1", "alice")

        assert store.get("evt-1", "bob") is not None
        assert store.get("evt-2", "alice") is not None
        assert store.count_by_event("evt-1") == 1

    def test_list_by_event_in_join_order(self, store: RosterStore):
        for user in ("carol", "alice", "bob"):
            store.try_insert("evt-1", user)
        store.try_insert("evt-2", "dave")

        roster = store.list_by_event("evt-1")
        assert [p.user_id for p in roster] == ["carol", "alice", "bob"]

    def test_list_by_user(self, store: RosterStore):
        store.try_insert("evt-1", "alice")
        store.try_insert("evt-2", "alice")
        store.try_insert("evt-2", "bob")

        events = {p.event_id for p in store.list_by_user("alice")}
        assert events == {"evt-1", "evt-2"}
        assert store.list_by_user("nobody") == []

    def test_count_matches_records_after_mixed_operations(self, store: RosterStore):
        for user in ("a", "b", "c", "d"):
            store.try_insert("evt-1", user)
        store.remove("evt-1", "b")
        store.try_insert("evt-1", "a")
        store.remove("evt-1", "zzz")
        store.try_insert("evt-1", "e")

        assert store.count_by_event("evt-1") == len(store.list_by_event("evt-1")) == 4

    def test_not_initialized_store_raises(self):
        store = RosterStore("sqlite:///unused.db")
        with pytest.raises(RuntimeError):
            store.count_by_event("evt-1")


class TestRosterStoreFailures:

    @pytest.fixture
    def broken_store(self, tmp_path):
        # 존재하지 않는 디렉터리 → 연결 시 OperationalError
        url = f"sqlite:///{tmp_path / 'missing' / 'nested' / 'roster.db'}"
        store = RosterStore(url, timeout=1.0).init()
        yield store
        store.shutdown()

    def test_try_insert_fault_is_transient_not_already_exists(self, broken_store: RosterStore):
        with pytest.raises(TransientError):
            broken_store.try_insert("evt-1", "alice")

    def test_remove_fault_is_transient_not_not_found(self, broken_store: RosterStore):
        with pytest.raises(TransientError):
            broken_store.remove("evt-1", "alice")

    def test_reads_fault_is_transient(self, broken_store: RosterStore):
        with pytest.raises(TransientError):
            broken_store.count_by_event("evt-1")
        with pytest.raises(TransientError):
            broken_store.get("evt-1", "alice")
        with pytest.raises(TransientError):
            broken_store.list_by_event("evt-1")


class TestRosterStoreTimeouts:

    def test_locked_database_times_out_as_transient(self, store: RosterStore, database_path):
        # 다른 연결이 배타 잠금을 쥐고 있으면 busy timeout 이 지나 OperationalError → TransientError
        impatient = RosterStore(f"sqlite:///{database_path}", timeout=0.2).init()
        locker = sqlite3.connect(str(database_path), isolation_level=None)
        try:
            locker.execute("BEGIN EXCLUSIVE")
            with pytest.raises(TransientError):
                impatient.try_insert("evt-1", "alice")
            with pytest.raises(TransientError):
                impatient.count_by_event("evt-1")
        finally:
            locker.execute("ROLLBACK")
            locker.close()
            impatient.shutdown()

        # 실패한 insert 는 기록을 남기지 않음
        assert store.get("evt-1", "alice") is None
        assert store.count_by_event("evt-1") == 0

    def test_per_call_timeout_on_sqlite_falls_back_to_store_timeout(self, store: RosterStore):
        assert store.try_insert("evt-1", "alice", timeout=0.5) is InsertOutcome.INSERTED
        assert store.count_by_event("evt-1", timeout=0.5) == 1

    @pytest.mark.parametrize("timeout, expected", [(5.0, 5000), (0.25, 250), (0.0005, 1), (0.0, 1)])
    def test_timeout_ms_never_disables_the_limit(self, timeout, expected):
        assert timeout_ms(timeout) == expected
