"""
Tests for client-held session evidence.
"""

import json

from client.evidence import (
    SESSION_ID_KEY,
    USER_KEY,
    FileStorage,
    MemoryStorage,
    SessionEvidence,
    SessionEvidenceStore,
)

ALICE = SessionEvidence(session_id="tok-1", user={"username": "alice1234", "id": "u-1"})


def _stores(tmp_path):
    durable = FileStorage(tmp_path / "local_storage.json")
    volatile = MemoryStorage()
    return durable, volatile, SessionEvidenceStore(durable, volatile)


class TestSessionEvidenceStore:
    def test_remember_me_writes_durable_storage(self, tmp_path):
        durable, volatile, store = _stores(tmp_path)
        store.set(ALICE, remember=True)

        assert durable.get_item(SESSION_ID_KEY) == "tok-1"
        assert json.loads(durable.get_item(USER_KEY)) == {"username": "alice1234", "id": "u-1"}
        assert volatile.get_item(SESSION_ID_KEY) is None
        assert store.get() == ALICE

    def test_without_remember_me_writes_volatile_storage(self, tmp_path):
        durable, volatile, store = _stores(tmp_path)
        store.set(ALICE, remember=False)

        assert durable.get_item(SESSION_ID_KEY) is None
        assert volatile.get_item(SESSION_ID_KEY) == "tok-1"
        assert store.get() == ALICE

    def test_durable_evidence_survives_a_restart(self, tmp_path):
        _, _, store = _stores(tmp_path)
        store.set(ALICE, remember=True)

        _, _, reopened = _stores(tmp_path)
        assert reopened.get() == ALICE

    def test_durable_is_read_before_volatile(self, tmp_path):
        durable, volatile, store = _stores(tmp_path)
        volatile.set_item(SESSION_ID_KEY, "volatile-token")
        durable.set_item(SESSION_ID_KEY, "durable-token")
        assert store.get().session_id == "durable-token"

    def test_switching_storage_clears_the_other_area(self, tmp_path):
        durable, volatile, store = _stores(tmp_path)
        store.set(ALICE, remember=True)
        store.set(SessionEvidence("tok-2", {"username": "alice1234", "id": "u-1"}), remember=False)

        assert durable.get_item(SESSION_ID_KEY) is None
        assert store.get().session_id == "tok-2"

    def test_clear_removes_everything(self, tmp_path):
        durable, volatile, store = _stores(tmp_path)
        store.set(ALICE, remember=True)
        volatile.set_item(SESSION_ID_KEY, "stray")
        store.clear()

        assert store.get() is None
        assert durable.get_item(USER_KEY) is None

    def test_malformed_user_keeps_session_id(self, tmp_path):
        _, volatile, store = _stores(tmp_path)
        volatile.set_item(SESSION_ID_KEY, "tok-1")
        volatile.set_item(USER_KEY, "not json")

        evidence = store.get()
        assert evidence.session_id == "tok-1"
        assert evidence.user is None
        assert evidence.username is None

    def test_user_without_session_id_is_not_evidence(self, tmp_path):
        _, volatile, store = _stores(tmp_path)
        volatile.set_item(USER_KEY, json.dumps({"username": "alice1234"}))
        assert store.get() is None

    def test_corrupt_durable_file_reads_as_empty(self, tmp_path):
        (tmp_path / "local_storage.json").write_text("{broken", encoding="utf-8")
        _, _, store = _stores(tmp_path)
        assert store.get() is None
