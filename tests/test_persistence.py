from engine import SetDraftAnswer, apply, create_demo_snapshot
from persistence import load_snapshot, persist_snapshot, storage_key
from storage import MemoryStorage, SqlStorage


class BrokenStorage:
    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("quota exceeded")


def test_storage_key_is_namespaced():
    assert storage_key("abc") == "ace.exam.session.abc"


def test_persist_then_load(clock):
    storage = MemoryStorage()
    snap = apply(create_demo_snapshot("s1", clock), SetDraftAnswer("x+1"), clock)
    clock.advance(250)
    persist_snapshot(storage, snap, clock)

    loaded = load_snapshot(storage, "s1")
    assert loaded is not None
    assert loaded.draft_answer == "x+1"
    # the written copy carries a fresh persistence stamp
    assert loaded.last_local_persisted_at == clock.now_ms()
    assert loaded.model_copy(update={"last_local_persisted_at": snap.last_local_persisted_at}) == snap


def test_load_missing_returns_none():
    assert load_snapshot(MemoryStorage(), "nope") is None


def test_load_garbage_returns_none():
    storage = MemoryStorage()
    storage.set_item(storage_key("s1"), "{not json")
    assert load_snapshot(storage, "s1") is None


def test_storage_failures_are_swallowed(clock):
    storage = BrokenStorage()
    persist_snapshot(storage, create_demo_snapshot("s1", clock), clock)
    assert load_snapshot(storage, "s1") is None


def test_sql_storage_survives_reopen(tmp_path, clock):
    url = f"sqlite:///{tmp_path}/local.db"
    snap = create_demo_snapshot("durable", clock)
    persist_snapshot(SqlStorage(url), snap, clock)
    persist_snapshot(SqlStorage(url), apply(snap, SetDraftAnswer("2"), clock), clock)

    reopened = SqlStorage(url)
    loaded = load_snapshot(reopened, "durable")
    assert loaded is not None and loaded.draft_answer == "2"
    assert reopened.get_item("unrelated") is None
