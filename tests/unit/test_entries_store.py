"""Tests for entry storage: file and in-memory stores, save_entry, notifications."""

import json
from datetime import date

import pytest

from otcalc.sdk.entries import (
    EntryNotFoundError,
    FileEntryStore,
    MemoryEntryStore,
    default_store,
    save_entry,
)
from otcalc.sdk.schemas import Allowance, Entry


def make_entry(day=date(2026, 4, 1), **kwargs):
    return Entry(date=day, **kwargs)


@pytest.fixture
def file_store(tmp_path):
    return FileEntryStore(tmp_path / "entries")


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    """Each store implementation, so shared behavior is tested on both."""
    if request.param == "memory":
        return MemoryEntryStore()
    return FileEntryStore(tmp_path / "entries")


class TestStoreCrud:
    """Create, read, update and delete on both implementations."""

    def test_create_assigns_id(self, store):
        entry_id = store.create(make_entry(hours_133=2))
        assert len(entry_id) == 8
        stored = store.get(entry_id)
        assert stored.id == entry_id
        assert stored.hours_133 == 2

    def test_get_missing(self, store):
        assert store.get("deadbeef") is None

    def test_update_in_place(self, store):
        entry_id = store.create(make_entry(reason="Court"))
        assert store.update(entry_id, make_entry(reason="Court", hours_150=3))
        updated = store.get(entry_id)
        assert updated.hours_150 == 3
        assert len(store.list()) == 1

    def test_update_missing_returns_false(self, store):
        assert store.update("deadbeef", make_entry(reason="x")) is False

    def test_delete(self, store):
        keep = store.create(make_entry(reason="keep"))
        drop = store.create(make_entry(reason="drop"))
        assert store.delete(drop) is True
        assert store.get(drop) is None
        assert [e.id for e in store.list()] == [keep]

    def test_delete_missing_returns_false(self, store):
        assert store.delete("deadbeef") is False

    def test_clear(self, store):
        store.create(make_entry(reason="a"))
        store.create(make_entry(reason="b"))
        assert store.clear() == 2
        assert store.list() == []


class TestNotifications:
    """Subscribers receive one change per mutation."""

    def test_change_sequence(self, store):
        changes = []
        store.subscribe(changes.append)

        entry_id = store.create(make_entry(reason="Court"))
        store.update(entry_id, make_entry(reason="Court", hours_133=1))
        store.delete(entry_id)

        assert [c.type for c in changes] == ["added", "modified", "removed"]
        assert all(c.entry_id == entry_id for c in changes)
        assert changes[0].entry.id == entry_id
        assert changes[1].entry.hours_133 == 1
        assert changes[2].entry is None

    def test_failed_mutations_do_not_notify(self, store):
        changes = []
        store.subscribe(changes.append)
        store.update("deadbeef", make_entry(reason="x"))
        store.delete("deadbeef")
        assert changes == []

    def test_unsubscribe(self, store):
        changes = []
        unsubscribe = store.subscribe(changes.append)
        store.create(make_entry(reason="a"))
        unsubscribe()
        store.create(make_entry(reason="b"))
        assert len(changes) == 1


class TestFileEntryStore:
    """File layout and tolerance of bad files."""

    def test_record_layout(self, file_store):
        entry_id = file_store.create(make_entry(reason="Late arrest", hours_150=2.5, allowance="PA1"))
        record = json.loads((file_store.root / f"{entry_id}.json").read_text())
        assert "created_at" in record["meta"]
        assert record["data"]["reason"] == "Late arrest"
        assert record["data"]["hours_150"] == 2.5
        assert record["data"]["allowance"] == "PA1"
        assert "id" not in record["data"]

    def test_update_keeps_created_at(self, file_store):
        entry_id = file_store.create(make_entry(reason="a"))
        path = file_store.root / f"{entry_id}.json"
        created = json.loads(path.read_text())["meta"]["created_at"]

        file_store.update(entry_id, make_entry(reason="b"))
        meta = json.loads(path.read_text())["meta"]
        assert meta["created_at"] == created
        assert "updated_at" in meta

    def test_list_sorted_by_date(self, file_store):
        file_store.create(make_entry(date(2026, 9, 1), reason="late"))
        file_store.create(make_entry(date(2026, 2, 10), reason="early"))
        file_store.create(make_entry(date(2026, 5, 5), reason="middle"))
        assert [e.reason for e in file_store.list()] == ["early", "middle", "late"]

    def test_list_missing_dir(self, tmp_path):
        assert FileEntryStore(tmp_path / "nope").list() == []

    def test_legacy_keys_load(self, file_store):
        file_store.root.mkdir(parents=True)
        (file_store.root / "legacy01.json").write_text(json.dumps({
            "meta": {},
            "data": {"date": "2026-03-01", "hours133": "4", "paRate": "PA2", "reason": "Old"},
        }))
        entry = file_store.get("legacy01")
        assert entry.hours_133 == 4
        assert entry.allowance is Allowance.PA2

    def test_corrupt_files_skipped(self, file_store):
        good = file_store.create(make_entry(reason="good"))
        (file_store.root / "broken01.json").write_text("{not json")
        (file_store.root / "nodate01.json").write_text(json.dumps({"meta": {}, "data": {"reason": "x"}}))
        assert [e.id for e in file_store.list()] == [good]
        assert file_store.get("broken01") is None

    def test_oversized_hours_load_as_zero(self, file_store):
        """An integer too large for a float does not break listing."""
        file_store.root.mkdir(parents=True)
        (file_store.root / "huge0001.json").write_text(json.dumps({
            "meta": {},
            "data": {"date": "2026-04-01", "hours133": 10**400, "hours150": 2, "reason": "Typo"},
        }))
        entries = file_store.list()
        assert [e.id for e in entries] == ["huge0001"]
        assert entries[0].hours_133 == 0
        assert entries[0].hours_150 == 2


class TestSaveEntry:
    """save_entry create/update/skip behavior."""

    def test_empty_entry_not_saved(self, store):
        assert save_entry(store, make_entry()) is None
        assert store.list() == []

    def test_whitespace_only_entry_not_saved(self, store):
        assert save_entry(store, make_entry(reason="  ", comments="\t")) is None

    def test_creates_when_no_id(self, store):
        entry_id = save_entry(store, make_entry(allowance="PA3"))
        assert store.get(entry_id).allowance is Allowance.PA3

    def test_updates_when_id_set(self, store):
        entry_id = store.create(make_entry(reason="a"))
        result = save_entry(store, make_entry(reason="b").model_copy(update={"id": entry_id}))
        assert result == entry_id
        assert store.get(entry_id).reason == "b"
        assert len(store.list()) == 1

    def test_update_unknown_id_raises(self, store):
        with pytest.raises(EntryNotFoundError) as exc_info:
            save_entry(store, make_entry(reason="x").model_copy(update={"id": "deadbeef"}))
        assert exc_info.value.entry_id == "deadbeef"


class TestMemoryEntryStore:
    """Seeding the in-memory store."""

    def test_seed_keeps_order_and_ids(self):
        store = MemoryEntryStore([
            make_entry(reason="first").model_copy(update={"id": "aaaa0001"}),
            make_entry(reason="second"),
        ])
        listed = store.list()
        assert listed[0].id == "aaaa0001"
        assert listed[1].reason == "second"
        assert listed[1].id


class TestDefaultStore:
    """default_store uses the configured data directory."""

    def test_under_data_dir(self, tmp_path, monkeypatch):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        monkeypatch.setenv("OT_CALC_CONFIG_PATH", str(config_dir))
        (config_dir / "settings.json").write_text(json.dumps({"data_dir": str(tmp_path / "data")}))

        store = default_store()
        assert store.root == tmp_path / "data" / "entries"
