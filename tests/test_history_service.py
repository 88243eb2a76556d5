"""GenerationHistoryService and StorageService tests."""

from __future__ import annotations

import json
import os

import pytest

from adgenius.services.history_service import (
    HISTORY_STORAGE_KEY,
    GenerationHistoryService,
    GenerationRecord,
    GenerationStatus,
)
from adgenius.services.storage_service import StorageService


def build_history(tmp_path) -> GenerationHistoryService:
    storage = StorageService(tmp_path / "data", tmp_path / "outputs")
    return GenerationHistoryService(storage)


def make_record(index: int) -> GenerationRecord:
    return GenerationRecord(
        id=str(1_700_000_000_000 + index),
        timestamp=1_700_000_000_000 + index,
        product_name=f"Produk {index}",
        prompt=f"prompt {index}",
        video_url=f"outputs/{index}.mp4",
    )


@pytest.mark.parametrize("inserts", [1, 9, 10, 11, 25])
def test_history_keeps_most_recent_ten_in_reverse_order(tmp_path, inserts):
    history = build_history(tmp_path)

    for index in range(inserts):
        entries = history.record(make_record(index))
        assert len(entries) <= 10

    expected = [str(1_700_000_000_000 + index) for index in reversed(range(inserts))][:10]
    assert [item.id for item in history.list()] == expected


def test_record_persists_and_load_restores(tmp_path):
    history = build_history(tmp_path)
    record = GenerationRecord.create(
        product_name="Kopi Senja",
        prompt="slow pour",
        reference_images=["data:image/png;base64,AAAA"],
        video_url="outputs/a.mp4",
    )
    history.record(record)

    reloaded = build_history(tmp_path)
    entries = reloaded.load()

    assert len(entries) == 1
    assert entries[0] == record
    assert entries[0].status == GenerationStatus.COMPLETED
    stored = json.loads((tmp_path / "data" / f"{HISTORY_STORAGE_KEY}.json").read_text(encoding="utf-8"))
    assert stored[0]["status"] == "completed"


def test_create_snapshots_lists_and_names_unnamed_products():
    images = ["data:image/png;base64,AAAA"]
    record = GenerationRecord.create(product_name="  ", prompt="p", talent_images=images)
    images.append("later")

    assert record.product_name == "Tanpa Nama"
    assert record.talent_images == ["data:image/png;base64,AAAA"]
    assert record.id.startswith(f"{record.timestamp}-")


def test_create_gives_distinct_ids_within_one_millisecond(monkeypatch):
    monkeypatch.setattr("adgenius.services.history_service.time.time", lambda: 1_700_000_000.0)

    first = GenerationRecord.create(product_name="A", prompt="p")
    second = GenerationRecord.create(product_name="B", prompt="p")

    assert first.timestamp == second.timestamp
    assert first.id != second.id


@pytest.mark.parametrize(
    "payload",
    [
        b"{not json",
        b'{"a": 1}',
        b'[{"prompt": "missing id"}]',
        b'[{"id": "\xff\xfe"}]',
        b"[" * 100_000,
    ],
)
def test_corrupt_history_loads_as_empty(tmp_path, payload):
    storage = StorageService(tmp_path / "data", tmp_path / "outputs")
    path = tmp_path / "data" / f"{HISTORY_STORAGE_KEY}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)

    history = GenerationHistoryService(storage)

    assert history.load() == []
    history.record(make_record(1))
    assert len(history.load()) == 1


def test_missing_history_is_empty(tmp_path):
    assert build_history(tmp_path).load() == []


def test_get_finds_entry_by_id(tmp_path):
    history = build_history(tmp_path)
    history.record(make_record(1))
    history.record(make_record(2))

    assert history.get(str(1_700_000_000_001)).prompt == "prompt 1"
    assert history.get("unknown") is None
    assert len(history.list(limit=1)) == 1


def test_storage_rejects_unsafe_keys(tmp_path):
    storage = StorageService(tmp_path / "data", tmp_path / "outputs")
    with pytest.raises(ValueError):
        storage.set_item("../escape", "x")


def test_cleanup_keeps_newest_videos(tmp_path):
    storage = StorageService(tmp_path / "data", tmp_path / "outputs")
    paths = [storage.save_video(b"x", {"product_name": "Kopi"}) for _ in range(4)]
    for age, path in enumerate(reversed(paths)):
        os.utime(path, (1_000_000 - age * 10, 1_000_000 - age * 10))

    removed = storage.cleanup(max_items=2)

    assert sorted(removed) == sorted(paths[:2])
    assert all(path.exists() for path in paths[2:])


def test_failed_write_leaves_history_unchanged(tmp_path, monkeypatch):
    history = build_history(tmp_path)
    history.record(make_record(1))

    def broken_write(key, value):
        raise OSError("disk full")

    monkeypatch.setattr(history.storage, "set_item", broken_write)

    with pytest.raises(OSError):
        history.record(make_record(2))
    assert [entry.id for entry in history.list()] == [str(1_700_000_000_001)]
    assert [entry.id for entry in history.load()] == [str(1_700_000_000_001)]
