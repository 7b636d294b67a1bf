import pytest

from boussole.errors import StorageError
from boussole.services.storage import MemoryStorage, SQLiteStorage, create_storage


def test_sqlite_storage_persists_across_instances(tmp_path):
    db_path = str(tmp_path / "nested" / "cache.db")

    SQLiteStorage(db_path).set_item("ai_cache_inv_1_2", '{"data": "x", "timestamp": 1}')
    reopened = SQLiteStorage(db_path)

    assert reopened.get_item("ai_cache_inv_1_2") == '{"data": "x", "timestamp": 1}'
    assert reopened.keys() == ["ai_cache_inv_1_2"]


def test_sqlite_storage_overwrite_and_remove(tmp_path):
    storage = SQLiteStorage(str(tmp_path / "cache.db"))
    storage.set_item("k", "one")
    storage.set_item("k", "two")

    assert storage.get_item("k") == "two"

    storage.remove_item("k")
    storage.remove_item("k")

    assert storage.get_item("k") is None


def test_sqlite_storage_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    storage = SQLiteStorage(str(blocker / "cache.db"))

    with pytest.raises(StorageError):
        storage.set_item("k", "v")


def test_create_storage_picks_backend(tmp_path):
    assert isinstance(create_storage(""), MemoryStorage)
    assert isinstance(create_storage(":memory:"), MemoryStorage)
    assert isinstance(create_storage(str(tmp_path / "c.db")), SQLiteStorage)
