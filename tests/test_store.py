import json
import threading

import pytest

from models import store
from models.store import COLLECTIONS


def test_init_creates_empty_collections(ctx):
    data_dir = ctx.config["DATA_DIR"]
    for name in COLLECTIONS:
        assert json.loads((data_dir / f"{name}.json").read_text()) == []


def test_write_then_read_preserves_order(ctx):
    records = [{"id": "b"}, {"id": "a"}, {"id": "c"}]
    store.write("users", records)
    assert store.read("users") == records


def test_write_leaves_no_temp_files(ctx):
    store.write("users", [{"id": "x"}])
    leftovers = [p for p in ctx.config["DATA_DIR"].iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_corrupt_file_resets_to_empty(ctx, caplog):
    path = ctx.config["DATA_DIR"] / "users.json"
    path.write_text("{not json", encoding="utf-8")
    assert store.read("users") == []
    assert json.loads(path.read_text()) == []
    assert "resetting" in caplog.text


def test_non_list_file_resets_to_empty(ctx):
    path = ctx.config["DATA_DIR"] / "transactions.json"
    path.write_text('{"id": 1}', encoding="utf-8")
    assert store.read("transactions") == []


def test_transaction_writes_on_clean_exit(ctx):
    with store.transaction("users") as data:
        data["users"].append({"id": "u1"})
    assert store.read("users") == [{"id": "u1"}]


def test_transaction_discards_changes_on_error(ctx):
    store.write("users", [{"id": "u1"}])
    with pytest.raises(RuntimeError):
        with store.transaction("users", "transactions") as data:
            data["users"].append({"id": "u2"})
            data["transactions"].append({"id": "t1"})
            raise RuntimeError("boom")
    assert store.read("users") == [{"id": "u1"}]
    assert store.read("transactions") == []


def test_concurrent_read_modify_write_loses_no_update(app):
    with app.app_context():
        store.write("users", [{"id": "u1", "counter": 0}])

    def bump():
        for _ in range(20):
            with app.app_context():
                with store.transaction("users") as data:
                    data["users"][0]["counter"] += 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    with app.app_context():
        assert store.read("users")[0]["counter"] == 80
