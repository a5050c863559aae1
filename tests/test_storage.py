import json
import os
import sqlite3
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import db
from db import (
    COLLECTIONS,
    AsyncDocumentStore,
    Database,
    DocumentStore,
    EntityValidationError,
    GoalRepository,
    StorageError,
    export_collections,
    import_collections,
)


def goal_doc(**fields) -> dict:
    data = {
        "id": "goal-1",
        "title": "Run 5k",
        "metric_to_track": "run_km",
        "target_value": 5,
        "start_date": "2024-01-01",
        "target_date": "2024-03-01",
    }
    data.update(fields)
    return data


class TestDocumentStore:
    def test_tables_created(self, tmp_path):
        db_file = str(tmp_path / "store.db")
        Database(db_file)
        conn = sqlite3.connect(db_file)
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        conn.close()
        assert set(COLLECTIONS) <= names

    def test_old_table_is_migrated(self, tmp_path):
        db_file = str(tmp_path / "old.db")
        conn = sqlite3.connect(db_file)
        conn.execute("CREATE TABLE goals (id TEXT PRIMARY KEY, data TEXT NOT NULL)")
        conn.execute("INSERT INTO goals VALUES (?, ?)", ("goal-1", json.dumps(goal_doc())))
        conn.commit()
        conn.close()

        store = DocumentStore(db_file)

        assert store.get("goals", "goal-1")["title"] == "Run 5k"
        conn = sqlite3.connect(db_file)
        cols = [row[1] for row in conn.execute("PRAGMA table_info(goals)")]
        version = conn.execute("SELECT version FROM goals").fetchone()[0]
        leftover = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='goals_old'"
        ).fetchone()
        conn.close()
        assert cols == ["id", "data", "created_at", "updated_at", "version"]
        assert version == 1
        assert leftover is None

    def test_crud(self, tmp_path):
        store = DocumentStore(str(tmp_path / "crud.db"))
        store.save("goals", goal_doc())
        store.save("goals", goal_doc(title="Run 10k"))
        assert store.count("goals") == 1
        assert store.get("goals", "goal-1")["title"] == "Run 10k"
        assert store.get("goals", "missing") is None
        assert store.delete("goals", "goal-1") is True
        assert store.delete("goals", "goal-1") is False
        store.save_batch("goals", [goal_doc(id="a"), goal_doc(id="b")])
        assert [d["id"] for d in store.get_all("goals")] == ["a", "b"]
        store.clear("goals")
        assert store.get_all("goals") == []

    def test_unknown_collection(self, tmp_path):
        store = DocumentStore(str(tmp_path / "crud.db"))
        with pytest.raises(ValueError):
            store.get_all("widgets")

    def test_write_failures_raise_and_reads_degrade(self, tmp_path):
        store = DocumentStore(str(tmp_path / "bad.db"))
        with pytest.raises(StorageError):
            store.execute("INSERT INTO nowhere VALUES (1)")
        assert store.fetch_all("SELECT * FROM nowhere") == []

    def test_malformed_documents_are_skipped(self, tmp_path):
        db_file = str(tmp_path / "skip.db")
        store = DocumentStore(db_file)
        store.save("goals", goal_doc(id="good"))
        store.save("goals", {"id": "bad", "title": ""})
        repo = GoalRepository(db_file)
        assert [g.id for g in repo.get_all()] == ["good"]


class TestExportImport:
    def test_round_trip(self, tmp_path):
        source = DocumentStore(str(tmp_path / "source.db"))
        GoalRepository(source.db_path).save(goal_doc())
        payload = export_collections(source)
        data = json.loads(payload)
        assert data["data_version"] == 1
        assert set(data["collections"]) == set(COLLECTIONS)

        target = DocumentStore(str(tmp_path / "target.db"))
        target.save("goals", goal_doc(id="stale"))
        counts = import_collections(target, payload)
        assert counts["goals"] == 1
        assert [d["id"] for d in target.get_all("goals")] == ["goal-1"]

    def test_merge_keeps_existing(self, tmp_path):
        store = DocumentStore(str(tmp_path / "merge.db"))
        store.save("goals", goal_doc(id="kept"))
        payload = json.dumps({"collections": {"goals": [goal_doc(id="new")]}})
        import_collections(store, payload, replace=False)
        assert {d["id"] for d in store.get_all("goals")} == {"kept", "new"}

    def test_invalid_import_writes_nothing(self, tmp_path):
        store = DocumentStore(str(tmp_path / "invalid.db"))
        payload = json.dumps(
            {"collections": {"glossary": [], "goals": [goal_doc(id="ok"), goal_doc(id="bad", target_date="soon")]}}
        )
        with pytest.raises(EntityValidationError):
            import_collections(store, payload)
        assert store.count("goals") == 0
        with pytest.raises(EntityValidationError):
            import_collections(store, "not json")
        with pytest.raises(EntityValidationError):
            import_collections(store, json.dumps({"version": 1}))
        with pytest.raises(ValueError):
            import_collections(store, json.dumps({"collections": {"widgets": []}}))

    def test_failed_import_keeps_previous_data(self, tmp_path, monkeypatch):
        store = DocumentStore(str(tmp_path / "atomic.db"))
        term = {"id": "t1", "term": "Set", "category": "exercise", "plain_definition": "Reps in a row."}
        store.save("glossary", term)
        store.save("goals", goal_doc(id="kept"))
        build_row = db._document_row

        def failing_row(document):
            if document["id"] == "boom":
                raise sqlite3.OperationalError("disk I/O error")
            return build_row(document)

        monkeypatch.setattr(db, "_document_row", failing_row)
        payload = json.dumps(
            {"collections": {"glossary": [], "goals": [goal_doc(id="new"), goal_doc(id="boom")]}}
        )
        with pytest.raises(StorageError):
            import_collections(store, payload)
        assert [d["id"] for d in store.get_all("glossary")] == ["t1"]
        assert [d["id"] for d in store.get_all("goals")] == ["kept"]

    def test_export_selected_collections(self, tmp_path):
        store = DocumentStore(str(tmp_path / "some.db"))
        data = json.loads(export_collections(store, ["goals"]))
        assert list(data["collections"]) == ["goals"]


@pytest.mark.asyncio
async def test_async_document_store(tmp_path):
    store = AsyncDocumentStore(str(tmp_path / "async.db"))
    await store.save("goals", goal_doc())
    assert (await store.get("goals", "goal-1"))["title"] == "Run 5k"
    assert await store.count("goals") == 1
    assert [d["id"] for d in await store.get_all("goals")] == ["goal-1"]
    assert await store.delete("goals", "goal-1") is True
    assert await store.get("goals", "goal-1") is None
    await store.save("goals", goal_doc(id="x"))
    await store.clear("goals")
    assert await store.count("goals") == 0
