"""Tests for the plain-folder notes store, including a pass over real files."""

import pytest

from action_sync.errors import SourceNotFound
from action_sync.folder_store import FolderDocumentStore
from action_sync.sync_engine import SyncEngine


@pytest.fixture
def store(tmp_path):
    return FolderDocumentStore(tmp_path / "notes")


def test_list_missing_folder_is_empty(store):
    assert store.list_documents("Actions") == []


def test_create_read_write(store):
    store.create_document("Actions", "Groceries", ["Groceries", "#act Milk"])

    assert store.list_documents("Actions") == ["Groceries"]
    assert store.read_text("Actions", "Groceries") == "Groceries\n#act Milk\n"
    assert store.read_raw("Actions", "Groceries") == store.read_text("Actions", "Groceries")

    store.write_raw("Actions", "Groceries", "Groceries\n#done Milk\n")
    assert store.read_text("Actions", "Groceries") == "Groceries\n#done Milk\n"


def test_ignores_other_files(store):
    store.create_document("Actions", "Note", ["x"])
    (store.root / "Actions" / "image.png").write_bytes(b"\x89PNG")
    assert store.list_documents("Actions") == ["Note"]


def test_missing_document(store):
    with pytest.raises(SourceNotFound) as excinfo:
        store.read_text("Actions", "Gone")
    assert excinfo.value.name == "Gone"

    with pytest.raises(SourceNotFound):
        store.write_raw("Actions", "Gone", "x")


def test_full_pass_over_files(store, reminders, settings):
    store.create_document("Actions", "Groceries", ["Groceries", "#act Buy milk", "2% only"])
    engine = SyncEngine(notes=store, reminders=reminders, settings=settings)

    engine.run_once()
    assert store.read_text("Actions", "Action List") == "Action List\n#act Buy milk [Groceries]\n"

    reminders.complete("WORK", "Buy milk")
    engine.run_once()

    assert store.read_text("Actions", "Groceries") == "Groceries\n#done Buy milk\n2% only\n"
    assert store.read_text("Actions", "Action List") == (
        "Action List\n--- Done ---\n#done Buy milk [Groceries]\n"
    )
