"""Tests for the flat-file JSON backend."""

import json
import uuid

import pytest

from entitystore import JSONFileBackend, MissingStorageContextError, StorageError
from entitystore.core import resolve_storage_context

from tests.models import Note, Orphan, Player

def bound(backend, entity_class):
    backend.bind(entity_class, resolve_storage_context(entity_class))
    backend.startup()
    return backend

def test_startup_creates_folders(tmp_path):
    backend = bound(JSONFileBackend(tmp_path / "root" / "db"), Note)

    assert (tmp_path / "root" / "db" / "notes").is_dir()
    # Idempotent
    backend.startup()
    assert backend.is_started

def test_startup_without_metadata_fails(tmp_path):
    backend = JSONFileBackend(tmp_path)
    backend.bind(Orphan, None)

    with pytest.raises(MissingStorageContextError):
        backend.startup()

def test_save_writes_one_file_per_entity(json_backend):
    backend = bound(json_backend, Note)
    backend.save(Note(key="n1", body="first", tags=["x"]))

    path = backend.data_folder / "n1.json"
    assert path.is_file()
    assert json.loads(path.read_text()) == {"key": "n1", "body": "first", "tags": ["x"]}

def test_round_trip_with_uuid_identifier(json_backend, make_player):
    backend = bound(json_backend, Player)
    player = make_player("bob", score=12)

    backend.save(player)

    assert (backend.data_folder / f"{player.uuid}.json").is_file()
    loaded = backend.get(player.uuid)
    assert loaded == player
    assert loaded is not player

def test_private_attributes_are_not_persisted(json_backend, make_player):
    backend = bound(json_backend, Player)
    player = make_player()
    player._session_token = "secret"

    backend.save(player)

    text = (backend.data_folder / f"{player.uuid}.json").read_text()
    assert "secret" not in text
    assert backend.get(player.uuid)._session_token == ""

def test_save_overwrites(json_backend):
    backend = bound(json_backend, Note)
    backend.save(Note(key="n1", body="first"))
    backend.save(Note(key="n1", body="second"))

    assert backend.get("n1").body == "second"
    assert len(list(backend.data_folder.iterdir())) == 1

def test_get_missing_returns_none(json_backend):
    backend = bound(json_backend, Note)
    assert backend.get("missing") is None

def test_get_unreadable_returns_none(json_backend):
    backend = bound(json_backend, Note)
    (backend.data_folder / "broken.json").write_text("{not json")

    assert backend.get("broken") is None

def test_get_all_skips_bad_and_foreign_files(json_backend):
    backend = bound(json_backend, Note)
    backend.save(Note(key="a"))
    backend.save(Note(key="b"))
    (backend.data_folder / "broken.json").write_text("{not json")
    (backend.data_folder / "wrong.json").write_text(json.dumps({"body": "no key"}))
    (backend.data_folder / "readme.txt").write_text("ignored")

    assert sorted(n.key for n in backend.get_all()) == ["a", "b"]

def test_get_all_without_folder_is_empty(tmp_path):
    backend = JSONFileBackend(tmp_path / "never-created")
    backend.bind(Note, resolve_storage_context(Note))

    assert backend.get_all() == []

def test_delete_is_idempotent(json_backend):
    backend = bound(json_backend, Note)
    backend.save(Note(key="a"))

    backend.delete("a")
    backend.delete("a")

    assert backend.get("a") is None

def test_identifier_with_path_separator_is_rejected_on_write(json_backend):
    backend = bound(json_backend, Note)

    with pytest.raises(StorageError):
        backend.save(Note(key="../escape"))
    with pytest.raises(StorageError):
        backend.delete("../escape")

def test_encode_identifier_uses_canonical_uuid(json_backend):
    value = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert json_backend.encode_identifier(value) == "12345678-1234-5678-1234-567812345678"
    assert json_backend.encode_identifier(7) == 7

def test_failed_write_keeps_previous_version(json_backend, monkeypatch):
    backend = bound(json_backend, Note)
    backend.save(Note(key="a", body="safe"))

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("entitystore.persistence.backends.json_file.os.replace", boom)
    with pytest.raises(OSError):
        backend.save(Note(key="a", body="lost"))

    assert backend.get("a").body == "safe"
    assert [p.name for p in backend.data_folder.iterdir()] == ["a.json"]

def test_non_utf8_file_is_skipped_by_get_all(json_backend):
    backend = bound(json_backend, Note)
    backend.save(Note(key="a"))
    (backend.data_folder / "bad.json").write_bytes(b"\xff\xfe\x00garbage")

    assert [n.key for n in backend.get_all()] == ["a"]

def test_non_utf8_file_reads_as_missing(json_backend):
    backend = bound(json_backend, Note)
    (backend.data_folder / "bad.json").write_bytes(b"\xff\xfe\x00garbage")

    assert backend.get("bad") is None

def test_get_with_unusable_file_name_is_missing(json_backend):
    backend = bound(json_backend, Note)

    assert backend.get("a/b") is None
    assert backend.get("..") is None

def test_identifier_of_reads_bound_field(json_backend):
    backend = bound(json_backend, Note)
    assert backend.identifier_of(Note(key="n9")) == "n9"
