"""Tests for KeyValueStore persistence"""

import json

import pytest

from userdir.services.key_value_store import KeyValueStore


def test_missing_key_is_none(tmp_path):
    store = KeyValueStore(str(tmp_path / "storage.json"))

    assert store.get("api_token") is None
    assert store.get("api_token", "fallback") == "fallback"


def test_value_survives_new_instance(tmp_path):
    path = tmp_path / "storage.json"
    KeyValueStore(str(path)).set("api_token", "tok-1")

    assert KeyValueStore(str(path)).get("api_token") == "tok-1"
    assert json.loads(path.read_text(encoding="utf-8")) == {"api_token": "tok-1"}


def test_delete(tmp_path):
    store = KeyValueStore(str(tmp_path / "storage.json"))
    store.set("api_token", "tok")

    assert store.delete("api_token") is True
    assert store.delete("api_token") is False
    assert store.get("api_token") is None


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    store = KeyValueStore(str(path))

    assert store.get("api_token") is None
    store.set("api_token", "tok")
    assert store.get("api_token") == "tok"


def test_creates_parent_directory(tmp_path):
    store = KeyValueStore(str(tmp_path / "nested" / "dir" / "storage.json"))
    store.set("k", 1)

    assert (tmp_path / "nested" / "dir" / "storage.json").exists()
    assert not list((tmp_path / "nested" / "dir").glob("tmp*"))


def test_unserializable_value_leaves_no_temp_file(tmp_path):
    path = tmp_path / "storage.json"
    store = KeyValueStore(str(path))
    store.set("api_token", "tok")

    with pytest.raises(TypeError):
        store.set("photo", object())

    assert not list(tmp_path.glob("tmp*"))
    assert store.get("api_token") == "tok"
