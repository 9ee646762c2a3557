"""Tests for the JSON file store."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from meetbook.storage.store import JsonFileStore


@pytest.fixture
def store(tmp_path: Path) -> JsonFileStore:
    return JsonFileStore(tmp_path / "data")


class TestLoad:
    def test_creates_root(self, store: JsonFileStore):
        assert store.root.is_dir()

    def test_missing_key_returns_default(self, store: JsonFileStore):
        assert store.load("contacts", []) == []
        assert store.load("theme", "light") == "light"

    def test_corrupt_file_returns_default(self, store: JsonFileStore):
        (store.root / "contacts.json").write_text("{not json", encoding="utf-8")
        assert store.load("contacts", []) == []

    def test_returns_copies(self, store: JsonFileStore):
        store.save("contacts", [{"id": "a"}])
        loaded = store.load("contacts", [])
        loaded.append({"id": "b"})
        assert store.load("contacts", []) == [{"id": "a"}]

    def test_survives_reload(self, store: JsonFileStore):
        store.save("meetings", [{"id": "m"}])
        reopened = JsonFileStore(store.root)
        assert reopened.load("meetings", []) == [{"id": "m"}]


class TestSave:
    def test_written_immediately(self, store: JsonFileStore):
        store.save("theme", "dark")
        assert json.loads((store.root / "theme.json").read_text(encoding="utf-8")) == "dark"

    def test_save_many(self, store: JsonFileStore):
        store.save_many({"contacts": [{"id": "c"}], "meetings": []})
        assert store.load("contacts") == [{"id": "c"}]
        assert store.load("meetings") == []
        assert not list(store.root.glob(".*.tmp"))

    def test_unserializable_value_leaves_state(self, store: JsonFileStore):
        store.save_many({"contacts": [{"id": "c"}], "meetings": [{"id": "m"}]})
        with pytest.raises(TypeError):
            store.save_many({"contacts": [], "meetings": [object()]})
        assert store.load("contacts") == [{"id": "c"}]
        assert store.load("meetings") == [{"id": "m"}]
        assert JsonFileStore(store.root).load("contacts") == [{"id": "c"}]
        assert not list(store.root.glob(".*.tmp"))

    def test_write_failure_leaves_state(self, store: JsonFileStore):
        store.save_many({"contacts": [{"id": "c"}], "meetings": [{"id": "m"}]})
        real_write = Path.write_text
        calls = []

        def flaky_write(self, *args, **kwargs):
            calls.append(self)
            if len(calls) == 2:
                raise OSError("disk full")
            return real_write(self, *args, **kwargs)

        with patch.object(Path, "write_text", flaky_write):
            with pytest.raises(OSError):
                store.save_many({"contacts": [], "meetings": []})

        assert store.load("contacts") == [{"id": "c"}]
        assert JsonFileStore(store.root).load("meetings") == [{"id": "m"}]
        assert not list(store.root.glob(".*.tmp"))

    def test_swap_failure_restores_earlier_keys(self, store: JsonFileStore):
        store.save_many({"contacts": [{"id": "c"}], "meetings": [{"id": "m"}]})
        real_replace = os.replace
        calls = []

        def flaky_replace(src, dst):
            calls.append(dst)
            if len(calls) == 2:
                raise OSError("device busy")
            return real_replace(src, dst)

        with patch("meetbook.storage.store.os.replace", flaky_replace):
            with pytest.raises(OSError):
                store.save_many({"contacts": [], "meetings": []})

        assert store.load("contacts") == [{"id": "c"}]
        reopened = JsonFileStore(store.root)
        assert reopened.load("contacts") == [{"id": "c"}]
        assert reopened.load("meetings") == [{"id": "m"}]
        assert not list(store.root.glob(".*.tmp"))
