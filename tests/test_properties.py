"""
Tests for the runtime properties stores.
"""

import json
import logging
import os

import pytest

from refgraphlib import InMemoryPropertiesStore, JsonPropertiesStore, PropertiesError


class TestInMemoryPropertiesStore:

    def test_get_set_remove(self):
        store = InMemoryPropertiesStore({"PROJECT_CODE": "alpha"})
        assert store.get("PROJECT_CODE") == "alpha"
        assert store.get("MISSING") is None
        assert store.get("MISSING", "fallback") == "fallback"
        store.set("ABORT", "true")
        assert "ABORT" in store
        assert store.remove("ABORT")
        assert not store.remove("ABORT")

    def test_keys_are_sorted(self):
        store = InMemoryPropertiesStore({"b": "1", "a": "2"})
        assert store.keys() == ["a", "b"]

    def test_remove_by_prefix(self):
        store = InMemoryPropertiesStore({
            "ROOT_MODULE_VERSIONS.001": "Domain/a",
            "ROOT_MODULE_VERSIONS.002": "Domain/b",
            "PROJECT_CODE": "alpha",
        })
        assert store.remove_by_prefix("ROOT_MODULE_VERSIONS.") == 2
        assert store.as_dict() == {"PROJECT_CODE": "alpha"}

    def test_replace_prefix(self):
        store = InMemoryPropertiesStore({
            "ROOT_MODULE_VERSIONS.001": "Domain/a",
            "ROOT_MODULE_VERSIONS.002": "Domain/b",
            "PROJECT_CODE": "alpha",
        })
        store.replace_prefix("ROOT_MODULE_VERSIONS.", {"ROOT_MODULE_VERSIONS.001": "Domain/c"})
        assert store.as_dict() == {"ROOT_MODULE_VERSIONS.001": "Domain/c", "PROJECT_CODE": "alpha"}

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("YES", True), ("1", True), (" on ", True),
        ("false", False), ("No", False), ("0", False), ("off", False),
    ])
    def test_get_bool(self, value, expected):
        store = InMemoryPropertiesStore({"FLAG": value})
        assert store.get_bool("FLAG", not expected) is expected

    def test_get_bool_unrecognized(self, caplog):
        store = InMemoryPropertiesStore({"FLAG": "sometimes"})
        with caplog.at_level(logging.WARNING):
            assert store.get_bool("FLAG", True) is True
        assert "non-boolean" in caplog.text
        assert store.get_bool("UNSET") is False


class TestJsonPropertiesStore:

    def test_missing_file_starts_empty(self, tmp_path):
        store = JsonPropertiesStore(tmp_path / "properties.json")
        assert store.keys() == []
        assert not (tmp_path / "properties.json").exists()

    def test_writes_are_persisted(self, tmp_path):
        path = tmp_path / "state" / "properties.json"
        store = JsonPropertiesStore(path)
        store.set("PROJECT_CODE", "alpha")
        store.set("ABORT", "true")
        store.remove("ABORT")

        assert json.loads(path.read_text(encoding="utf-8")) == {"PROJECT_CODE": "alpha"}
        assert JsonPropertiesStore(path).get("PROJECT_CODE") == "alpha"

    def test_no_temporary_files_left(self, tmp_path):
        store = JsonPropertiesStore(tmp_path / "properties.json")
        for index in range(5):
            store.set(f"KEY.{index}", str(index))
        store.remove_by_prefix("KEY.")
        assert [p.name for p in tmp_path.iterdir()] == ["properties.json"]

    def test_remove_by_prefix_persists(self, tmp_path):
        path = tmp_path / "properties.json"
        path.write_text(json.dumps({"MAP_MODULE_VERSION.1": "x", "OTHER": "y"}), encoding="utf-8")
        store = JsonPropertiesStore(path)
        assert store.remove_by_prefix("MAP_MODULE_VERSION.") == 1
        assert json.loads(path.read_text(encoding="utf-8")) == {"OTHER": "y"}

    def test_values_are_strings(self, tmp_path):
        path = tmp_path / "properties.json"
        path.write_text(json.dumps({"COUNT": 3, "FLAG": True}), encoding="utf-8")
        store = JsonPropertiesStore(path)
        assert store.get("COUNT") == "3"
        assert store.get("FLAG") == "True"
        assert store.get_bool("FLAG")

    def test_reload(self, tmp_path):
        path = tmp_path / "properties.json"
        store = JsonPropertiesStore(path)
        store.set("PROJECT_CODE", "alpha")
        path.write_text(json.dumps({"PROJECT_CODE": "beta"}), encoding="utf-8")
        assert store.get("PROJECT_CODE") == "alpha"
        store.reload()
        assert store.get("PROJECT_CODE") == "beta"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "properties.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PropertiesError):
            JsonPropertiesStore(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "properties.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(PropertiesError):
            JsonPropertiesStore(path)

    def test_replace_prefix_is_one_write(self, tmp_path, monkeypatch):
        path = tmp_path / "properties.json"
        store = JsonPropertiesStore(path)
        store.set("KEY.1", "a")
        store.set("OTHER", "x")

        writes = []
        real_replace = os.replace

        def counting_replace(src, dst):
            writes.append(dst)
            real_replace(src, dst)

        monkeypatch.setattr("refgraphlib.properties.os.replace", counting_replace)
        store.replace_prefix("KEY.", {"KEY.1": "b", "KEY.2": "c"})
        assert len(writes) == 1
        assert json.loads(path.read_text(encoding="utf-8")) == {"KEY.1": "b", "KEY.2": "c", "OTHER": "x"}

    def test_failed_write_keeps_values(self, tmp_path, monkeypatch):
        path = tmp_path / "properties.json"
        store = JsonPropertiesStore(path)
        store.set("KEY.1", "a")

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("refgraphlib.properties.os.replace", failing_replace)
        with pytest.raises(PropertiesError):
            store.replace_prefix("KEY.", {"KEY.2": "b"})
        with pytest.raises(PropertiesError):
            store.set("KEY.1", "changed")
        with pytest.raises(PropertiesError):
            store.remove("KEY.1")

        assert store.as_dict() == {"KEY.1": "a"}
        assert json.loads(path.read_text(encoding="utf-8")) == {"KEY.1": "a"}
        assert [p.name for p in tmp_path.iterdir()] == ["properties.json"]
