"""Tests for layered settings documents."""

import pytest

from conftest import write_json
from settingsflow.merge import deep_merge, merged_settings


class TestDeepMerge:

    def test_nested_objects_are_merged(self):
        """Test nested objects are merged."""
        target = {"a": 1, "nested": {"x": 1, "y": 2}}

        result = deep_merge(target, {"nested": {"y": 3, "z": 4}}, {"b": 2})

        assert result is target
        assert result == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3, "z": 4}}

    def test_object_replaces_scalar(self):
        """Test object replaces scalar."""
        assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_lists_and_nulls_replace(self):
        """Test lists and nulls replace."""
        result = deep_merge({"a": [1, 2], "b": 1}, {"a": [3], "b": None})

        assert result == {"a": [3], "b": None}

    def test_missing_sources_are_skipped(self):
        """Test missing sources are skipped."""
        assert deep_merge({}, None, {"a": 1}, None) == {"a": 1}

    def test_sources_are_not_modified(self):
        """Test sources are not modified."""
        source = {"nested": {"x": 1}}
        result = deep_merge({}, source)
        result["nested"]["x"] = 2

        assert source == {"nested": {"x": 1}}


class TestMergedSettings:

    @pytest.fixture
    def config(self, tmp_path):
        root = tmp_path / ".config"
        write_json(root / "car.json", {"color": "blue", "options": {"wheels": 4}})
        write_json(root / "jane" / "car.json", {"make": "Ford", "options": {"roof": "sunroof"}})
        write_json(root / "race" / "car.json", {"color": "red"})
        return root

    def test_root_only(self, config):
        """Test root only."""
        assert merged_settings("car", settings_directory=config) == {
            "color": "blue",
            "options": {"wheels": 4},
        }

    def test_later_aspects_win(self, config):
        """Test later aspects win."""
        result = merged_settings("car.json", "jane|race", settings_directory=config)

        assert result == {
            "color": "red",
            "make": "Ford",
            "options": {"wheels": 4, "roof": "sunroof"},
        }

    def test_precedence_list(self, config):
        """Test precedence list."""
        result = merged_settings("car", ["race", "jane"], settings_directory=config)

        assert result["color"] == "red"
        assert result["make"] == "Ford"

    def test_missing_aspect_is_ignored(self, config):
        """Test missing aspect is ignored."""
        result = merged_settings("car", "nobody", settings_directory=config)

        assert result["color"] == "blue"

    def test_environment_overrides_precedence(self, config, monkeypatch):
        """Test environment overrides precedence."""
        monkeypatch.setenv("precedence", "race")

        result = merged_settings("car", "jane", settings_directory=config)

        assert result == {"color": "red", "options": {"wheels": 4}}

    def test_invalid_json_is_ignored(self, config):
        """Test invalid JSON is ignored."""
        (config / "jane" / "car.json").write_text("{not json", encoding="utf-8")

        result = merged_settings("car", "jane", settings_directory=config)

        assert result == {"color": "blue", "options": {"wheels": 4}}

    def test_unknown_document(self, config):
        """Test unknown document."""
        assert merged_settings("plane", "jane", settings_directory=config) == {}
