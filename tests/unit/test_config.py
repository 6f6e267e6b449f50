"""
Unit tests for config module.
"""

import pytest
import yaml

from aerogrid import config
from aerogrid.config import OverlayConfig, get_overlay_config
from aerogrid.settings import OVERLAY


class TestLoadConfig:
    """Test config loading functionality."""

    def test_returns_empty_dict_when_no_file(self, tmp_path, monkeypatch):
        """Should return empty dict when config file doesn't exist."""
        monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "nonexistent.yaml")
        assert config.load_config() == {}

    def test_loads_valid_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("overlay:\n  cache_ttl: 20\n")
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)

        assert config.load_config() == {"overlay": {"cache_ttl": 20}}

    def test_returns_empty_dict_on_invalid_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)

        assert config.load_config() == {}

    def test_returns_empty_dict_when_yaml_is_not_dict(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- item1\n- item2\n")
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)

        assert config.load_config() == {}

    def test_returns_empty_dict_when_yaml_is_null(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)

        assert config.load_config() == {}


class TestSaveConfig:
    """Test config saving functionality."""

    def test_saves_config_to_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "sub" / "config.yaml"
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)

        config.save_config({"overlay": {"push_port": 19000}, "other": "kept"})

        assert yaml.safe_load(config_file.read_text()) == {
            "overlay": {"push_port": 19000},
            "other": "kept",
        }

    def test_round_trips_through_load(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.yaml")
        config.save_config({"overlay": {"windows_query_mode": "per-workspace"}})
        assert get_overlay_config().windows_query_mode == "per-workspace"


class TestGetOverlayConfig:
    """Test merging the overlay section over defaults."""

    def test_defaults(self):
        cfg = get_overlay_config({})
        assert cfg == OverlayConfig()
        assert cfg.cache_ttl == OVERLAY.cache_ttl == 10.0
        assert cfg.push_port == 18901
        assert cfg.refresh_on_demand_only is True
        assert len(cfg.workspace_names) == 40

    def test_overrides_applied(self):
        cfg = get_overlay_config({"overlay": {
            "cache_ttl": 30,
            "push_port": 19000,
            "refresh_on_demand_only": False,
            "workspace_file": "/tmp/ws",
            "workspace_names": ["1", 2, "q"],
        }})
        assert cfg.cache_ttl == 30.0
        assert isinstance(cfg.cache_ttl, float)
        assert cfg.push_port == 19000
        assert cfg.refresh_on_demand_only is False
        assert cfg.workspace_file == "/tmp/ws"
        assert cfg.workspace_names == ["1", "2", "q"]

    def test_unknown_keys_ignored(self):
        cfg = get_overlay_config({"overlay": {"colour": "red"}})
        assert cfg == OverlayConfig()

    @pytest.mark.parametrize("key,value", [
        ("cache_ttl", "ten"),
        ("cache_ttl", -1),
        ("cache_ttl", True),
        ("push_port", 70000),
        ("push_port", "18901"),
        ("push_enabled", "yes"),
        ("windows_query_mode", "sometimes"),
        ("workspace_names", []),
        ("workspace_file", ""),
    ])
    def test_wrong_types_ignored(self, key, value):
        cfg = get_overlay_config({"overlay": {key: value}})
        assert getattr(cfg, key) == getattr(OverlayConfig(), key)

    def test_non_mapping_section_ignored(self):
        assert get_overlay_config({"overlay": "fast"}) == OverlayConfig()

    def test_reads_file_when_no_data_given(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("overlay:\n  poll_interval: 15\n")
        monkeypatch.setattr(config, "CONFIG_PATH", config_file)
        assert get_overlay_config().poll_interval == 15.0


class TestDefaultTemplate:
    """The shipped template must load cleanly."""

    def test_template_parses_to_defaults(self):
        data = yaml.safe_load(config.DEFAULT_CONFIG_TEMPLATE)
        cfg = get_overlay_config(data)
        assert cfg == OverlayConfig()
