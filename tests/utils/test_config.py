"""Unit tests for configuration loading and rebuild settings."""

import logging

import pytest

from src.roadnet.errors import ConfigurationError
from src.roadnet.network import Network
from src.roadnet.settings import RebuildSettings
from src.utils.config import DEFAULT_CONFIG_PATH, load_config
from src.utils.logging import get_logger, set_level


class TestLoadConfig:
    """Test suite for load_config."""

    def test_missing_file(self, tmp_path):
        assert load_config(str(tmp_path / "missing.yaml")) == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_default_config(self):
        config = load_config(str(DEFAULT_CONFIG_PATH))
        assert {"typologies", "marker_templates", "rebuild"} <= set(config)


class TestRebuildSettings:
    """Test suite for RebuildSettings."""

    def test_defaults(self):
        settings = RebuildSettings.from_mapping(None)
        assert settings.snap_tolerance == 0.0001
        assert settings.error_policy == "abort"
        assert settings.default_max_speed == 70.0

    def test_from_mapping(self):
        settings = RebuildSettings.from_mapping({"error_policy": "isolate", "snap_tolerance": 0.01})
        assert settings.error_policy == "isolate"
        assert settings.snap_tolerance == 0.01

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown rebuild settings"):
            RebuildSettings.from_mapping({"tolerance": 1})

    def test_unknown_policy(self):
        with pytest.raises(ConfigurationError):
            RebuildSettings(error_policy="ignore")

    def test_negative_tolerance(self):
        with pytest.raises(ConfigurationError):
            RebuildSettings(snap_tolerance=-1.0)


class TestNetworkFromConfig:
    """Test suite for Network.from_config_file."""

    def test_bundled_config(self):
        network = Network.from_config_file()
        assert network.typologies.lookup("Road").drivable
        assert network.marker_templates.lookup("|").width == pytest.approx(0.15)
        assert network.settings.error_policy == "abort"

    def test_custom_config(self, tmp_path):
        path = tmp_path / "network.yaml"
        path.write_text(
            "typologies:\n"
            "  - name: lane\n"
            "    drivable: true\n"
            "marker_templates:\n"
            "  - type: '|'\n"
            "    width: 0.2\n"
            "rebuild:\n"
            "  error_policy: isolate\n"
            "  default_max_speed: 50\n"
        )
        network = Network.from_config_file(path)
        assert "lane" in network.typologies
        assert network.settings.error_policy == "isolate"
        a = network.add_node("a", 0, 0.0, 0.0)
        b = network.add_node("b", 1, 10.0, 0.0)
        assert network.add_link("ab", a.node_id, b.node_id).max_speed == 50.0

    def test_missing_config(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Network.from_config_file(tmp_path / "missing.yaml")


class TestLogging:
    """Test suite for the logging helpers."""

    def test_loggers_share_root(self):
        logger = get_logger("src.roadnet.link")
        assert logger.name == "roadnet.link"
        assert logger.parent.name == "roadnet"

    def test_set_level(self):
        root = logging.getLogger("roadnet")
        previous = root.level
        try:
            set_level("WARNING")
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)
