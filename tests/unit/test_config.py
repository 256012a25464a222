"""Tests for the configuration module."""

import logging
from pathlib import Path

import pytest

from forestcg.config import ForestCGConfig, configure_logging


class TestForestCGConfig:

    def test_defaults(self):
        cfg = ForestCGConfig()
        assert cfg.epsilon_weights == pytest.approx(1e-6)
        assert cfg.epsilon_pricing == pytest.approx(1e-6)
        assert cfg.epsilon_color_interpolate == pytest.approx(1e-4)
        assert cfg.geometry_cut_scale == 0.5
        assert cfg.geometry_cut_degree == 3
        assert isinstance(cfg.data_path, Path)

    def test_data_path_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FORESTCG_DATA_PATH", str(tmp_path))
        assert ForestCGConfig().data_path == tmp_path

    def test_string_data_path(self, tmp_path):
        cfg = ForestCGConfig(data_path=str(tmp_path))
        assert cfg.data_path == tmp_path

    def test_set_tolerance(self):
        cfg = ForestCGConfig()
        cfg.set_tolerance("pricing", 1e-3)
        assert cfg.epsilon_pricing == 1e-3
        # unknown names fall back to 1e-6
        assert cfg.get_tolerance("unknown") == 1e-6

    def test_dict_round_trip(self, tmp_path):
        cfg = ForestCGConfig(data_path=tmp_path, log_level="DEBUG", geometry_cut_degree=5)
        cfg.set_tolerance("weights", 0.5)
        restored = ForestCGConfig.from_dict(cfg.to_dict())

        assert restored.data_path == tmp_path
        assert restored.log_level == "DEBUG"
        assert restored.geometry_cut_degree == 5
        assert restored.epsilon_weights == 0.5
        assert restored.epsilon_pricing == pytest.approx(1e-6)

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "forestcg.toml"
        cfg = ForestCGConfig(data_path=tmp_path / "data", geometry_cut_scale=0.75)
        cfg.set_tolerance("color_interpolate", 0.001)
        cfg.save(path)

        loaded = ForestCGConfig.load(path)
        assert loaded.data_path == tmp_path / "data"
        assert loaded.geometry_cut_scale == 0.75
        assert loaded.geometry_cut_degree == 3
        assert loaded.epsilon_color_interpolate == pytest.approx(0.001)

    def test_load_missing_file(self, tmp_path):
        cfg = ForestCGConfig.load(tmp_path / "missing.toml")
        assert cfg.geometry_cut_degree == 3


class TestConfigureLogging:

    def test_sets_level(self):
        configure_logging("debug")
        logger = logging.getLogger("forestcg")
        assert logger.level == logging.DEBUG
        assert logger.handlers

        configure_logging("warning")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
