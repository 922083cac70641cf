# -*- coding: utf-8 -*-
"""
Tests for logcompass.core.config_loader
"""

import os

import pytest

from logcompass.core.config_loader import (
    LogCompassConfig, BatchOptions, load_config, reset_config,
    DEFAULT_SENSOR_ID_CEILING,
)

SAMPLE_INI = """
[batch]
source_dirs = /data/a, ${LC_TEST_SOURCE} ,
output_dir = /data/out
family = MS110
recursive = no
clean = yes
keep_original = true

[identity]
sensor_id_ceiling = 120
bad_number = twelve
"""


@pytest.fixture
def ini_path(tmp_path):
    path = tmp_path / "logcompass.ini"
    path.write_text(SAMPLE_INI, encoding="utf-8")
    return str(path)


@pytest.fixture
def config(ini_path, monkeypatch):
    monkeypatch.setenv("LC_TEST_SOURCE", "/data/b")
    cfg = LogCompassConfig(ini_path)
    cfg.load()
    return cfg


class TestLogCompassConfig:

    def test_loaded(self, config, ini_path):
        assert config.is_loaded()
        assert config.path == ini_path

    def test_get_with_fallback(self, config):
        assert config.get("batch", "output_dir") == "/data/out"
        assert config.get("batch", "missing", fallback="x") == "x"
        assert config.get("nosection", "key") is None

    def test_env_interpolation(self, config):
        assert config.get_list("batch", "source_dirs") == ["/data/a", "/data/b"]

    def test_unset_env_reads_as_unconfigured(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LC_TEST_UNSET", raising=False)
        path = tmp_path / "env.ini"
        path.write_text("[batch]\noutput_dir = ${LC_TEST_UNSET}\nsource_dirs = /a, ${LC_TEST_UNSET}\n",
                        encoding="utf-8")
        cfg = LogCompassConfig(str(path))
        cfg.load()
        assert cfg.get("batch", "output_dir") is None
        assert cfg.get("batch", "output_dir", fallback="/tmp/x") == "/tmp/x"
        assert cfg.get_list("batch", "source_dirs") == []
        opts = BatchOptions.from_config(cfg)
        assert opts.output_dir is None
        assert opts.source_dirs == []

    def test_typed_getters(self, config):
        assert config.get_int("identity", "sensor_id_ceiling") == 120
        assert config.get_int("identity", "bad_number", fallback=7) == 7
        assert config.get_float("identity", "sensor_id_ceiling") == 120.0
        assert config.get_bool("batch", "recursive", fallback=True) is False
        assert config.get_bool("batch", "keep_original") is True
        assert config.get_bool("batch", "absent", fallback=True) is True

    def test_sections_and_dump(self, config):
        assert config.sections() == ["batch", "identity"]
        assert config.items("nosection") == []
        dump = config.dump()
        assert dump[0].startswith("---")
        assert "[identity]" in dump

    def test_missing_file_means_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr("logcompass.core.config_loader.CONFIG_SEARCH_PATHS", [])
        cfg = LogCompassConfig(str(tmp_path / "nope.ini"))
        cfg.load()
        assert not cfg.is_loaded()
        assert cfg.dump() == ["Config not loaded (defaults in effect)"]


class TestBatchOptions:

    def test_from_config(self, config):
        opts = BatchOptions.from_config(config)
        assert opts.source_dirs == ["/data/a", "/data/b"]
        assert opts.output_dir == "/data/out"
        assert opts.family == "MS110"
        assert opts.recursive is False
        assert opts.clean is True
        assert opts.keep_original is True
        assert opts.verbose is False
        assert opts.sensor_id_ceiling == 120

    def test_overrides_win(self, config):
        opts = BatchOptions.from_config(config, output_dir="/elsewhere", recursive=True,
                                        family=None)
        assert opts.output_dir == "/elsewhere"
        assert opts.recursive is True
        assert opts.family == "MS110"

    def test_unknown_override(self, config):
        with pytest.raises(TypeError):
            BatchOptions.from_config(config, colour="blue")

    def test_defaults(self):
        opts = BatchOptions()
        assert opts.as_dict()["sensor_id_ceiling"] == DEFAULT_SENSOR_ID_CEILING
        assert opts.recursive and opts.clean and not opts.keep_original


class TestLoadConfig:

    def test_cached(self, ini_path):
        reset_config()
        try:
            first = load_config(ini_path)
            assert load_config() is first
        finally:
            reset_config()


def test_shipped_config_parses():
    path = os.path.join(os.path.dirname(__file__), os.pardir, "config", "logcompass.ini")
    cfg = LogCompassConfig(path)
    cfg.load()
    assert cfg.get("batch", "family") == "DB110"
    assert cfg.get_int("identity", "sensor_id_ceiling") == 150
