"""Tests for rollinglog/config.py — Config defaults, YAML and env loading."""

import dataclasses
import os
import sys
import tempfile

import pytest

from rollinglog.config import (
    Config,
    _parse_bool,
    default_log_path,
    discard_error,
    load_config,
    load_yaml_config,
)

ENV_VARS = ["LOG_FILE", "MAX_BYTES", "MAX_BACKUPS", "MAX_AGE_DAYS", "COMPRESS", "LOCALTIME"]


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# ── Config defaults ─────────────────────────────────────────────────

class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.max_bytes == 0
        assert cfg.max_backups == 0
        assert cfg.max_age_days == 0
        assert cfg.compress is False
        assert cfg.localtime is False
        assert cfg.error_handler is discard_error

    def test_default_filename(self):
        expected = os.path.join(
            tempfile.gettempdir(), os.path.basename(sys.argv[0]) + "-rollinglog.log"
        )
        assert default_log_path() == expected
        assert Config().filename == expected

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.max_bytes = 10

    def test_none_error_handler_falls_back_to_discard(self):
        assert Config(error_handler=None).error_handler is discard_error

    def test_custom_error_handler(self):
        seen = []
        cfg = Config(error_handler=seen.append)
        cfg.error_handler(RuntimeError("x"))
        assert len(seen) == 1

    @pytest.mark.parametrize("name", ["max_bytes", "max_backups", "max_age_days"])
    def test_negative_limits_rejected(self, name):
        with pytest.raises(ValueError):
            Config(**{name: -1})


class TestParseBool:
    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", " YES ", True])
    def test_truthy(self, value):
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "", "random", False])
    def test_falsy(self, value):
        assert _parse_bool(value) is False


# ── YAML loading ────────────────────────────────────────────────────

class TestLoadYamlConfig:
    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "missing.yml")) == {}

    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("filename: /var/log/app.log\nmax_bytes: 1024\ncompress: true\n")
        assert load_yaml_config(str(path)) == {
            "filename": "/var/log/app.log",
            "max_bytes": 1024,
            "compress": True,
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_yaml_config(str(path)) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))


# ── load_config layering ────────────────────────────────────────────

class TestLoadConfig:
    def test_defaults_without_env(self, clean_env):
        cfg = load_config()
        assert cfg == Config()

    def test_yaml_values(self, clean_env):
        cfg = load_config({"filename": "app.log", "max_backups": 3, "localtime": "yes"})
        assert cfg.filename == "app.log"
        assert cfg.max_backups == 3
        assert cfg.localtime is True

    def test_env_values(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_FILE", "/tmp/x.log")
        monkeypatch.setenv("MAX_BYTES", "2048")
        monkeypatch.setenv("MAX_BACKUPS", "4")
        monkeypatch.setenv("MAX_AGE_DAYS", "7")
        monkeypatch.setenv("COMPRESS", "true")
        monkeypatch.setenv("LOCALTIME", "1")
        cfg = load_config()
        assert cfg.filename == "/tmp/x.log"
        assert cfg.max_bytes == 2048
        assert cfg.max_backups == 4
        assert cfg.max_age_days == 7
        assert cfg.compress is True
        assert cfg.localtime is True

    def test_env_overrides_yaml(self, clean_env, monkeypatch):
        monkeypatch.setenv("MAX_BYTES", "500")
        cfg = load_config({"max_bytes": 100, "max_backups": 2})
        assert cfg.max_bytes == 500
        assert cfg.max_backups == 2

    def test_explicit_env_mapping(self):
        cfg = load_config(env={"MAX_AGE_DAYS": "3"})
        assert cfg.max_age_days == 3

    def test_unknown_yaml_keys_ignored(self, clean_env):
        cfg = load_config({"max_bytes": 10, "rotation_interval": 60})
        assert cfg.max_bytes == 10

    def test_error_handler_passed_through(self, clean_env):
        seen = []
        cfg = load_config(error_handler=seen.append)
        assert cfg.error_handler == seen.append

    def test_invalid_number(self, clean_env, monkeypatch):
        monkeypatch.setenv("MAX_BYTES", "lots")
        with pytest.raises(ValueError):
            load_config()
