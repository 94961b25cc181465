# File: tests/test_config.py
"""Тесты загрузки и валидации конфигурации (`page_dumper.config`)."""
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from page_dumper.config import (
    DEFAULT_SETTLE_TIME,
    MAX_SETTLE_TIME,
    MIN_SETTLE_TIME,
    DumperConfig,
    DumpOptions,
    load_config,
)
from page_dumper.paths import PathPolicy


def test_dump_options_defaults():
    opts = DumpOptions()
    assert opts.settle_time == DEFAULT_SETTLE_TIME
    assert opts.path_policy is PathPolicy.PRESERVE
    assert opts.cross_origin is True


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, DEFAULT_SETTLE_TIME),
        (0, DEFAULT_SETTLE_TIME),
        (100, MIN_SETTLE_TIME),
        (5000, 5000),
        (10**6, MAX_SETTLE_TIME),
        ("3000", 3000),
    ],
)
def test_settle_time_is_clamped(value, expected):
    assert DumpOptions(settle_time=value).settle_time == expected


def test_dump_options_reject_unknown_keys():
    with pytest.raises(ValidationError):
        DumpOptions(bogus=True)


def test_path_policy_from_string():
    assert DumpOptions(path_policy="anonymize").path_policy is PathPolicy.ANONYMIZE
    with pytest.raises(ValidationError):
        DumpOptions(path_policy="random")


def test_load_yaml_config(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text(
        "headless: false\n"
        "navigation_timeout: 5000\n"
        "blocklist_url: null\n"
        "options:\n"
        "  settle_time: 100\n"
        "  cross_origin: false\n"
    )
    cfg = load_config(cfg_file)
    assert cfg.headless is False
    assert cfg.navigation_timeout == 5000
    assert cfg.blocklist_url is None
    assert cfg.options.settle_time == MIN_SETTLE_TIME
    assert cfg.options.cross_origin is False


def test_load_json_config(tmp_path):
    cfg_file = tmp_path / "cfg.json"
    cfg_file.write_text(json.dumps({"user_agent": "Agent/1.0", "request_timeout": 2.5}))
    cfg = load_config(cfg_file)
    assert cfg.user_agent == "Agent/1.0"
    assert cfg.request_timeout == 2.5


def test_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_unsupported_suffix(tmp_path):
    cfg_file = tmp_path / "cfg.toml"
    cfg_file.write_text("headless = true")
    with pytest.raises(ValueError):
        load_config(cfg_file)


def test_invalid_yaml(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("headless: [true\n")
    with pytest.raises(ValueError):
        load_config(cfg_file)


def test_non_mapping_yaml(tmp_path):
    cfg_file = tmp_path / "list.yaml"
    cfg_file.write_text("- a\n- b\n")
    with pytest.raises(TypeError):
        load_config(cfg_file)


def test_invalid_values(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text("navigation_timeout: -1\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_default_config_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == DumperConfig()


def test_default_config_file_is_picked_up(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("configs").mkdir()
    Path("configs/default.yaml").write_text("viewport_width: 800\n")
    assert load_config(None).viewport_width == 800
