# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from pathlib import Path

import pytest

from config import AppConfig, ConfigSource, LegacyConfigSource, resolve_dispatcher_url
from constants import DISPATCHER_URL_CONFIG_KEY
from errors import ConfigError


# ---------------------------------------------------------------------
# resolve_dispatcher_url
# ---------------------------------------------------------------------

def current(url: str | None) -> ConfigSource:
    return ConfigSource(values={DISPATCHER_URL_CONFIG_KEY: url} if url else {})


def test_resolve_legacy_only():
    assert resolve_dispatcher_url(LegacyConfigSource("http://legacy"), current(None)) == (
        "http://legacy"
    )


def test_resolve_current_only():
    assert resolve_dispatcher_url(LegacyConfigSource(), current("http://current")) == (
        "http://current"
    )


def test_resolve_both_prefers_legacy():
    assert resolve_dispatcher_url(
        LegacyConfigSource("http://legacy"), current("http://current")
    ) == "http://legacy"


def test_resolve_neither_raises():
    with pytest.raises(ConfigError):
        resolve_dispatcher_url(LegacyConfigSource(), current(None))


def test_empty_values_count_as_unset():
    assert resolve_dispatcher_url(LegacyConfigSource(""), current("http://current")) == (
        "http://current"
    )
    with pytest.raises(ConfigError):
        resolve_dispatcher_url(
            LegacyConfigSource(), ConfigSource(values={DISPATCHER_URL_CONFIG_KEY: ""})
        )


# ---------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------

def test_legacy_source_loads_dispatcher_url(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"dispatcherUrl": "http://legacy", "other": 1}))

    assert LegacyConfigSource.load(str(path)) == LegacyConfigSource("http://legacy")


def test_legacy_source_without_path_is_empty():
    assert LegacyConfigSource.load(None) == LegacyConfigSource()


def test_legacy_source_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        LegacyConfigSource.load(str(tmp_path / "missing.json"))


def test_legacy_source_invalid_json_raises(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        LegacyConfigSource.load(str(path))


def test_current_source_from_env():
    source = ConfigSource.from_env({"JIBRI_ANALYSIS_DISPATCHER": "http://current"})
    assert source.get(DISPATCHER_URL_CONFIG_KEY) == "http://current"
    assert ConfigSource.from_env({}).get(DISPATCHER_URL_CONFIG_KEY) is None


# ---------------------------------------------------------------------
# AppConfig
# ---------------------------------------------------------------------

def test_load_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    legacy = tmp_path / "config.json"
    legacy.write_text(json.dumps({"dispatcherUrl": "http://legacy"}))

    monkeypatch.setenv("JIBRI_ID", "jibri-1")
    monkeypatch.setenv("JIBRI_LEGACY_CONFIG", str(legacy))
    monkeypatch.setenv("JIBRI_ANALYSIS_DISPATCHER", "http://current")
    monkeypatch.setenv("JIBRI_WEBHOOK_SUBSCRIBERS", "http://a, http://b,,")
    monkeypatch.setenv("JIBRI_WEBHOOK_TIMEOUT_S", "2.5")

    config = AppConfig.load_from_env()

    assert config.jibri_id == "jibri-1"
    assert config.legacy.dispatcher_url == "http://legacy"
    assert config.current.get(DISPATCHER_URL_CONFIG_KEY) == "http://current"
    assert config.webhook_subscribers == ("http://a", "http://b")
    assert config.webhook_timeout_s == 2.5
