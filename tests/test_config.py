# Area: Configuration
"""Tests for config.json loading and .env overrides."""
import json

import pytest

from matchsession.config import ClientConfig, load_config, load_env
from matchsession.session.scheduling import RetryPolicy

ENV_KEYS = (
    "MATCH_SERVER_URL",
    "MATCH_SELECTED_VARIANT",
    "LOG_LEVEL",
    "MATCH_MAX_RECONNECT_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        # setenv first so teardown also removes values load_env() wrote
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def _write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.json")
        assert config == ClientConfig()
        assert config.population_start_delay == 2.0
        assert config.readiness_start_delay == 1.0
        assert config.retry == RetryPolicy(max_attempts=3, base_delay=0.5, max_delay=4.0)

    def test_sections_are_read(self, tmp_path):
        path = _write_config(tmp_path, {
            "server": {"url": "http://game:9000", "find_match_event": "findMatch"},
            "match": {"selected_variant": 2, "readiness_start_delay": 0.5},
            "retry": {"max_attempts": 5},
            "log_level": "INFO",
        })
        config = load_config(path)
        assert config.server_url == "http://game:9000"
        assert config.find_match_event == "findMatch"
        assert config.cancel_match_event == "cancel-matchmaking"
        assert config.selected_variant == 2
        assert config.readiness_start_delay == 0.5
        assert config.population_start_delay == 2.0
        assert config.retry.max_attempts == 5
        assert config.retry.base_delay == 0.5
        assert config.log_level == "INFO"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, {"server": {"url": "http://file"}})
        monkeypatch.setenv("MATCH_SERVER_URL", "http://env")
        monkeypatch.setenv("MATCH_SELECTED_VARIANT", "4")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("MATCH_MAX_RECONNECT_ATTEMPTS", "1")
        config = load_config(path)
        assert config.server_url == "http://env"
        assert config.selected_variant == "4"
        assert config.log_level == "DEBUG"
        assert config.retry.max_attempts == 1

    def test_bad_attempts_value(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MATCH_MAX_RECONNECT_ATTEMPTS", "many")
        with pytest.raises(ValueError, match="MATCH_MAX_RECONNECT_ATTEMPTS"):
            load_config(tmp_path / "nope.json")


class TestLoadEnv:
    def test_missing_file(self, tmp_path):
        assert load_env(tmp_path / ".env") == 0

    def test_reads_assignments_and_skips_comments(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("# comment\n\nMATCH_SERVER_URL = http://env:1\nnot a line\n")
        assert load_env(env) == 1
        assert load_config(tmp_path / "nope.json").server_url == "http://env:1"

    def test_existing_environment_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        env = tmp_path / ".env"
        env.write_text("LOG_LEVEL=DEBUG\n")
        load_env(env)
        assert load_config(tmp_path / "nope.json").log_level == "ERROR"
