"""Tests for agent configuration."""

import unittest

import pytest

from telemetry_agent.config import (
    DEFAULT_CHECK_INTERVAL,
    AgentConfig,
    load_config,
)
from telemetry_agent.exceptions import ConfigurationError
from telemetry_agent.platform_client import DEFAULT_PLATFORM_URL


class TestAgentConfigValidation(unittest.TestCase):
    """Tests for AgentConfig.validate."""

    def test_defaults_are_valid(self):
        config = AgentConfig()
        config.validate()
        self.assertEqual(config.url, DEFAULT_PLATFORM_URL)
        self.assertEqual(config.check_interval, DEFAULT_CHECK_INTERVAL)

    def test_log_level_is_normalized(self):
        config = AgentConfig(log_level="debug")
        config.validate()
        self.assertEqual(config.log_level, "DEBUG")

    def test_invalid_log_level(self):
        with self.assertRaises(ConfigurationError):
            AgentConfig(log_level="chatty").validate()

    def test_empty_url(self):
        with self.assertRaises(ConfigurationError) as ctx:
            AgentConfig(url="").validate()
        self.assertIn("PERCONA_TELEMETRY_URL", str(ctx.exception))

    def test_url_without_scheme(self):
        with self.assertRaises(ConfigurationError):
            AgentConfig(url="check.percona.com/v1/telemetry/GenericReport").validate()

    def test_url_without_host(self):
        with self.assertRaises(ConfigurationError):
            AgentConfig(url="https://").validate()

    def test_non_positive_intervals(self):
        with self.assertRaises(ConfigurationError):
            AgentConfig(check_interval=0).validate()
        with self.assertRaises(ConfigurationError):
            AgentConfig(command_timeout=0).validate()
        with self.assertRaises(ConfigurationError):
            AgentConfig(resend_interval=-1).validate()

    def test_zero_resend_interval_is_allowed(self):
        AgentConfig(resend_interval=0).validate()

    def test_empty_root_path(self):
        with self.assertRaises(ConfigurationError) as ctx:
            AgentConfig(root_path="").validate()
        self.assertIn("PERCONA_TELEMETRY_ROOT_PATH", str(ctx.exception))

    def test_non_positive_history_keep_interval(self):
        with self.assertRaises(ConfigurationError):
            AgentConfig(history_keep_interval=0).validate()

    def test_history_path_is_under_root_path(self):
        self.assertEqual(AgentConfig(root_path="/var/lib/telemetry").history_path, "/var/lib/telemetry/history")


def test_load_config_defaults():
    config = load_config()
    assert config.url == DEFAULT_PLATFORM_URL
    assert config.check_interval == DEFAULT_CHECK_INTERVAL
    assert config.command_timeout == 30
    assert config.instance_id is None
    assert config.root_path == "/usr/local/percona/telemetry"
    assert config.history_keep_interval == 604800


def test_load_config_from_environment(monkeypatch, tmp_path):
    uuid_file = tmp_path / "telemetry_uuid"
    monkeypatch.setenv("PERCONA_TELEMETRY_URL", "http://localhost:8080/v1/telemetry/GenericReport")
    monkeypatch.setenv("PERCONA_TELEMETRY_CHECK_INTERVAL", "3600")
    monkeypatch.setenv("PERCONA_TELEMETRY_RESEND_INTERVAL", "5")
    monkeypatch.setenv("PERCONA_TELEMETRY_COMMAND_TIMEOUT", "10")
    monkeypatch.setenv("PERCONA_TELEMETRY_LOG_LEVEL", "warning")
    monkeypatch.setenv("PERCONA_TELEMETRY_INSTANCE_ID", "6f3b1c4e-0000-4000-8000-000000000000")
    monkeypatch.setenv("PERCONA_TELEMETRY_UUID_FILE", str(uuid_file))
    monkeypatch.setenv("PERCONA_TELEMETRY_ROOT_PATH", str(tmp_path))
    monkeypatch.setenv("PERCONA_TELEMETRY_HISTORY_KEEP_INTERVAL", "86400")

    config = load_config()

    assert config.url == "http://localhost:8080/v1/telemetry/GenericReport"
    assert config.check_interval == 3600
    assert config.resend_interval == 5
    assert config.command_timeout == 10
    assert config.log_level == "WARNING"
    assert config.instance_id == "6f3b1c4e-0000-4000-8000-000000000000"
    assert config.uuid_file == str(uuid_file)
    assert config.root_path == str(tmp_path)
    assert config.history_path == str(tmp_path / "history")
    assert config.history_keep_interval == 86400


def test_load_config_rejects_non_integer(monkeypatch):
    monkeypatch.setenv("PERCONA_TELEMETRY_CHECK_INTERVAL", "daily")
    with pytest.raises(ConfigurationError, match="PERCONA_TELEMETRY_CHECK_INTERVAL"):
        load_config()


def test_load_config_blank_integer_uses_default(monkeypatch):
    monkeypatch.setenv("PERCONA_TELEMETRY_COMMAND_TIMEOUT", " ")
    assert load_config().command_timeout == 30
