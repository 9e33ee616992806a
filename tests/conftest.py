"""Pytest configuration and shared fixtures for all tests."""

import pytest

from telemetry_agent._packages import Package, PackageRepository


@pytest.fixture(autouse=True)
def isolate_agent_environment(monkeypatch):
    """Keep host configuration out of tests.

    Sentry stays disabled and PERCONA_TELEMETRY_* variables from the
    developer's shell don't leak into configuration tests.
    """
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    for name in (
        "PERCONA_TELEMETRY_URL",
        "PERCONA_TELEMETRY_CHECK_INTERVAL",
        "PERCONA_TELEMETRY_RESEND_INTERVAL",
        "PERCONA_TELEMETRY_COMMAND_TIMEOUT",
        "PERCONA_TELEMETRY_LOG_LEVEL",
        "PERCONA_TELEMETRY_INSTANCE_ID",
        "PERCONA_TELEMETRY_UUID_FILE",
        "PERCONA_TELEMETRY_ROOT_PATH",
        "PERCONA_TELEMETRY_HISTORY_KEEP_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_packages():
    """A small package list as produced by a Debian scan."""
    return [
        Package("percona-server-server", "8.0.36-28-1", PackageRepository("ps-80", "release")),
        Package("percona-xtrabackup-80", "8.0.35-30-1", PackageRepository("percona", "release")),
        Package("haproxy", "2.4.24", PackageRepository("ubuntu", "main")),
    ]
