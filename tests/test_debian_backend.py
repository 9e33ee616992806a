"""Tests for the Debian package backend."""

import subprocess
import unittest
from unittest.mock import patch

from telemetry_agent._packages import DebianBackend, DistroFamily, Package, PackageRepository, RepositoryLookup
from telemetry_agent._packages.backends.debian import (
    DPKG_QUERY_FORMAT,
    parse_debian_package_name,
    parse_debian_package_output,
)
from telemetry_agent.exceptions import CommandExecutionError, RepositoryNotFoundError

RUN_COMMAND = "telemetry_agent._packages.backends.debian.run_command"


def _completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


class TestParseDebianPackageName(unittest.TestCase):
    def test_arch_qualifier_is_removed(self):
        self.assertEqual(parse_debian_package_name("percona-mysql-shell:amd64"), "percona-mysql-shell")

    def test_plain_name(self):
        self.assertEqual(parse_debian_package_name("percona-toolkit"), "percona-toolkit")


class TestParseDebianPackageOutput(unittest.TestCase):
    """Tests for dpkg-query output parsing."""

    def test_installed_first_party_packages(self):
        output = (
            "'ii |percona-server-server|8.0.36-28-1.jammy'\n"
            "'ii |percona-mysql-shell:amd64|8.0.36-1-1.jammy'\n"
            "'iHR|percona-release|1.0-27.generic'\n"
        )
        result = parse_debian_package_output(output, 0, first_party=True)
        self.assertTrue(result.found)
        self.assertEqual(
            result.packages,
            [
                Package("percona-server-server", "8.0.36-28-1"),
                Package("percona-mysql-shell", "8.0.36-1-1"),
                Package("percona-release", "1.0-27"),
            ],
        )

    def test_not_installed_entries_are_skipped(self):
        output = "'un |percona-server-client|'\n'rc |percona-xtrabackup-80|8.0.35-30-1.jammy'\n"
        result = parse_debian_package_output(output, 0, first_party=True)
        self.assertTrue(result.not_found)

    def test_malformed_lines_are_skipped(self):
        output = "garbage\n\n'ii |haproxy|2.4.24-0ubuntu0.22.04.1'\n'ii |broken'\n"
        result = parse_debian_package_output(output, 0, first_party=False)
        self.assertEqual(result.packages, [Package("haproxy", "2.4.24")])

    def test_no_packages_found_message(self):
        output = "dpkg-query: no packages found matching pmm*\n"
        result = parse_debian_package_output(output, 1, first_party=True)
        self.assertTrue(result.not_found)

    def test_other_failure(self):
        result = parse_debian_package_output("dpkg-query: error: database is locked\n", 2, first_party=True)
        self.assertTrue(result.failed)
        self.assertIn("status 2", result.error_message)


class TestDebianBackend(unittest.TestCase):
    """Tests for DebianBackend with mocked commands."""

    def test_identity(self):
        backend = DebianBackend()
        self.assertEqual(backend.name, "dpkg-query")
        self.assertEqual(backend.family, DistroFamily.DEBIAN)
        self.assertIsInstance(backend, RepositoryLookup)

    @patch(RUN_COMMAND)
    def test_query_packages_command(self, mock_run):
        mock_run.return_value = _completed("'ii |percona-toolkit|3.5.7-1.jammy'\n")
        backend = DebianBackend(timeout=5)

        result = backend.query_packages("percona-*")

        self.assertEqual(result.packages, [Package("percona-toolkit", "3.5.7-1")])
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], ["dpkg-query", "-f", DPKG_QUERY_FORMAT, "-W", "percona-*"])
        self.assertEqual(kwargs["timeout"], 5)

    @patch(RUN_COMMAND)
    def test_query_packages_third_party_versions(self, mock_run):
        mock_run.return_value = _completed("'ii |etcd|3.3.25+dfsg-7ubuntu0.22.04.1'\n")
        result = DebianBackend().query_packages("etcd*")
        self.assertEqual(result.packages, [Package("etcd", "3.3.25")])

    @patch(RUN_COMMAND)
    def test_query_packages_command_error_is_a_failure_result(self, mock_run):
        mock_run.side_effect = CommandExecutionError("dpkg-query command timed out after 30s")
        result = DebianBackend().query_packages("pmm*")
        self.assertTrue(result.failed)
        self.assertIn("timed out", result.error_message)

    @patch(RUN_COMMAND)
    def test_query_repository(self, mock_run):
        mock_run.return_value = _completed(
            "percona-toolkit:\n"
            "  Installed: 3.5.7-1.jammy\n"
            "  Version table:\n"
            " *** 3.5.7-1.jammy 500\n"
            "        500 http://repo.percona.com/pt/apt jammy/main amd64 Packages\n"
            "        100 /var/lib/dpkg/status\n"
        )
        repository = DebianBackend().query_repository("percona-toolkit", True)
        self.assertEqual(repository, PackageRepository("pt", "release"))
        self.assertEqual(mock_run.call_args[0][0], ["apt-cache", "-q=0", "policy", "percona-toolkit"])

    @patch(RUN_COMMAND)
    def test_query_repository_unknown_package(self, mock_run):
        mock_run.return_value = _completed("N: Unable to locate package percona-toolkit\n")
        with self.assertRaises(RepositoryNotFoundError):
            DebianBackend().query_repository("percona-toolkit", True)

    @patch(RUN_COMMAND)
    def test_query_repository_tool_failure(self, mock_run):
        mock_run.return_value = _completed("E: something broke\n", returncode=100)
        with self.assertRaises(CommandExecutionError):
            DebianBackend().query_repository("haproxy", False)
