"""Debian backend: dpkg-query for packages, apt-cache policy for repositories."""

import threading
from typing import List, Optional

from telemetry_agent.exceptions import CommandExecutionError
from telemetry_agent.logging_config import logger

from ..models import Package, PackageRepository
from ..patterns import is_first_party
from ..protocol import DEFAULT_COMMAND_TIMEOUT, DistroFamily
from ..repositories import parse_debian_repository_output
from ..result import QueryResult
from ..utils import run_command, split_output_line
from ..versions import parse_debian_version

# One line per installed entry: "<status> |<name>[:<arch>]|[epoch:]<version>"
DPKG_QUERY_FORMAT = "'${db:Status-Abbrev}|${binary:Package}|${source:Version}\n'"

# "ii" is installed and configured; "iHR" (half-installed, reinstall
# required) still has the package files on disk.
INSTALLED_STATUSES = frozenset({"ii", "iHR"})

NOT_FOUND_MESSAGE = "no packages found matching"


def parse_debian_package_name(name: str) -> str:
    """Strip the ":<architecture>" qualifier, e.g. "percona-mysql-shell:amd64"."""
    return name.strip().split(":")[0]


def parse_debian_package_output(output: str, returncode: int, first_party: bool) -> QueryResult:
    """
    Parse dpkg-query output produced with DPKG_QUERY_FORMAT.

    Lines with the wrong number of fields or a not-installed status are
    skipped. When nothing survives, the result is "not found".

    Args:
        output: Combined stdout/stderr of dpkg-query
        returncode: Exit status of dpkg-query
        first_party: Whether the queried pattern is a Percona pattern

    Returns:
        QueryResult with the installed packages
    """
    if returncode != 0:
        if NOT_FOUND_MESSAGE in output:
            return QueryResult.not_found_result()
        logger.debug(f"dpkg-query output: {output}")
        return QueryResult.failure_result(f"dpkg-query exited with status {returncode}: {output.strip()}")

    packages: List[Package] = []
    for line in output.splitlines():
        tokens = split_output_line(line, 3)
        if tokens is None:
            continue

        status, name, version = tokens
        if status.strip() not in INSTALLED_STATUSES:
            continue

        name = parse_debian_package_name(name)
        if not name:
            continue

        version = parse_debian_version(version, first_party)
        if not version:
            continue

        packages.append(Package(name=name, version=version))

    return QueryResult.from_packages(packages)


class DebianBackend:
    """
    Package backend for Debian-family hosts.

    dpkg-query doesn't know where a package came from, so repositories are
    looked up with a second apt-cache call per package (query_repository).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._timeout = timeout
        self._stop_event = stop_event

    @property
    def name(self) -> str:
        return "dpkg-query"

    @property
    def family(self) -> DistroFamily:
        return DistroFamily.DEBIAN

    def query_packages(self, pattern: str) -> QueryResult:
        """Query installed packages matching a pattern with dpkg-query."""
        cmd = ["dpkg-query", "-f", DPKG_QUERY_FORMAT, "-W", pattern]
        try:
            result = run_command(cmd, "dpkg-query", timeout=self._timeout, stop_event=self._stop_event)
        except CommandExecutionError as e:
            return QueryResult.failure_result(str(e))
        return parse_debian_package_output(result.stdout, result.returncode, is_first_party(pattern))

    def query_repository(self, package_name: str, first_party: bool) -> PackageRepository:
        """Resolve the repository of an installed package with apt-cache policy."""
        cmd = ["apt-cache", "-q=0", "policy", package_name]
        result = run_command(cmd, "apt-cache", timeout=self._timeout, stop_event=self._stop_event)
        if result.returncode != 0:
            logger.debug(f"apt-cache output: {result.stdout}")
            raise CommandExecutionError(f"apt-cache exited with status {result.returncode}")
        return parse_debian_repository_output(result.stdout, first_party)
