"""RHEL backend: repoquery reports package, version and repository in one call."""

import shutil
import threading
from typing import List, Optional, Sequence

from telemetry_agent.exceptions import CommandExecutionError, PackageManagerNotFoundError
from telemetry_agent.logging_config import logger

from ..models import Package
from ..patterns import is_first_party
from ..protocol import DEFAULT_COMMAND_TIMEOUT, DistroFamily
from ..repositories import parse_rhel_repository
from ..result import QueryResult
from ..utils import run_command, split_output_line
from ..versions import parse_rhel_version

# One line per installed package: "<name>|<version>|<release>|<repository>"
RHEL_QUERY_FORMAT = "'%{name}|%{version}|%{release}|%{from_repo}'"

# Candidate query commands, looked up on PATH in this order
RHEL_PACKAGE_MANAGERS: Sequence[Sequence[str]] = (
    ("repoquery",),
    ("yum", "repoquery"),
    ("dnf", "repoquery"),
)


def find_rhel_package_manager() -> List[str]:
    """
    Find the first available repoquery command.

    Returns:
        Command prefix, e.g. ["dnf", "repoquery"]

    Raises:
        PackageManagerNotFoundError: If none of the candidates is on PATH
    """
    for candidate in RHEL_PACKAGE_MANAGERS:
        if shutil.which(candidate[0]):
            return list(candidate)
    raise PackageManagerNotFoundError("no package manager found")


def parse_rhel_package_output(output: str, returncode: int, first_party: bool) -> QueryResult:
    """
    Parse repoquery output produced with RHEL_QUERY_FORMAT.

    repoquery exits cleanly when nothing matches, so a non-zero status is
    always a tool failure. Every well-formed line is an installed package.

    Args:
        output: Combined stdout/stderr of repoquery
        returncode: Exit status of repoquery
        first_party: Whether the queried pattern is a Percona pattern

    Returns:
        QueryResult with the installed packages
    """
    if returncode != 0:
        logger.debug(f"repoquery output: {output}")
        return QueryResult.failure_result(f"repoquery exited with status {returncode}: {output.strip()}")

    packages: List[Package] = []
    for line in output.splitlines():
        tokens = split_output_line(line, 4)
        if tokens is None:
            continue

        name, version, release, repository = tokens
        version = parse_rhel_version(version, release, first_party)
        if not name or not version:
            continue

        packages.append(
            Package(
                name=name,
                version=version,
                repository=parse_rhel_repository(repository, first_party),
            )
        )

    return QueryResult.from_packages(packages)


class RhelBackend:
    """Package backend for RHEL-family hosts."""

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Initialize the backend.

        Args:
            command: repoquery command prefix (looked up on PATH when omitted)
            timeout: Timeout of one repoquery call in seconds
            stop_event: Event signalling agent shutdown

        Raises:
            PackageManagerNotFoundError: If no command is given and none is found
        """
        self._command = list(command) if command else find_rhel_package_manager()
        self._timeout = timeout
        self._stop_event = stop_event

    @property
    def name(self) -> str:
        return " ".join(self._command)

    @property
    def family(self) -> DistroFamily:
        return DistroFamily.RHEL

    def query_packages(self, pattern: str) -> QueryResult:
        """Query installed packages matching a pattern with repoquery."""
        cmd = self._command + ["--qf", RHEL_QUERY_FORMAT, "--installed", pattern]
        try:
            result = run_command(cmd, self._command[0], timeout=self._timeout, stop_event=self._stop_event)
        except CommandExecutionError as e:
            return QueryResult.failure_result(str(e))
        return parse_rhel_package_output(result.stdout, result.returncode, is_first_party(pattern))
