"""Backend Protocol for package inventory plugins.

This module defines the core types shared by the package-manager backends
and the scraper that drives them.
"""

from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import PackageRepository
    from .result import QueryResult

# Timeout for a single package manager invocation, in seconds
DEFAULT_COMMAND_TIMEOUT = 30


class DistroFamily(str, Enum):
    """Coarse OS classification by packaging ecosystem."""

    UNKNOWN = "unknown"
    DEBIAN = "debian"
    RHEL = "rhel"


class PackageBackend(Protocol):
    """
    Protocol defining the interface for package-manager backends.

    Each backend wraps the query tool of one packaging ecosystem and turns
    its textual output into Package records.

    Example:
        class RhelBackend:
            name = "repoquery"
            family = DistroFamily.RHEL

            def query_packages(self, pattern: str) -> QueryResult:
                ...
    """

    @property
    def name(self) -> str:
        """Human-readable backend name, used for logging."""
        ...

    @property
    def family(self) -> DistroFamily:
        """Distro family this backend serves."""
        ...

    def query_packages(self, pattern: str) -> "QueryResult":
        """
        Query installed packages matching a name pattern.

        Implementations never raise for expected outcomes: "nothing
        installed" is reported as a not-found result and tool failures as
        an error result.

        Args:
            pattern: Exact package name or shell-style wildcard

        Returns:
            QueryResult with the matching packages
        """
        ...


@runtime_checkable
class RepositoryLookup(Protocol):
    """Capability of backends that need a second query to learn a package's repository."""

    def query_repository(self, package_name: str, first_party: bool) -> "PackageRepository":
        """
        Resolve the repository an installed package comes from.

        Raises:
            RepositoryNotFoundError: No remote repository is known for the package
            UnexpectedRepositoryLineError: A repository line could not be parsed
            UnexpectedConfiguredRepositoryLineError: The installed-version line could not be parsed
            CommandExecutionError: The query tool could not be run
        """
        ...
