"""Installed package scraper.

The scan is best effort: every failure is logged and the scan moves on, so
the caller always gets a (possibly empty) package list.
"""

import dataclasses
import threading
from typing import List, Optional

from telemetry_agent.exceptions import PackageManagerNotFoundError, RepositoryNotFoundError, TelemetryAgentError
from telemetry_agent.logging_config import logger

from .classifier import get_distro_family
from .models import Package
from .patterns import get_patterns, is_first_party
from .protocol import DEFAULT_COMMAND_TIMEOUT, DistroFamily, PackageBackend, RepositoryLookup
from .registry import BackendRegistry, create_default_registry


class PackageScraper:
    """
    Scans a host for installed packages matching the configured patterns.

    Example:
        scraper = PackageScraper(stop_event=stop_event)
        packages = scraper.scrape("Ubuntu 22.04.3 LTS")
    """

    def __init__(
        self,
        registry: Optional[BackendRegistry] = None,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._registry = registry or create_default_registry()
        self._timeout = timeout
        self._stop_event = stop_event

    def _stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    def scrape(self, os_name: str) -> List[Package]:
        """
        Scan the host and return the installed packages.

        Results keep pattern order, then the tool's output order. They are
        neither sorted nor de-duplicated.

        Args:
            os_name: OS identification string, e.g. "Rocky Linux 8.9 (Green Obsidian)"

        Returns:
            List of installed packages; empty on unsupported hosts
        """
        family = get_distro_family(os_name)
        if family == DistroFamily.UNKNOWN or not self._registry.supports(family):
            logger.warning(f"Unsupported package system, skipping package scan (OS: {os_name!r})")
            return []

        try:
            backend = self._registry.create(family, timeout=self._timeout, stop_event=self._stop_event)
        except PackageManagerNotFoundError as e:
            logger.warning(f"Skipping package scan on {family.value} host: {e}")
            return []
        if backend is None:
            return []

        logger.info(f"Scanning installed packages with {backend.name}")

        packages: List[Package] = []
        for pattern in get_patterns(family):
            if self._stopped():
                logger.info("Package scan interrupted")
                break
            packages.extend(self._scrape_pattern(backend, pattern))

        logger.info(f"Found {len(packages)} installed package(s)")
        return packages

    def _scrape_pattern(self, backend: PackageBackend, pattern: str) -> List[Package]:
        try:
            result = backend.query_packages(pattern)
        except Exception as e:
            logger.warning(f"Failed to get package info for pattern {pattern!r}: {e}")
            return []

        if result.not_found:
            logger.debug(f"No installed packages match pattern {pattern!r}")
            return []
        if result.failed:
            logger.warning(f"Failed to get package info for pattern {pattern!r}: {result.error_message}")
            return []

        if not isinstance(backend, RepositoryLookup):
            return result.packages

        first_party = is_first_party(pattern)
        return [self._with_repository(backend, package, first_party) for package in result.packages]

    def _with_repository(self, backend: RepositoryLookup, package: Package, first_party: bool) -> Package:
        """Attach the repository to a package; keep it with an empty one on failure."""
        if self._stopped():
            return package
        try:
            repository = backend.query_repository(package.name, first_party)
        except RepositoryNotFoundError as e:
            logger.debug(f"No repository found for package {package.name}: {e}")
            return package
        except TelemetryAgentError as e:
            logger.warning(f"Failed to get repository for package {package.name}: {e}")
            return package
        except Exception as e:
            logger.warning(f"Unexpected error getting repository for package {package.name}: {e}")
            return package
        return dataclasses.replace(package, repository=repository)
