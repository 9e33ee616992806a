"""Installed package inventory.

This module queries the host package manager for installed Percona and
related third-party packages and normalizes the result across Debian and
RHEL packaging:
- Distro family classification from the OS name
- Debian (dpkg-query + apt-cache policy) and RHEL (repoquery) backends
- Canonical, dash-joined versions for both ecosystems
- Repository name/component resolution

Usage:
    from telemetry_agent._packages import PackageScraper

    scraper = PackageScraper()
    packages = scraper.scrape("Ubuntu 22.04.3 LTS")
"""

from .backends import DebianBackend, RhelBackend
from .classifier import get_distro_family
from .models import Package, PackageRepository
from .patterns import FIRST_PARTY_PATTERNS, THIRD_PARTY_PATTERNS, get_patterns, is_first_party
from .protocol import DEFAULT_COMMAND_TIMEOUT, DistroFamily, PackageBackend, RepositoryLookup
from .registry import BackendRegistry, create_default_registry
from .repositories import parse_debian_repository_output, parse_rhel_repository
from .result import QueryResult
from .scraper import PackageScraper
from .versions import parse_debian_version, parse_rhel_version

__all__ = [
    # Core types
    "Package",
    "PackageRepository",
    "DistroFamily",
    "QueryResult",
    "PackageBackend",
    "RepositoryLookup",
    "DEFAULT_COMMAND_TIMEOUT",
    # Backends and selection
    "DebianBackend",
    "RhelBackend",
    "BackendRegistry",
    "create_default_registry",
    "PackageScraper",
    # Normalization
    "get_distro_family",
    "get_patterns",
    "is_first_party",
    "FIRST_PARTY_PATTERNS",
    "THIRD_PARTY_PATTERNS",
    "parse_debian_version",
    "parse_rhel_version",
    "parse_debian_repository_output",
    "parse_rhel_repository",
]
