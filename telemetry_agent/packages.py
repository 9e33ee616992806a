"""
Public API for the installed package scan.

Usage:
    from telemetry_agent.packages import scrape_installed_packages

    packages = scrape_installed_packages()
    for package in packages:
        print(package.name, package.version, package.repository.name)
"""

import json
import threading
from typing import List, Optional

from ._packages import DEFAULT_COMMAND_TIMEOUT, Package, PackageScraper
from .host import get_os_info


def scrape_installed_packages(
    stop_event: Optional[threading.Event] = None,
    os_name: Optional[str] = None,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> List[Package]:
    """
    Scan the host for installed Percona and related packages.

    Never raises for package manager problems; those are logged and the
    affected patterns are left out.

    Args:
        stop_event: Event that aborts the scan and kills running commands
        os_name: OS identification string (read from the host when omitted)
        timeout: Timeout of each package manager call in seconds

    Returns:
        List of installed packages
    """
    if os_name is None:
        os_name = get_os_info()
    return PackageScraper(timeout=timeout, stop_event=stop_event).scrape(os_name)


def packages_to_json(packages: List[Package]) -> str:
    """Serialize packages to the JSON list embedded in telemetry reports."""
    return json.dumps([package.to_dict() for package in packages])
