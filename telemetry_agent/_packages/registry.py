"""Backend registry for selecting the package backend of a distro family."""

import threading
from typing import Callable, Dict, List, Optional

from telemetry_agent.logging_config import logger

from .protocol import DEFAULT_COMMAND_TIMEOUT, DistroFamily, PackageBackend

BackendFactory = Callable[[float, Optional[threading.Event]], PackageBackend]


class BackendRegistry:
    """
    Registry mapping distro families to backend factories.

    Backends are built lazily so that probing for a package manager only
    happens on hosts of the matching family.

    Example:
        registry = BackendRegistry()
        registry.register(DistroFamily.DEBIAN, lambda timeout, stop: DebianBackend(timeout, stop))

        backend = registry.create(DistroFamily.DEBIAN)
        result = backend.query_packages("percona-*")
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._factories: Dict[DistroFamily, BackendFactory] = {}

    def register(self, family: DistroFamily, factory: BackendFactory) -> None:
        """
        Register the backend factory of a distro family.

        Args:
            family: Distro family the backend serves
            factory: Callable taking (timeout, stop_event) and returning a backend
        """
        self._factories[family] = factory
        logger.debug(f"Registered package backend for {family.value} family")

    def supports(self, family: DistroFamily) -> bool:
        return family in self._factories

    def create(
        self,
        family: DistroFamily,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        stop_event: Optional[threading.Event] = None,
    ) -> Optional[PackageBackend]:
        """
        Build the backend for a distro family.

        Returns:
            Backend instance, or None if the family has no backend

        Raises:
            PackageManagerNotFoundError: If the family's query tool is missing
        """
        factory = self._factories.get(family)
        if factory is None:
            return None
        return factory(timeout, stop_event)

    def list_families(self) -> List[DistroFamily]:
        return list(self._factories)


def create_default_registry() -> BackendRegistry:
    """Create a registry with the Debian and RHEL backends."""
    from .backends import DebianBackend, RhelBackend

    registry = BackendRegistry()
    registry.register(
        DistroFamily.DEBIAN,
        lambda timeout, stop_event: DebianBackend(timeout=timeout, stop_event=stop_event),
    )
    registry.register(
        DistroFamily.RHEL,
        lambda timeout, stop_event: RhelBackend(timeout=timeout, stop_event=stop_event),
    )
    return registry
