"""Data models for installed package inventory."""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class PackageRepository:
    """
    Repository a package was installed from.

    Both fields may be empty when the package comes from an unknown or
    local source (e.g. a .deb installed straight from the filesystem).
    """

    name: str = ""
    component: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.component

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "component": self.component}


@dataclass(frozen=True)
class Package:
    """
    An installed package with its canonical version.

    Attributes:
        name: Package name without architecture qualifier
        version: Canonical, dash-joined version string
        repository: Repository the package was installed from
    """

    name: str
    version: str
    repository: PackageRepository = field(default_factory=PackageRepository)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must not be empty")
        if not self.version:
            raise ValueError("Package version must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "repository": self.repository.to_dict(),
        }
