"""QueryResult dataclass for package query output."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from .models import Package

QueryStatus = Literal["found", "not_found", "error"]


@dataclass
class QueryResult:
    """
    Result of one package query (one pattern, one tool invocation).

    Attributes:
        status: "found", "not_found" (nothing installed) or "error"
        packages: Packages that survived parsing (only for "found")
        error_message: Error description (only for "error")
    """

    status: QueryStatus
    packages: List[Package] = field(default_factory=list)
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.status == "found" and not self.packages:
            raise ValueError("Found result must have packages")
        if self.status != "found" and self.packages:
            raise ValueError("Only a found result may carry packages")
        if self.status == "error" and not self.error_message:
            raise ValueError("Error result must have error_message")

    @property
    def found(self) -> bool:
        return self.status == "found"

    @property
    def not_found(self) -> bool:
        return self.status == "not_found"

    @property
    def failed(self) -> bool:
        return self.status == "error"

    @classmethod
    def found_result(cls, packages: List[Package]) -> "QueryResult":
        """Create a result for a query that matched installed packages."""
        return cls(status="found", packages=list(packages))

    @classmethod
    def not_found_result(cls) -> "QueryResult":
        """Create a result for a query that matched nothing installed."""
        return cls(status="not_found")

    @classmethod
    def failure_result(cls, error_message: str) -> "QueryResult":
        """Create a result for a query whose tool failed."""
        return cls(status="error", error_message=error_message)

    @classmethod
    def from_packages(cls, packages: List[Package]) -> "QueryResult":
        """Found when any package survived parsing, not found otherwise."""
        if not packages:
            return cls.not_found_result()
        return cls.found_result(packages)
