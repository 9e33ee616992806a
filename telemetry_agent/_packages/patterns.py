"""Package name patterns scanned on every host.

Patterns are the unit of query granularity: one package manager call per
pattern. First-party patterns cover Percona's own product lines, third-party
patterns cover software that is tracked for operational context.
"""

from typing import List

from .protocol import DistroFamily

# Percona packages with the same names on Debian and RHEL systems
FIRST_PARTY_PATTERNS = [
    "Percona-*",
    "percona-*",
    "proxysql*",
    "pmm*",
]

# Non-Percona packages with the same names on Debian and RHEL systems
THIRD_PARTY_PATTERNS = [
    # PG ecosystem
    "etcd*",
    "haproxy",
    "patroni",
    "pg*",
    "postgis",
    "wal2json",
]

# Patterns that only exist in one packaging ecosystem
FAMILY_FIRST_PARTY_PATTERNS = {
    DistroFamily.DEBIAN: [],
    DistroFamily.RHEL: [],
}

FAMILY_THIRD_PARTY_PATTERNS = {
    DistroFamily.DEBIAN: ["postgresql-*"],
    DistroFamily.RHEL: ["wal2json*"],
}


def is_first_party(pattern: str) -> bool:
    """Check if a queried pattern is one of the Percona patterns."""
    if pattern in FIRST_PARTY_PATTERNS:
        return True
    return any(pattern in patterns for patterns in FAMILY_FIRST_PARTY_PATTERNS.values())


def get_patterns(family: DistroFamily) -> List[str]:
    """
    Build the ordered pattern list scanned on a host of the given family.

    First-party patterns come first, then third-party ones. No
    de-duplication is done across the lists.
    """
    return (
        FIRST_PARTY_PATTERNS
        + FAMILY_FIRST_PARTY_PATTERNS.get(family, [])
        + THIRD_PARTY_PATTERNS
        + FAMILY_THIRD_PARTY_PATTERNS.get(family, [])
    )
