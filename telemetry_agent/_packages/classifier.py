"""Distro family classification from an OS identification string."""

from .protocol import DistroFamily

DEBIAN_FAMILY_PREFIXES = ("debian", "ubuntu")

RHEL_FAMILY_PREFIXES = ("el", "centos", "oracle", "rocky", "red hat", "amazon", "alma")


def get_distro_family(os_name: str) -> DistroFamily:
    """
    Classify an OS name such as "Ubuntu 22.04.3 LTS" or "CentOS Linux 7 (Core)".

    Matching is a case-insensitive prefix test; anything unrecognized is
    DistroFamily.UNKNOWN.
    """
    name = os_name.lower()
    if name.startswith(DEBIAN_FAMILY_PREFIXES):
        return DistroFamily.DEBIAN
    if name.startswith(RHEL_FAMILY_PREFIXES):
        return DistroFamily.RHEL
    return DistroFamily.UNKNOWN
