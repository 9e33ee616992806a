"""Version normalization for Debian and RHEL packages.

Both ecosystems are reduced to one dash-joined canonical version string, so
the same Percona build reports the same version on either family:

    Debian: 8.0.36-28-1.jammy             -> 8.0.36-28-1
    RHEL:   version=8.0.36, release=28.1.el9 -> 8.0.36-28-1
"""

from debian.debian_support import Version

# Debian Free Software Guidelines repack marker
DFSG_MARKER = "+dfsg"


def _strip_last_suffix(value: str) -> str:
    """Drop the text after the last '.', including the dot."""
    pos = value.rfind(".")
    if pos == -1:
        return value
    return value[:pos]


def parse_debian_version(version: str, first_party: bool) -> str:
    """
    Normalize a Debian version "[epoch:]upstream_version[-debian_revision]".

    Percona packages carry the distribution codename as an extra suffix of
    the revision ("8.2.0-1-1.jammy"), which is removed before parsing. Their
    revision is kept with dots turned into dashes. Third-party packages are
    reduced to the upstream version with any "+dfsg" repack marker cut off.
    The epoch is never part of the result.

    Args:
        version: Raw version as printed by dpkg-query
        first_party: Whether the package is a Percona package

    Returns:
        Canonical version, or the (stripped) raw value if it can't be parsed
    """
    if first_party:
        version = _strip_last_suffix(version)

    try:
        parsed = Version(version)
    except ValueError:
        return version

    upstream = parsed.upstream_version or ""

    if first_party:
        if parsed.debian_revision:
            revision = parsed.debian_revision.replace(".", "-")
            return f"{upstream}-{revision}"
        return upstream

    pos = upstream.find(DFSG_MARKER)
    if pos != -1:
        upstream = upstream[:pos]
    return upstream


def parse_rhel_version(version: str, release: str, first_party: bool) -> str:
    """
    Normalize RPM version and release fields.

    The distribution tag ("el9") sits at the end of the release, or at the
    end of the version when the release is empty. Percona packages keep
    their release, joined to the version with dots turned into dashes.

    Example:
        parse_rhel_version("1.5.5", "1.2.el9", first_party=True) == "1.5.5-1-2"
    """
    if release:
        release = _strip_last_suffix(release)
    else:
        version = _strip_last_suffix(version)

    if first_party and release:
        return f"{version}-{release.replace('.', '-')}"
    return version
