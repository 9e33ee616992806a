"""Repository resolution for installed packages.

RHEL query output already names the repository of each package. On Debian
the repository has to be dug out of ``apt-cache policy`` output, e.g.:

    percona-server-server:
      Installed: 8.0.36-28-1.jammy
      Candidate: 8.0.36-28-1.jammy
      Version table:
     *** 8.0.36-28-1.jammy 500
            500 http://repo.percona.com/ps-80/apt jammy/main amd64 Packages
            100 /var/lib/dpkg/status
         8.0.35-27-1.jammy 500
            500 http://repo.percona.com/ps-80/apt jammy/main amd64 Packages
"""

from urllib.parse import urlparse

from telemetry_agent.exceptions import (
    RepositoryNotFoundError,
    UnexpectedConfiguredRepositoryLineError,
    UnexpectedRepositoryLineError,
)
from telemetry_agent.logging_config import logger

from .models import PackageRepository

# Marker of the installed version in the apt-cache policy version table
INSTALLED_VERSION_MARKER = "***"
UNKNOWN_PACKAGE_MESSAGE = "Unable to locate package"
DPKG_STATUS_PATH = "/var/lib/dpkg/status"

# Percona publishes its "main" channel as "release"
FIRST_PARTY_MAIN_COMPONENT = "main"
FIRST_PARTY_RELEASE_COMPONENT = "release"


def parse_rhel_repository(repository: str, first_party: bool) -> PackageRepository:
    """
    Resolve the repository field of repoquery output.

    Percona repository ids look like "<name>-<component>-<arch>", for
    example "ps-80-release-x86_64" -> name "ps-80", component "release".
    Third-party repository ids are kept whole as the name. An empty field is
    valid and gives an empty repository.
    """
    if not repository:
        return PackageRepository()

    if not first_party:
        return PackageRepository(name=repository)

    # yum prints installed packages' origin as "@<repo id>"
    repository = repository.removeprefix("@")

    # drop the trailing architecture
    pos = repository.rfind("-")
    if pos != -1:
        repository = repository[:pos]

    pos = repository.rfind("-")
    if pos == -1:
        return PackageRepository()
    return PackageRepository(name=repository[:pos], component=repository[pos + 1 :])


def parse_debian_repository_line(line: str, first_party: bool) -> PackageRepository:
    """
    Parse an apt-cache policy source line.

    The line has the form "<priority> <url> <dist>/<component> <arch> Packages".

    Raises:
        UnexpectedRepositoryLineError: If the line doesn't have that shape
    """
    tokens = line.split()
    if len(tokens) < 3:
        logger.warning(f"Unexpected package repository line: {line!r}")
        raise UnexpectedRepositoryLineError(f"unexpected package repository line: {line!r}")

    try:
        url = urlparse(tokens[1])
    except ValueError as e:
        logger.warning(f"Failed to parse repository url {tokens[1]!r}: {e}")
        raise UnexpectedRepositoryLineError(f"invalid repository url: {tokens[1]!r}") from e

    name = url.path.strip("/").split("/")[0]

    component = ""
    branch = tokens[2].split("/")
    if len(branch) == 2:
        component = branch[1]
    if first_party and component == FIRST_PARTY_MAIN_COMPONENT:
        component = FIRST_PARTY_RELEASE_COMPONENT

    return PackageRepository(name=name, component=component)


def parse_debian_repository_output(output: str, first_party: bool) -> PackageRepository:
    """
    Find the repository of the installed version in apt-cache policy output.

    The "***" line marks the installed version and ends with its priority.
    The first following source line with the same priority that points to a
    remote repository is the one the package was installed from.

    Raises:
        RepositoryNotFoundError: Unknown package, or no remote source recorded
        UnexpectedConfiguredRepositoryLineError: Malformed "***" line
        UnexpectedRepositoryLineError: Malformed source line
    """
    lines = iter(output.splitlines())
    for raw_line in lines:
        line = raw_line.strip(" '\t")
        if UNKNOWN_PACKAGE_MESSAGE in line:
            raise RepositoryNotFoundError(line)
        if not line.startswith(INSTALLED_VERSION_MARKER):
            continue

        # *** <version> <priority>
        tokens = line.split()
        if len(tokens) != 3:
            logger.warning(f"Unexpected configured package repository line: {line!r}")
            raise UnexpectedConfiguredRepositoryLineError(f"unexpected configured package repository line: {line!r}")
        priority = tokens[2]

        for raw_source in lines:
            source = raw_source.strip(" '\t")
            source_tokens = source.split()
            if not source_tokens or source_tokens[0] != priority:
                continue
            if DPKG_STATUS_PATH in source:
                continue
            return parse_debian_repository_line(source, first_party)

    raise RepositoryNotFoundError("no package repository found")
