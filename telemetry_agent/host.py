"""Host identification and host-level metrics."""

import platform
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import distro

from .logging_config import logger

DEFAULT_UUID_FILE = "/usr/local/percona/telemetry_uuid"
INSTANCE_ID_KEY = "instanceId"
DEPLOYMENT = "PACKAGE"


@dataclass
class HostMetrics:
    """Metrics describing the host the agent runs on."""

    instance_id: str
    metrics: Dict[str, str] = field(default_factory=dict)


def get_os_info() -> str:
    """
    Get a human-readable OS name, e.g. "Ubuntu 22.04.3 LTS".

    Uses /etc/os-release (through distro) and falls back to the kernel name.
    """
    name = distro.name(pretty=True)
    if name:
        return name
    return platform.system() or "unknown"


def get_hardware_info() -> str:
    """Get the machine architecture, e.g. "x86_64"."""
    return platform.machine() or "unknown"


def get_instance_id(uuid_file: str = DEFAULT_UUID_FILE) -> str:
    """
    Read the host instance id shared by Percona products.

    The file holds an "instanceId: <uuid>" line. When the file is absent it
    is created with a fresh id.

    Raises:
        OSError: If the file can't be read or created
    """
    path = Path(uuid_file)
    if not path.exists():
        instance_id = str(uuid.uuid4())
        logger.info(f"Telemetry file {uuid_file} is absent, creating new one")
        path.write_text(f"{INSTANCE_ID_KEY}: {instance_id}")
        path.chmod(0o600)
        return instance_id

    for line in path.read_text().splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == INSTANCE_ID_KEY:
            return value.strip()

    logger.error(f"Telemetry file {uuid_file} has no {INSTANCE_ID_KEY} value")
    return ""


def scrape_host_metrics(uuid_file: str = DEFAULT_UUID_FILE, instance_id: str = "") -> HostMetrics:
    """Collect OS, deployment and architecture metrics plus the instance id."""
    if not instance_id:
        try:
            instance_id = get_instance_id(uuid_file)
        except OSError as e:
            logger.error(f"Failed to get telemetry instance id from {uuid_file}: {e}")

    return HostMetrics(
        instance_id=instance_id,
        metrics={
            "OS": get_os_info(),
            "deployment": DEPLOYMENT,
            "hardware_arch": get_hardware_info(),
        },
    )
