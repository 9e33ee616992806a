"""Percona product ("pillar") metrics files.

Percona Server, XtraDB Cluster, Server for MongoDB and Distribution for
PostgreSQL drop telemetry files into their own directory under the
telemetry root. Each file is a JSON object named
``<unix timestamp>-<random token>.json``, for example
``1708026156-d7664a58-d855-45c9-b017-50678cf620bb.json``.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from .exceptions import MetricsFileError
from .logging_config import logger

DEFAULT_TELEMETRY_ROOT_PATH = "/usr/local/percona/telemetry"
HISTORY_DIRECTORY = "history"
METRICS_FILE_SUFFIX = ".json"

PRODUCT_FAMILY_PS = "PRODUCT_FAMILY_PS"
PRODUCT_FAMILY_PXC = "PRODUCT_FAMILY_PXC"
PRODUCT_FAMILY_PSMDB = "PRODUCT_FAMILY_PSMDB"
PRODUCT_FAMILY_POSTGRESQL = "PRODUCT_FAMILY_POSTGRESQL"

# Sub-directory of the telemetry root -> product family, in processing order
PILLAR_DIRECTORIES = (
    ("ps", PRODUCT_FAMILY_PS),
    ("pxc", PRODUCT_FAMILY_PXC),
    ("psmdb", PRODUCT_FAMILY_PSMDB),
    ("pg", PRODUCT_FAMILY_POSTGRESQL),
)


@dataclass
class MetricsFile:
    """
    One parsed product metrics file.

    Attributes:
        filename: Path of the source file
        timestamp: Creation time taken from the file name (UTC)
        product_family: Product family of the directory the file was found in
        metrics: Metric values, each JSON-encoded
    """

    filename: str
    timestamp: datetime
    product_family: str = ""
    metrics: Dict[str, str] = field(default_factory=dict)


def timestamp_from_filename(filename: str) -> int:
    """
    Extract the unix timestamp prefix of a metrics file name.

    Raises:
        ValueError: If the name doesn't start with an integer timestamp
    """
    stem = Path(filename).stem
    return int(stem.split("-")[0])


def is_metrics_file(path: Path) -> bool:
    return path.is_file() and not path.is_symlink() and path.suffix == METRICS_FILE_SUFFIX


def parse_metrics_file(path: str) -> MetricsFile:
    """
    Parse a product metrics file.

    Values keep their JSON encoding, so a string value "8.0.36" becomes the
    metric value '"8.0.36"' and nested objects stay JSON documents.

    Raises:
        MetricsFileError: If the file can't be read, isn't a JSON object or
            its name has no timestamp
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = json.load(f)
    except (OSError, ValueError) as e:
        raise MetricsFileError(f"can't parse metrics file {path}: {e}") from e

    if not isinstance(content, dict):
        raise MetricsFileError(f"metrics file {path} doesn't hold a JSON object")

    try:
        created = timestamp_from_filename(path)
    except ValueError as e:
        raise MetricsFileError(f"metrics file name {Path(path).name} has no timestamp") from e

    return MetricsFile(
        filename=path,
        timestamp=datetime.fromtimestamp(created, tz=timezone.utc),
        metrics={key: json.dumps(value, separators=(",", ":")) for key, value in content.items()},
    )


def process_metrics_directory(path: str, product_family: str) -> List[MetricsFile]:
    """
    Parse every metrics file of one product directory.

    A missing directory is normal (product not installed) and gives an
    empty list. Files that fail to parse are logged and skipped.

    Raises:
        MetricsFileError: If the directory exists but can't be listed
    """
    directory = Path(os.path.normpath(path))
    try:
        entries = sorted(directory.iterdir())
    except FileNotFoundError:
        logger.info(f"Pillar metric directory {directory} is absent, skipping")
        return []
    except OSError as e:
        raise MetricsFileError(f"can't read directory with metric files {directory}: {e}") from e

    if not entries:
        logger.info(f"Pillar metric directory {directory} is empty, skipping")
        return []

    metrics_files: List[MetricsFile] = []
    for entry in entries:
        if not is_metrics_file(entry):
            logger.debug(f"{entry} seems not a metrics file, skipping")
            continue
        try:
            metrics_file = parse_metrics_file(str(entry))
        except MetricsFileError as e:
            logger.error(f"Error during parsing metrics file, skipping: {e}")
            continue
        metrics_file.product_family = product_family
        metrics_files.append(metrics_file)
    return metrics_files


def collect_pillar_metrics(root_path: str) -> List[MetricsFile]:
    """Collect metrics files of all products under the telemetry root."""
    collected: List[MetricsFile] = []
    for directory, product_family in PILLAR_DIRECTORIES:
        path = os.path.join(root_path, directory)
        logger.info(f"Processing {product_family} metrics in {path}")
        try:
            collected.extend(process_metrics_directory(path, product_family))
        except MetricsFileError as e:
            logger.error(f"Failed to process {product_family} metrics: {e}")
    return collected
