"""Telemetry report assembly."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ._packages import Package
from .host import HostMetrics
from .packages import packages_to_json
from .pillars import MetricsFile

INSTALLED_PACKAGES_KEY = "installed_packages"

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _get_current_utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def build_metrics(
    host_metrics: HostMetrics,
    packages: List[Package],
    pillar_metrics: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge product metrics, host metrics and the installed package list.

    Product metrics come first; host metrics win on a key clash. The package
    list is embedded as one JSON string value and only when it is not empty.
    """
    metrics = dict(pillar_metrics or {})
    metrics.update(host_metrics.metrics)
    if packages:
        metrics[INSTALLED_PACKAGES_KEY] = packages_to_json(packages)
    return metrics


def build_report(
    host_metrics: HostMetrics,
    packages: List[Package],
    product_family: str,
    create_time: Optional[str] = None,
    pillar_metrics: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build a GenericReport request body.

    Args:
        host_metrics: Host metrics with the instance id
        packages: Installed packages found by the scan
        product_family: Percona product family of the report
        create_time: ISO-8601 timestamp (defaults to now)
        pillar_metrics: Metrics of the product the report is about

    Returns:
        JSON-serializable report request
    """
    metrics = build_metrics(host_metrics, packages, pillar_metrics)
    return {
        "reports": [
            {
                # each request shall have a unique id
                "id": str(uuid.uuid4()),
                "createTime": create_time or _get_current_utc_timestamp(),
                "instanceId": host_metrics.instance_id,
                "productFamily": product_family,
                "metrics": [{"key": key, "value": value} for key, value in metrics.items()],
            }
        ]
    }


def build_pillar_report(
    metrics_file: MetricsFile,
    host_metrics: HostMetrics,
    packages: List[Package],
) -> Dict[str, Any]:
    """Build the report for one product metrics file, enriched with host data."""
    return build_report(
        host_metrics,
        packages,
        product_family=metrics_file.product_family,
        create_time=format_timestamp(metrics_file.timestamp),
        pillar_metrics=metrics_file.metrics,
    )
