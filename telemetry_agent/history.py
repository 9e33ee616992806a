"""Telemetry history: copies of sent reports kept on the local filesystem."""

import json
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import HistoryError
from .logging_config import logger
from .pillars import MetricsFile, is_metrics_file, timestamp_from_filename

DEFAULT_HISTORY_KEEP_INTERVAL = 7 * 24 * 60 * 60  # seconds


def create_history_directory(history_path: str) -> None:
    """
    Create the history directory if it doesn't exist.

    Raises:
        HistoryError: If the directory can't be created
    """
    logger.debug(f"Checking/creating telemetry directory {history_path}")
    try:
        os.makedirs(history_path, exist_ok=True)
    except OSError as e:
        raise HistoryError(f"can't create directory {history_path}: {e}") from e


def _validate_directory(path: Path) -> None:
    if not path.exists():
        raise HistoryError(f"history directory {path} doesn't exist")
    if not path.is_dir():
        raise HistoryError(f"{path} is not a directory")


def write_metrics_to_history(history_file: str, report: Dict[str, Any]) -> None:
    """
    Write a sent report request into a history file as indented JSON.

    Raises:
        HistoryError: If the report has no reports or the file can't be written
    """
    if not report or not report.get("reports"):
        raise HistoryError("invalid Percona Platform report, reports list is empty")

    path = Path(os.path.normpath(history_file))
    _validate_directory(path.parent)

    try:
        path.write_text(json.dumps(report, indent=2))
        path.chmod(0o600)
    except OSError as e:
        raise HistoryError(f"can't write history file {path}: {e}") from e


def archive_metrics_file(metrics_file: MetricsFile, report: Dict[str, Any], history_path: str) -> bool:
    """
    Move a sent metrics file out of its product directory.

    The report built from it is stored under the same file name in the
    history directory, then the source file is removed.

    Returns:
        True when both steps succeeded
    """
    history_file = os.path.join(history_path, os.path.basename(metrics_file.filename))
    logger.info(f"Writing metrics from {metrics_file.filename} to history file {history_file}")
    try:
        write_metrics_to_history(history_file, report)
    except HistoryError as e:
        logger.error(f"Failed to write metrics into history file: {e}")
        return False

    logger.info(f"Removing metrics file {metrics_file.filename}")
    try:
        os.remove(metrics_file.filename)
    except OSError as e:
        logger.error(f"Failed to remove metrics file {metrics_file.filename}: {e}")
        return False
    return True


def cleanup_metrics_history(history_path: str, keep_interval: int, now: Optional[float] = None) -> int:
    """
    Remove history files older than the keep interval.

    File age comes from the timestamp in the file name, not from the
    filesystem. Files whose name has no timestamp are left alone.

    Args:
        history_path: History directory
        keep_interval: Retention in seconds
        now: Current unix time (defaults to time.time())

    Returns:
        Number of removed files

    Raises:
        HistoryError: If the history directory is missing or unreadable
    """
    directory = Path(os.path.normpath(history_path))
    _validate_directory(directory)

    threshold = (time.time() if now is None else now) - keep_interval
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise HistoryError(f"can't read directory with history metrics files {directory}: {e}") from e

    removed = 0
    for entry in entries:
        if not is_metrics_file(entry):
            logger.debug(f"{entry} seems not a metrics file, skipping")
            continue
        try:
            created = timestamp_from_filename(entry.name)
        except ValueError:
            logger.warning(f"Can't get creation time from history file name {entry.name}, skipping")
            continue
        if created > threshold:
            continue

        logger.debug(f"Removing history file {entry}")
        try:
            entry.unlink()
        except OSError as e:
            logger.error(f"Error removing history file {entry}, skipping: {e}")
            continue
        removed += 1
    return removed
