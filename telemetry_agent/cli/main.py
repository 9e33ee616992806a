"""Command line interface of the telemetry agent.

Configuration comes from PERCONA_TELEMETRY_* environment variables;
command line options take precedence over them.
"""

import json
import os
import signal
import threading
from typing import List, Optional

import click
import sentry_sdk

from .. import __version__
from ..config import AgentConfig, load_config
from ..console import console, print_packages_table
from ..exceptions import ConfigurationError, HistoryError
from ..history import archive_metrics_file, cleanup_metrics_history, create_history_directory
from ..host import get_os_info, scrape_host_metrics
from ..logging_config import logger, set_log_level
from ..packages import scrape_installed_packages
from ..pillars import collect_pillar_metrics
from ..platform_client import PlatformClient, UploadResult
from ..report import build_pillar_report

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def initialize_sentry() -> None:
    """Initialize Sentry error tracking when SENTRY_DSN is set."""
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        return

    def before_send(event, hint):
        """Don't send configuration errors - these are user errors."""
        if "exc_info" in hint:
            exc_type, exc_value, tb = hint["exc_info"]
            if isinstance(exc_value, ConfigurationError):
                return None
        return event

    sentry_sdk.init(
        dsn=sentry_dsn,
        release=f"percona-telemetry-agent@{__version__}",
        send_default_pii=False,
        before_send=before_send,
    )


def _load_config(ctx: click.Context) -> AgentConfig:
    try:
        config = load_config()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    if not ctx.obj.get("verbose"):
        set_log_level(config.log_level)
    return config


def run_iteration(
    config: AgentConfig,
    client: PlatformClient,
    stop_event: threading.Event,
    dry_run: bool = False,
) -> List[UploadResult]:
    """
    Run one processing iteration.

    Every product metrics file found under the telemetry root is sent as
    its own report, enriched with host metrics and installed packages. A
    sent file is moved to the history directory. With dry_run the reports
    are printed and the files are left in place.

    Returns:
        Upload results, one per sent report
    """
    logger.info("Scraping host metrics")
    host_metrics = scrape_host_metrics(config.uuid_file, config.instance_id or "")

    logger.info("Scraping installed Percona packages")
    packages = scrape_installed_packages(
        stop_event=stop_event,
        os_name=host_metrics.metrics["OS"],
        timeout=config.command_timeout,
    )

    logger.info("Processing Pillars metric files")
    results: List[UploadResult] = []
    for metrics_file in collect_pillar_metrics(config.root_path):
        if stop_event.is_set():
            logger.info("Metrics processing interrupted")
            break

        report = build_pillar_report(metrics_file, host_metrics, packages)
        if dry_run:
            console.print_json(json.dumps(report))
            continue

        result = client.send_telemetry(report)
        results.append(result)
        if not result.success:
            if not stop_event.is_set():
                logger.error(f"Error during sending telemetry for {metrics_file.filename}: {result.error_message}")
            continue

        archive_metrics_file(metrics_file, report, config.history_path)

    return results


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose (debug) logging.")
@click.version_option(__version__, prog_name="Percona Telemetry Agent")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Percona Telemetry Agent gathers information about the host and installed Percona software."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        set_log_level("DEBUG")


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print packages as JSON.")
@click.option("--os-name", default=None, help="OS name to classify instead of the host's one.")
@click.option("--timeout", type=click.IntRange(min=1), default=None, help="Timeout of each package manager call.")
@click.pass_context
def scrape(ctx: click.Context, as_json: bool, os_name: Optional[str], timeout: Optional[int]) -> None:
    """List installed Percona and related packages."""
    config = _load_config(ctx)
    os_name = os_name or get_os_info()
    packages = scrape_installed_packages(os_name=os_name, timeout=timeout or config.command_timeout)

    if as_json:
        click.echo(json.dumps([package.to_dict() for package in packages], indent=2))
    else:
        print_packages_table(packages, os_name)


def _cleanup_history(config: AgentConfig) -> None:
    logger.info(f"Cleaning up history metric files in {config.history_path}")
    try:
        removed = cleanup_metrics_history(config.history_path, config.history_keep_interval)
    except HistoryError as e:
        # not critical, keep processing
        logger.error(f"Error during history metric directory cleanup: {e}")
        return
    logger.debug(f"Removed {removed} history file(s)")


@cli.command()
@click.option("--root-path", default=None, help="Percona telemetry root path on the local filesystem.")
@click.pass_context
def report(ctx: click.Context, root_path: Optional[str]) -> None:
    """Print the reports for pending product metrics files without sending them."""
    config = _load_config(ctx)
    if root_path:
        config.root_path = root_path
    client = PlatformClient(url=config.url)
    run_iteration(config, client, threading.Event(), dry_run=True)


@cli.command()
@click.option("--once", is_flag=True, default=False, help="Run a single iteration immediately and exit.")
@click.option("--dry-run", is_flag=True, default=False, help="Print reports instead of sending them.")
@click.option("--url", default=None, help="Percona Platform URL to send telemetry to.")
@click.option("--root-path", default=None, help="Percona telemetry root path on the local filesystem.")
@click.option("--check-interval", type=click.IntRange(min=1), default=None, help="Seconds between iterations.")
@click.pass_context
def run(
    ctx: click.Context,
    once: bool,
    dry_run: bool,
    url: Optional[str],
    root_path: Optional[str],
    check_interval: Optional[int],
) -> None:
    """Run the telemetry agent loop."""
    config = _load_config(ctx)
    if url:
        config.url = url
    if root_path:
        config.root_path = root_path
    if check_interval:
        config.check_interval = check_interval
    try:
        config.validate()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    initialize_sentry()

    if not dry_run:
        try:
            create_history_directory(config.history_path)
        except HistoryError as e:
            raise click.ClickException(str(e))

    stop_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    client = PlatformClient(url=config.url, resend_interval=config.resend_interval, stop_event=stop_event)

    logger.info("Percona Telemetry Agent started")
    if once:
        if not dry_run:
            _cleanup_history(config)
        run_iteration(config, client, stop_event, dry_run=dry_run)
        logger.info("finished")
        return

    while True:
        logger.info(f"Sleeping for {config.check_interval} seconds before next iteration")
        if stop_event.wait(config.check_interval):
            break
        logger.info("Start metrics processing iteration")
        if not dry_run:
            _cleanup_history(config)
        run_iteration(config, client, stop_event, dry_run=dry_run)

    logger.info("finished")


def main() -> None:
    """Console script entry point."""
    cli(obj={})
