"""Shared utilities for running package manager commands."""

import subprocess
import threading
import time
from typing import Optional

from telemetry_agent.exceptions import CommandExecutionError
from telemetry_agent.logging_config import logger

from .protocol import DEFAULT_COMMAND_TIMEOUT

# How often a running command is checked for timeout and cancellation, in seconds
POLL_INTERVAL = 0.1


def _kill(process: subprocess.Popen) -> None:
    process.kill()
    # reap the child and drain its pipe
    process.communicate()


def run_command(
    cmd: list[str],
    command_name: str,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
    stop_event: Optional[threading.Event] = None,
) -> subprocess.CompletedProcess:
    """
    Run a command with stderr folded into stdout.

    A non-zero exit status is not an error here: package managers use it to
    report "nothing matched", so the caller inspects the result. The child
    is killed when the timeout expires or the stop event is set.

    Args:
        cmd: Command to run as a list
        command_name: Name of the command for error reporting
        timeout: Command timeout in seconds
        stop_event: Event signalling agent shutdown (optional)

    Returns:
        CompletedProcess with the combined output in stdout

    Raises:
        CommandExecutionError: If the command is missing, times out or is cancelled
    """
    if stop_event is not None and stop_event.is_set():
        raise CommandExecutionError(f"{command_name} command cancelled")

    logger.debug(f"Executing command: {' '.join(cmd)}")

    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except FileNotFoundError:
        raise CommandExecutionError(f"{command_name} command not found - is it installed?")
    except OSError as e:
        raise CommandExecutionError(f"{command_name} command could not be started: {e}")

    start_time = time.monotonic()
    while True:
        try:
            output, _ = process.communicate(timeout=POLL_INTERVAL)
            break
        except subprocess.TimeoutExpired:
            if stop_event is not None and stop_event.is_set():
                _kill(process)
                raise CommandExecutionError(f"{command_name} command cancelled")
            if time.monotonic() - start_time >= timeout:
                _kill(process)
                raise CommandExecutionError(f"{command_name} command timed out after {timeout}s")

    return subprocess.CompletedProcess(args=cmd, returncode=process.returncode, stdout=output or "")


def split_output_line(line: str, fields: int) -> Optional[list[str]]:
    """
    Split one line of a custom query format into its '|'-separated fields.

    The query formats are passed without a shell, so their wrapping single
    quotes show up in the output and are trimmed here together with spaces.

    Returns:
        The fields, or None for blank lines and lines with the wrong field count
    """
    line = line.strip(" '\t")
    if not line:
        return None
    tokens = line.split("|")
    if len(tokens) != fields:
        return None
    return tokens
