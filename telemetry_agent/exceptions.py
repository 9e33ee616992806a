"""Custom exceptions for the telemetry agent."""


class TelemetryAgentError(Exception):
    """Base exception for all telemetry agent operations."""


class ConfigurationError(TelemetryAgentError):
    """Raised when configuration validation fails."""


class CommandExecutionError(TelemetryAgentError):
    """Raised when an external command cannot be executed or does not finish in time."""


class PackageManagerNotFoundError(TelemetryAgentError):
    """Raised when no supported package query tool is available on PATH."""


class RepositoryNotFoundError(TelemetryAgentError):
    """Raised when no remote repository is recorded for an installed package."""


class UnexpectedRepositoryLineError(TelemetryAgentError):
    """Raised when a repository line of apt-cache policy output cannot be parsed."""


class UnexpectedConfiguredRepositoryLineError(TelemetryAgentError):
    """Raised when the installed-version line of apt-cache policy output cannot be parsed."""



class MetricsFileError(TelemetryAgentError):
    """Raised when a product metrics file or directory cannot be read or parsed."""


class HistoryError(TelemetryAgentError):
    """Raised when the telemetry history directory cannot be used."""
