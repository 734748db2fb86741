from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by schedsim."""


class ConfigurationError(SchedulerError, ValueError):
    """Invalid workload or run options, detected before any algorithm runs."""


class WorkloadError(SchedulerError, ValueError):
    """A workload file or interactive entry could not be turned into processes."""


class MetricsError(SchedulerError, ArithmeticError):
    """Aggregate metrics cannot be derived from a scheduled process set."""
