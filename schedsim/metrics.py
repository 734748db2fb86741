from __future__ import annotations

import logging
from typing import Callable, Dict, List

from .errors import ConfigurationError, MetricsError
from .models import AggregateMetrics, ProcessRecord, ScheduleResult

logger = logging.getLogger(__name__)

SPAN_INPUT_ORDER = "input-order"
SPAN_EXTREMES = "extremes"


def span_by_input_order_endpoints(records: List[ProcessRecord]) -> int:
    """
    Completion time of the last record minus arrival time of the first
    record, taken positionally from the input order.

    This is not the true first-arrival to last-completion span whenever a
    scheduler finishes processes out of input order; the utilization it
    yields can then exceed 100%.
    """
    return records[-1].completion_time - records[0].arrival_time


def span_by_extremes(records: List[ProcessRecord]) -> int:
    """Latest completion minus earliest arrival over all records."""
    return max(r.completion_time for r in records) - min(r.arrival_time for r in records)


SPAN_METHODS: Dict[str, Callable[[List[ProcessRecord]], int]] = {
    SPAN_INPUT_ORDER: span_by_input_order_endpoints,
    SPAN_EXTREMES: span_by_extremes,
}


def fill_process_metrics(records: List[ProcessRecord]) -> None:
    for r in records:
        r.turnaround_time = r.completion_time - r.arrival_time
        r.waiting_time = r.turnaround_time - r.burst_time


def compute_metrics(records: List[ProcessRecord], span_method: str = SPAN_INPUT_ORDER) -> AggregateMetrics:
    """
    Derive turnaround/waiting time for every record (in place) and the
    aggregate averages, CPU utilization and throughput of the run.
    """
    if span_method not in SPAN_METHODS:
        raise ConfigurationError(
            f"Unknown span method '{span_method}' (use {', '.join(SPAN_METHODS)})"
        )
    if not records:
        raise MetricsError("Cannot compute metrics for an empty process set")

    unfinished = [r.pid for r in records if not r.finished]
    if unfinished:
        raise MetricsError(f"Processes without a completion time: {unfinished}")

    span = SPAN_METHODS[span_method](records)
    if span <= 0:
        raise MetricsError(
            f"Total time span is {span} ({span_method}); "
            "CPU utilization and throughput are undefined"
        )

    fill_process_metrics(records)

    n = len(records)
    total_turnaround = sum(r.turnaround_time for r in records)
    total_waiting = sum(r.waiting_time for r in records)
    total_burst = sum(r.burst_time for r in records)

    metrics = AggregateMetrics(
        total_turnaround_time=total_turnaround,
        total_waiting_time=total_waiting,
        total_burst_time=total_burst,
        average_turnaround_time=total_turnaround / n,
        average_waiting_time=total_waiting / n,
        time_span=span,
        span_method=span_method,
        cpu_utilization=100.0 * total_burst / span,
        throughput=n / span,
    )
    logger.debug("metrics over %d processes: span=%d util=%.2f%%", n, span, metrics.cpu_utilization)
    return metrics


def attach_metrics(result: ScheduleResult, span_method: str = SPAN_INPUT_ORDER) -> AggregateMetrics:
    result.metrics = compute_metrics(result.processes, span_method=span_method)
    return result.metrics
