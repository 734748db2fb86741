import pytest

from schedsim.algorithms import run_algorithm, schedule_fcfs, schedule_rr, schedule_sjf
from schedsim.errors import ConfigurationError, MetricsError
from schedsim.metrics import (
    SPAN_EXTREMES,
    compute_metrics,
    span_by_extremes,
    span_by_input_order_endpoints,
)
from schedsim.models import Process, ProcessRecord


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5),
        Process(2, arrival_time=1, burst_time=3),
        Process(3, arrival_time=2, burst_time=8),
    ]


def test_fcfs_end_to_end_metrics():
    res = schedule_fcfs(_procs())
    m = compute_metrics(res.processes)

    assert [p.turnaround_time for p in res.processes] == [5, 7, 14]
    assert [p.waiting_time for p in res.processes] == [0, 4, 6]
    assert m.total_turnaround_time == 26
    assert m.total_waiting_time == 10
    assert m.average_turnaround_time == pytest.approx(26 / 3)
    assert m.average_waiting_time == pytest.approx(10 / 3)
    assert m.time_span == 16
    assert m.cpu_utilization == pytest.approx(100.0)
    assert m.throughput == pytest.approx(3 / 16)


def test_input_order_span_can_exceed_full_utilization():
    # RR finishes P2 (listed last) before P1, so the positional span is
    # shorter than the real one and utilization goes past 100%.
    procs = [Process(1, arrival_time=0, burst_time=5), Process(2, arrival_time=1, burst_time=3)]
    res = schedule_rr(procs, quantum=2)

    m = compute_metrics(res.processes)
    assert m.time_span == 7
    assert m.cpu_utilization == pytest.approx(800 / 7)
    assert m.throughput == pytest.approx(2 / 7)

    m = compute_metrics(res.processes, span_method=SPAN_EXTREMES)
    assert m.time_span == 8
    assert m.cpu_utilization == pytest.approx(100.0)
    assert m.throughput == pytest.approx(0.25)


def test_span_helpers_differ_on_reordered_completion():
    res = schedule_sjf(
        [
            Process(1, arrival_time=0, burst_time=8),
            Process(2, arrival_time=1, burst_time=4),
            Process(3, arrival_time=2, burst_time=9),
            Process(4, arrival_time=3, burst_time=5),
        ]
    )
    assert span_by_input_order_endpoints(res.processes) == 17
    assert span_by_extremes(res.processes) == 26


def test_idle_time_lowers_utilization():
    res = schedule_fcfs([Process(1, arrival_time=0, burst_time=2), Process(2, arrival_time=6, burst_time=2)])
    m = compute_metrics(res.processes)
    assert m.time_span == 8
    assert m.cpu_utilization == pytest.approx(50.0)


def test_negative_span_is_reported():
    # P2 (listed last) completes at 1, before P1 (listed first) arrives at 5.
    res = schedule_sjf([Process(1, arrival_time=5, burst_time=1), Process(2, arrival_time=0, burst_time=1)])
    with pytest.raises(MetricsError, match="span"):
        compute_metrics(res.processes)

    m = compute_metrics(res.processes, span_method=SPAN_EXTREMES)
    assert m.time_span == 6
    assert m.cpu_utilization == pytest.approx(100 * 2 / 6)


def test_zero_span_is_reported():
    res = schedule_sjf([Process(1, arrival_time=3, burst_time=1), Process(2, arrival_time=0, burst_time=3)])
    with pytest.raises(MetricsError):
        compute_metrics(res.processes)


def test_run_algorithm_propagates_metrics_error():
    with pytest.raises(MetricsError):
        run_algorithm("sjf", [Process(1, arrival_time=3, burst_time=1), Process(2, arrival_time=0, burst_time=3)])


def test_unfinished_records_rejected():
    rec = ProcessRecord.from_process(Process(1, arrival_time=0, burst_time=2))
    with pytest.raises(MetricsError):
        compute_metrics([rec])


def test_empty_set_rejected():
    with pytest.raises(MetricsError):
        compute_metrics([])


def test_unknown_span_method():
    res = schedule_fcfs(_procs())
    with pytest.raises(ConfigurationError):
        compute_metrics(res.processes, span_method="median")


def test_single_process():
    res = run_algorithm("srtf", [Process(1, arrival_time=2, burst_time=4)])
    assert res.metrics.time_span == 4
    assert res.metrics.cpu_utilization == pytest.approx(100.0)
    assert res.metrics.throughput == pytest.approx(0.25)
    assert res.processes[0].waiting_time == 0


def test_unarrived_rr_process_gets_negative_waiting_time():
    res = run_algorithm("rr", [Process(1, arrival_time=0, burst_time=1), Process(2, arrival_time=10, burst_time=1)], quantum=2)
    assert res.processes[1].turnaround_time == -8
    assert res.processes[1].waiting_time == -9


def test_failed_metrics_leave_records_untouched():
    res = schedule_sjf([Process(1, arrival_time=3, burst_time=1), Process(2, arrival_time=0, burst_time=3)])
    with pytest.raises(MetricsError):
        compute_metrics(res.processes)
    assert all(p.turnaround_time is None and p.waiting_time is None for p in res.processes)
