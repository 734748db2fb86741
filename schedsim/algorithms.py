from __future__ import annotations

import logging
from collections import deque
from operator import attrgetter
from typing import Callable, Iterable, List, Optional

from .errors import ConfigurationError
from .metrics import SPAN_INPUT_ORDER, attach_metrics
from .models import Process, ProcessRecord, ScheduleResult, ScheduledSlice, is_integer, validate_workload

logger = logging.getLogger(__name__)


def _fresh_records(processes: Iterable[Process]) -> List[ProcessRecord]:
    return [ProcessRecord.from_process(p) for p in processes]


def _append_slice(timeline: List[ScheduledSlice], pid: int, start_time: int, end_time: int) -> None:
    last = timeline[-1] if timeline else None
    if last is not None and last.pid == pid and last.end_time == start_time:
        last.end_time = end_time
    else:
        timeline.append(ScheduledSlice(pid=pid, start_time=start_time, end_time=end_time))


def schedule_fcfs(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive).

    Processes run in the order they were submitted, which is not
    necessarily arrival order.
    """
    records = _fresh_records(processes)

    time = 0
    timeline: List[ScheduledSlice] = []

    for rec in records:
        if time < rec.arrival_time:
            time = rec.arrival_time

        start_time = time
        time += rec.burst_time
        timeline.append(ScheduledSlice(pid=rec.pid, start_time=start_time, end_time=time))
        rec.mark_completed(time)
        logger.debug("FCFS: P%d ran %d..%d", rec.pid, start_time, time)

    return ScheduleResult(algorithm="FCFS", quantum=None, processes=records, timeline=timeline)


def _run_to_completion_by(records: List[ProcessRecord], key: Callable[[ProcessRecord], int], label: str) -> List[ScheduledSlice]:
    """
    Shared loop of the non-preemptive selection policies.

    Whenever at least one eligible process is unfinished, the one with the
    smallest key runs to completion; min() keeps the first of equal keys,
    so ties go to the lowest index. Otherwise the clock idles one tick.
    """
    time = 0
    completed = 0
    timeline: List[ScheduledSlice] = []

    while completed < len(records):
        ready = [r for r in records if r.arrival_time <= time and not r.finished]

        if not ready:
            time += 1
            continue

        rec = min(ready, key=key)

        start_time = time
        time += rec.burst_time
        timeline.append(ScheduledSlice(pid=rec.pid, start_time=start_time, end_time=time))
        rec.mark_completed(time)
        completed += 1
        logger.debug("%s: P%d ran %d..%d", label, rec.pid, start_time, time)

    return timeline


def schedule_sjf(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time.
    """
    records = _fresh_records(processes)
    timeline = _run_to_completion_by(records, attrgetter("burst_time"), "SJF")
    return ScheduleResult(algorithm="SJF (non-preemptive)", quantum=None, processes=records, timeline=timeline)


def schedule_priority(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority.
    """
    records = _fresh_records(processes)
    timeline = _run_to_completion_by(records, attrgetter("priority"), "Priority")
    return ScheduleResult(algorithm="Priority (static)", quantum=None, processes=records, timeline=timeline)


def schedule_srtf(processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).

    Simulated one time unit at a time: the winner is reselected every tick,
    so a newly arrived shorter job preempts the running one immediately.
    """
    records = _fresh_records(processes)

    time = 0
    completed = 0
    timeline: List[ScheduledSlice] = []

    while completed < len(records):
        ready = [r for r in records if r.arrival_time <= time and r.remaining_time > 0]

        if not ready:
            time += 1
            continue

        rec = min(ready, key=attrgetter("remaining_time"))

        _append_slice(timeline, rec.pid, time, time + 1)
        time += 1
        rec.remaining_time -= 1

        if rec.remaining_time == 0:
            rec.mark_completed(time)
            completed += 1
            logger.debug("SRTF: P%d completed at %d", rec.pid, time)

    return ScheduleResult(algorithm="SRTF", quantum=None, processes=records, timeline=timeline)


def schedule_rr(processes: List[Process], quantum: Optional[int] = None, admit_on_arrival: bool = False) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    By default every process is queued up front in input order, whether or
    not it has arrived; arrival time is only checked when admitting
    processes after a preempted slice. A process queued ahead of its arrival
    can therefore run, and even finish, before it arrives.

    With ``admit_on_arrival`` only processes that have arrived are queued:
    the initial queue holds those arrived at time 0, arrivals are admitted
    after every slice and the clock idles one tick while the queue is empty.
    """
    if not is_integer(quantum) or quantum <= 0:
        raise ConfigurationError("Round Robin requires a positive integer quantum (use --quantum)")

    records = _fresh_records(processes)

    time = 0
    timeline: List[ScheduledSlice] = []

    if admit_on_arrival:
        ready = deque(i for i, r in enumerate(records) if r.arrival_time <= time)
    else:
        ready = deque(range(len(records)))

    def enqueue_new_arrivals(current_time: int, running: Optional[int]) -> None:
        for i, r in enumerate(records):
            if i != running and i not in ready and not r.finished and r.arrival_time <= current_time:
                ready.append(i)

    def pending() -> bool:
        return any(not r.finished for r in records)

    while ready or (admit_on_arrival and pending()):
        if not ready:
            time += 1
            enqueue_new_arrivals(time, running=None)
            continue

        idx = ready.popleft()
        rec = records[idx]

        if rec.remaining_time > quantum:
            _append_slice(timeline, rec.pid, time, time + quantum)
            time += quantum
            rec.remaining_time -= quantum
            # Arrivals during the slice queue ahead of the preempted process.
            enqueue_new_arrivals(time, running=idx)
            ready.append(idx)
        else:
            _append_slice(timeline, rec.pid, time, time + rec.remaining_time)
            time += rec.remaining_time
            rec.remaining_time = 0
            rec.mark_completed(time)
            logger.debug("RR: P%d completed at %d", rec.pid, time)
            if admit_on_arrival:
                enqueue_new_arrivals(time, running=idx)

    return ScheduleResult(algorithm="Round Robin", quantum=quantum, processes=records, timeline=timeline)


ALGORITHMS = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "srtf": schedule_srtf,
    "priority": schedule_priority,
    "rr": schedule_rr,
}


def run_algorithm(
    name: str,
    processes: Iterable[Process],
    quantum: Optional[int] = None,
    span_method: str = SPAN_INPUT_ORDER,
    admit_on_arrival: bool = False,
) -> ScheduleResult:
    """
    Validate the workload, run the requested algorithm on a fresh copy of
    it and attach aggregate metrics to the result.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ConfigurationError(f"Unknown algorithm '{name}' (use {', '.join(ALGORITHMS)})")

    processes = validate_workload(processes)

    if name == "rr":
        result = schedule_rr(processes, quantum=quantum, admit_on_arrival=admit_on_arrival)
    else:
        result = ALGORITHMS[name](processes, quantum=quantum)

    attach_metrics(result, span_method=span_method)
    logger.info(
        "%s: %d processes, avg turnaround %.2f, avg waiting %.2f",
        result.algorithm,
        len(result.processes),
        result.metrics.average_turnaround_time,
        result.metrics.average_waiting_time,
    )
    return result
