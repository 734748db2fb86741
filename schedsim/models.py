from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class Process:
    """
    Static description of one job as submitted by the caller.

    Lower numeric priority means more urgent (only Priority scheduling
    looks at it).
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class ProcessRecord:
    """
    Working copy of a Process for a single algorithm run.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    remaining_time: int
    completion_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    waiting_time: Optional[int] = None

    @classmethod
    def from_process(cls, process: Process) -> "ProcessRecord":
        return cls(
            pid=process.pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            priority=process.priority,
            remaining_time=process.burst_time,
        )

    @property
    def finished(self) -> bool:
        return self.completion_time is not None

    def mark_completed(self, time: int) -> None:
        if self.completion_time is not None:
            raise RuntimeError(f"P{self.pid} already completed at t={self.completion_time}")
        self.completion_time = time


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass
class AggregateMetrics:
    total_turnaround_time: int
    total_waiting_time: int
    total_burst_time: int
    average_turnaround_time: float
    average_waiting_time: float
    time_span: int
    span_method: str
    cpu_utilization: float  # percent
    throughput: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessRecord] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    metrics: Optional[AggregateMetrics] = None

    @property
    def completion_order(self) -> List[int]:
        done = [p for p in self.processes if p.finished]
        return [p.pid for p in sorted(done, key=lambda p: p.completion_time)]

    def record(self, pid: int) -> ProcessRecord:
        for p in self.processes:
            if p.pid == pid:
                return p
        raise KeyError(pid)


def is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_workload(processes: Iterable[Process]) -> List[Process]:
    """
    Check the preconditions every algorithm relies on and return the
    processes as a list.
    """
    processes = list(processes)
    if not processes:
        raise ConfigurationError("Process set is empty")

    seen: set[int] = set()
    for p in processes:
        for name in ("pid", "arrival_time", "burst_time", "priority"):
            value = getattr(p, name)
            if not is_integer(value):
                raise ConfigurationError(f"Process {p.pid!r}: {name} must be an integer, got {value!r}")
        if p.pid <= 0:
            raise ConfigurationError(f"Process id must be positive, got {p.pid}")
        if p.pid in seen:
            raise ConfigurationError(f"Duplicate process id {p.pid}")
        seen.add(p.pid)
        if p.arrival_time < 0:
            raise ConfigurationError(f"P{p.pid}: arrival time must be >= 0, got {p.arrival_time}")
        if p.burst_time <= 0:
            raise ConfigurationError(f"P{p.pid}: burst time must be > 0, got {p.burst_time}")

    return processes
