"""
schedsim package.

Deterministic CPU scheduling simulator (FCFS, SJF, SRTF, Priority, Round
Robin) with turnaround, waiting, utilization and throughput metrics, plus a
command-line driver.
"""

from .algorithms import ALGORITHMS, run_algorithm
from .models import Process, ScheduleResult

__all__ = ["ALGORITHMS", "Process", "ScheduleResult", "cli", "run_algorithm"]
