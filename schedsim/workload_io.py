from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List

from .errors import WorkloadError
from .models import Process, is_integer

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.

    File order is kept: it is the submission order FCFS runs in and the
    positional order the default span uses.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.debug("loaded %d processes from %s", len(processes), path)
    return processes


def _load_json(path: Path) -> List[Process]:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        raise WorkloadError(f"Cannot read workload {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise WorkloadError(f"Workload {path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise WorkloadError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return [
        _process_from_mapping(entry, position, from_text=False)
        for position, entry in enumerate(raw, start=1)
    ]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for position, row in enumerate(reader, start=1):
                processes.append(_process_from_mapping(row, position, from_text=True))
    except OSError as exc:
        raise WorkloadError(f"Cannot read workload {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise WorkloadError(f"Workload {path} is not valid UTF-8: {exc}") from exc
    except csv.Error as exc:
        raise WorkloadError(f"Invalid CSV in {path}: {exc}") from exc
    return processes


def _to_int(value, from_text: bool) -> int:
    # CSV cells are strings; JSON numbers must already be integers.
    if from_text and isinstance(value, str):
        return int(value)
    if not is_integer(value):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _optional_int(mapping, key: str, default: int, from_text: bool) -> int:
    value = mapping.get(key)
    if value in (None, ""):
        return default
    return _to_int(value, from_text)


def _process_from_mapping(mapping, position: int, from_text: bool) -> Process:
    try:
        arrival_time = _to_int(mapping["arrival_time"], from_text)
        burst_time = _to_int(mapping["burst_time"], from_text)
        # Unnumbered entries get their 1-based position as pid.
        pid = _optional_int(mapping, "pid", position, from_text)
        priority = _optional_int(mapping, "priority", 0, from_text)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def parse_process_line(line: str, pid: int) -> Process:
    """
    Parse an interactive "arrival burst priority" entry.
    """
    parts = line.split()
    if len(parts) != 3:
        raise WorkloadError(f"Expected 'arrival burst priority' for process {pid}, got {line!r}")
    try:
        arrival_time, burst_time, priority = (int(x) for x in parts)
    except ValueError as exc:
        raise WorkloadError(f"Non-integer value in entry for process {pid}: {line!r}") from exc
    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time, priority=priority)
