from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .errors import ConfigurationError, MetricsError, SchedulerError
from .gantt import build_rich_gantt
from .metrics import SPAN_INPUT_ORDER, SPAN_METHODS
from .models import Process, ScheduleResult
from .workload_io import load_workload, parse_process_line

logger = logging.getLogger(__name__)

MENU_CHOICES = {
    "1": ("fcfs", "FCFS"),
    "2": ("sjf", "SJF"),
    "3": ("srtf", "SRTF"),
    "4": ("priority", "Priority Scheduling"),
    "5": ("rr", "Round Robin"),
}


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--span",
        choices=sorted(SPAN_METHODS),
        default=SPAN_INPUT_ORDER,
        help="How the total time span is measured (default: input-order, "
        "last listed completion minus first listed arrival).",
    )
    parser.add_argument(
        "--admit-on-arrival",
        action="store_true",
        help="Round Robin: only queue processes once they have arrived.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, RR).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHMS)}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    _add_run_options(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare aggregate metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(ALGORITHMS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for RR when included (default: 2).",
    )
    _add_run_options(compare_parser)

    interactive_parser = subparsers.add_parser(
        "interactive",
        help="Enter processes and pick an algorithm at the prompt.",
    )
    _add_run_options(interactive_parser)

    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in ["Process", "AT", "BT", "CT", "TAT", "WT"]:
        proc_table.add_column(h, justify="center" if h == "Process" else "right")

    for p in result.processes:
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
        )

    console.print(proc_table)
    console.print()

    m = result.metrics
    if m is None:
        return

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Average Turnaround Time", f"{m.average_turnaround_time:.2f}")
    sys_table.add_row("Average Waiting Time", f"{m.average_waiting_time:.2f}")
    sys_table.add_row("CPU Utilization", f"{m.cpu_utilization:.2f}%")
    sys_table.add_row("Throughput (proc/time)", f"{m.throughput:.3f}")
    sys_table.add_row(f"Time span ({m.span_method})", str(m.time_span))

    console.print(sys_table)


def _run_compare(args: argparse.Namespace, console: Console) -> None:
    processes = load_workload(Path(args.workload))

    summary_table = Table(title=f"Algorithm comparison: {args.workload}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("CPU util", justify="right")
    summary_table.add_column("Throughput", justify="right")

    for alg in args.algorithms:
        q = args.quantum if alg.lower() == "rr" else None
        try:
            result = run_algorithm(
                alg,
                processes,
                quantum=q,
                span_method=args.span,
                admit_on_arrival=args.admit_on_arrival,
            )
        except MetricsError as exc:
            logger.warning("%s: %s", alg, exc)
            summary_table.add_row(alg, "" if q is None else str(q), "-", "-", "-", f"n/a ({exc})")
            continue

        m = result.metrics
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{m.average_turnaround_time:.2f}",
            f"{m.average_waiting_time:.2f}",
            f"{m.cpu_utilization:.2f}%",
            f"{m.throughput:.3f}",
        )

    console.print(summary_table)


def _interactive_session(
    console: Console,
    span_method: str = SPAN_INPUT_ORDER,
    admit_on_arrival: bool = False,
    stream: Optional[TextIO] = None,
) -> ScheduleResult:
    """
    Prompt for a process set and an algorithm, run it and print the result.

    ``stream`` replaces stdin for every prompt.
    """
    n = IntPrompt.ask("Enter number of processes", console=console, stream=stream)
    if n <= 0:
        raise ConfigurationError("Number of processes must be positive")

    processes: List[Process] = []
    for pid in range(1, n + 1):
        line = Prompt.ask(
            f"Enter arrival time, burst time, and priority for process {pid}",
            console=console,
            stream=stream,
        )
        processes.append(parse_process_line(line, pid))

    console.print("[bold]Choose scheduling algorithm:[/bold]")
    for key, (_, label) in MENU_CHOICES.items():
        console.print(f"  [yellow]{key}[/yellow]. {label}")
    choice = Prompt.ask("Choice", choices=list(MENU_CHOICES), console=console, stream=stream)
    algorithm = MENU_CHOICES[choice][0]

    quantum = None
    if algorithm == "rr":
        quantum = IntPrompt.ask("Enter time quantum", console=console, stream=stream)

    result = run_algorithm(
        algorithm,
        processes,
        quantum=quantum,
        span_method=span_method,
        admit_on_arrival=admit_on_arrival,
    )
    _print_result(result, console)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = run_algorithm(
                args.algorithm,
                processes,
                quantum=args.quantum,
                span_method=args.span,
                admit_on_arrival=args.admit_on_arrival,
            )
            _print_result(result, console)
            return 0

        if args.command == "compare":
            _run_compare(args, console)
            return 0

        if args.command == "interactive":
            _interactive_session(console, span_method=args.span, admit_on_arrival=args.admit_on_arrival)
            return 0
    except SchedulerError as exc:
        logger.debug("run failed", exc_info=True)
        console.print(f"Error: {exc}", style="red", markup=False)
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
