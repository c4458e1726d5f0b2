from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .compare import compare_algorithms
from .config import ALGORITHM_KEYS, DEFAULT_COMM, DEFAULT_QUANTUM
from .exceptions import SchedulerError
from .gantt import build_heft_gantt, build_rich_gantt
from .heft import schedule_heft
from .heft_trace import build_heft_steps
from .logging_config import setup_logging
from .models import HeftResult, Process, RankStep, Simulation
from .presets import example_dag, load_example, workload_names
from .trace import simulate
from .workload_io import load_dag, load_workload

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-trace",
        description="CPU scheduling (FCFS, SJF, SRTF, Priority, HRRN, RR) and HEFT DAG scheduling with step traces.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHM_KEYS)}).",
    )
    _add_workload_args(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round robin (ignored by the other algorithms).",
    )
    run_parser.add_argument(
        "--steps",
        action="store_true",
        help="Print the step-by-step trace (ready queue and completed set per slot).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    _add_workload_args(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHM_KEYS),
        help=f"Algorithms to compare (default: {' '.join(ALGORITHM_KEYS)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )

    heft_parser = subparsers.add_parser("heft", help="Schedule a task DAG with HEFT.")
    heft_parser.add_argument(
        "--dag",
        "-d",
        default=None,
        help="Text file with one 'taskId weight [parent1,parent2]' per line (default: built-in example).",
    )
    heft_parser.add_argument(
        "--comm",
        "-c",
        type=float,
        default=DEFAULT_COMM,
        help=f"Communication cost between processors (default: {DEFAULT_COMM:g}).",
    )
    heft_parser.add_argument("--steps", action="store_true", help="Print rank and placement steps.")

    subparsers.add_parser("examples", help="List the built-in example workloads.")

    return parser


def _add_workload_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--workload", "-w", help="Path to JSON or CSV workload file.")
    source.add_argument("--example", "-e", help=f"Built-in workload ({', '.join(workload_names())}).")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject malformed process fields instead of coercing them.",
    )


def _load_processes(args: argparse.Namespace) -> List[Process]:
    if args.workload:
        return load_workload(Path(args.workload), strict=args.strict)
    return load_example(args.example)


def _print_simulation(sim: Simulation, console: Console, show_steps: bool) -> None:
    result = sim.result
    console.print(f"[bold]Algorithm:[/bold] {result.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    if show_steps:
        step_table = Table(title="Decision trace", box=box.SIMPLE_HEAVY)
        for h in ("#", "Time", "Running", "Ready (remaining/waiting)", "Completed"):
            step_table.add_column(h)
        for step in sim.steps:
            ready = ", ".join(f"{r.name}({r.remaining}/{r.waiting})" for r in step.ready)
            step_table.add_row(
                str(step.index + 1),
                f"{step.start}-{step.end}",
                step.running or "[dim]idle[/dim]",
                ready or "-",
                ", ".join(step.completed) or "-",
            )
        console.print(step_table)
        console.print()

    headers = ["Process", "Arrive", "Burst", "Priority", "Start", "Finish", "Wait", "Turnaround", "Response"]
    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Process", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.name,
            str(p.arrival),
            str(p.burst),
            str(p.priority),
            str(p.start),
            str(p.finish),
            str(p.waiting),
            str(p.turnaround),
            str(p.response),
        )

    console.print(proc_table)
    console.print()

    summary, system = result.summary, result.system
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")
    sys_table.add_row("Avg waiting", f"{summary.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{summary.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{summary.avg_response:.2f}")
    sys_table.add_row("Throughput (proc/time)", f"{system.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")
    sys_table.add_row("Starvation count", str(system.starvation_count))
    console.print(sys_table)


def _print_heft(result: HeftResult, console: Console, show_steps: bool) -> None:
    rank_table = Table(title="Upward ranks", box=box.SIMPLE_HEAVY)
    rank_table.add_column("Order", justify="right")
    rank_table.add_column("Task")
    rank_table.add_column("Avg comp", justify="right")
    rank_table.add_column("rank_u", justify="right")
    for idx, tid in enumerate(result.ordered_tasks, start=1):
        rank_table.add_row(str(idx), tid, f"{result.avg_comp[tid]:.2f}", f"{result.rank[tid]:.2f}")
    console.print(rank_table)

    if show_steps:
        for step in build_heft_steps(result):
            if isinstance(step, RankStep):
                terms = ", ".join(f"{c.successor_id}:{c.term:.2f}" for c in step.successor_contributions)
                console.print(
                    f"[cyan]rank[/cyan] {step.task_id}: avg {step.avg_comp:.2f}"
                    f" + max({terms or '-'}) = {step.rank:.2f}"
                )
            else:
                options = ", ".join(f"{c.processor_id} {c.start:.1f}-{c.end:.1f}" for c in step.candidates)
                console.print(
                    f"[green]place[/green] {step.task_id}: [{options}] -> {step.chosen_processor}"
                )
        console.print()

    console.print(build_heft_gantt(result.assignments, result.processors))
    console.print(f"[bold]Makespan:[/bold] {result.makespan:.2f}")


def _run_compare(processes: List[Process], algorithms: List[str], quantum: int, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for row in compare_algorithms(processes, quantum=quantum, algorithms=algorithms):
        summary_table.add_row(
            row.label,
            "" if row.quantum is None else str(row.quantum),
            f"{row.summary.avg_waiting:.2f}",
            f"{row.summary.avg_turnaround:.2f}",
            f"{row.summary.avg_response:.2f}",
        )

    console.print(summary_table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()
    setup_logging(args.verbose)

    try:
        if args.command == "run":
            processes = _load_processes(args)
            sim = simulate(processes, args.algorithm, quantum=args.quantum, strict=args.strict)
            _print_simulation(sim, console, args.steps)
            return 0

        if args.command == "compare":
            _run_compare(_load_processes(args), args.algorithms, args.quantum, console)
            return 0

        if args.command == "heft":
            tasks = load_dag(args.dag) if args.dag else example_dag()
            _print_heft(schedule_heft(tasks, comm=args.comm), console, args.steps)
            return 0

        if args.command == "examples":
            for name in workload_names():
                names = ", ".join(f"{p.name}({p.arrival},{p.burst},{p.priority})" for p in load_example(name))
                console.print(f"[bold]{name}[/bold]: {names}")
            return 0
    except (SchedulerError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
