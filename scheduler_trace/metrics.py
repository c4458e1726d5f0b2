from __future__ import annotations

from typing import Iterable, List

from .exceptions import InvariantError
from .models import ProcessMetrics, ProcessRun, ScheduleResult, SummaryMetrics, SystemMetrics


def compute_process_metrics(runs: Iterable[ProcessRun]) -> List[ProcessMetrics]:
    """
    Derive waiting/turnaround/response for every finished run.
    """
    metrics: List[ProcessMetrics] = []
    for run in runs:
        p = run.process
        if run.finish is None or run.start is None:
            raise InvariantError(f"Process {p.name} was never completed")

        turnaround = run.finish - p.arrival
        metrics.append(
            ProcessMetrics(
                name=p.name,
                arrival=p.arrival,
                burst=p.burst,
                priority=p.priority,
                start=run.start,
                finish=run.finish,
                waiting=turnaround - p.burst,
                turnaround=turnaround,
                response=run.start - p.arrival,
            )
        )
    return metrics


def summarize_process_metrics(processes: List[ProcessMetrics]) -> SummaryMetrics:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return SummaryMetrics(avg_waiting=0.0, avg_turnaround=0.0, avg_response=0.0)

    n = len(processes)
    return SummaryMetrics(
        avg_waiting=sum(p.waiting for p in processes) / n,
        avg_turnaround=sum(p.turnaround for p in processes) / n,
        avg_response=sum(p.response for p in processes) / n,
    )


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline slices.
    """
    if not result.processes:
        return SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(p.finish for p in result.processes)
    cpu_busy_time = sum(s.duration for s in result.timeline if not s.is_idle)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Count processes whose waiting time is more than 2x the average waiting time.
    avg_wait = sum(p.waiting for p in result.processes) / len(result.processes)
    starvation_count = sum(1 for p in result.processes if p.waiting > 2 * avg_wait)

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )


def finalize_result(result: ScheduleResult) -> ScheduleResult:
    result.summary = summarize_process_metrics(result.processes)
    result.system = compute_system_metrics(result)
    return result
