from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import ALGORITHM_LABELS, IDLE
from .exceptions import ConfigError
from .metrics import compute_process_metrics, finalize_result
from .models import Process, ProcessRun, ScheduleResult, ScheduledSlice
from .validation import validate_algorithm, validate_processes, validate_quantum

logger = logging.getLogger(__name__)

Scheduler = Callable[..., ScheduleResult]


def _prepare(processes: Sequence[Process]) -> Tuple[List[ProcessRun], List[ProcessRun]]:
    """
    Validate and copy the input, returning the runs in input order and in
    candidate order (stable by arrival, ties keep input order).
    """
    copies = validate_processes(processes)
    runs = [ProcessRun.from_process(p) for p in copies]
    by_arrival = sorted(runs, key=lambda r: r.process.arrival)
    return runs, by_arrival


def _append_slice(
    timeline: List[ScheduledSlice], pid: str, start: int, end: int, merge: bool = False
) -> None:
    if end <= start:
        return
    if merge and timeline and timeline[-1].pid == pid and timeline[-1].end_time == start:
        start = timeline.pop().start_time
    timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=end))


def _build_result(
    key: str, quantum: Optional[int], runs: List[ProcessRun], timeline: List[ScheduledSlice]
) -> ScheduleResult:
    result = ScheduleResult(
        algorithm=key,
        label=ALGORITHM_LABELS[key],
        quantum=quantum,
        processes=compute_process_metrics(runs),
        timeline=timeline,
    )
    finalize_result(result)
    logger.debug(
        "%s finished %d processes in %d slots (makespan %d)",
        result.label,
        len(runs),
        len(timeline),
        result.system.makespan,
    )
    return result


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    runs, queue = _prepare(processes)

    time = 0
    timeline: List[ScheduledSlice] = []

    for run in queue:
        p = run.process
        if time < p.arrival:
            # CPU idle until process arrives
            _append_slice(timeline, IDLE, time, p.arrival)
            time = p.arrival

        run.start = time
        time += p.burst
        run.finish = time
        run.remaining = 0
        _append_slice(timeline, p.name, run.start, time)

    return _build_result("fcfs", None, runs, timeline)


def _run_non_preemptive(
    queue: List[ProcessRun], select: Callable[[List[ProcessRun], int], ProcessRun]
) -> List[ScheduledSlice]:
    """
    Repeatedly let ``select`` pick among arrived, unfinished runs and run the
    pick to completion. Jumps over idle gaps.
    """
    time = 0
    timeline: List[ScheduledSlice] = []
    pending = list(queue)

    while pending:
        ready = [r for r in pending if r.process.arrival <= time]

        if not ready:
            next_arrival = min(r.process.arrival for r in pending)
            _append_slice(timeline, IDLE, time, next_arrival)
            time = next_arrival
            continue

        run = select(ready, time)
        run.start = time
        time += run.process.burst
        run.finish = time
        run.remaining = 0
        _append_slice(timeline, run.process.name, run.start, time)
        pending.remove(run)

    return timeline


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time. ``min`` keeps the
    first of equal bursts, so ties go to the earlier arrival, then input order.
    """
    runs, queue = _prepare(processes)
    timeline = _run_non_preemptive(queue, lambda ready, _now: min(ready, key=lambda r: r.process.burst))
    return _build_result("sjf", None, runs, timeline)


def response_ratio(process: Process, now: int) -> float:
    waiting = now - process.arrival
    return (waiting + process.burst) / process.burst


def schedule_hrrn(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Highest Response Ratio Next (non-preemptive).

    Ratios are recomputed from scratch at every dispatch: (waiting + burst) / burst.
    """
    runs, queue = _prepare(processes)

    def pick(ready: List[ProcessRun], now: int) -> ProcessRun:
        ratios = [response_ratio(r.process, now) for r in ready]
        logger.debug(
            "HRRN t=%d ratios: %s",
            now,
            ", ".join(f"{r.process.name}={ratio:.2f}" for r, ratio in zip(ready, ratios)),
        )
        best = max(range(len(ready)), key=lambda i: ratios[i])
        return ready[best]

    timeline = _run_non_preemptive(queue, pick)
    return _build_result("hrrn", None, runs, timeline)


def _run_preemptive(queue: List[ProcessRun], key: Callable[[ProcessRun], int]) -> List[ScheduledSlice]:
    """
    Preemptive selection by ``key``, advanced event by event.

    The choice can only change when a process arrives or one finishes, so time
    jumps straight to the next such boundary. This gives the same timeline as
    stepping one time unit at a time: the running process's key only shrinks
    while it runs, and ``min`` keeps the first of equal keys.
    """
    time = 0
    timeline: List[ScheduledSlice] = []
    pending = list(queue)

    while pending:
        ready = [r for r in pending if r.process.arrival <= time]

        if not ready:
            next_arrival = min(r.process.arrival for r in pending)
            _append_slice(timeline, IDLE, time, next_arrival, merge=True)
            time = next_arrival
            continue

        run = min(ready, key=key)
        if run.start is None:
            run.start = time

        horizon = time + run.remaining
        future = [r.process.arrival for r in pending if r.process.arrival > time]
        if future:
            horizon = min(horizon, min(future))

        _append_slice(timeline, run.process.name, time, horizon, merge=True)
        run.remaining -= horizon - time
        time = horizon

        if run.remaining == 0:
            run.finish = time
            pending.remove(run)

    return timeline


def schedule_srtf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    runs, queue = _prepare(processes)
    timeline = _run_preemptive(queue, key=lambda r: r.remaining)
    return _build_result("srtf", None, runs, timeline)


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive Priority scheduling.

    Lower numeric priority value means higher priority. A newly arrived process
    with a strictly better priority preempts the running one.
    """
    runs, queue = _prepare(processes)
    timeline = _run_preemptive(queue, key=lambda r: r.process.priority)
    return _build_result("priority", None, runs, timeline)


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    After every slice, processes that arrived by the current time join the
    queue before the preempted process is put back at its tail.
    """
    q = validate_quantum(quantum)
    runs, by_arrival = _prepare(processes)

    time = 0
    timeline: List[ScheduledSlice] = []
    not_arrived = deque(by_arrival)
    ready: deque[ProcessRun] = deque()
    completed = 0

    def enqueue_new_arrivals(current_time: int) -> None:
        while not_arrived and not_arrived[0].process.arrival <= current_time:
            ready.append(not_arrived.popleft())

    while completed < len(runs):
        enqueue_new_arrivals(time)

        if not ready:
            # Jump to next arrival if CPU is idle
            next_arrival = not_arrived[0].process.arrival
            _append_slice(timeline, IDLE, time, next_arrival)
            time = next_arrival
            continue

        run = ready.popleft()
        if run.start is None:
            run.start = time

        run_time = min(q, run.remaining)
        _append_slice(timeline, run.process.name, time, time + run_time)
        time += run_time
        run.remaining -= run_time

        enqueue_new_arrivals(time)

        if run.remaining > 0:
            ready.append(run)
        else:
            run.finish = time
            completed += 1

    return _build_result("rr", q, runs, timeline)


ALGORITHMS: Dict[str, Scheduler] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "srtf": schedule_srtf,
    "priority": schedule_priority,
    "hrrn": schedule_hrrn,
    "rr": schedule_rr,
}


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round robin.
    """
    key = validate_algorithm(name)
    if not processes:
        raise ConfigError("At least one process is required")
    return ALGORITHMS[key](processes, quantum=quantum)
