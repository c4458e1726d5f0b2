"""
CPU step trace: replay a finished timeline and record, for every slot, what
was ready, what had completed and what ran.

The builder makes no scheduling decisions of its own; everything is derived
from the timeline and the per-process metrics of a ScheduleResult.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .algorithms import run_algorithm
from .config import RunConfig
from .models import ProcessMetrics, ReadyEntry, ScheduleResult, Simulation, Step
from .validation import RawProcess, normalize_processes

logger = logging.getLogger(__name__)


def state_at(
    processes: Iterable[ProcessMetrics], executed: Dict[str, int], time: int
) -> Tuple[Tuple[ReadyEntry, ...], Tuple[str, ...]]:
    """
    Ready and completed sets at ``time`` given CPU time handed out so far.
    """
    ready: List[ReadyEntry] = []
    completed: List[str] = []

    for p in processes:
        done = executed.get(p.name, 0)
        remaining = max(p.burst - done, 0)

        if p.finish <= time:
            completed.append(p.name)
        elif p.arrival <= time and remaining > 0:
            ready.append(
                ReadyEntry(
                    name=p.name,
                    arrival=p.arrival,
                    burst=p.burst,
                    priority=p.priority,
                    remaining=remaining,
                    waiting=max(time - p.arrival - done, 0),
                )
            )

    return tuple(ready), tuple(completed)


def build_steps(result: ScheduleResult) -> List[Step]:
    timeline = sorted(result.timeline, key=lambda s: s.start_time)
    executed: Dict[str, int] = {p.name: 0 for p in result.processes}
    steps: List[Step] = []

    for slot in timeline:
        ready, completed = state_at(result.processes, executed, slot.start_time)
        running: Optional[str] = None if slot.is_idle else slot.pid
        steps.append(
            Step(
                index=len(steps),
                start=slot.start_time,
                end=slot.end_time,
                running=running,
                ready=ready,
                completed=completed,
            )
        )
        if running is not None:
            executed[running] += slot.duration

    return steps


def simulate(
    processes: Iterable[RawProcess],
    algorithm: str,
    quantum: Optional[int] = None,
    strict: bool = False,
) -> Simulation:
    """
    Validate input, schedule it and build the step trace in one call.
    """
    config = RunConfig(algorithm=algorithm, quantum=quantum, strict=strict).validate()
    clean = normalize_processes(processes, strict=config.strict)

    result = run_algorithm(config.algorithm, clean, quantum=config.quantum)
    steps = build_steps(result)
    logger.debug("Built %d steps for %s", len(steps), result.label)
    return Simulation(algorithm=config.algorithm, quantum=result.quantum, steps=steps, result=result)
