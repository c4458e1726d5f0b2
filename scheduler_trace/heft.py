"""
HEFT (Heterogeneous Earliest Finish Time) list scheduling of a task DAG.

Tasks are prioritized by upward rank, then each one is placed, in that order,
on the processor where it would finish earliest. Communication cost is a
single scalar charged on every edge whose endpoints land on different
processors.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .config import DEFAULT_COMM, DEFAULT_PROCESSORS
from .exceptions import GraphError, InvariantError
from .models import Assignment, Candidate, Decision, HeftResult, ParentImpact, Processor, Task
from .validation import validate_comm, validate_processors, validate_tasks

logger = logging.getLogger(__name__)

RawTask = Union[Task, Mapping[str, Any]]
RawProcessor = Union[Processor, Mapping[str, Any]]


def default_processors() -> List[Processor]:
    return [Processor(id=pid, speed=speed) for pid, speed in DEFAULT_PROCESSORS]


def average_computation(tasks: Sequence[Task], processors: Sequence[Processor]) -> Dict[str, float]:
    return {
        t.id: sum(t.weight / p.speed for p in processors) / len(processors)
        for t in tasks
    }


def successor_map(tasks: Sequence[Task]) -> Dict[str, List[str]]:
    """
    Invert the parent lists. Successors are listed in task order.
    """
    known = {t.id for t in tasks}
    succ: Dict[str, List[str]] = {t.id: [] for t in tasks}
    for t in tasks:
        for parent in t.parents:
            if parent not in known:
                raise GraphError(f"Task {t.id} references unknown parent '{parent}'")
            succ[parent].append(t.id)
    return succ


def upward_ranks(
    tasks: Sequence[Task],
    successors: Mapping[str, Sequence[str]],
    avg_comp: Mapping[str, float],
    comm: float,
) -> Dict[str, float]:
    """
    rank(t) = avg_comp(t) + max over successors s of (comm + rank(s)).

    Evaluated with an explicit stack and memo table. A task met again while
    its own rank is still being computed means the graph has a cycle.
    """
    rank: Dict[str, float] = {}
    in_progress: set[str] = set()

    for t in tasks:
        if t.id in rank:
            continue

        stack = [(t.id, iter(successors[t.id]))]
        in_progress.add(t.id)

        while stack:
            node, pending = stack[-1]
            child = next(pending, None)

            if child is not None:
                if child in rank:
                    continue
                if child in in_progress:
                    path = [n for n, _ in stack]
                    cycle = path[path.index(child):] + [child]
                    raise GraphError(f"Task graph has a cycle: {' -> '.join(cycle)}")
                in_progress.add(child)
                stack.append((child, iter(successors[child])))
                continue

            stack.pop()
            in_progress.discard(node)
            rank[node] = avg_comp[node] + max((comm + rank[s] for s in successors[node]), default=0.0)

    return rank


def topological_order(tasks: Sequence[Task]) -> List[str]:
    """
    Kahn's algorithm; among tasks that become ready together, task order wins.
    """
    succ = successor_map(tasks)
    indegree = {t.id: len(t.parents) for t in tasks}
    frontier = deque(t.id for t in tasks if indegree[t.id] == 0)
    order: List[str] = []

    while frontier:
        node = frontier.popleft()
        order.append(node)
        for child in succ[node]:
            indegree[child] -= 1
            if indegree[child] == 0:
                frontier.append(child)

    if len(order) != len(tasks):
        stuck = [t.id for t in tasks if indegree[t.id] > 0]
        raise GraphError(f"Task graph has a cycle through: {', '.join(stuck)}")
    return order


def task_levels(tasks: Sequence[Task]) -> Dict[str, int]:
    """
    Depth of each task in the DAG: roots are level 0, every other task sits one
    level below its deepest parent. Useful for drawing the graph in layers.
    """
    parents = {t.id: t.parents for t in tasks}
    levels: Dict[str, int] = {}
    for node in topological_order(tasks):
        levels[node] = max((levels[p] + 1 for p in parents[node]), default=0)
    return levels


def _candidate(
    task: Task,
    processor: Processor,
    available: float,
    placed: Mapping[str, Assignment],
    comm: float,
) -> Candidate:
    comp_time = task.weight / processor.speed
    start = available
    impacts: List[ParentImpact] = []

    for parent_id in task.parents:
        parent = placed[parent_id]
        edge_comm = 0.0 if parent.processor_id == processor.id else comm
        ready_time = parent.end + edge_comm
        impacts.append(
            ParentImpact(
                parent_id=parent_id,
                parent_processor=parent.processor_id,
                parent_end=parent.end,
                comm=edge_comm,
                ready_time=ready_time,
            )
        )
        start = max(start, ready_time)

    return Candidate(
        processor_id=processor.id,
        start=start,
        end=start + comp_time,
        comp_time=comp_time,
        parent_impacts=tuple(impacts),
    )


def schedule_heft(
    tasks: Iterable[RawTask],
    processors: Optional[Iterable[RawProcessor]] = None,
    comm: float = DEFAULT_COMM,
) -> HeftResult:
    task_list = validate_tasks(tasks)
    proc_list = validate_processors(processors if processors is not None else default_processors())
    comm = validate_comm(comm)

    avg_comp = average_computation(task_list, proc_list)
    succ = successor_map(task_list)
    rank = upward_ranks(task_list, succ, avg_comp, comm)

    # A parent's rank can round to exactly its child's when its own cost is
    # negligible; the level puts the parent first. sorted() is stable, so
    # remaining ties keep task list order.
    levels = task_levels(task_list)
    ordered = sorted(task_list, key=lambda t: (-rank[t.id], levels[t.id]))
    logger.debug("HEFT priority order: %s", ", ".join(f"{t.id}({rank[t.id]:.2f})" for t in ordered))

    available: Dict[str, float] = {p.id: 0.0 for p in proc_list}
    placed: Dict[str, Assignment] = {}
    assignments: List[Assignment] = []
    decisions: List[Decision] = []

    for task in ordered:
        missing = [pid for pid in task.parents if pid not in placed]
        if missing:
            raise InvariantError(f"Task {task.id} ordered ahead of its parents {', '.join(missing)}")

        candidates = [_candidate(task, p, available[p.id], placed, comm) for p in proc_list]

        best = candidates[0]
        for c in candidates[1:]:
            if c.end < best.end:
                best = c

        assignment = Assignment(task_id=task.id, processor_id=best.processor_id, start=best.start, end=best.end)
        placed[task.id] = assignment
        assignments.append(assignment)
        available[best.processor_id] = best.end
        decisions.append(Decision(task_id=task.id, candidates=tuple(candidates), chosen_processor=best.processor_id))
        logger.debug("HEFT placed %s on %s [%.2f, %.2f)", task.id, best.processor_id, best.start, best.end)

    makespan = max(a.end for a in assignments)

    return HeftResult(
        tasks=task_list,
        processors=proc_list,
        comm=comm,
        avg_comp=avg_comp,
        rank=rank,
        ordered_tasks=[t.id for t in ordered],
        assignments=assignments,
        decisions=decisions,
        makespan=makespan,
    )
