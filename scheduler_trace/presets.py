from __future__ import annotations

from typing import Dict, List, Tuple

from .exceptions import ConfigError
from .models import Process, Task

# (name, arrival, burst, priority)
_WORKLOADS: Dict[str, Tuple[Tuple[str, int, int, int], ...]] = {
    # Balanced default
    "basic": (
        ("P1", 0, 5, 2),
        ("P2", 1, 3, 1),
        ("P3", 2, 8, 3),
        ("P4", 3, 6, 2),
    ),
    # Long jobs with some overlap
    "cpu-heavy": (
        ("P1", 0, 10, 1),
        ("P2", 0, 6, 2),
        ("P3", 2, 8, 3),
        ("P4", 4, 4, 2),
    ),
    # Arrivals in bursts
    "bursty": (
        ("P1", 0, 3, 1),
        ("P2", 1, 2, 2),
        ("P3", 2, 1, 3),
        ("P4", 5, 7, 1),
        ("P5", 6, 3, 2),
        ("P6", 6, 2, 3),
        ("P7", 7, 8, 1),
        ("P8", 8, 2, 2),
    ),
    # Mixed priorities to show preemption and starvation
    "priority": (
        ("P1", 0, 8, 3),
        ("P2", 0, 4, 1),
        ("P3", 1, 9, 4),
        ("P4", 2, 5, 2),
        ("P5", 4, 2, 0),
    ),
}

_ALIASES = {"cpu": "cpu-heavy"}

EXAMPLE_DAG: Tuple[Tuple[str, float, Tuple[str, ...]], ...] = (
    ("T1", 10, ()),
    ("T2", 18, ("T1",)),
    ("T3", 12, ("T1",)),
    ("T4", 14, ("T2", "T3")),
    ("T5", 10, ("T3",)),
    ("T6", 8, ("T4", "T5")),
)


def workload_names() -> List[str]:
    return list(_WORKLOADS)


def load_example(name: str = "basic") -> List[Process]:
    key = _ALIASES.get(name, name)
    if key not in _WORKLOADS:
        raise ConfigError(f"Unknown example workload '{name}' (choose from {', '.join(_WORKLOADS)})")
    return [Process(name=n, arrival=a, burst=b, priority=pr) for n, a, b, pr in _WORKLOADS[key]]


def example_dag() -> List[Task]:
    return [Task(id=tid, weight=float(w), parents=parents) for tid, w, parents in EXAMPLE_DAG]
