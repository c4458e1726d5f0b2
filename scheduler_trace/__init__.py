"""
Scheduler trace package.

Computes CPU schedules (FCFS, SJF, SRTF, Priority, HRRN, Round Robin) and
HEFT DAG schedules, and turns them into step-by-step decision traces.
"""

from .algorithms import ALGORITHMS, run_algorithm
from .compare import compare_algorithms
from .exceptions import ConfigError, GraphError, SchedulerError, ValidationError
from .heft import schedule_heft
from .heft_trace import build_heft_steps
from .session import SchedulerSession
from .trace import build_steps, simulate

__all__ = [
    "ALGORITHMS",
    "ConfigError",
    "GraphError",
    "SchedulerError",
    "SchedulerSession",
    "ValidationError",
    "build_heft_steps",
    "build_steps",
    "compare_algorithms",
    "run_algorithm",
    "schedule_heft",
    "simulate",
]
