from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .config import IDLE


@dataclass(frozen=True)
class Process:
    name: str
    arrival: int
    burst: int
    priority: int = 0


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of the Gantt chart, either a process or the CPU idling.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessRun:
    """
    Working state of a single process while an algorithm is running.

    Algorithms own these records; the caller's Process values are never touched.
    """

    process: Process
    remaining: int
    start: Optional[int] = None
    finish: Optional[int] = None

    @classmethod
    def from_process(cls, process: Process) -> "ProcessRun":
        return cls(process=process, remaining=process.burst)

    @property
    def done(self) -> bool:
        return self.finish is not None


@dataclass(frozen=True)
class ProcessMetrics:
    name: str
    arrival: int
    burst: int
    priority: int
    start: int
    finish: int
    waiting: int
    turnaround: int
    response: int


@dataclass(frozen=True)
class SummaryMetrics:
    avg_waiting: float
    avg_turnaround: float
    avg_response: float


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    label: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    summary: Optional[SummaryMetrics] = None
    system: Optional[SystemMetrics] = None

    def metrics_for(self, name: str) -> ProcessMetrics:
        for m in self.processes:
            if m.name == name:
                return m
        raise KeyError(name)


@dataclass(frozen=True)
class ReadyEntry:
    """
    State of a ready process at the start of a step.
    """

    name: str
    arrival: int
    burst: int
    priority: int
    remaining: int
    waiting: int

    @property
    def response_ratio(self) -> float:
        return (self.waiting + self.burst) / self.burst


@dataclass(frozen=True)
class Step:
    index: int
    start: int
    end: int
    running: Optional[str]
    ready: Tuple[ReadyEntry, ...] = ()
    completed: Tuple[str, ...] = ()

    @property
    def is_idle(self) -> bool:
        return self.running is None


@dataclass
class Simulation:
    algorithm: str
    quantum: Optional[int]
    steps: List[Step]
    result: ScheduleResult

    @property
    def timeline(self) -> List[ScheduledSlice]:
        return self.result.timeline

    @property
    def metrics(self) -> List[ProcessMetrics]:
        return self.result.processes

    @property
    def summary(self) -> Optional[SummaryMetrics]:
        return self.result.summary


# --- HEFT -------------------------------------------------------------------


@dataclass(frozen=True)
class Task:
    id: str
    weight: float
    parents: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Processor:
    id: str
    speed: float


@dataclass(frozen=True)
class Assignment:
    task_id: str
    processor_id: str
    start: float
    end: float


@dataclass(frozen=True)
class ParentImpact:
    """
    How one parent constrains a task's earliest start on a candidate processor.
    """

    parent_id: str
    parent_processor: str
    parent_end: float
    comm: float
    ready_time: float


@dataclass(frozen=True)
class Candidate:
    processor_id: str
    start: float
    end: float
    comp_time: float
    parent_impacts: Tuple[ParentImpact, ...] = ()


@dataclass(frozen=True)
class Decision:
    task_id: str
    candidates: Tuple[Candidate, ...]
    chosen_processor: str

    @property
    def chosen(self) -> Candidate:
        for c in self.candidates:
            if c.processor_id == self.chosen_processor:
                return c
        raise KeyError(self.chosen_processor)


@dataclass
class HeftResult:
    tasks: List[Task]
    processors: List[Processor]
    comm: float
    avg_comp: Dict[str, float]
    rank: Dict[str, float]
    ordered_tasks: List[str]
    assignments: List[Assignment]
    decisions: List[Decision]
    makespan: float

    def assignment_for(self, task_id: str) -> Assignment:
        for a in self.assignments:
            if a.task_id == task_id:
                return a
        raise KeyError(task_id)


@dataclass(frozen=True)
class SuccessorContribution:
    successor_id: str
    successor_rank: float
    comm: float
    term: float


@dataclass(frozen=True)
class RankStep:
    task_id: str
    avg_comp: float
    rank: float
    successor_contributions: Tuple[SuccessorContribution, ...] = ()
    kind: str = "rank"


@dataclass(frozen=True)
class ScheduleStep:
    task_id: str
    candidates: Tuple[Candidate, ...]
    chosen_processor: str
    start: float
    end: float
    kind: str = "schedule"


HeftStep = Union[RankStep, ScheduleStep]
