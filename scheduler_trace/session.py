"""
Caller-owned session state.

The engine functions are pure; anything that has to survive between calls
(the process list being edited, the last simulation and how far the user has
stepped through it) lives on a SchedulerSession the caller holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Union

from .config import DEFAULT_COMM, DEFAULT_QUANTUM
from .exceptions import ConfigError
from .heft import schedule_heft
from .heft_trace import build_heft_steps
from .models import HeftResult, HeftStep, Process, Processor, Simulation, Step, Task
from .presets import load_example
from .trace import simulate
from .validation import next_auto_name, normalize_process, validate_algorithm


@dataclass
class StepCursor:
    """Position within a list of steps."""

    total: int
    index: int = 0

    def forward(self) -> bool:
        if self.index + 1 < self.total:
            self.index += 1
            return True
        return False

    def back(self) -> bool:
        if self.index > 0:
            self.index -= 1
            return True
        return False

    def reset(self) -> None:
        self.index = 0

    @property
    def finished(self) -> bool:
        return self.total == 0 or self.index == self.total - 1


@dataclass
class SchedulerSession:
    processes: List[Process] = field(default_factory=list)
    algorithm: str = "fcfs"
    quantum: int = DEFAULT_QUANTUM
    strict: bool = False
    simulation: Optional[Simulation] = None
    cursor: Optional[StepCursor] = None
    heft_result: Optional[HeftResult] = None
    heft_steps: List[HeftStep] = field(default_factory=list)
    heft_cursor: Optional[StepCursor] = None

    # --- process list -------------------------------------------------------

    def add_process(self, raw: Union[Process, Mapping[str, Any]]) -> Process:
        default_name = next_auto_name(p.name for p in self.processes)
        process = normalize_process(raw, strict=self.strict, default_name=default_name)
        if any(p.name == process.name for p in self.processes):
            raise ConfigError(f"Process {process.name} already exists")
        self.processes.append(process)
        return process

    def remove_process(self, name: str) -> None:
        self.processes = [p for p in self.processes if p.name != name]
        self.simulation = None
        self.cursor = None

    def clear_processes(self) -> None:
        self.processes = []
        self.simulation = None
        self.cursor = None

    def load_example(self, name: str = "basic") -> None:
        self.processes = load_example(name)
        self.simulation = None
        self.cursor = None

    def select_algorithm(self, name: str, quantum: Optional[int] = None) -> None:
        self.algorithm = validate_algorithm(name)
        if quantum is not None:
            self.quantum = quantum

    # --- CPU simulation -----------------------------------------------------

    def run(self) -> Simulation:
        self.simulation = simulate(self.processes, self.algorithm, quantum=self.quantum, strict=self.strict)
        self.cursor = StepCursor(total=len(self.simulation.steps))
        return self.simulation

    def _require_simulation(self) -> Simulation:
        if self.simulation is None or self.cursor is None:
            raise ConfigError("No simulation has been run in this session")
        return self.simulation

    @property
    def current_step(self) -> Step:
        sim = self._require_simulation()
        return sim.steps[self.cursor.index]

    @property
    def completed_steps(self) -> List[Step]:
        sim = self._require_simulation()
        return sim.steps[: self.cursor.index + 1]

    def step_forward(self) -> bool:
        self._require_simulation()
        return self.cursor.forward()

    def step_back(self) -> bool:
        self._require_simulation()
        return self.cursor.back()

    def reset(self) -> None:
        self._require_simulation()
        self.cursor.reset()

    @property
    def is_finished(self) -> bool:
        self._require_simulation()
        return self.cursor.finished

    # --- HEFT ---------------------------------------------------------------

    def run_heft(
        self,
        tasks: Iterable[Union[Task, Mapping[str, Any]]],
        processors: Optional[Iterable[Union[Processor, Mapping[str, Any]]]] = None,
        comm: float = DEFAULT_COMM,
    ) -> HeftResult:
        self.heft_result = schedule_heft(tasks, processors, comm)
        self.heft_steps = build_heft_steps(self.heft_result)
        self.heft_cursor = StepCursor(total=len(self.heft_steps))
        return self.heft_result

    @property
    def current_heft_step(self) -> HeftStep:
        if self.heft_cursor is None:
            raise ConfigError("No HEFT run in this session")
        return self.heft_steps[self.heft_cursor.index]

    def heft_step_forward(self) -> bool:
        if self.heft_cursor is None:
            raise ConfigError("No HEFT run in this session")
        return self.heft_cursor.forward()
