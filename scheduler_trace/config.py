from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Occupant name used for idle slots in a timeline. Reserved: no process may use it.
IDLE = "Idle"

ALGORITHM_KEYS: Tuple[str, ...] = ("fcfs", "sjf", "srtf", "priority", "hrrn", "rr")

ALGORITHM_LABELS: Dict[str, str] = {
    "fcfs": "FCFS",
    "sjf": "SJF",
    "srtf": "SRTF",
    "priority": "Priority",
    "hrrn": "HRRN",
    "rr": "Round Robin",
}

QUANTUM_ALGORITHMS = frozenset({"rr"})

DEFAULT_QUANTUM = 2

# HEFT defaults: three heterogeneous VMs and a uniform cross-processor cost.
DEFAULT_COMM = 2.0
DEFAULT_PROCESSORS: Tuple[Tuple[str, float], ...] = (
    ("VM1", 1.0),
    ("VM2", 0.6),
    ("VM3", 1.2),
)


@dataclass(frozen=True)
class RunConfig:
    """
    Options for a single CPU scheduling run.

    ``strict`` turns lenient coercion of malformed process fields into errors.
    """

    algorithm: str
    quantum: Optional[int] = None
    strict: bool = False

    def validate(self) -> "RunConfig":
        from .validation import validate_algorithm, validate_quantum

        key = validate_algorithm(self.algorithm)
        quantum = self.quantum
        if key in QUANTUM_ALGORITHMS:
            quantum = validate_quantum(quantum)
        return RunConfig(algorithm=key, quantum=quantum, strict=self.strict)
