from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .algorithms import run_algorithm
from .config import ALGORITHM_KEYS, QUANTUM_ALGORITHMS
from .exceptions import ConfigError
from .models import Process, ScheduledSlice, SummaryMetrics
from .validation import validate_algorithm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonRow:
    key: str
    label: str
    quantum: Optional[int]
    summary: SummaryMetrics
    timeline: List[ScheduledSlice]


def compare_algorithms(
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    algorithms: Optional[Iterable[str]] = None,
) -> List[ComparisonRow]:
    """
    Run several algorithms on the same workload.

    Quantum-based algorithms are left out when no positive quantum is given.
    """
    if not processes:
        raise ConfigError("At least one process is required")

    keys = [validate_algorithm(k) for k in (algorithms or ALGORITHM_KEYS)]
    rows: List[ComparisonRow] = []

    for key in keys:
        q = quantum if key in QUANTUM_ALGORITHMS else None
        if key in QUANTUM_ALGORITHMS and (q is None or q <= 0):
            logger.info("Skipping %s: no positive quantum given", key)
            continue

        result = run_algorithm(key, list(processes), quantum=q)
        rows.append(
            ComparisonRow(
                key=key,
                label=result.label,
                quantum=result.quantum,
                summary=result.summary,
                timeline=result.timeline,
            )
        )

    if not rows:
        raise ConfigError("No algorithms could be compared; Round Robin needs a positive quantum")
    return rows
