from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List

from .exceptions import ValidationError
from .models import Process, Task
from .validation import normalize_processes

logger = logging.getLogger(__name__)


def load_workload(path: str | Path, strict: bool = False) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return normalize_processes(_load_json(path), strict=strict)
    if suffix == ".csv":
        return normalize_processes(_load_csv(path), strict=strict)

    raise ValidationError(f"Unsupported workload format: {suffix} (use .json or .csv)", field="path")


def _load_json(path: Path) -> List[dict]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list) or not all(isinstance(entry, dict) for entry in raw):
        raise ValidationError("JSON workload must be a list of process objects", field="path", value=str(path))
    return raw


def _load_csv(path: Path) -> List[dict]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return [dict(row) for row in reader]


def parse_dag_text(text: str) -> List[Task]:
    """
    Parse ``taskId weight [parent1,parent2,...]`` lines.

    Lines without a positive weight are skipped, and parent ids that do not
    name a declared task are dropped.
    """
    tasks: List[Task] = []

    for lineno, line in enumerate(text.splitlines(), start=1):
        parts = line.split()
        if not parts:
            continue
        if len(parts) < 2:
            logger.warning("DAG line %d skipped: expected 'taskId weight [parents]'", lineno)
            continue

        try:
            weight = float(parts[1])
        except ValueError:
            weight = float("nan")
        if not weight > 0 or weight == float("inf"):
            logger.warning("DAG line %d skipped: weight %r is not a positive number", lineno, parts[1])
            continue

        parents: Iterable[str] = ()
        if len(parts) >= 3:
            parents = [p.strip() for p in parts[2].split(",") if p.strip()]
        tasks.append(Task(id=parts[0], weight=weight, parents=tuple(parents)))

    if not tasks:
        raise ValidationError("No valid tasks were parsed from the DAG input", field="dag")

    valid_ids = {t.id for t in tasks}
    cleaned: List[Task] = []
    for t in tasks:
        kept = tuple(p for p in t.parents if p in valid_ids)
        if len(kept) != len(t.parents):
            dropped = [p for p in t.parents if p not in valid_ids]
            logger.warning("Task %s: dropped unknown parents %s", t.id, ", ".join(dropped))
        cleaned.append(Task(id=t.id, weight=t.weight, parents=kept))
    return cleaned


def load_dag(path: str | Path) -> List[Task]:
    return parse_dag_text(Path(path).read_text(encoding="utf-8"))
