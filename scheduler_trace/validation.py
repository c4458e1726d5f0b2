"""
Entity validation: turn raw input mappings into well-formed records.

Process fields are normalized rather than rejected by default (negative
arrival becomes 0, non-positive burst becomes 1). Pass ``strict=True`` to
get a ValidationError instead. Structural problems (duplicate names, an
empty list, a bad quantum) always fail before any scheduling work starts.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .config import ALGORITHM_KEYS, IDLE
from .exceptions import ConfigError, ValidationError
from .models import Process, Processor, Task

logger = logging.getLogger(__name__)

_AUTO_NAME = re.compile(r"^P(\d+)$")

RawProcess = Union[Process, Mapping[str, Any]]


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        text = str(value).strip()
        # Accept "3.0" style values the way a form field would.
        number = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _is_fractional(value: Any) -> bool:
    """
    True for a finite number with a fractional part, e.g. 2.5 or "2.5".
    """
    if value is None or isinstance(value, (bool, int)):
        return False
    number = _parse_float(str(value).strip())
    return number is not None and number != int(number)


def _int_field(
    process: str, field: str, value: Any, strict: bool, minimum: Optional[int], fallback: int
) -> int:
    if _is_fractional(value):
        if strict:
            raise ValidationError(f"{field} must be a whole number", field=field, value=value)
        logger.warning("Process %s: %s %r truncated", process, field, value)

    parsed = _parse_int(value)
    if parsed is None or (minimum is not None and parsed < minimum):
        if strict:
            bound = f" >= {minimum}" if minimum is not None else ""
            raise ValidationError(f"{field} must be an integer{bound}", field=field, value=value)
        logger.warning("Process %s: %s %r coerced to %d", process, field, value, fallback)
        parsed = fallback
    return parsed


def next_auto_name(names: Iterable[str]) -> str:
    """
    Return ``P<n>`` one past the highest ``P<n>`` among ``names``.
    """
    highest = 0
    count = 0
    for name in names:
        count += 1
        m = _AUTO_NAME.match(name)
        if m:
            highest = max(highest, int(m.group(1)))
    return f"P{highest + 1 if highest else count + 1}"


def normalize_process(raw: RawProcess, strict: bool = False, default_name: str = "") -> Process:
    if isinstance(raw, Process):
        raw = {"name": raw.name, "arrival": raw.arrival, "burst": raw.burst, "priority": raw.priority}

    name = str(raw.get("name") or "").strip() or default_name
    if not name:
        raise ValidationError("process name is required", field="name")
    if name == IDLE:
        raise ValidationError(f"'{IDLE}' is reserved for idle slots", field="name", value=name)

    arrival = _int_field(name, "arrival", raw.get("arrival"), strict, minimum=0, fallback=0)
    burst = _int_field(name, "burst", raw.get("burst"), strict, minimum=1, fallback=1)

    raw_priority = raw.get("priority")
    if raw_priority in (None, ""):
        priority = 0
    else:
        priority = _int_field(name, "priority", raw_priority, strict, minimum=None, fallback=0)

    return Process(name=name, arrival=arrival, burst=burst, priority=priority)


def normalize_processes(raw_processes: Iterable[RawProcess], strict: bool = False) -> List[Process]:
    """
    Normalize a whole process list. Blank names are filled in as ``P<n>``.
    """
    processes: List[Process] = []
    seen: set[str] = set()
    for raw in raw_processes:
        default_name = next_auto_name(p.name for p in processes)
        p = normalize_process(raw, strict=strict, default_name=default_name)
        if p.name in seen:
            raise ValidationError("process names must be unique", field="name", value=p.name)
        seen.add(p.name)
        processes.append(p)
    return processes


def validate_processes(processes: Sequence[Process]) -> List[Process]:
    """
    Check a list that is about to be scheduled and return a private copy.
    """
    if not processes:
        raise ConfigError("At least one process is required")
    return normalize_processes(processes, strict=True)


def validate_quantum(quantum: Any) -> int:
    q = _parse_int(quantum)
    if q is None or q <= 0 or _is_fractional(quantum):
        raise ConfigError("Round Robin requires a positive quantum")
    return q


def validate_algorithm(name: str) -> str:
    key = (name or "").strip().lower()
    if key not in ALGORITHM_KEYS:
        raise ConfigError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHM_KEYS)})")
    return key


# --- HEFT -------------------------------------------------------------------


def normalize_task(raw: Union[Task, Mapping[str, Any]]) -> Task:
    if isinstance(raw, Task):
        raw = {"id": raw.id, "weight": raw.weight, "parents": raw.parents}

    task_id = str(raw.get("id") or "").strip()
    if not task_id:
        raise ValidationError("task id is required", field="id")
    weight = _parse_float(raw.get("weight"))
    if weight is None or weight <= 0:
        raise ValidationError("weight must be a positive number", field="weight", value=raw.get("weight"))

    parents = raw.get("parents") or ()
    if isinstance(parents, str):
        parents = [p for p in parents.split(",")]
    parent_ids = tuple(str(p).strip() for p in parents if str(p).strip())
    return Task(id=task_id, weight=weight, parents=parent_ids)


def validate_tasks(raw_tasks: Iterable[Union[Task, Mapping[str, Any]]]) -> List[Task]:
    tasks = [normalize_task(raw) for raw in raw_tasks]
    if not tasks:
        raise ConfigError("At least one task is required")
    ids = [t.id for t in tasks]
    if len(set(ids)) != len(ids):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise ConfigError(f"Duplicate task ids: {', '.join(dupes)}")
    return tasks


def validate_processors(raw_processors: Iterable[Union[Processor, Mapping[str, Any]]]) -> List[Processor]:
    processors: List[Processor] = []
    for raw in raw_processors:
        if isinstance(raw, Processor):
            raw = {"id": raw.id, "speed": raw.speed}
        proc_id = str(raw.get("id") or "").strip()
        speed = _parse_float(raw.get("speed"))
        if not proc_id:
            raise ConfigError("processor id is required")
        if speed is None or speed <= 0:
            raise ConfigError(f"Processor {proc_id} needs a positive speed (got {raw.get('speed')!r})")
        processors.append(Processor(id=proc_id, speed=speed))

    if not processors:
        raise ConfigError("At least one processor is required")
    ids = [p.id for p in processors]
    if len(set(ids)) != len(ids):
        raise ConfigError("Processor ids must be unique")
    return processors


def validate_comm(comm: Any) -> float:
    value = _parse_float(comm)
    if value is None or value < 0:
        raise ConfigError(f"Communication cost must be >= 0 (got {comm!r})")
    return value
