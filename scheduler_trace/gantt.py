from __future__ import annotations

from typing import Dict, List, Sequence

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Assignment, Processor, ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


class _Palette:
    def __init__(self) -> None:
        self._assigned: Dict[str, str] = {}

    def __call__(self, name: str) -> str:
        if name not in self._assigned:
            self._assigned[name] = COLORS[len(self._assigned) % len(COLORS)]
        return self._assigned[name]


def build_rich_gantt(slices: Sequence[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Idle slots are drawn as dots.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart"), ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))
    color_for = _Palette()

    timeline = Text()
    labels = Text()
    time_marks = str(slices[0].start_time)

    for sl in slices:
        width = max(1, sl.duration)
        if sl.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(" " * width)
        else:
            timeline.append(" " * width, style=f"on {color_for(sl.pid)}")
            labels.append(sl.pid[:width].ljust(width), style="bold")
        time_marks += f"{sl.end_time:>{max(3, width)}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    return Panel.fit(table, title="Gantt Chart"), time_marks


def build_heft_gantt(assignments: Sequence[Assignment], processors: Sequence[Processor]) -> Table:
    """
    One row per processor listing the tasks it runs in start order.
    """
    by_proc: Dict[str, List[Assignment]] = {p.id: [] for p in processors}
    for a in assignments:
        by_proc[a.processor_id].append(a)

    color_for = _Palette()
    table = Table(title="HEFT schedule", box=box.SIMPLE_HEAVY)
    table.add_column("Processor")
    table.add_column("Speed", justify="right")
    table.add_column("Tasks")

    for p in processors:
        row = Text()
        for a in sorted(by_proc[p.id], key=lambda a: a.start):
            if row:
                row.append("  ")
            row.append(f" {a.task_id} ", style=f"bold on {color_for(a.task_id)}")
            row.append(f" {a.start:.1f}-{a.end:.1f}")
        table.add_row(p.id, f"{p.speed:g}", row)

    return table
