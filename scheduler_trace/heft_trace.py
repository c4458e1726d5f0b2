from __future__ import annotations

from typing import List

from .heft import successor_map
from .models import HeftResult, HeftStep, RankStep, ScheduleStep, SuccessorContribution


def build_heft_steps(result: HeftResult) -> List[HeftStep]:
    """
    One rank step per task in rank order, then one schedule step per task in
    scheduling order. The steps carry numbers only; wording is up to the caller.
    """
    succ = successor_map(result.tasks)
    steps: List[HeftStep] = []

    for task_id in result.ordered_tasks:
        contributions = tuple(
            SuccessorContribution(
                successor_id=child,
                successor_rank=result.rank[child],
                comm=result.comm,
                term=result.rank[child] + result.comm,
            )
            for child in succ[task_id]
        )
        steps.append(
            RankStep(
                task_id=task_id,
                avg_comp=result.avg_comp[task_id],
                rank=result.rank[task_id],
                successor_contributions=contributions,
            )
        )

    for decision in result.decisions:
        chosen = decision.chosen
        steps.append(
            ScheduleStep(
                task_id=decision.task_id,
                candidates=decision.candidates,
                chosen_processor=decision.chosen_processor,
                start=chosen.start,
                end=chosen.end,
            )
        )

    return steps
