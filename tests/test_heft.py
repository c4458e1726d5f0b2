import pytest

from scheduler_trace.exceptions import ConfigError, GraphError
from scheduler_trace.heft import schedule_heft, task_levels
from scheduler_trace.heft_trace import build_heft_steps
from scheduler_trace.models import Processor, RankStep, ScheduleStep, Task
from scheduler_trace.presets import example_dag

# Mean of 1/speed over VM1 (1.0), VM2 (0.6), VM3 (1.2).
AVG_FACTOR = (1 / 1.0 + 1 / 0.6 + 1 / 1.2) / 3


def test_example_ranks_and_order():
    result = schedule_heft(example_dag())

    assert result.avg_comp["T2"] == pytest.approx(18 * AVG_FACTOR)
    assert result.rank["T6"] == pytest.approx(8 * AVG_FACTOR)
    assert result.rank["T4"] == pytest.approx(14 * AVG_FACTOR + 2 + result.rank["T6"])
    assert result.rank["T3"] == pytest.approx(12 * AVG_FACTOR + 2 + max(result.rank["T4"], result.rank["T5"]))
    assert result.rank["T1"] == pytest.approx(64.0 + 1 / 3)
    assert result.ordered_tasks == ["T1", "T2", "T3", "T4", "T5", "T6"]


def test_example_assignment():
    result = schedule_heft(example_dag())
    placed = {a.task_id: (a.processor_id, a.start, a.end) for a in result.assignments}

    assert placed["T1"] == ("VM3", 0.0, pytest.approx(25 / 3))
    assert placed["T2"] == ("VM3", pytest.approx(25 / 3), pytest.approx(70 / 3))
    assert placed["T3"] == ("VM1", pytest.approx(31 / 3), pytest.approx(67 / 3))
    assert placed["T4"][0] == "VM3"
    assert placed["T4"][1] == pytest.approx(73 / 3)
    assert placed["T5"][0] == "VM1"
    assert placed["T6"] == ("VM3", pytest.approx(36.0), pytest.approx(128 / 3))
    assert result.makespan == pytest.approx(128 / 3)


def test_decisions_record_every_processor():
    result = schedule_heft(example_dag())
    t2 = result.decisions[1]

    assert t2.task_id == "T2"
    assert [c.processor_id for c in t2.candidates] == ["VM1", "VM2", "VM3"]
    assert [c.end for c in t2.candidates] == pytest.approx([85 / 3, 121 / 3, 70 / 3])
    assert t2.chosen_processor == "VM3"

    on_vm1 = t2.candidates[0].parent_impacts[0]
    assert on_vm1.parent_id == "T1"
    assert on_vm1.comm == 2
    on_vm3 = t2.candidates[2].parent_impacts[0]
    assert on_vm3.comm == 0
    assert on_vm3.ready_time == pytest.approx(25 / 3)


def test_schedule_invariants():
    result = schedule_heft(example_dag(), comm=3.5)
    by_task = {a.task_id: a for a in result.assignments}
    tasks = {t.id: t for t in result.tasks}

    for tid, a in by_task.items():
        assert result.rank[tid] >= result.avg_comp[tid]
        for parent in tasks[tid].parents:
            pa = by_task[parent]
            comm = 0 if pa.processor_id == a.processor_id else 3.5
            assert a.start >= pa.end + comm - 1e-9

    assert result.makespan == max(a.end for a in result.assignments)

    # No overlap on any processor.
    for proc in result.processors:
        runs = sorted((a for a in result.assignments if a.processor_id == proc.id), key=lambda a: a.start)
        for prev, cur in zip(runs, runs[1:]):
            assert cur.start >= prev.end - 1e-9


def test_equal_finish_goes_to_first_processor():
    result = schedule_heft([Task("A", 4)], [Processor("fast", 2), Processor("twin", 2)], comm=0)
    assert result.assignments[0].processor_id == "fast"


def test_equal_rank_keeps_task_order():
    result = schedule_heft([Task("B", 3), Task("A", 3)], [Processor("p", 1)], comm=0)
    assert result.ordered_tasks == ["B", "A"]
    assert [(a.task_id, a.start) for a in result.assignments] == [("B", 0), ("A", 3)]


def test_negligible_parent_cost_still_schedules_parent_first():
    result = schedule_heft([Task("B", 1e6, ("A",)), Task("A", 1e-12)], [Processor("p", 1)], comm=0)
    assert result.rank["A"] == result.rank["B"]
    assert result.ordered_tasks == ["A", "B"]
    placed = {a.task_id: a for a in result.assignments}
    assert placed["B"].start >= placed["A"].end


def test_cycle_is_rejected():
    with pytest.raises(GraphError, match="cycle"):
        schedule_heft([Task("A", 1, ("C",)), Task("B", 1, ("A",)), Task("C", 1, ("B",))])


def test_self_loop_is_rejected():
    with pytest.raises(GraphError):
        schedule_heft([Task("A", 1, ("A",))])


def test_unknown_parent_is_rejected():
    with pytest.raises(GraphError, match="unknown parent"):
        schedule_heft([Task("A", 1, ("ghost",))])


def test_long_chain_does_not_recurse():
    tasks = [Task("t0", 1)] + [Task(f"t{i}", 1, (f"t{i - 1}",)) for i in range(1, 5000)]
    result = schedule_heft(tasks, [Processor("p", 1)], comm=0)
    assert result.rank["t0"] == pytest.approx(5000)
    assert result.makespan == pytest.approx(5000)


@pytest.mark.parametrize(
    "processors, comm",
    [([], 1), ([Processor("p", 0)], 1), ([Processor("p", 1)], -1)],
)
def test_bad_processor_config(processors, comm):
    with pytest.raises(ConfigError):
        schedule_heft(example_dag(), processors, comm=comm)


def test_no_tasks():
    with pytest.raises(ConfigError):
        schedule_heft([])


def test_task_levels():
    assert task_levels(example_dag()) == {"T1": 0, "T2": 1, "T3": 1, "T4": 2, "T5": 2, "T6": 3}


def test_heft_steps():
    result = schedule_heft(example_dag())
    steps = build_heft_steps(result)

    assert [s.kind for s in steps] == ["rank"] * 6 + ["schedule"] * 6
    rank_steps = [s for s in steps if isinstance(s, RankStep)]
    assert [s.task_id for s in rank_steps] == result.ordered_tasks

    t1 = rank_steps[0]
    assert [c.successor_id for c in t1.successor_contributions] == ["T2", "T3"]
    assert t1.successor_contributions[0].term == pytest.approx(result.rank["T2"] + 2)
    assert t1.rank == pytest.approx(t1.avg_comp + max(c.term for c in t1.successor_contributions))
    assert rank_steps[-1].successor_contributions == ()

    sched = [s for s in steps if isinstance(s, ScheduleStep)]
    assert [s.task_id for s in sched] == [d.task_id for d in result.decisions]
    assert sched[0].chosen_processor == "VM3"
    assert sched[-1].end == pytest.approx(result.makespan)
    assert len(sched[0].candidates) == 3


def test_mapping_input_is_accepted():
    result = schedule_heft(
        [{"id": "a", "weight": 2}, {"id": "b", "weight": "4", "parents": "a"}],
        [{"id": "cpu", "speed": 2}],
        comm=1,
    )
    assert [(a.task_id, a.start, a.end) for a in result.assignments] == [("a", 0, 1), ("b", 1, 3)]
