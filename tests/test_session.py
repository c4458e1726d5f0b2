import pytest

from scheduler_trace.exceptions import ConfigError
from scheduler_trace.models import RankStep, ScheduleStep
from scheduler_trace.presets import example_dag
from scheduler_trace.session import SchedulerSession


def test_add_process_auto_names():
    session = SchedulerSession()
    session.load_example("basic")
    added = session.add_process({"arrival": 9, "burst": 2})
    assert added.name == "P5"

    with pytest.raises(ConfigError):
        session.add_process({"name": "P1", "arrival": 0, "burst": 1})


def test_step_through_simulation():
    session = SchedulerSession()
    session.load_example("basic")
    session.select_algorithm("RR", quantum=3)
    sim = session.run()

    assert sim.algorithm == "rr"
    assert session.current_step.index == 0
    assert not session.is_finished

    while session.step_forward():
        pass
    assert session.is_finished
    assert session.current_step is sim.steps[-1]
    assert len(session.completed_steps) == len(sim.steps)
    assert not session.step_forward()

    session.reset()
    assert session.current_step.index == 0
    assert not session.step_back()


def test_sessions_are_independent():
    a = SchedulerSession()
    b = SchedulerSession()
    a.load_example("basic")
    b.load_example("priority")
    a.select_algorithm("sjf")
    b.select_algorithm("priority")

    sim_a = a.run()
    b.run()
    assert a.simulation is sim_a
    assert {m.name for m in sim_a.metrics} == {"P1", "P2", "P3", "P4"}


def test_cursor_requires_a_run():
    with pytest.raises(ConfigError):
        SchedulerSession().step_forward()


def test_removing_a_process_discards_the_simulation():
    session = SchedulerSession()
    session.load_example("basic")
    session.run()
    session.remove_process("P1")

    assert session.simulation is None
    assert [p.name for p in session.processes] == ["P2", "P3", "P4"]
    with pytest.raises(ConfigError):
        session.step_forward()


def test_heft_cursor():
    session = SchedulerSession()
    session.run_heft(example_dag())

    assert isinstance(session.current_heft_step, RankStep)
    for _ in range(6):
        assert session.heft_step_forward()
    assert isinstance(session.current_heft_step, ScheduleStep)
