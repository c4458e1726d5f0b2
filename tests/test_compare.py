import pytest

from scheduler_trace.algorithms import run_algorithm
from scheduler_trace.compare import compare_algorithms
from scheduler_trace.exceptions import ConfigError
from scheduler_trace.presets import load_example


def test_compare_all_algorithms():
    procs = load_example("cpu-heavy")
    rows = compare_algorithms(procs, quantum=3)

    assert [r.key for r in rows] == ["fcfs", "sjf", "srtf", "priority", "hrrn", "rr"]
    assert rows[-1].quantum == 3
    assert rows[0].quantum is None

    fcfs = run_algorithm("fcfs", procs)
    assert rows[0].summary == fcfs.summary
    assert rows[0].timeline == fcfs.timeline


def test_compare_skips_rr_without_quantum():
    rows = compare_algorithms(load_example("basic"))
    assert "rr" not in [r.key for r in rows]


def test_compare_needs_something_to_run():
    with pytest.raises(ConfigError):
        compare_algorithms(load_example("basic"), algorithms=["rr"])
    with pytest.raises(ConfigError):
        compare_algorithms([])


def test_srtf_never_worse_than_fcfs_on_average_waiting():
    rows = {r.key: r for r in compare_algorithms(load_example("bursty"), quantum=2)}
    assert rows["srtf"].summary.avg_waiting <= rows["fcfs"].summary.avg_waiting
