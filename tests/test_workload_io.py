from pathlib import Path

import pytest

from scheduler_trace.exceptions import ValidationError
from scheduler_trace.models import Process
from scheduler_trace.workload_io import load_dag, load_workload, parse_dag_text


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"name":"A","arrival":0,"burst":3,"priority":1},'
                 '{"name":"B","arrival":1,"burst":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority == 0
    assert procs[1].arrival == 1


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("name,arrival,burst,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].name == "A"
    assert procs[1].priority == 0


def test_load_csv_strict_rejects_bad_burst(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("name,arrival,burst\nA,0,0\n")
    assert load_workload(p)[0].burst == 1
    with pytest.raises(ValidationError):
        load_workload(p, strict=True)


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("A 0 3")
    with pytest.raises(ValidationError):
        load_workload(p)


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"name": "A"}')
    with pytest.raises(ValidationError):
        load_workload(p)


def test_parse_dag_text_is_lenient():
    text = """
    A 4
    B 2 A
    C 3 A,B,ghost
    D -1 A
    E abc
    lonely
    """
    tasks = parse_dag_text(text)
    assert [(t.id, t.weight, t.parents) for t in tasks] == [
        ("A", 4.0, ()),
        ("B", 2.0, ("A",)),
        ("C", 3.0, ("A", "B")),
    ]


def test_parse_dag_text_needs_one_task():
    with pytest.raises(ValidationError):
        parse_dag_text("X 0\nY nope\n")


def test_load_dag(tmp_path: Path):
    p = tmp_path / "dag.txt"
    p.write_text("T1 10\nT2 5 T1\n")
    assert [t.id for t in load_dag(p)] == ["T1", "T2"]
