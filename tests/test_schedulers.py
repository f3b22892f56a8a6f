import pytest

from schedsim.algorithms import (
    ALGORITHMS,
    Algorithm,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
    simulate,
)
from schedsim.errors import EmptyInput, InvalidProcess, InvalidQuantum, SimulationError, UnknownAlgorithm
from schedsim.models import Process


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5, priority=2),
        Process(2, arrival_time=1, burst_time=3, priority=1),
        Process(3, arrival_time=2, burst_time=8, priority=3),
    ]


def _slices(result):
    return [(s.pid, s.start_time, s.end_time) for s in result.timeline]


def _mixed_workload():
    # Gaps, simultaneous arrivals, equal bursts and equal priorities.
    return [
        Process(4, arrival_time=0, burst_time=6, priority=2),
        Process(1, arrival_time=0, burst_time=3, priority=2),
        Process(2, arrival_time=2, burst_time=1, priority=1),
        Process(3, arrival_time=3, burst_time=3, priority=5),
        Process(5, arrival_time=20, burst_time=4, priority=1),
        Process(6, arrival_time=21, burst_time=2, priority=3),
        Process(7, arrival_time=21, burst_time=7, priority=3),
        Process(8, arrival_time=40, burst_time=1, priority=4),
    ]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert [s.pid for s in res.timeline] == [1, 2, 3]
    assert res.processes[1].waiting_time == 0
    assert res.processes[2].waiting_time == 4
    assert res.processes[3].waiting_time == 6


def test_fcfs_two_processes():
    res = simulate("fcfs", None, [Process(1, 0, 5), Process(2, 1, 3)])
    assert _slices(res) == [(1, 0, 5), (2, 5, 8)]
    assert [m.waiting_time for m in res.processes.values()] == [0, 4]


def test_fcfs_ties_broken_by_pid_not_input_order():
    res = schedule_fcfs([Process(2, 0, 2), Process(1, 0, 2)])
    assert _slices(res) == [(1, 0, 2), (2, 2, 4)]


def test_fcfs_idles_until_next_arrival():
    res = schedule_fcfs([Process(1, 0, 2), Process(2, 6, 1)])
    assert _slices(res) == [(1, 0, 2), (2, 6, 7)]
    assert res.processes[2].waiting_time == 0


def test_sjf_order():
    res = schedule_sjf(_procs())
    # P1 is alone at t=0 and runs to completion, then P2 < P3.
    assert [s.pid for s in res.timeline] == [1, 2, 3]


def test_sjf_textbook_case():
    procs = [Process(1, 0, 7), Process(2, 2, 4), Process(3, 4, 1), Process(4, 5, 4)]
    res = schedule_sjf(procs)
    # Non-preemptive: P1 keeps the CPU even though P3 arrives at t=4.
    assert _slices(res) == [(1, 0, 7), (3, 7, 8), (2, 8, 12), (4, 12, 16)]
    assert [m.waiting_time for m in res.processes.values()] == [0, 6, 3, 7]
    assert res.average_waiting == pytest.approx(4.0)
    assert res.average_turnaround == pytest.approx(8.0)


def test_sjf_tie_breaks_on_arrival_then_pid():
    procs = [
        Process(4, 1, 3),
        Process(3, 2, 3),
        Process(2, 1, 3),
        Process(1, 0, 2),
    ]
    res = schedule_sjf(procs)
    assert [s.pid for s in res.timeline] == [1, 2, 4, 3]


def test_sjf_skips_idle_gap():
    res = schedule_sjf([Process(1, 3, 2), Process(2, 10, 1)])
    assert _slices(res) == [(1, 3, 5), (2, 10, 11)]


def test_priority_static():
    res = schedule_priority(_procs())
    # P2 has highest priority (1), but P1 is alone at t=0 and starts first.
    assert res.timeline[0].pid == 1
    assert res.timeline[1].pid == 2


def test_priority_never_preempts():
    procs = [Process(1, 0, 10, 3), Process(2, 1, 5, 1), Process(3, 2, 2, 4), Process(4, 3, 4, 2)]
    res = schedule_priority(procs)
    assert _slices(res) == [(1, 0, 10), (2, 10, 15), (4, 15, 19), (3, 19, 21)]
    assert [m.waiting_time for m in res.processes.values()] == [0, 9, 17, 12]
    assert res.average_waiting == pytest.approx(9.5)
    assert res.average_turnaround == pytest.approx(14.75)


def test_priority_tie_breaks_on_arrival_then_pid():
    procs = [
        Process(1, 0, 4, 1),
        Process(3, 1, 1, 2),
        Process(2, 2, 1, 2),
        Process(4, 1, 1, 2),
    ]
    res = schedule_priority(procs)
    assert [s.pid for s in res.timeline] == [1, 3, 4, 2]


def test_rr_quantum_2():
    res = schedule_rr(_procs(), quantum=2)
    assert {s.pid for s in res.timeline} == {1, 2, 3}
    assert sum(p.burst_time for p in _procs()) == res.system.cpu_busy_time


def test_rr_newcomer_queues_ahead_of_preempted_process():
    res = simulate(Algorithm.ROUND_ROBIN, 2, [Process(1, 0, 5), Process(2, 1, 3)])
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 6), (2, 6, 7), (1, 7, 8)]
    assert res.processes[1].completion_time == 8
    assert res.processes[2].completion_time == 7
    assert res.processes[1].waiting_time == 3
    assert res.processes[2].waiting_time == 3


def test_rr_arrival_at_slice_end_counts_as_during_slice():
    res = schedule_rr([Process(1, 0, 4), Process(2, 3, 2)], quantum=3)
    assert _slices(res) == [(1, 0, 3), (2, 3, 5), (1, 5, 6)]


def test_rr_newcomers_enqueued_in_arrival_then_pid_order():
    procs = [Process(1, 0, 4), Process(3, 2, 1), Process(2, 2, 1), Process(4, 1, 1)]
    res = schedule_rr(procs, quantum=4)
    assert [s.pid for s in res.timeline] == [1, 4, 2, 3]


def test_rr_idle_jump_enqueues_simultaneous_arrivals():
    procs = [Process(1, 0, 1), Process(3, 5, 1), Process(2, 5, 3)]
    res = schedule_rr(procs, quantum=2)
    assert _slices(res) == [(1, 0, 1), (2, 5, 7), (3, 7, 8), (2, 8, 9)]
    assert [(g.start_time, g.end_time) for g in res.idle_intervals()] == [(1, 5)]


def test_rr_starts_at_earliest_arrival():
    res = schedule_rr([Process(1, 3, 2), Process(2, 3, 1)], quantum=4)
    assert _slices(res) == [(1, 3, 5), (2, 5, 6)]
    assert [(g.start_time, g.end_time) for g in res.idle_intervals()] == [(0, 3)]


def test_rr_large_quantum_matches_fcfs():
    rr = schedule_rr(_mixed_workload(), quantum=100)
    fcfs = schedule_fcfs(_mixed_workload())
    assert rr.timeline == fcfs.timeline
    assert rr.processes == fcfs.processes


def test_rr_quantum_1_alternates():
    res = schedule_rr([Process(1, 0, 2), Process(2, 0, 2)], quantum=1)
    assert [s.pid for s in res.timeline] == [1, 2, 1, 2]


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_invariants_hold_for_every_algorithm(algorithm):
    procs = _mixed_workload()
    res = simulate(algorithm, 3, procs)

    assert sorted(res.processes) == sorted(p.pid for p in procs)

    for p in procs:
        ran = sum(s.duration for s in res.slices_for(p.pid))
        assert ran == p.burst_time

        m = res.processes[p.pid]
        assert m.completion_time >= p.arrival_time + p.burst_time
        assert m.turnaround_time >= p.burst_time
        assert m.waiting_time >= 0
        assert m.start_time >= p.arrival_time

    for s in res.timeline:
        assert s.end_time > s.start_time
    for prev, nxt in zip(res.timeline, res.timeline[1:]):
        assert prev.end_time <= nxt.start_time
        assert prev.start_time < nxt.start_time


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_simulate_is_repeatable(algorithm):
    procs = _mixed_workload()
    first = simulate(algorithm, 2, procs)
    second = simulate(algorithm, 2, procs)
    assert first == second
    assert procs == _mixed_workload()


def test_averages_divide_by_total_process_count():
    res = schedule_fcfs([Process(1, 0, 5), Process(2, 1, 3)])
    assert res.processes[1].waiting_time == 0
    assert res.average_waiting == pytest.approx(2.0)
    assert res.average_turnaround == pytest.approx(6.0)
    assert res.average_response == pytest.approx(2.0)


def test_input_order_does_not_change_outcome():
    procs = _mixed_workload()
    forward = simulate("sjf", None, procs)
    backward = simulate("sjf", None, list(reversed(procs)))
    assert forward == backward


def test_processes_reported_in_pid_order():
    res = schedule_sjf(_mixed_workload())
    assert list(res.processes) == sorted(res.processes)


def test_quantum_ignored_for_non_preemptive():
    res = simulate("priority", 0, _procs())
    assert res.quantum is None


def test_rr_reports_quantum():
    res = schedule_rr(_procs(), quantum=3)
    assert res.quantum == 3
    assert res.algorithm is Algorithm.ROUND_ROBIN
    assert res.algorithm.label == "Round Robin"


def test_empty_input_rejected():
    with pytest.raises(EmptyInput):
        simulate("fcfs", None, [])


def test_empty_input_checked_before_quantum():
    with pytest.raises(EmptyInput):
        simulate("rr", None, [])


@pytest.mark.parametrize("quantum", [None, 0, -1, True, 1.5])
def test_rr_requires_positive_integer_quantum(quantum):
    with pytest.raises(InvalidQuantum) as excinfo:
        schedule_rr(_procs(), quantum=quantum)
    assert excinfo.value.quantum is quantum


@pytest.mark.parametrize(
    "bad",
    [
        Process(7, arrival_time=-1, burst_time=3),
        Process(7, arrival_time=0, burst_time=0),
        Process(7, arrival_time=0, burst_time=3, priority=0),
    ],
)
def test_invalid_process_names_offending_pid(bad):
    with pytest.raises(InvalidProcess) as excinfo:
        schedule_fcfs([Process(1, 0, 1), bad])
    assert excinfo.value.pid == 7
    assert "P7" in str(excinfo.value)


def test_duplicate_pid_rejected():
    with pytest.raises(InvalidProcess, match="duplicate"):
        schedule_sjf([Process(1, 0, 1), Process(1, 2, 2)])


def test_errors_are_value_errors():
    assert issubclass(SimulationError, ValueError)
    with pytest.raises(ValueError):
        simulate("fcfs", None, [])


def test_unknown_algorithm():
    with pytest.raises(UnknownAlgorithm, match="srtf"):
        simulate("srtf", None, _procs())


@pytest.mark.parametrize(
    "name, expected",
    [
        ("fcfs", Algorithm.FCFS),
        ("FCFS", Algorithm.FCFS),
        ("sjf", Algorithm.SJF),
        ("Priority", Algorithm.PRIORITY),
        ("rr", Algorithm.ROUND_ROBIN),
        ("round-robin", Algorithm.ROUND_ROBIN),
        (Algorithm.SJF, Algorithm.SJF),
    ],
)
def test_algorithm_parse(name, expected):
    assert Algorithm.parse(name) is expected


def test_every_algorithm_has_a_policy():
    assert set(ALGORITHMS) == set(Algorithm)


def test_simulate_rejects_non_process_entries():
    with pytest.raises(InvalidProcess, match="expected a Process"):
        simulate("fcfs", None, [Process(1, 0, 1), (2, 0, 1, 1)])


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_result_carries_algorithm_member(algorithm):
    res = simulate(algorithm.value, 2, _procs())
    assert res.algorithm is algorithm
    assert res.algorithm.label
