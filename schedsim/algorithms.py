from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set, Union

from .errors import EmptyInput, InvalidProcess, InvalidQuantum, UnknownAlgorithm
from .metrics import average, compute_system_metrics
from .models import Process, ProcessState, ScheduledSlice, SimulationResult, validate_process

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    PRIORITY = "priority"
    ROUND_ROBIN = "rr"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Union["Algorithm", str]) -> "Algorithm":
        """
        Accept an ``Algorithm`` or a case-insensitive name such as ``"fcfs"``,
        ``"RR"`` or ``"round-robin"``.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _ALIASES.get(key, key)
            try:
                return cls(key)
            except ValueError:
                pass
        raise UnknownAlgorithm(value)


_LABELS = {
    Algorithm.FCFS: "FCFS",
    Algorithm.SJF: "SJF (non-preemptive)",
    Algorithm.PRIORITY: "Priority (static)",
    Algorithm.ROUND_ROBIN: "Round Robin",
}

_ALIASES = {
    "fifo": "fcfs",
    "round-robin": "rr",
    "round_robin": "rr",
    "roundrobin": "rr",
}

PolicyFn = Callable[[List[ProcessState], Optional[int]], List[ScheduledSlice]]


def _by_arrival(state: ProcessState):
    return (state.arrival_time, state.pid)


def _run_fcfs(states: List[ProcessState], quantum: Optional[int] = None) -> List[ScheduledSlice]:
    """
    First-Come First-Serve (non-preemptive).
    """
    time = 0
    timeline: List[ScheduledSlice] = []

    for state in sorted(states, key=_by_arrival):
        if time < state.arrival_time:
            logger.debug("t=%d: CPU idle until t=%d", time, state.arrival_time)
            time = state.arrival_time

        slice_ = state.allocate(time, state.remaining)
        logger.debug("t=%d: dispatch P%d until t=%d", time, state.pid, slice_.end_time)
        timeline.append(slice_)
        time = slice_.end_time

    return timeline


def _run_non_preemptive(
    states: List[ProcessState],
    key: Callable[[ProcessState], tuple],
) -> List[ScheduledSlice]:
    """
    Shared loop for SJF and static priority.

    At each decision point, among processes that have arrived and are not
    yet completed, run the one with the smallest ``key`` to completion.
    """
    time = 0
    timeline: List[ScheduledSlice] = []
    unfinished = list(states)

    while unfinished:
        ready = [s for s in unfinished if s.arrival_time <= time]

        if not ready:
            next_arrival = min(s.arrival_time for s in unfinished)
            logger.debug("t=%d: CPU idle until t=%d", time, next_arrival)
            time = next_arrival
            continue

        state = min(ready, key=key)
        slice_ = state.allocate(time, state.remaining)
        logger.debug("t=%d: dispatch P%d until t=%d", time, state.pid, slice_.end_time)
        timeline.append(slice_)
        unfinished.remove(state)
        time = slice_.end_time

    return timeline


def _run_sjf(states: List[ProcessState], quantum: Optional[int] = None) -> List[ScheduledSlice]:
    # Tie-breaker: earlier arrival, then PID.
    return _run_non_preemptive(states, key=lambda s: (s.burst_time, s.arrival_time, s.pid))


def _run_priority(states: List[ProcessState], quantum: Optional[int] = None) -> List[ScheduledSlice]:
    # Lower numeric priority value means higher priority.
    return _run_non_preemptive(states, key=lambda s: (s.priority, s.arrival_time, s.pid))


def _run_round_robin(states: List[ProcessState], quantum: Optional[int] = None) -> List[ScheduledSlice]:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice runs join the queue ahead of the
    process that was just preempted. ``quantum`` has already been checked
    by ``simulate``.
    """
    not_arrived: Deque[ProcessState] = deque(sorted(states, key=_by_arrival))
    ready: Deque[ProcessState] = deque()
    timeline: List[ScheduledSlice] = []

    def admit(until: int) -> None:
        while not_arrived and not_arrived[0].arrival_time <= until:
            ready.append(not_arrived.popleft())

    time = not_arrived[0].arrival_time
    admit(time)

    while ready or not_arrived:
        if not ready:
            next_arrival = not_arrived[0].arrival_time
            logger.debug("t=%d: CPU idle until t=%d", time, next_arrival)
            time = next_arrival
            admit(time)
            continue

        state = ready.popleft()
        slice_ = state.allocate(time, min(quantum, state.remaining))
        logger.debug("t=%d: dispatch P%d until t=%d", time, state.pid, slice_.end_time)
        timeline.append(slice_)
        time = slice_.end_time

        admit(time)

        if not state.finished:
            ready.append(state)

    return timeline


ALGORITHMS: Dict[Algorithm, PolicyFn] = {
    Algorithm.FCFS: _run_fcfs,
    Algorithm.SJF: _run_sjf,
    Algorithm.PRIORITY: _run_priority,
    Algorithm.ROUND_ROBIN: _run_round_robin,
}


def _check_quantum(quantum) -> None:
    if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum < 1:
        raise InvalidQuantum(quantum)


def _check_processes(processes: List[Process]) -> None:
    seen: Set[int] = set()
    for p in processes:
        validate_process(p)
        if p.pid in seen:
            raise InvalidProcess(p.pid, "duplicate pid")
        seen.add(p.pid)


def simulate(
    algorithm: Union[Algorithm, str],
    quantum: Optional[int],
    processes: Iterable[Process],
) -> SimulationResult:
    """
    Run one scheduling policy over ``processes`` from time 0 and return the
    timeline, per-process metrics and averages.

    Raises ``EmptyInput``, ``InvalidQuantum`` or ``InvalidProcess`` (all
    ``SimulationError``) before anything is simulated.
    """
    algorithm = Algorithm.parse(algorithm)
    processes = list(processes)

    if not processes:
        raise EmptyInput()
    if algorithm is Algorithm.ROUND_ROBIN:
        _check_quantum(quantum)
    else:
        quantum = None
    _check_processes(processes)

    states = [ProcessState.from_process(p) for p in processes]
    timeline = ALGORITHMS[algorithm](states, quantum)

    metrics = {s.pid: s.to_metrics() for s in sorted(states, key=lambda s: s.pid)}
    count = len(processes)

    result = SimulationResult(
        algorithm=algorithm,
        quantum=quantum,
        processes=metrics,
        timeline=timeline,
        average_turnaround=average((m.turnaround_time for m in metrics.values()), count),
        average_waiting=average((m.waiting_time for m in metrics.values()), count),
        average_response=average((m.response_time for m in metrics.values()), count),
        system=compute_system_metrics(timeline, count),
    )
    logger.info(
        "%s: %d processes, %d slices, avg turnaround %.2f, avg waiting %.2f",
        algorithm.label,
        count,
        len(timeline),
        result.average_turnaround,
        result.average_waiting,
    )
    return result


def schedule_fcfs(processes: List[Process], quantum: Optional[int] = None) -> SimulationResult:
    return simulate(Algorithm.FCFS, quantum, processes)


def schedule_sjf(processes: List[Process], quantum: Optional[int] = None) -> SimulationResult:
    return simulate(Algorithm.SJF, quantum, processes)


def schedule_priority(processes: List[Process], quantum: Optional[int] = None) -> SimulationResult:
    return simulate(Algorithm.PRIORITY, quantum, processes)


def schedule_rr(processes: List[Process], quantum: Optional[int] = None) -> SimulationResult:
    return simulate(Algorithm.ROUND_ROBIN, quantum, processes)
