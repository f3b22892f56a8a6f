from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from .errors import InvalidProcess

if TYPE_CHECKING:
    from .algorithms import Algorithm


@dataclass(frozen=True)
class Process:
    """
    Input descriptor for one job. Lower ``priority`` values run first.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 1


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _find_problem(process: Process) -> Optional[str]:
    if not isinstance(process, Process):
        return f"expected a Process, got {type(process).__name__}"
    if not _is_int(process.pid) or process.pid < 1:
        return f"pid must be a positive integer, got {process.pid!r}"
    if not _is_int(process.arrival_time) or process.arrival_time < 0:
        return f"arrival_time must be an integer >= 0, got {process.arrival_time!r}"
    if not _is_int(process.burst_time) or process.burst_time < 1:
        return f"burst_time must be an integer >= 1, got {process.burst_time!r}"
    if not _is_int(process.priority) or process.priority < 1:
        return f"priority must be an integer >= 1, got {process.priority!r}"
    return None


def is_valid(process: Process) -> bool:
    return _find_problem(process) is None


def validate_process(process: Process) -> None:
    problem = _find_problem(process)
    if problem is not None:
        pid = process.pid if isinstance(process, Process) else None
        raise InvalidProcess(pid, problem)


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class IdleInterval:
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int


@dataclass
class ProcessState:
    """
    Mutable bookkeeping for one process during a single simulation run.

    Built fresh from a ``Process`` at the start of every run; the descriptor
    itself is never touched.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    remaining: int
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    @classmethod
    def from_process(cls, process: Process) -> "ProcessState":
        return cls(
            pid=process.pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            priority=process.priority,
            remaining=process.burst_time,
        )

    @property
    def finished(self) -> bool:
        return self.remaining == 0

    def allocate(self, start: int, duration: int) -> ScheduledSlice:
        """
        Give the CPU to this process for ``duration`` units from ``start``
        and return the resulting slice.
        """
        if duration <= 0 or duration > self.remaining:
            raise RuntimeError(
                f"P{self.pid}: cannot run {duration} units with {self.remaining} remaining"
            )

        if self.start_time is None:
            self.start_time = start

        end = start + duration
        self.remaining -= duration
        if self.remaining == 0:
            self.completion_time = end

        return ScheduledSlice(pid=self.pid, start_time=start, end_time=end)

    def to_metrics(self) -> ProcessMetrics:
        if self.start_time is None or self.completion_time is None:
            raise RuntimeError(f"P{self.pid} has not finished")

        turnaround_time = self.completion_time - self.arrival_time
        return ProcessMetrics(
            pid=self.pid,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
            priority=self.priority,
            start_time=self.start_time,
            completion_time=self.completion_time,
            turnaround_time=turnaround_time,
            waiting_time=turnaround_time - self.burst_time,
            response_time=self.start_time - self.arrival_time,
        )


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class SimulationResult:
    algorithm: Algorithm
    quantum: Optional[int]
    processes: Dict[int, ProcessMetrics] = field(default_factory=dict)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    average_turnaround: float = 0.0
    average_waiting: float = 0.0
    average_response: float = 0.0
    system: Optional[SystemMetrics] = None

    def slices_for(self, pid: int) -> List[ScheduledSlice]:
        return [s for s in self.timeline if s.pid == pid]

    def idle_intervals(self) -> List[IdleInterval]:
        from .metrics import idle_intervals

        return idle_intervals(self.timeline)


class ProcessTable:
    """
    Collects process descriptors and hands out sequential pids (1, 2, ...).

    Each table owns its own counter, so separate workloads never share
    numbering.
    """

    def __init__(self) -> None:
        self._processes: List[Process] = []
        self._pids: Set[int] = set()
        self._next_pid = 1

    def add(
        self,
        arrival_time: int,
        burst_time: int,
        priority: int = 1,
        pid: Optional[int] = None,
    ) -> Process:
        if pid is None:
            pid = self._next_pid

        process = Process(
            pid=pid,
            arrival_time=arrival_time,
            burst_time=burst_time,
            priority=priority,
        )
        validate_process(process)
        if pid in self._pids:
            raise InvalidProcess(pid, "duplicate pid")

        self._processes.append(process)
        self._pids.add(pid)
        self._next_pid = max(self._next_pid, pid + 1)
        return process

    def clear(self) -> None:
        self._processes.clear()
        self._pids.clear()
        self._next_pid = 1

    @property
    def processes(self) -> List[Process]:
        return list(self._processes)

    def __len__(self) -> int:
        return len(self._processes)
