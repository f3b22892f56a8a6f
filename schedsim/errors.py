from __future__ import annotations

from typing import Any, Optional


class SimulationError(ValueError):
    """
    Base class for input problems that stop a simulation before it starts.
    """


class EmptyInput(SimulationError):
    def __init__(self) -> None:
        super().__init__("No processes supplied; add at least one process")


class InvalidQuantum(SimulationError):
    def __init__(self, quantum: Any) -> None:
        self.quantum = quantum
        if quantum is None:
            msg = "Round Robin requires a time quantum (use --quantum)"
        else:
            msg = f"Round Robin requires a positive integer quantum, got {quantum!r}"
        super().__init__(msg)


class InvalidProcess(SimulationError):
    def __init__(self, pid: Optional[Any], reason: str) -> None:
        self.pid = pid
        self.reason = reason
        label = "process" if pid is None else f"process P{pid}"
        super().__init__(f"Invalid {label}: {reason}")


class UnknownAlgorithm(SimulationError):
    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Unknown or unimplemented algorithm '{name}'")
