"""
CPU scheduling simulator.

Runs FCFS, SJF, static-priority and round-robin scheduling over a fixed set of
processes and reports the execution timeline and per-process metrics.
"""

from .algorithms import Algorithm, simulate
from .errors import EmptyInput, InvalidProcess, InvalidQuantum, SimulationError, UnknownAlgorithm
from .models import Process, ProcessTable, SimulationResult

__all__ = [
    "Algorithm",
    "EmptyInput",
    "InvalidProcess",
    "InvalidQuantum",
    "Process",
    "ProcessTable",
    "SimulationError",
    "SimulationResult",
    "UnknownAlgorithm",
    "cli",
    "simulate",
]
