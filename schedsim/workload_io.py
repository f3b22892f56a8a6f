from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Mapping

from .errors import InvalidProcess
from .models import Process, ProcessTable

logger = logging.getLogger(__name__)

# (arrival_time, burst_time, priority)
EXAMPLE_WORKLOAD = [
    (0, 10, 3),
    (1, 5, 1),
    (2, 2, 4),
    (3, 4, 2),
]


class WorkloadError(ValueError):
    pass


def example_workload() -> List[Process]:
    """
    The four-process demo workload used when no file is given.
    """
    table = ProcessTable()
    for arrival_time, burst_time, priority in EXAMPLE_WORKLOAD:
        table.add(arrival_time, burst_time, priority)
    return table.processes


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.

    ``pid`` and ``priority`` columns are optional: missing pids are numbered
    in file order, missing priorities default to 1.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        entries = _load_json(path)
    elif suffix == ".csv":
        entries = _load_csv(path)
    else:
        raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    table = ProcessTable()
    for entry in entries:
        _add_entry(table, entry)

    logger.debug("Loaded %d processes from %s", len(table), path)
    return table.processes


def _load_json(path: Path) -> List[Mapping]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return raw


def _load_csv(path: Path) -> List[Mapping]:
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def _to_int(value) -> int:
    # JSON numbers must already be ints; CSV cells arrive as strings.
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected an integer, got {value!r}")


def _optional_int(mapping: Mapping, key: str):
    value = mapping.get(key)
    if value is None or value == "":
        return None
    return _to_int(value)


def _parse_pid(value):
    # Accept both 3 and "P3".
    if value is None or value == "":
        return None
    if isinstance(value, str) and value[:1] in ("P", "p"):
        value = value[1:]
    return _to_int(value)


def _add_entry(table: ProcessTable, mapping) -> Process:
    try:
        arrival_time = _to_int(mapping["arrival_time"])
        burst_time = _to_int(mapping["burst_time"])
        pid = _parse_pid(mapping.get("pid"))
        priority = _optional_int(mapping, "priority")
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    try:
        return table.add(
            arrival_time=arrival_time,
            burst_time=burst_time,
            priority=1 if priority is None else priority,
            pid=pid,
        )
    except InvalidProcess as exc:
        raise WorkloadError(f"Invalid process entry {mapping!r}: {exc.reason}") from exc
