from __future__ import annotations

from typing import Iterable, List

from .models import IdleInterval, ScheduledSlice, SystemMetrics


def idle_intervals(timeline: List[ScheduledSlice]) -> List[IdleInterval]:
    """
    Derive CPU idle time from the gaps between consecutive slices, including
    the gap between time 0 and the first slice.
    """
    gaps: List[IdleInterval] = []
    last_end = 0
    for slice_ in timeline:
        if slice_.start_time > last_end:
            gaps.append(IdleInterval(start_time=last_end, end_time=slice_.start_time))
        last_end = max(last_end, slice_.end_time)
    return gaps


def average(values: Iterable[int], count: int) -> float:
    """
    Mean of ``values`` over ``count`` processes. ``count`` is the size of the
    whole input, not the number of values that happened to be collected.
    """
    if count <= 0:
        return 0.0
    return sum(values) / count


def compute_system_metrics(timeline: List[ScheduledSlice], process_count: int) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from the timeline slices.
    """
    if not timeline:
        return SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = max(s.end_time for s in timeline)
    cpu_busy_time = sum(s.duration for s in timeline)
    idle_time = sum(gap.duration for gap in idle_intervals(timeline))

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=process_count / makespan,
        cpu_utilization=cpu_busy_time / makespan,
    )
