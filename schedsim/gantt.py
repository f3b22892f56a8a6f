from __future__ import annotations

from typing import List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .metrics import idle_intervals
from .models import ScheduledSlice

COLORS = ["blue", "red", "green", "yellow", "magenta", "cyan", "bright_red", "bright_blue", "bright_yellow", "white"]


def pid_color(pid: int) -> str:
    """Same pid, same color, in every chart."""
    return COLORS[(pid - 1) % len(COLORS)]


def _segments(slices: List[ScheduledSlice]):
    """
    Yield ``(label, start, end)`` in time order, with ``label=None`` for
    idle gaps.
    """
    gaps = {gap.end_time: gap for gap in idle_intervals(slices)}
    for sl in slices:
        gap = gaps.get(sl.start_time)
        if gap is not None:
            yield None, gap.start_time, gap.end_time
        yield sl, sl.start_time, sl.end_time


def render_gantt(slices: List[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart for terminals without color (``--plain``).
    """
    if not slices:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = "0"

    for sl, start, end in _segments(slices):
        width = max(1, end - start)
        if sl is None:
            line += "." * width
            labels += " " * width
        else:
            line += "=" * width
            labels += f"P{sl.pid}"[:width].ljust(width)
        time_marks += f"{end:>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    timeline = Text()
    labels = Text()
    time_marks = "0"

    for sl, start, end in _segments(slices):
        width = max(1, end - start)
        if sl is None:
            timeline.append("." * width, style="dim")
            labels.append("idle"[:width].ljust(width), style="dim")
        else:
            timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
            labels.append(f"P{sl.pid}"[:width].ljust(width), style="bold")
        time_marks += f"{end:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
