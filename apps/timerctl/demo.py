from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from domain.timer import TimerClient, TimerPhase, format_duration
from ports.time import SleeperPort
from rich.table import Table

LOG: Final = logging.getLogger("timerctl.demo")


@dataclass(frozen=True)
class SplitSnapshot:
    split_name: str
    split_index: int
    last_split_time: timedelta
    comparison_split_time: timedelta
    phase: TimerPhase | str
    best_possible_time: timedelta
    final_time: timedelta


def take_snapshot(client: TimerClient, comparison: str = "") -> SplitSnapshot:
    return SplitSnapshot(
        split_name=client.get_current_split_name(),
        split_index=client.get_split_index(),
        last_split_time=client.get_last_split_time(),
        comparison_split_time=client.get_comparison_split_time(),
        phase=client.get_current_timer_phase(),
        best_possible_time=client.get_best_possible_time(),
        final_time=client.get_final_time(comparison),
    )


def render_snapshot(snap: SplitSnapshot) -> Table:
    table = Table(title=f"split #{snap.split_index}", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("split name", snap.split_name)
    table.add_row("split index", str(snap.split_index))
    table.add_row("split time", format_duration(snap.last_split_time))
    table.add_row("comparison split time", format_duration(snap.comparison_split_time))
    table.add_row("timer phase", str(snap.phase))
    table.add_row("best possible time", format_duration(snap.best_possible_time))
    table.add_row("final time", format_duration(snap.final_time))
    return table


def run_demo(
    client: TimerClient,
    sleeper: SleeperPort,
    on_snapshot: Callable[[SplitSnapshot], None],
    interval_s: float = 2.0,
    comparison: str = "",
    max_splits: int | None = None,
) -> int:
    """Start a fresh run and split every ``interval_s`` until the run ends.

    Returns the number of splits sent.
    """
    if client.get_current_timer_phase() != TimerPhase.NOT_RUNNING:
        LOG.info("Timer already active; resetting first.")
        client.reset()
    client.start_timer()

    splits = 0
    while max_splits is None or splits < max_splits:
        sleeper.sleep(interval_s)
        client.split()
        splits += 1
        if client.get_current_timer_phase() == TimerPhase.ENDED:
            LOG.info("Run ended after %d splits.", splits)
            break
        on_snapshot(take_snapshot(client, comparison))
    return splits
