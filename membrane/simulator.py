"""Headless stand-in for the host render loop."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from .clock import ManualClock
from .console import console
from .history import StateHistoryInstrument
from .profiler import profile_run
from .simulation import Simulation


def run_simulation(
    sim: Simulation,
    num_steps: int,
    *,
    frame_rate: float = 60.0,
    clock: Optional[ManualClock] = None,
    history: Optional[StateHistoryInstrument] = None,
) -> Dict[str, Any]:
    """Drive `sim` for `num_steps` frames at a fixed frame rate.

    One `step()` per frame; the buffer counts as uploaded (acknowledged)
    whenever it is dirty.
    """
    cfg = sim.cfg
    clock = clock if clock is not None else ManualClock(frame_rate)
    history = history if history is not None else StateHistoryInstrument()

    console.header(
        "MEMBRANE SIMULATION",
        Device=cfg.device,
        Grid=f"{cfg.grid_size}x{cfg.grid_size} ({cfg.physical_size:g} units)",
        Response=sim.response.name,
        Collider=repr(sim.collider),
        Rates=cfg.rate_mode,
        Steps=num_steps,
    )

    uploads = 0
    skipped = 0
    start = time.perf_counter()
    with profile_run(cfg, num_steps) as profiler_step:
        for _ in range(int(num_steps)):
            elapsed, delta = clock.tick()
            stats = sim.step(elapsed, delta)
            history.update(stats)
            skipped += int(stats.skipped)
            if sim.output.needs_update:
                sim.output.acknowledge()
                uploads += 1
            profiler_step()

    wall = time.perf_counter() - start
    last = sim.integrator.last_stats
    cut = sim.cut_mask()
    summary = {
        "steps": int(num_steps),
        "uploads": uploads,
        "skipped": skipped,
        "elapsed": clock.elapsed,
        "wall_time": wall,
        "steps_per_second": (num_steps / wall) if wall > 0 else float("inf"),
        "max_displacement": last.max_displacement if last is not None else 0.0,
        "cut_points": int(cut.sum()) if cut is not None else 0,
        "history": history.history,
    }
    console.success(
        "Simulation finished",
        detail=f"{num_steps} steps in {wall:.2f}s ({summary['steps_per_second']:.0f} steps/s), {skipped} skipped",
    )
    console.summary("Run summary", {k: v for k, v in summary.items() if k != "history"})
    return summary
