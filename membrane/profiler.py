"""Optional torch profiling around a headless run."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import time
from typing import Callable, Iterator


from .config import SimulationConfig
from .console import console


@contextmanager
def profile_run(config: SimulationConfig, num_steps: int) -> Iterator[Callable[[], None]]:
    """Yield a per-step callback; a no-op unless `config.profile_enabled`.

    The first `profile_warmup_steps` steps are skipped, then two warmup
    steps, then the rest of the run is recorded.
    """
    if not config.profile_enabled:
        yield lambda: None
        return

    from torch.profiler import ProfilerActivity, profile, schedule

    activities = [ProfilerActivity.CPU]
    if config.device == "cuda":
        activities.append(ProfilerActivity.CUDA)
    # MPS kernels are not visible to the profiler; CPU-side dispatch still is.

    wait = int(config.profile_warmup_steps)
    active = max(1, int(num_steps) - wait - 2)
    prof = profile(
        activities=activities,
        schedule=schedule(wait=wait, warmup=2, active=active, repeat=1),
        on_trace_ready=lambda p: save_profiler_trace(p, Path(config.profile_output_dir)),
        record_shapes=True,
        profile_memory=True,
    )
    prof.start()
    try:
        yield prof.step
    finally:
        prof.stop()


def save_profiler_trace(profiler, output_dir: Path) -> Path:
    """Write a chrome trace and print the top operators."""
    output_dir.mkdir(parents=True, exist_ok=True)
    trace_path = output_dir / f"trace_{int(time.time())}.json"
    profiler.export_chrome_trace(str(trace_path))
    console.success("Profiler trace saved", detail=f"{trace_path} (view in chrome://tracing)")
    console.info("Top operators", detail="\n" + profiler.key_averages().table(sort_by="cpu_time_total", row_limit=20))
    return trace_path
