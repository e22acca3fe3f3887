"""Command-line entrypoint: `python -m membrane`.

Runs one of the preset rigs headlessly and prints a summary.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from .console import console
from .errors import MembraneError

_PRESETS = ["membrane", "drape", "pull_through"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m membrane")
    parser.add_argument("--preset", default="membrane", choices=_PRESETS, help="Which rig to run")
    parser.add_argument("--steps", type=int, default=600, help="Number of frames to simulate")
    parser.add_argument("--fps", type=float, default=60.0, help="Frame rate of the simulated render loop")
    parser.add_argument("--grid", type=int, default=None, help="Override grid resolution N")
    parser.add_argument(
        "--response",
        default=None,
        choices=["analytic", "cast", "projection"],
        help="Override the collision response strategy",
    )
    parser.add_argument("--rate-mode", default=None, choices=["per_frame", "normalized"], help="Constant handling")
    parser.add_argument("--device", type=str, default=None, help="Device (mps, cuda, cpu)")
    parser.add_argument("--profile", action="store_true", help="Enable torch profiling")
    parser.add_argument("--profile-dir", type=str, default="artifacts/profiles", help="Profiler trace directory")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from . import presets
    from .simulator import run_simulation

    overrides: dict = {}
    if args.grid is not None:
        overrides["grid_size"] = args.grid
    if args.response is not None:
        overrides["response"] = args.response
    if args.rate_mode is not None:
        overrides["rate_mode"] = args.rate_mode
    if args.device is not None:
        overrides["device"] = args.device
    if args.profile:
        overrides["profile_enabled"] = True
        overrides["profile_output_dir"] = Path(args.profile_dir)

    try:
        with console.spinner(f"Building {args.preset} rig..."):
            sim = getattr(presets, args.preset)(**overrides)
            if args.preset == "pull_through":
                # headless run: pointer held at the centre for the whole run
                sim.collider.trajectory.press()
    except MembraneError as err:
        console.error("Invalid configuration", detail=str(err))
        return 2

    run_simulation(sim, args.steps, frame_rate=args.fps)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
