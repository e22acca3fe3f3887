#!/usr/bin/env python3
"""Membrane Simulation Entrypoint

Headless runner for the preset rigs:
- torch profiling for per-step cost (ray casts dominate the cast strategy)
- step summary printed through the rich console

Usage:
    python run.py                          # Membrane rig, analytic push
    python run.py --preset drape           # Draping cloth, surface projection
    python run.py --response cast          # Ray-cast push with damped velocity
    python run.py --profile --steps 200    # Write a chrome trace
"""

from __future__ import annotations

import sys

from membrane.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
