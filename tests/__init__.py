"""Test suite for the membrane simulation.

This package contains:
- Unit tests for the grid, colliders and response strategies
- Integrator / output behaviour (skipping, NaN guards, dirty flag)
- Small end-to-end runs of the preset rigs
"""
