"""Console output: literal text, quiet mode, summary table."""

from __future__ import annotations

import io

import pytest
from rich.console import Console as RichConsole

from membrane.console import Console


@pytest.fixture
def captured():
    buffer = io.StringIO()
    rich = RichConsole(file=buffer, width=120, color_system=None)
    return Console(rich_console=rich), buffer


class TestConsole:
    def test_brackets_are_printed_verbatim(self, captured):
        console, buffer = captured
        console.error("Invalid configuration", detail="expected one of ['analytic', 'cast', 'projection']")
        assert "['analytic', 'cast', 'projection']" in buffer.getvalue()

    def test_quiet_silences_all_but_errors(self, captured):
        console, buffer = captured
        console.quiet = True
        console.info("hidden")
        console.warn("hidden")
        console.success("hidden")
        console.header("HIDDEN", Steps=3)
        console.summary("hidden", {"steps": 3})
        assert buffer.getvalue() == ""

        console.error("shown", detail="[red]")
        assert "shown [red]" in buffer.getvalue()

    def test_summary_formats_floats(self, captured):
        console, buffer = captured
        console.summary("Run summary", {"steps": 600, "wall_time": 1.23456789})
        out = buffer.getvalue()
        assert "600" in out
        assert "1.235" in out
        assert "Run summary" in out

    def test_header_lists_fields(self, captured):
        console, buffer = captured
        console.header("MEMBRANE SIMULATION", Grid="4x4", Response="cast")
        out = buffer.getvalue()
        assert "Grid: 4x4" in out
        assert "Response: cast" in out
