"""Configuration validation and frame-rate handling."""

from __future__ import annotations

from dataclasses import replace

import pytest

from membrane.config import SimulationConfig, canonical_response
from membrane.errors import InvalidConfiguration


@pytest.fixture
def config():
    return SimulationConfig(grid_size=8, physical_size=2.0, device="cpu")


class TestResponseNames:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("analytic", "analytic"),
            ("AnalyticPush", "analytic"),
            ("cast_push", "cast"),
            ("CastPush", "cast"),
            ("SurfaceProjection", "projection"),
            ("projection", "projection"),
        ],
    )
    def test_aliases(self, name, expected):
        assert canonical_response(name) == expected

    def test_config_stores_canonical_name(self):
        cfg = SimulationConfig(grid_size=4, response="CastPush", device="cpu")
        assert cfg.response == "cast"

    def test_unknown_strategy_rejected(self):
        with pytest.raises(InvalidConfiguration):
            SimulationConfig(grid_size=4, response="magnet", device="cpu")


class TestValidation:
    @pytest.mark.parametrize(
        "field,value",
        [
            ("grid_size", 1),
            ("grid_size", float("inf")),
            ("grid_size", float("nan")),
            ("grid_size", 4.5),
            ("physical_size", float("inf")),
            ("max_substeps", 0),
            ("physical_size", 0.0),
            ("physical_size", -1.0),
            ("max_displacement", 0.0),
            ("band_depth", -1.0),
            ("cast_range", 0.0),
            ("damping", 1.0),
            ("damping", 0.0),
            ("stiffness", 1.5),
            ("relax_rate", -0.1),
            ("probe_direction", (0.0, 0.0, 0.0)),
            ("rate_mode", "fixed"),
            ("projection_mode", "spherical"),
            ("influence_radius", 0.0),
            ("reference_frame_rate", 0.0),
        ],
    )
    def test_invalid_values(self, config, field, value):
        with pytest.raises(InvalidConfiguration):
            replace(config, **{field: value})

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(grid_size=0, device="cpu")


class TestFrames:
    def test_per_frame_ignores_delta(self, config):
        cfg = replace(config, rate_mode="per_frame")
        assert cfg.frames(0.5) == 1.0
        assert cfg.frames(0.0) == 1.0

    def test_normalized_scales_with_delta(self, config):
        cfg = replace(config, rate_mode="normalized", reference_frame_rate=60.0)
        assert cfg.frames(1.0 / 30.0) == pytest.approx(2.0)
        assert cfg.frames(1.0 / 60.0) == pytest.approx(1.0)

    def test_normalized_non_positive_delta_is_zero_frames(self, config):
        assert config.frames(0.0) == 0.0
        assert config.frames(-0.1) == 0.0
        assert config.frames(float("nan")) == 0.0


class TestScaled:
    def test_lengths_scale(self):
        cfg = SimulationConfig(grid_size=4, influence_radius=1.5, device="cpu").scaled(2.0)
        assert cfg.physical_size == pytest.approx(20.0)
        assert cfg.influence_radius == pytest.approx(3.0)
        assert cfg.max_displacement == pytest.approx(4.0)
        assert cfg.depth_threshold == pytest.approx(-3.0)
        assert cfg.band_depth == pytest.approx(6.0)

    def test_rates_do_not_scale(self, config):
        cfg = config.scaled(3.0)
        assert cfg.stiffness == config.stiffness
        assert cfg.damping == config.damping

    def test_rejects_bad_scale(self, config):
        with pytest.raises(InvalidConfiguration):
            config.scaled(0.0)
