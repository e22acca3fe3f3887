"""Integrator contract: pose snapshots, skipping, NaN guards, atomic commits."""

from __future__ import annotations

import pytest
import torch

from membrane.collider import Collider, Mesh, Sphere, StaticTrajectory, Transform
from membrane.config import SimulationConfig
from membrane.grid import Grid
from membrane.integrator import Integrator
from membrane.output import SurfaceOutput
from membrane.response import ResponseResult
from membrane.response.base import CollisionResponse
from membrane.simulation import Simulation

FRAME = 1.0 / 60.0


@pytest.fixture
def config():
    return SimulationConfig(grid_size=4, physical_size=2.0, device="cpu", rate_mode="per_frame")


class CountingTrajectory:
    def __init__(self, pose: Transform):
        self.pose = pose
        self.calls: list[float] = []

    def __call__(self, elapsed: float) -> Transform:
        self.calls.append(elapsed)
        return self.pose


class PoisonResponse(CollisionResponse):
    """Writes NaN / inf into a couple of points."""

    name = "poison"

    def apply(self, grid, collider, pose, frames):
        nxt = grid.current.clone()
        nxt[:, 2] += 0.25
        nxt[0, 2] = float("nan")
        nxt[1, 0] = float("inf")
        return ResponseResult(current=nxt, velocity=torch.zeros_like(nxt))


class ExplodingResponse(CollisionResponse):
    name = "explode"

    def apply(self, grid, collider, pose, frames):
        raise RuntimeError("boom")


class TestPoseSnapshot:
    def test_one_pose_read_per_step(self, config):
        traj = CountingTrajectory(Transform.at(0.0, 0.0, -0.3))
        sim = Simulation(config, Collider(Sphere(0.5), traj))

        sim.step(0.5, FRAME)
        sim.step(0.6, FRAME)

        assert traj.calls == [0.5, 0.6]

    def test_explicit_pose_bypasses_trajectory(self, config):
        traj = CountingTrajectory(Transform.at(0.0, 0.0, -100.0))
        sim = Simulation(config, Collider(Sphere(0.5), traj))

        sim.step(0.0, FRAME, pose=Transform.at(0.0, 0.0, -0.3))

        assert traj.calls == []
        assert float(sim.grid.current[:, 2].max()) > 0.0

    def test_deterministic(self, config):
        def run():
            collider = Collider(Sphere(0.6), StaticTrajectory(Transform.at(0.1, 0.0, -0.2)))
            sim = Simulation(replace_response(config, "cast"), collider)
            for i in range(20):
                sim.step(i * FRAME, FRAME)
            return sim.grid.current.clone()

        assert torch.equal(run(), run())


def replace_response(config: SimulationConfig, name: str) -> SimulationConfig:
    from dataclasses import replace

    return replace(config, response=name)


class TestColliderUnavailable:
    def test_skips_until_geometry_loads(self, config):
        mesh = Mesh.pending()
        collider = Collider(mesh, StaticTrajectory(Transform.at(0.0, 0.0, -0.3)))
        sim = Simulation(config, collider)
        sim.output.acknowledge()

        stats = sim.step(FRAME, FRAME)

        assert stats.skipped
        assert torch.equal(sim.grid.current, sim.grid.rest)
        assert not sim.output.needs_update

        sphere = Mesh.uv_sphere(0.5, 16, 8)
        mesh.load(sphere.vertices, sphere.faces)
        stats = sim.step(2 * FRAME, FRAME)

        assert not stats.skipped
        assert sim.output.needs_update
        assert float(sim.grid.current[:, 2].max()) > 0.0

    def test_ready_hook_runs_once_after_load(self, config):
        calls = []
        mesh = Mesh.pending()
        collider = Collider(mesh, StaticTrajectory(Transform.at(0.0, 0.0, -0.3)))
        sim = Simulation(config, collider, on_collider_ready=calls.append)

        sim.step(FRAME, FRAME)
        assert calls == []

        sphere = Mesh.uv_sphere(0.5, 16, 8)
        mesh.load(sphere.vertices, sphere.faces)
        sim.step(2 * FRAME, FRAME)
        sim.step(3 * FRAME, FRAME)
        assert calls == [sim]

    def test_unloaded_mesh_skips_again(self, config):
        mesh = Mesh.uv_sphere(0.5, 16, 8)
        sim = Simulation(config, Collider(mesh, StaticTrajectory(Transform.at(0.0, 0.0, -0.3))))
        sim.step(FRAME, FRAME)
        before = sim.grid.current.clone()

        mesh.unload()
        stats = sim.step(2 * FRAME, FRAME)

        assert stats.skipped
        assert torch.equal(sim.grid.current, before)


class TestNumericGuards:
    def test_non_finite_values_keep_prior_state(self, config):
        grid = Grid.create(4, 2.0)
        output = SurfaceOutput(grid)
        collider = Collider(Sphere(1.0))
        integrator = Integrator(grid, collider, PoisonResponse(config), output, config=config)

        stats = integrator.step(FRAME, FRAME)

        assert stats.non_finite == 2
        assert torch.isfinite(grid.current).all()
        assert torch.equal(grid.current[:2], grid.rest[:2])
        assert torch.allclose(grid.current[2:, 2], torch.full((14,), 0.25))
        assert torch.isfinite(torch.from_numpy(output.buffer.copy())).all()

    def test_failed_step_leaves_state_untouched(self, config):
        grid = Grid.create(4, 2.0)
        output = SurfaceOutput(grid)
        output.acknowledge()
        integrator = Integrator(grid, Collider(Sphere(1.0)), ExplodingResponse(config), output, config=config)

        with pytest.raises(RuntimeError, match="boom"):
            integrator.step(FRAME, FRAME)

        assert torch.equal(grid.current, grid.rest)
        assert not output.needs_update


class TestLifecycle:
    def test_marks_output_dirty(self, config):
        sim = Simulation(config, Collider(Sphere(0.5), StaticTrajectory(Transform.at(0.0, 0.0, -0.3))))
        sim.output.acknowledge()
        version = sim.output.version

        sim.step(FRAME, FRAME)

        assert sim.output.needs_update
        assert sim.output.version == version + 1

    def test_close_stops_stepping(self, config):
        sim = Simulation(config, Collider(Sphere(0.5)))
        sim.close()
        with pytest.raises(RuntimeError):
            sim.step(FRAME, FRAME)

    def test_reset_returns_to_rest(self, config):
        sim = Simulation(config, Collider(Sphere(0.5), StaticTrajectory(Transform.at(0.0, 0.0, -0.3))))
        sim.step(FRAME, FRAME)
        sim.reset()
        assert torch.equal(sim.grid.current, sim.grid.rest)
        assert torch.all(sim.grid.velocity == 0.0)

    def test_stats(self, config):
        sim = Simulation(config, Collider(Sphere(0.5), StaticTrajectory(Transform.at(0.0, 0.0, -0.3))))
        stats = sim.step(1.0, FRAME)
        assert stats.frame == 1
        assert stats.elapsed == 1.0
        assert stats.contacts == 16
        assert stats.max_displacement > 0.0
        assert sim.frame == 1
