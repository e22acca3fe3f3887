"""Pointer-driven pull-through effect."""

from __future__ import annotations

import pytest
import torch

from membrane import presets
from membrane.collider import Collider, Sphere
from membrane.pull_through import PullThroughTrajectory, pull_threshold, pull_through_mask


class TestPullThroughTrajectory:
    def test_progress_rises_while_held_and_saturates(self):
        traj = PullThroughTrajectory()
        traj.press()
        for _ in range(150):
            traj.advance()
        assert traj.progress == 1.0

    def test_progress_falls_after_release(self):
        traj = PullThroughTrajectory()
        traj.press()
        for _ in range(10):
            traj.advance()
        traj.release()
        for _ in range(4):
            traj.advance()
        assert traj.progress == pytest.approx(0.06)
        for _ in range(100):
            traj.advance()
        assert traj.progress == 0.0

    def test_pose_follows_pointer_and_progress(self):
        traj = PullThroughTrajectory()
        traj.move(0.5, -0.25)
        traj.press()
        for _ in range(50):
            traj.advance()
        pose = Collider(Sphere(1.0), traj).current_pose(0.0)
        assert pose.position.tolist() == pytest.approx([1.0, -0.5, -1.0])


class TestMask:
    def test_threshold_mix(self):
        assert pull_threshold(1.0, 0.0) == pytest.approx(2.0)
        assert pull_threshold(1.0, 1.0) == pytest.approx(-1.0)
        assert pull_threshold(1.0, 0.5) == pytest.approx(0.5)
        assert pull_threshold(1.0, 3.0) == pytest.approx(-1.0)

    def test_mask_cuts_points_near_sphere(self):
        points = torch.tensor([[0.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
        mask = pull_through_mask(points, torch.tensor([0.0, 0.0, -1.0]), 1.0, 0.0)
        assert mask.tolist() == [True, False]

    def test_fully_pulled_cuts_nothing(self):
        points = torch.zeros(4, 3)
        mask = pull_through_mask(points, torch.zeros(3), 1.0, 1.0)
        assert not mask.any()

    def test_cut_mask_uses_current_pose(self):
        traj = PullThroughTrajectory(radius=1.0)
        traj.move(0.5, 0.0)
        points = torch.tensor([[1.0, 0.0, -1.0], [-1.0, 0.0, -1.0]])
        assert traj.cut_mask(points).tolist() == [True, False]


class TestSimulationWiring:
    def test_step_advances_progress_once_per_frame(self):
        sim = presets.pull_through(grid_size=6, device="cpu", rate_mode="per_frame")
        traj = sim.collider.trajectory
        traj.press()
        for i in range(5):
            sim.step(i / 60.0, 1.0 / 60.0)
        assert traj.progress == pytest.approx(0.05)

    def test_progress_follows_elapsed_time_when_normalized(self):
        sim = presets.pull_through(grid_size=6, device="cpu", rate_mode="normalized")
        traj = sim.collider.trajectory
        traj.press()
        sim.step(0.5, 0.5)
        assert traj.progress == pytest.approx(0.3)

    def test_cut_mask_opens_and_closes_with_progress(self):
        sim = presets.pull_through(radius=1.5, grid_size=9, device="cpu")
        traj = sim.collider.trajectory
        sim.step(0.0, 1.0 / 60.0)
        assert sim.cut_mask().any()

        traj.press()
        for i in range(1, 121):
            sim.step(i / 60.0, 1.0 / 60.0)
        assert traj.progress == 1.0
        assert not sim.cut_mask().any()

    def test_cut_mask_absent_for_other_rigs(self):
        sim = presets.drape(grid_size=5, device="cpu")
        assert sim.cut_mask() is None
