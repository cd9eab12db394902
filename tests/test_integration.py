"""Integration tests: full pipeline end-to-end."""

import numpy as np
import pytest

from bloch_precession.analysis.metrics import TrajectoryMetrics
from bloch_precession.core.simulation import BlochSimulation
from bloch_precession.utils.types import SimulationConfig


class TestFullPipeline:
    """Drive the simulation the way a render loop and control panel would."""

    def test_interactive_session(self):
        sim = BlochSimulation()

        # Paused: ticks are no-ops, but the panel can still change parameters
        for _ in range(10):
            sim.tick()
        sim.set_rabi_frequency(2.5)
        assert sim.elapsed_time() == 0.0

        # Play for a quarter period
        sim.toggle_running()
        for _ in range(10):
            sim.tick()
        theta, _ = sim.current_spherical()
        assert theta == pytest.approx(np.pi / 2, abs=1e-9)
        assert len(sim.trail_points()) == 10

        # Pause, then reset keeps it paused
        sim.toggle_running()
        sim.reset()
        assert sim.running is False
        assert sim.current_spherical() == (pytest.approx(np.pi), 0.0)

        # Detuned drive: trail fills and stays bounded
        sim.set_detuning(1.0)
        sim.toggle_running()
        for _ in range(450):
            sim.tick()
        trail = sim.trail_points()
        assert len(trail) == 200
        assert trail[-1] == pytest.approx(sim.current_cartesian())
        norms = np.linalg.norm(np.array(trail), axis=1)
        np.testing.assert_allclose(norms, 1.0, atol=1e-9)

    def test_headless_run_matches_rabi_formula(self):
        config = SimulationConfig(rabi_freq=1.5, detuning=-0.8)
        sim = BlochSimulation(config=config)
        history = sim.run(1000)
        assert len(history) == 1000

        report = TrajectoryMetrics(history, sim.params).full_report()
        assert report["norm_drift"] < 1e-9
        assert report["analytic_deviation"] < 1e-8
        assert report["estimated_period"] == pytest.approx(report["expected_period"], rel=0.05)
        assert report["population_stats"]["excited_max"] == pytest.approx(
            1.5**2 / (1.5**2 + 0.8**2), abs=1e-3
        )

    def test_long_run_stays_on_sphere(self):
        sim = BlochSimulation(SimulationConfig(rabi_freq=7.3, detuning=4.1))
        sim.run(20_000)
        x, y, z = sim.current_cartesian()
        assert np.sqrt(x * x + y * y + z * z) == pytest.approx(1.0, abs=1e-9)
        theta, phi = sim.current_spherical()
        assert 0.0 <= theta <= np.pi
        assert -np.pi <= phi <= np.pi
