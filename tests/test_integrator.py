"""Tests for coordinate conversion and the Rodrigues step integrator."""

import numpy as np
import pytest

from bloch_precession.core import integrator
from bloch_precession.core.state_vector import (
    excited_population,
    ground_population,
    state_cartesian,
    to_cartesian,
    to_spherical,
)
from bloch_precession.utils.math_helpers import rodrigues_rotate
from bloch_precession.utils.types import DrivingParameters, State


def norm_of(state: State) -> float:
    return float(np.linalg.norm(state_cartesian(state)))


class TestStateVector:
    def test_to_cartesian_returns_floats(self):
        x, y, z = to_cartesian(np.pi / 2, 0.0)
        assert isinstance(x, float)
        assert (x, y, z) == pytest.approx((1.0, 0.0, 0.0), abs=1e-15)

    def test_to_cartesian_any_real(self):
        # theta outside [0, pi] is still a point on the sphere
        x, y, z = to_cartesian(7.5, -12.0)
        assert x * x + y * y + z * z == pytest.approx(1.0)

    def test_to_spherical(self):
        theta, phi = to_spherical(0.0, 1.0, 0.0)
        assert theta == pytest.approx(np.pi / 2)
        assert phi == pytest.approx(np.pi / 2)

    def test_to_spherical_clamps(self):
        theta, _ = to_spherical(0.0, 0.0, -1.0000000001)
        assert theta == pytest.approx(np.pi)

    def test_populations_at_poles(self):
        assert ground_population(np.pi) == pytest.approx(1.0)
        assert excited_population(np.pi) == pytest.approx(0.0)
        assert excited_population(0.0) == pytest.approx(1.0)

    def test_populations_sum_to_one(self):
        for theta in np.linspace(0, np.pi, 7):
            assert ground_population(theta) + excited_population(theta) == pytest.approx(1.0)


class TestEffectiveField:
    def test_components(self):
        field = integrator.effective_field(DrivingParameters(rabi_freq=2.0, detuning=1.0))
        assert field.bx == pytest.approx(4 * np.pi)
        assert field.by == 0.0
        assert field.bz == pytest.approx(2 * np.pi)
        assert field.magnitude == pytest.approx(2 * np.pi * np.sqrt(5.0))

    def test_zero_drive(self):
        field = integrator.effective_field(DrivingParameters(rabi_freq=0.0, detuning=0.0))
        assert field.magnitude == 0.0

    def test_negative_rabi(self):
        field = integrator.effective_field(DrivingParameters(rabi_freq=-1.5, detuning=0.0))
        assert field.bx == pytest.approx(-3 * np.pi)
        assert field.magnitude == pytest.approx(3 * np.pi)

    def test_by_always_zero(self):
        for rabi, det in [(1.0, 2.0), (-3.0, -0.5), (0.0, 4.0)]:
            field = integrator.effective_field(DrivingParameters(rabi, det))
            assert field.by == 0.0


class TestStep:
    def test_returns_new_state(self):
        s0 = State()
        s1 = integrator.step(s0, DrivingParameters())
        assert s1 is not s0
        assert s0.theta == pytest.approx(np.pi)
        assert s0.time == 0.0

    def test_time_advances(self):
        s = integrator.step(State(), DrivingParameters(), dt=0.01)
        assert s.time == pytest.approx(0.01)

    def test_no_drive_is_idempotent(self):
        params = DrivingParameters(rabi_freq=0.0, detuning=0.0)
        s = State(theta=1.234, phi=-0.567)
        for i in range(100):
            s = integrator.step(s, params)
            assert s.theta == 1.234
            assert s.phi == -0.567
        assert s.time == pytest.approx(1.0)

    def test_scenario_single_step(self):
        """2 MHz resonant drive from the ground state, one step."""
        params = DrivingParameters(rabi_freq=2.0, detuning=0.0)
        s = integrator.step(State(theta=np.pi, phi=0.0), params, dt=0.01)

        angle = 2 * np.pi * 2.0 * 0.01
        assert angle == pytest.approx(0.12566, abs=1e-5)

        v0 = np.array(to_cartesian(np.pi, 0.0))
        expected = rodrigues_rotate(v0, np.array([1.0, 0.0, 0.0]), angle)
        exp_theta, exp_phi = to_spherical(*expected)

        assert s.theta == pytest.approx(np.pi - angle, abs=1e-12)
        assert s.theta == pytest.approx(exp_theta, abs=1e-15)
        assert s.phi == pytest.approx(exp_phi, abs=1e-15)
        # Rotation about +x carries the south pole toward +y
        assert s.phi == pytest.approx(np.pi / 2, abs=1e-12)

    def test_quarter_period_reaches_equator(self):
        # 2.5 MHz -> 0.05 pi per step, 10 steps = pi / 2
        params = DrivingParameters(rabi_freq=2.5, detuning=0.0)
        s = State()
        thetas = []
        for _ in range(10):
            s = integrator.step(s, params)
            thetas.append(s.theta)
        assert s.theta == pytest.approx(np.pi / 2, abs=1e-9)
        assert all(a > b for a, b in zip(thetas, thetas[1:]))

    def test_negative_rabi_reverses_phi(self):
        pos, neg = State(), State()
        for _ in range(10):
            pos = integrator.step(pos, DrivingParameters(rabi_freq=2.5, detuning=0.0))
            neg = integrator.step(neg, DrivingParameters(rabi_freq=-2.5, detuning=0.0))
        assert pos.theta == pytest.approx(neg.theta, abs=1e-12)
        assert pos.phi == pytest.approx(np.pi / 2, abs=1e-9)
        assert neg.phi == pytest.approx(-np.pi / 2, abs=1e-9)

    def test_pure_detuning_precesses_about_z(self):
        params = DrivingParameters(rabi_freq=0.0, detuning=1.0)
        s = State(theta=np.pi / 2, phi=0.0)
        s = integrator.step(s, params, dt=0.01)
        assert s.theta == pytest.approx(np.pi / 2, abs=1e-12)
        assert s.phi == pytest.approx(2 * np.pi * 0.01)

    @pytest.mark.parametrize(
        "rabi,detuning",
        [(2.0, 0.0), (1.3, -0.7), (-4.0, 2.5), (0.0, 3.0), (10.0, 10.0)],
    )
    def test_norm_preserved(self, rabi, detuning):
        params = DrivingParameters(rabi_freq=rabi, detuning=detuning)
        s = State(theta=2.0, phi=0.4)
        for _ in range(2000):
            s = integrator.step(s, params)
            assert abs(norm_of(s) - 1.0) < 1e-9
            assert 0.0 <= s.theta <= np.pi
            assert -np.pi <= s.phi <= np.pi

    def test_parameters_may_change_between_steps(self):
        s = integrator.step(State(), DrivingParameters(rabi_freq=2.0))
        theta_after_drive = s.theta
        s = integrator.step(s, DrivingParameters(rabi_freq=0.0, detuning=0.0))
        assert s.theta == theta_after_drive

    def test_renormalize_keeps_unit_norm(self):
        params = DrivingParameters(rabi_freq=3.0, detuning=1.0)
        s = State()
        for _ in range(500):
            s = integrator.step(s, params, renormalize=True)
        assert norm_of(s) == pytest.approx(1.0, abs=1e-12)
