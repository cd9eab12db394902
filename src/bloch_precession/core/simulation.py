"""Simulation object owning the Bloch state, driving parameters and trail.

Renderers and input handlers talk to BlochSimulation only through its
accessor and mutator methods. Everything runs on one thread: setters
are plain writes, and tick() is never reentered.
"""

from __future__ import annotations

import dataclasses
import logging

import numpy as np

from bloch_precession.core import integrator
from bloch_precession.core.state_vector import (
    excited_population,
    ground_population,
    to_cartesian,
)
from bloch_precession.core.trail import Point, TrailBuffer
from bloch_precession.utils.types import (
    DrivingParameters,
    EffectiveField,
    SimulationConfig,
    State,
)

logger = logging.getLogger(__name__)


class BlochSimulation:
    """Single qubit precessing under a (Rabi, detuning) drive.

    Starts Stopped in the ground state (theta = pi, phi = 0). While
    Running, each tick() performs exactly one integration step.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        params: DrivingParameters | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.params = params or DrivingParameters(
            rabi_freq=self.config.rabi_freq,
            detuning=self.config.detuning,
        )

        self._state = State()
        self.trail = TrailBuffer(self.config.trail_capacity)
        self._running: bool = False

        self.tick_count: int = 0
        self.history: list[dict] = []

    # -- Parameter inputs --

    def set_rabi_frequency(self, value: float) -> None:
        self.params.rabi_freq = value

    def set_detuning(self, value: float) -> None:
        self.params.detuning = value

    # -- Control inputs --

    @property
    def running(self) -> bool:
        return self._running

    def toggle_running(self) -> bool:
        """Flip between Stopped and Running. Returns the new flag."""
        self._running = not self._running
        logger.info("Simulation %s", "running" if self._running else "stopped")
        return self._running

    def reset(self) -> None:
        """Return to the ground state and clear the trail.

        The Running/Stopped flag is left as it was.
        """
        self._state = State()
        self.trail.clear()
        self.tick_count = 0
        self.history = []
        logger.info("Simulation reset to ground state")

    # -- Evolution --

    def tick(self) -> bool:
        """One scheduling tick. Steps only while Running."""
        if not self._running:
            return False
        self.step()
        return True

    def step(self) -> None:
        """Integrate one step and record the new position in the trail."""
        self.tick_count += 1
        every = self.config.renormalize_every
        renormalize = every > 0 and self.tick_count % every == 0
        self._state = integrator.step(
            self._state, self.params, self.config.dt, renormalize=renormalize
        )
        self.trail.append(self.current_cartesian())

    def run(self, num_steps: int) -> list[dict]:
        """Step num_steps times, recording a snapshot per step. Return history."""
        for _ in range(num_steps):
            self.step()
            self._record_history()
        return self.history

    def _record_history(self) -> None:
        """Snapshot current state into history list."""
        x, y, z = self.current_cartesian()
        self.history.append({
            "tick": self.tick_count,
            "time": self._state.time,
            "theta": self._state.theta,
            "phi": self._state.phi,
            "x": x,
            "y": y,
            "z": z,
            "excited_population": excited_population(self._state.theta),
            "norm": float(np.sqrt(x * x + y * y + z * z)),
        })

    # -- Observable outputs --

    @property
    def state(self) -> State:
        """Copy of the current state."""
        return dataclasses.replace(self._state)

    def current_cartesian(self) -> Point:
        return to_cartesian(self._state.theta, self._state.phi)

    def current_spherical(self) -> tuple[float, float]:
        return (self._state.theta, self._state.phi)

    def trail_points(self) -> list[Point]:
        return self.trail.all()

    def effective_field(self) -> EffectiveField:
        return integrator.effective_field(self.params)

    def elapsed_time(self) -> float:
        return self._state.time

    def populations(self) -> tuple[float, float]:
        """(ground, excited) level populations."""
        theta = self._state.theta
        return (ground_population(theta), excited_population(theta))

    def __repr__(self) -> str:
        theta, phi = self.current_spherical()
        return (
            f"BlochSimulation(theta={theta:.4f}, phi={phi:.4f}, "
            f"t={self.elapsed_time():.4f}, running={self._running})"
        )
