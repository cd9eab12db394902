"""Dataclass definitions for the Bloch precession simulation."""

from __future__ import annotations

from dataclasses import dataclass

from bloch_precession.utils.constants import (
    DEFAULT_DETUNING_MHZ,
    DEFAULT_RABI_FREQ_MHZ,
    DT,
    GROUND_PHI,
    GROUND_THETA,
    TRAIL_CAPACITY,
)


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""

    dt: float = DT
    trail_capacity: int = TRAIL_CAPACITY
    rabi_freq: float = DEFAULT_RABI_FREQ_MHZ
    detuning: float = DEFAULT_DETUNING_MHZ
    renormalize_every: int = 0  # 0 = never rescale the rotated vector

    def __post_init__(self) -> None:
        if not self.dt > 0:
            raise ValueError(f"dt must be > 0, got {self.dt}")
        if self.trail_capacity < 1:
            raise ValueError(f"trail_capacity must be >= 1, got {self.trail_capacity}")
        if self.renormalize_every < 0:
            raise ValueError(
                f"renormalize_every must be >= 0, got {self.renormalize_every}"
            )


@dataclass
class State:
    """Bloch vector in spherical coordinates plus elapsed simulated time."""

    theta: float = GROUND_THETA  # polar angle [0, pi], pi = ground state
    phi: float = GROUND_PHI  # azimuthal angle (-pi, pi]
    time: float = 0.0


@dataclass
class DrivingParameters:
    """Drive strength and detuning, both in MHz."""

    rabi_freq: float = DEFAULT_RABI_FREQ_MHZ
    detuning: float = DEFAULT_DETUNING_MHZ


@dataclass(frozen=True)
class EffectiveField:
    """Angular-rate vector of the effective field and its magnitude."""

    bx: float
    by: float
    bz: float
    magnitude: float

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter((self.bx, self.by, self.bz, self.magnitude))

    @property
    def vector(self) -> tuple[float, float, float]:
        return (self.bx, self.by, self.bz)
