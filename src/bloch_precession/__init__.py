"""Bloch sphere precession of a driven two-level system."""

from bloch_precession.core.simulation import BlochSimulation
from bloch_precession.utils.types import (
    DrivingParameters,
    EffectiveField,
    SimulationConfig,
    State,
)

__version__ = "0.1.0"

__all__ = [
    "BlochSimulation",
    "DrivingParameters",
    "EffectiveField",
    "SimulationConfig",
    "State",
    "__version__",
]
