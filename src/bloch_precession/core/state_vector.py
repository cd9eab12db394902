"""Bloch vector coordinate conversion and level populations."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from bloch_precession.utils.math_helpers import (
    cartesian_to_spherical,
    spherical_to_cartesian,
)
from bloch_precession.utils.types import State


def to_cartesian(theta: float, phi: float) -> tuple[float, float, float]:
    """(theta, phi) -> (x, y, z) on the unit sphere."""
    x, y, z = spherical_to_cartesian(theta, phi)
    return float(x), float(y), float(z)


def to_spherical(x: float, y: float, z: float) -> tuple[float, float]:
    """(x, y, z) -> (theta, phi). Caller supplies a near-unit vector."""
    theta, phi = cartesian_to_spherical(x, y, z)
    return float(theta), float(phi)


def state_cartesian(state: State) -> NDArray[np.float64]:
    """Cartesian projection of a State as a (3,) array."""
    return np.array(to_cartesian(state.theta, state.phi), dtype=np.float64)


def excited_population(theta: float) -> float:
    """Probability of the excited level |e> (north pole)."""
    return float((1.0 + np.cos(theta)) / 2.0)


def ground_population(theta: float) -> float:
    """Probability of the ground level |g> (south pole)."""
    return float((1.0 - np.cos(theta)) / 2.0)
