"""Closed-form Bloch vector integrator.

Each step treats the Rabi frequency and detuning as constant and rotates
the Bloch vector rigidly about the effective-field axis by |B| * dt.
For a constant field this is the exact solution of dv/dt = B x v over
one step, so no ODE solver is involved. Parameters may change between
steps (piecewise-constant field).
"""

from __future__ import annotations

import numpy as np

from bloch_precession.core.state_vector import state_cartesian, to_spherical
from bloch_precession.utils.constants import DT, TWO_PI
from bloch_precession.utils.math_helpers import normalize, rodrigues_rotate
from bloch_precession.utils.types import DrivingParameters, EffectiveField, State


def effective_field(params: DrivingParameters) -> EffectiveField:
    """Effective field in the rotating frame, in rad per time unit.

    (Bx, By, Bz) = (2 pi Rabi, 0, 2 pi Detuning). There is no quadrature
    drive term, so By is always zero.
    """
    bx = TWO_PI * params.rabi_freq
    by = 0.0
    bz = TWO_PI * params.detuning
    magnitude = float(np.sqrt(bx * bx + by * by + bz * bz))
    return EffectiveField(bx=bx, by=by, bz=bz, magnitude=magnitude)


def step(
    state: State,
    params: DrivingParameters,
    dt: float = DT,
    renormalize: bool = False,
) -> State:
    """Advance state by one time step and return the new State.

    A zero field leaves (theta, phi) untouched since the rotation axis is
    undefined. Time always advances by dt.
    """
    field = effective_field(params)

    theta, phi = state.theta, state.phi
    if field.magnitude > 0:
        axis = np.array(field.vector) / field.magnitude
        v = rodrigues_rotate(state_cartesian(state), axis, field.magnitude * dt)
        if renormalize:
            v = normalize(v)
        theta, phi = to_spherical(v[0], v[1], v[2])

    return State(theta=theta, phi=phi, time=state.time + dt)
