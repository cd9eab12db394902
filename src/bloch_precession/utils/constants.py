"""Physical and numerical constants for the Bloch precession simulation."""

import numpy as np

# -- Integration --
DT: float = 0.01  # fixed step, simulated time units (1/MHz)
TRAIL_CAPACITY: int = 200

# -- Driving defaults --
DEFAULT_RABI_FREQ_MHZ: float = 2.0
DEFAULT_DETUNING_MHZ: float = 0.0

# -- Initial state (ground state, south pole) --
GROUND_THETA: float = float(np.pi)
GROUND_PHI: float = 0.0

# -- Derived --
TWO_PI: float = 2.0 * float(np.pi)  # MHz -> rad per time unit
