"""Observable metric extraction from simulation history."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.signal import find_peaks

from bloch_precession.utils.constants import TWO_PI
from bloch_precession.utils.types import DrivingParameters


def rabi_excited_population(
    t: float | NDArray[np.float64],
    rabi_freq: float,
    detuning: float,
) -> NDArray[np.float64]:
    """Analytic excited-state population starting from the ground state.

    Generalized Rabi formula: P_e(t) = (Bx / B)^2 sin^2(B t / 2), with
    Bx = 2 pi Rabi and B = 2 pi sqrt(Rabi^2 + Detuning^2). Zero when B = 0.
    """
    t = np.asarray(t, dtype=np.float64)
    bx = TWO_PI * rabi_freq
    b = TWO_PI * np.hypot(rabi_freq, detuning)
    if b == 0:
        return np.zeros_like(t)
    return (bx / b) ** 2 * np.sin(b * t / 2.0) ** 2


class TrajectoryMetrics:
    """Summarize a history list produced by BlochSimulation.run()."""

    def __init__(self, history: list[dict], params: DrivingParameters) -> None:
        self.history = history
        self.params = params

    def _column(self, name: str) -> NDArray[np.float64]:
        return np.array([h[name] for h in self.history], dtype=np.float64)

    def population_stats(self) -> dict:
        """Min/max/mean of the excited population and the final value."""
        if not self.history:
            return {
                "count": 0,
                "excited_min": 0.0,
                "excited_max": 0.0,
                "excited_mean": 0.0,
                "excited_final": 0.0,
            }

        pe = self._column("excited_population")
        return {
            "count": len(pe),
            "excited_min": float(np.min(pe)),
            "excited_max": float(np.max(pe)),
            "excited_mean": float(np.mean(pe)),
            "excited_final": float(pe[-1]),
        }

    def norm_drift(self) -> float:
        """Largest |1 - |v|| seen over the run."""
        if not self.history:
            return 0.0
        return float(np.max(np.abs(self._column("norm") - 1.0)))

    def analytic_deviation(self) -> float:
        """Largest difference from the analytic Rabi formula.

        Only meaningful for runs started from the ground state with
        parameters held constant.
        """
        if not self.history:
            return 0.0
        t = self._column("time")
        expected = rabi_excited_population(
            t, self.params.rabi_freq, self.params.detuning
        )
        return float(np.max(np.abs(self._column("excited_population") - expected)))

    def estimate_rabi_period(self) -> float | None:
        """Oscillation period from the spacing of excited-population maxima.

        Returns None when fewer than two maxima are present.
        """
        if len(self.history) < 3:
            return None
        pe = self._column("excited_population")
        t = self._column("time")
        peaks, _ = find_peaks(pe)
        if len(peaks) < 2:
            return None
        return float(np.mean(np.diff(t[peaks])))

    def full_report(self) -> dict:
        """Aggregate all metrics into a single report."""
        b = np.hypot(self.params.rabi_freq, self.params.detuning)
        return {
            "population_stats": self.population_stats(),
            "norm_drift": self.norm_drift(),
            "analytic_deviation": self.analytic_deviation(),
            "estimated_period": self.estimate_rabi_period(),
            "expected_period": float(1.0 / b) if b > 0 else None,
        }
