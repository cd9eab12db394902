"""Matplotlib-based plots for Bloch precession runs."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend by default

import matplotlib.pyplot as plt
import numpy as np

from bloch_precession.analysis.metrics import rabi_excited_population

if TYPE_CHECKING:
    from bloch_precession.core.simulation import BlochSimulation


class PlotSuite:
    """Matplotlib plots for Bloch precession analysis."""

    def __init__(self, save_dir: str = ".") -> None:
        self.save_dir = os.path.expanduser(save_dir)

    def _save_or_show(
        self, fig: plt.Figure, name: str, show: bool, save: bool
    ) -> plt.Figure:
        if save:
            os.makedirs(self.save_dir, exist_ok=True)
            path = os.path.join(self.save_dir, f"bp_{name}.png")
            fig.savefig(path, dpi=150, bbox_inches="tight")
        if show:
            plt.show()
        else:
            plt.close(fig)
        return fig

    def population_vs_time(
        self,
        history: list[dict],
        rabi_freq: float | None = None,
        detuning: float = 0.0,
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Excited and ground populations over simulated time.

        When rabi_freq is given, the analytic Rabi curve is overlaid.
        """
        if not history:
            fig, ax = plt.subplots()
            ax.text(0.5, 0.5, "No data", ha="center", va="center")
            return self._save_or_show(fig, "populations", show, save)

        t = np.array([h["time"] for h in history])
        pe = np.array([h["excited_population"] for h in history])

        fig, ax = plt.subplots(figsize=(12, 5))
        ax.plot(t, pe, label="P(|e>)", color="crimson")
        ax.plot(t, 1.0 - pe, label="P(|g>)", color="steelblue")
        if rabi_freq is not None:
            ax.plot(
                t, rabi_excited_population(t, rabi_freq, detuning),
                "k--", alpha=0.5, label="Rabi formula",
            )
        ax.set_xlabel("Time (us)")
        ax.set_ylabel("Population")
        ax.set_ylim(-0.05, 1.05)
        ax.set_title("Level Populations")
        ax.legend(loc="upper right")
        ax.grid(True, alpha=0.3)

        fig.tight_layout()
        return self._save_or_show(fig, "populations", show, save)

    def spherical_angles_vs_time(
        self,
        history: list[dict],
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Polar and azimuthal angle evolution."""
        if not history:
            fig, ax = plt.subplots()
            ax.text(0.5, 0.5, "No data", ha="center", va="center")
            return self._save_or_show(fig, "angles", show, save)

        t = [h["time"] for h in history]
        theta = [h["theta"] for h in history]
        phi = [h["phi"] for h in history]

        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

        ax1.plot(t, theta, color="purple")
        ax1.axhline(y=np.pi, color="gray", linestyle="--", alpha=0.5, label="Ground (pi)")
        ax1.axhline(y=np.pi / 2, color="gray", linestyle=":", alpha=0.5, label="Equator")
        ax1.set_ylabel("theta (rad)")
        ax1.set_title("Polar Angle")
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2.plot(t, phi, color="darkorange")
        ax2.set_xlabel("Time (us)")
        ax2.set_ylabel("phi (rad)")
        ax2.set_title("Azimuthal Angle")
        ax2.grid(True, alpha=0.3)

        fig.tight_layout()
        return self._save_or_show(fig, "angles", show, save)

    def bloch_trajectory_3d(
        self,
        sim: BlochSimulation,
        show: bool = False,
        save: bool = True,
    ) -> plt.Figure:
        """Bloch sphere with the trail, current state and field axis."""
        fig = plt.figure(figsize=(8, 8))
        ax = fig.add_subplot(111, projection="3d")

        # Wireframe sphere
        u = np.linspace(0, 2 * np.pi, 25)
        v = np.linspace(0, np.pi, 13)
        ax.plot_wireframe(
            np.outer(np.cos(u), np.sin(v)),
            np.outer(np.sin(u), np.sin(v)),
            np.outer(np.ones_like(u), np.cos(v)),
            color="gray", alpha=0.15, linewidth=0.5,
        )

        trail = sim.trail.as_array()
        if len(trail) >= 2:
            ax.plot(trail[:, 0], trail[:, 1], trail[:, 2], color="steelblue", alpha=0.7)

        x, y, z = sim.current_cartesian()
        ax.quiver(0, 0, 0, x, y, z, color="black", arrow_length_ratio=0.08)
        ax.scatter([x], [y], [z], color="black", s=30)

        field = sim.effective_field()
        if field.magnitude > 0:
            scale = 0.6 / max(field.magnitude, 1.0)
            ax.quiver(
                0, 0, 0, field.bx * scale, field.by * scale, field.bz * scale,
                color="crimson", arrow_length_ratio=0.1, label="B_eff",
            )

        ax.text(0, 0, 1.25, "|e>", ha="center")
        ax.text(0, 0, -1.3, "|g>", ha="center")
        ax.set_xlim(-1, 1)
        ax.set_ylim(-1, 1)
        ax.set_zlim(-1, 1)
        ax.set_box_aspect((1, 1, 1))
        ax.set_xlabel("X")
        ax.set_ylabel("Y")
        ax.set_zlabel("Z")
        ax.set_title(
            f"Rabi {sim.params.rabi_freq:.1f} MHz, "
            f"detuning {sim.params.detuning:.1f} MHz"
        )

        return self._save_or_show(fig, "trajectory_3d", show, save)
