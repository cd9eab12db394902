"""Coordinate transforms and rotation utilities for the Bloch sphere."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def spherical_to_cartesian(
    theta: float | NDArray[np.float64],
    phi: float | NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Convert unit-sphere angles (theta, phi) to Cartesian (x, y, z).

    theta: polar angle from +z
    phi: azimuthal angle from +x in the xy-plane
    Defined for all real inputs.
    """
    theta = np.asarray(theta, dtype=np.float64)
    phi = np.asarray(phi, dtype=np.float64)

    x = np.sin(theta) * np.cos(phi)
    y = np.sin(theta) * np.sin(phi)
    z = np.cos(theta)
    return x, y, z


def cartesian_to_spherical(
    x: float | NDArray[np.float64],
    y: float | NDArray[np.float64],
    z: float | NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Convert a (near) unit vector to spherical angles (theta, phi).

    The vector is not renormalized; z is clipped to [-1, 1] so rounding
    drift cannot push arccos out of its domain.

    Returns:
        theta: polar angle [0, pi]
        phi: azimuthal angle (-pi, pi], 0 when x = y = 0
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    theta = np.arccos(np.clip(z, -1.0, 1.0))
    phi = np.arctan2(y, x)
    return theta, phi


def normalize(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a vector to unit length. Handles zero vectors gracefully."""
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm == 0.0:
        return v
    return v / norm


def rodrigues_rotate(
    v: NDArray[np.float64],
    axis: NDArray[np.float64],
    angle: float,
) -> NDArray[np.float64]:
    """Rotate v about a unit axis by angle (right-hand rule).

    v_rot = v cos(a) + (u x v) sin(a) + u (u . v)(1 - cos(a))

    Exact solid-body rotation: |v_rot| == |v| up to rounding. The axis
    must already be unit length.
    """
    v = np.asarray(v, dtype=np.float64)
    u = np.asarray(axis, dtype=np.float64)

    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    return v * cos_a + np.cross(u, v) * sin_a + u * np.dot(u, v) * (1.0 - cos_a)


def circle_points(n: int, radius: float = 1.0) -> NDArray[np.float64]:
    """n points on a circle of the given radius in the xy-plane, shape (n, 3)."""
    angles = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    return np.stack(
        [radius * np.cos(angles), radius * np.sin(angles), np.zeros(n)], axis=1
    )


def rotation_matrix(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """3x3 matrix form of rodrigues_rotate (K is the cross-product matrix of u)."""
    u = normalize(axis)
    K = np.array([
        [0.0, -u[2], u[1]],
        [u[2], 0.0, -u[0]],
        [-u[1], u[0], 0.0],
    ])
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)
