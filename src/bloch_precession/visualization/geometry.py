"""Vertex builders for the Bloch sphere renderer.

Pure numpy; every function returns float32 xyz arrays ready for upload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from bloch_precession.utils.math_helpers import circle_points, rotation_matrix

if TYPE_CHECKING:
    from bloch_precession.utils.types import EffectiveField

AXIS_LENGTH = 1.5
FIELD_ARROW_LENGTH = 0.6  # fraction of the sphere radius at |B| >= 1


def _as_line_segments(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Closed polyline (n, 3) -> GL_LINES pairs (2n, 3)."""
    nxt = np.roll(points, -1, axis=0)
    return np.stack([points, nxt], axis=1).reshape(-1, 3)


def axes_vertices(length: float = AXIS_LENGTH) -> NDArray[np.float32]:
    """Three axis lines through the origin as GL_LINES pairs, shape (6, 3)."""
    verts = []
    for axis in np.eye(3):
        verts.append(-length * axis)
        verts.append(length * axis)
    return np.array(verts, dtype=np.float32)


def sphere_wireframe_vertices(segments: int = 64) -> NDArray[np.float32]:
    """Unit-sphere wireframe as GL_LINES pairs.

    Eight circles rotated about z in pi/4 increments (meridians) and eight
    rotated about x, all starting from the circle in the xz-plane.
    """
    base = circle_points(segments)[:, [0, 2, 1]]  # xz-plane
    z_axis = np.array([0.0, 0.0, 1.0])
    x_axis = np.array([1.0, 0.0, 0.0])

    rings = []
    for i in range(8):
        angle = i * np.pi / 4
        rings.append(base @ rotation_matrix(z_axis, angle).T)
        rings.append(base @ rotation_matrix(x_axis, angle).T)

    return np.concatenate([_as_line_segments(r) for r in rings]).astype(np.float32)


def equator_vertices(segments: int = 64) -> NDArray[np.float32]:
    return _as_line_segments(circle_points(segments)).astype(np.float32)


def field_arrow_vertices(field: EffectiveField) -> NDArray[np.float32]:
    """Arrow shaft along the effective field, shape (2, 3), or (0, 3) at zero field.

    Length is |B| * 0.6 / max(|B|, 1), so weak fields draw shorter.
    """
    if field.magnitude <= 0:
        return np.zeros((0, 3), dtype=np.float32)
    scale = FIELD_ARROW_LENGTH / max(field.magnitude, 1.0)
    tip = np.array(field.vector) * scale
    return np.array([np.zeros(3), tip], dtype=np.float32)


def state_vector_vertices(point: tuple[float, float, float]) -> NDArray[np.float32]:
    """Line from the origin to the Bloch vector tip, shape (2, 3)."""
    return np.array([np.zeros(3), point], dtype=np.float32)

