"""Tests for the bounded trail buffer."""

import numpy as np
import pytest

from bloch_precession.core.trail import TrailBuffer


def point(i: int) -> tuple[float, float, float]:
    return (float(i), float(-i), 0.5)


class TestTrailBuffer:
    def test_starts_empty(self):
        trail = TrailBuffer()
        assert len(trail) == 0
        assert trail.all() == []
        assert trail.capacity == 200

    def test_append_in_order(self):
        trail = TrailBuffer()
        for i in range(5):
            trail.append(point(i))
        assert trail.all() == [point(i) for i in range(5)]

    def test_bound_after_500_appends(self):
        trail = TrailBuffer()
        for i in range(500):
            trail.append(point(i))
        pts = trail.all()
        assert len(pts) == 200
        assert pts == [point(i) for i in range(300, 500)]

    def test_length_never_exceeds_capacity(self):
        trail = TrailBuffer(capacity=3)
        for i in range(10):
            trail.append(point(i))
            assert len(trail) <= 3
        assert trail.all() == [point(7), point(8), point(9)]

    def test_clear(self):
        trail = TrailBuffer()
        for i in range(10):
            trail.append(point(i))
        trail.clear()
        assert len(trail) == 0
        assert trail.all() == []

    def test_reread_reflects_latest(self):
        trail = TrailBuffer()
        trail.append(point(0))
        first = trail.all()
        trail.append(point(1))
        assert len(first) == 1
        assert trail.all() == [point(0), point(1)]

    def test_iteration_is_restartable(self):
        trail = TrailBuffer()
        for i in range(3):
            trail.append(point(i))
        assert list(trail) == list(trail)

    def test_as_array(self):
        trail = TrailBuffer()
        assert trail.as_array().shape == (0, 3)
        trail.append((0.0, 0.0, -1.0))
        trail.append((0.1, 0.2, -0.97))
        arr = trail.as_array()
        assert arr.shape == (2, 3)
        np.testing.assert_allclose(arr[1], [0.1, 0.2, -0.97])

    def test_stores_floats(self):
        trail = TrailBuffer()
        trail.append(np.array([1, 0, 0]))
        assert trail.all() == [(1.0, 0.0, 0.0)]
        assert isinstance(trail.all()[0][0], float)

    @pytest.mark.parametrize("capacity", [0, -5])
    def test_rejects_bad_capacity(self, capacity):
        with pytest.raises(ValueError):
            TrailBuffer(capacity=capacity)
