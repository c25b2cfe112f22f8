import math

import numpy as np
import pytest

from core.errors import DegenerateGeometryError, InvalidPolygonError
from measurement.geometry import (
    measure_angle,
    measure_area,
    measure_length,
    points_in_polygon,
    shoelace_area,
)
from measurement.types import Point2D


POLYGON = np.array([(1.0, 1.0), (6.0, 2.0), (7.0, 6.0), (3.0, 8.0), (0.0, 4.0)])


def test_shoelace_invariant_under_rotation_and_reversal():
    area = shoelace_area(POLYGON)
    for shift in range(len(POLYGON)):
        rotated = np.roll(POLYGON, shift, axis=0)
        assert shoelace_area(rotated) == pytest.approx(area)
        assert shoelace_area(rotated[::-1]) == pytest.approx(area)


def test_shoelace_known_area():
    assert shoelace_area(np.array([(0, 0), (4, 0), (4, 3), (0, 3)], dtype=float)) == 12.0


def test_length_symmetric_and_anisotropic(gradient_slice):
    ab = measure_length(gradient_slice, (1, 2), (4, 6))
    ba = measure_length(gradient_slice, Point2D(4, 6), Point2D(1, 2))
    assert ab.length_mm == ba.length_mm
    assert ab.length_pixels == 5.0
    # spacing 0.5 x 2.0: dx 3 -> 1.5 mm, dy 4 -> 8 mm
    assert ab.length_mm == pytest.approx(math.hypot(1.5, 8.0))
    assert ab.length_cm == pytest.approx(ab.length_mm / 10)
    assert (ab.pixel_spacing_x, ab.pixel_spacing_y) == (0.5, 2.0)


def test_right_angle():
    result = measure_angle((0, 0), (5, 0), (0, 3))
    assert result.angle_degrees == pytest.approx(90.0)
    assert result.angle_radians == pytest.approx(math.pi / 2)


def test_collinear_angles_stay_in_domain():
    assert measure_angle((0, 0), (1, 1), (3, 3)).angle_degrees == pytest.approx(0.0, abs=1e-4)
    assert measure_angle((0, 0), (1, 1), (-3, -3)).angle_degrees == pytest.approx(180.0)


def test_zero_length_ray():
    with pytest.raises(DegenerateGeometryError):
        measure_angle((2, 2), (2, 2), (5, 5))


def test_area_and_perimeter(gradient_slice):
    result = measure_area(gradient_slice, [(0, 0), (4, 0), (4, 3), (0, 3)])
    assert result.area_pixels == 12.0
    assert result.area_mm2 == pytest.approx(12.0)
    assert result.area_cm2 == pytest.approx(0.12)
    assert result.perimeter_pixels == pytest.approx(14.0)
    # Horizontal edges 4 * 0.5, vertical edges 3 * 2.0
    assert result.perimeter_mm == pytest.approx(2 * 2.0 + 2 * 6.0)
    assert result.polygon[1] == Point2D(4.0, 0.0)


@pytest.mark.parametrize("points", [[], [(0, 0)], [(0, 0), (1, 1)]])
def test_area_needs_three_points(gradient_slice, points):
    with pytest.raises(InvalidPolygonError):
        measure_area(gradient_slice, points)


def test_points_in_polygon():
    square = np.array([(1, 1), (5, 1), (5, 5), (1, 5)], dtype=float)
    xs = np.array([3, 0, 6, 2, 4.9])
    ys = np.array([3, 3, 3, 4, 1.5])
    assert points_in_polygon(xs, ys, square).tolist() == [True, False, False, True, True]


def test_points_in_concave_polygon():
    # U shape: notch between x 2..4 above y 2
    u_shape = np.array([(0, 0), (6, 0), (6, 6), (4, 6), (4, 2), (2, 2), (2, 6), (0, 6)], dtype=float)
    xs = np.array([1, 3, 3, 5])
    ys = np.array([4, 4, 1, 4])
    assert points_in_polygon(xs, ys, u_shape).tolist() == [True, False, True, True]
