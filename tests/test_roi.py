import math

import numpy as np
import pytest

from core.errors import (
    DegenerateGeometryError,
    EmptyInputError,
    EmptyResultError,
    InvalidPolygonError,
    OutOfBoundsError,
)
from measurement.roi import (
    bone_density,
    compute_statistics,
    ellipse_roi,
    freehand_roi,
    histogram,
    interpret_hu,
    landmark_distances,
    measure_hounsfield,
    measure_hounsfield_region,
    profile_line,
    rectangle_roi,
)
from measurement.types import LandmarkPoint, Point2D


@pytest.fixture
def constant_slice(make_slice):
    def _make(hu, **kwargs):
        return make_slice(np.full((8, 8), hu, dtype=np.float64), rescale_intercept=0.0, **kwargs)
    return _make


def test_rectangle_statistics(gradient_slice):
    stats = rectangle_roi(gradient_slice, (2, 3), (4, 5))
    assert stats.pixel_count == 9
    assert stats.mean == pytest.approx(30.0)
    assert stats.sum == pytest.approx(270.0)
    assert (stats.min, stats.max, stats.median) == (20.0, 40.0, 30.0)
    assert stats.variance == pytest.approx(200.0 / 3)
    assert stats.std_dev == pytest.approx(math.sqrt(200.0 / 3))
    # Ellipse inscribed in a 2 x 2 pixel extent at 0.5 x 2.0 mm
    assert stats.area_mm2 == pytest.approx(math.pi * (1 * 0.5) * (1 * 2.0))
    assert stats.unit == "HU"


def test_rectangle_clamped_to_slice(gradient_slice):
    stats = rectangle_roi(gradient_slice, (-5, -5), (1, 1))
    assert stats.pixel_count == 4
    assert stats.mean == pytest.approx(5.0)
    # Area follows the clamped extent, not the requested corners
    assert stats.area_mm2 == pytest.approx(math.pi * (0.5 * 0.5) * (0.5 * 2.0))


def test_rectangle_corners_in_any_order(gradient_slice):
    expected = rectangle_roi(gradient_slice, (2, 3), (4, 5))
    for top_left, bottom_right in [((4, 5), (2, 3)), ((4, 3), (2, 5)), ((2, 5), (4, 3))]:
        assert rectangle_roi(gradient_slice, top_left, bottom_right) == expected


def test_rectangle_outside_slice_is_empty(gradient_slice):
    with pytest.raises(EmptyResultError):
        rectangle_roi(gradient_slice, (20, 20), (30, 30))


def test_ellipse_statistics(gradient_slice):
    stats = ellipse_roi(gradient_slice, Point2D(5, 5), 1, 1)
    # Center plus the four neighbours
    assert stats.pixel_count == 5
    assert stats.mean == pytest.approx(50.0)
    assert stats.area_mm2 == pytest.approx(math.pi * 0.5 * 2.0)


def test_ellipse_needs_positive_radii(gradient_slice):
    with pytest.raises(DegenerateGeometryError):
        ellipse_roi(gradient_slice, (5, 5), 0, 2)


def test_freehand_statistics(gradient_slice):
    stats = freehand_roi(gradient_slice, [(1, 1), (5, 1), (5, 5), (1, 5)])
    assert stats.pixel_count == 16
    assert stats.mean == pytest.approx(25.0)
    # Ellipse inscribed in the 4 x 4 bounding box
    assert stats.area_mm2 == pytest.approx(math.pi * (2 * 0.5) * (2 * 2.0))


def test_freehand_needs_three_points(gradient_slice):
    with pytest.raises(InvalidPolygonError):
        freehand_roi(gradient_slice, [(1, 1), (5, 5)])


def test_unit_follows_modality(constant_slice):
    assert rectangle_roi(constant_slice(3.0, modality="PT"), (0, 0), (2, 2)).unit == "raw"


def test_empty_statistics_raise():
    with pytest.raises(EmptyResultError):
        compute_statistics(np.array([]), 0.0)


@pytest.mark.parametrize("hu,label", [
    (-1000, "Air"),
    (-950, "Lung/Fat"),
    (-50, "Water/Fluid"),
    (19.9, "Water/Fluid"),
    (20, "Soft Tissue"),
    (70, "Blood/Muscle"),
    (199, "Blood/Muscle"),
    (200, "Calcification"),
    (400, "Bone"),
    (3000, "Bone"),
])
def test_interpret_hu(hu, label):
    assert interpret_hu(hu) == label


def test_hounsfield_point(make_slice):
    s = make_slice(np.full((4, 4), 1064, dtype=np.int16))
    result = measure_hounsfield(s, 3, 2)
    assert result.value == 40.0
    assert (result.x, result.y) == (3, 2)
    assert (result.rescale_slope, result.rescale_intercept) == (1.0, -1024.0)
    assert result.interpretation == "Soft Tissue"


@pytest.mark.parametrize("x,y", [(-1, 0), (10, 0), (0, 10), (0, -1)])
def test_hounsfield_out_of_bounds(gradient_slice, x, y):
    with pytest.raises(OutOfBoundsError):
        measure_hounsfield(gradient_slice, x, y)
    with pytest.raises(IndexError):
        measure_hounsfield(gradient_slice, x, y)


def test_hounsfield_region(gradient_slice):
    result = measure_hounsfield_region(gradient_slice, (5.0, 5.0), 1)
    assert result.value == pytest.approx(50.0)
    assert (result.x, result.y) == (5, 5)
    assert (result.rescale_slope, result.rescale_intercept) == (1.0, 0.0)
    assert result.interpretation == "Soft Tissue"


@pytest.mark.parametrize("hu,category", [
    (150, "Normal"),
    (100, "Osteopenia"),
    (0, "Osteopenia"),
    (-100, "Osteoporosis"),
    (-300, "Osteoporosis"),
])
def test_bone_density_categories(constant_slice, hu, category):
    result = bone_density(constant_slice(hu), [(1, 1), (6, 1), (6, 6), (1, 6)])
    assert result.t_score_category == category
    assert result.mean_hu == pytest.approx(hu)
    assert result.bmd_estimate_mg_cm3 == pytest.approx((hu + 1000) * 0.8)
    assert result.area_mm2 == result.roi_stats.area_mm2


def test_landmark_distances(gradient_slice):
    landmarks = [
        LandmarkPoint("A", Point2D(0, 0)),
        LandmarkPoint("B", Point2D(2, 0)),
        ("C", (0, 1)),
    ]
    distances = landmark_distances(gradient_slice, landmarks)
    assert [(d.from_landmark, d.to_landmark) for d in distances] == [("A", "B"), ("A", "C"), ("B", "C")]
    assert distances[0].distance_mm == pytest.approx(1.0)
    assert distances[1].distance_mm == pytest.approx(2.0)
    assert distances[2].distance_mm == pytest.approx(math.hypot(1.0, 2.0))
    assert distances[2].distance_cm == pytest.approx(distances[2].distance_mm / 10)


def test_landmark_edge_cases(gradient_slice):
    assert landmark_distances(gradient_slice, [("A", (1, 1))]) == []
    with pytest.raises(EmptyInputError):
        landmark_distances(gradient_slice, [])


def test_profile_line(gradient_slice):
    result = profile_line(gradient_slice, (0, 2), (9, 2))
    assert result.values == tuple(float(v) for v in range(0, 100, 10))
    assert result.points[0] == Point2D(0, 2)
    assert result.points[-1] == Point2D(9, 2)
    assert result.mean == pytest.approx(45.0)
    assert result.std_dev == pytest.approx(np.std(np.arange(0, 100, 10)))
    assert (result.min, result.max) == (0.0, 90.0)
    assert result.length_mm == pytest.approx(4.5)


def test_profile_line_clips_to_slice(gradient_slice):
    result = profile_line(gradient_slice, (-3, 0), (3, 0))
    assert len(result.values) == 4
    assert result.length_mm == pytest.approx(3.0)


def test_profile_line_outside_slice(gradient_slice):
    with pytest.raises(EmptyResultError):
        profile_line(gradient_slice, (20, 20), (30, 25))


def test_histogram_whole_image(gradient_slice):
    result = histogram(gradient_slice)
    assert len(result.bins) == 256
    assert sum(result.bins) == 100
    assert result.bins[0] == 10
    assert result.bins[255] == 10
    assert (result.min_value, result.max_value) == (0.0, 90.0)
    assert result.bin_width == pytest.approx(90.0 / 256)
    assert result.mean == pytest.approx(45.0)
    assert result.median == 50.0
    assert result.percentiles == (0.0, 20.0, 50.0, 70.0, 90.0)


def test_histogram_roi_counts(gradient_slice):
    result = histogram(gradient_slice, (2, 0), (3, 9))
    assert sum(result.bins) == 20
    assert (result.min_value, result.max_value) == (20.0, 30.0)


def test_histogram_roi_corners_in_any_order(gradient_slice):
    assert histogram(gradient_slice, (3, 9), (2, 0)) == histogram(gradient_slice, (2, 0), (3, 9))


def test_histogram_constant_image(constant_slice):
    result = histogram(constant_slice(12.0))
    assert result.bin_width == 0
    assert result.bins[0] == 64
    assert result.std_dev == 0


def test_histogram_empty_roi(gradient_slice):
    with pytest.raises(EmptyResultError):
        histogram(gradient_slice, (50, 50), (60, 60))
