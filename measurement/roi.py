"""
Region Measurements

ROI statistics (ellipse, rectangle, freehand), Hounsfield sampling and
interpretation, bone density estimate, landmark distances, line profiles
and histograms on a single slice.
"""

from typing import Optional, Sequence, Tuple
import itertools
import logging
import math
import numpy as np
from skimage.draw import line

from config import (
    DEFAULT_MEASUREMENT,
    HU_INTERPRETATION,
    HU_INTERPRETATION_DEFAULT,
    MeasurementConfig,
)
from core.errors import (
    DegenerateGeometryError,
    DimensionMismatchError,
    EmptyInputError,
    EmptyResultError,
    OutOfBoundsError,
)
from loaders.slice_loader import ScalarSlice
from .geometry import as_point, as_polygon, points_in_polygon
from .types import (
    BoneDensityResult,
    DistanceMeasurement,
    HistogramResult,
    HounsfieldResult,
    LandmarkPoint,
    Point2D,
    ProfileLineResult,
    RoiStatistics,
)


def _scalar_values(scalar_slice: ScalarSlice) -> np.ndarray:
    if scalar_slice.is_color:
        raise DimensionMismatchError("Measurements require a single-channel slice")
    return scalar_slice.rescaled()


def _clamped_box(scalar_slice: ScalarSlice, min_x, max_x, min_y, max_y) -> Tuple[int, int, int, int]:
    """Truncate a floating point bounding box to pixel indices inside the slice."""
    min_x, max_x = min(min_x, max_x), max(min_x, max_x)
    min_y, max_y = min(min_y, max_y), max(min_y, max_y)
    return (
        max(0, int(min_x)),
        min(scalar_slice.columns - 1, int(max_x)),
        max(0, int(min_y)),
        min(scalar_slice.rows - 1, int(max_y)),
    )


def _extent_area(scalar_slice: ScalarSlice, width: float, height: float) -> float:
    """Area of the ellipse inscribed in a width x height pixel extent, in mm²."""
    return (
        math.pi
        * (width / 2) * scalar_slice.pixel_spacing_x
        * (height / 2) * scalar_slice.pixel_spacing_y
    )


def compute_statistics(values: np.ndarray, area_mm2: float, unit: str = "HU") -> RoiStatistics:
    """
    Descriptive statistics of sampled values.

    Raises:
        EmptyResultError: If no values were sampled
    """
    values = np.sort(np.asarray(values, dtype=np.float64).ravel())
    if values.size == 0:
        raise EmptyResultError("ROI contains no pixels")

    total = float(values.sum())
    mean = total / values.size
    variance = float(np.mean((values - mean) ** 2))

    return RoiStatistics(
        mean=mean,
        std_dev=math.sqrt(variance),
        min=float(values[0]),
        max=float(values[-1]),
        median=float(values[values.size // 2]),
        pixel_count=int(values.size),
        area_mm2=area_mm2,
        sum=total,
        variance=variance,
        unit=unit,
    )


def ellipse_roi(scalar_slice: ScalarSlice, center, radius_x: float, radius_y: float) -> RoiStatistics:
    """
    Statistics inside an axis-aligned ellipse.

    A pixel is inside when ((x - cx) / rx)² + ((y - cy) / ry)² <= 1.
    The reported area is π · rx · ry · spacing_x · spacing_y.
    """
    if radius_x <= 0 or radius_y <= 0:
        raise DegenerateGeometryError(f"Ellipse radii must be positive, got ({radius_x}, {radius_y})")

    center = as_point(center)
    pixels = _scalar_values(scalar_slice)
    x0, x1, y0, y1 = _clamped_box(
        scalar_slice,
        center.x - radius_x, center.x + radius_x,
        center.y - radius_y, center.y + radius_y,
    )

    ys, xs = np.mgrid[y0:y1 + 1, x0:x1 + 1]
    inside = ((xs - center.x) / radius_x) ** 2 + ((ys - center.y) / radius_y) ** 2 <= 1
    values = pixels[y0:y1 + 1, x0:x1 + 1][inside]

    area_mm2 = math.pi * radius_x * radius_y * scalar_slice.pixel_spacing_x * scalar_slice.pixel_spacing_y
    return compute_statistics(values, area_mm2, scalar_slice.unit)


def rectangle_roi(scalar_slice: ScalarSlice, top_left, bottom_right) -> RoiStatistics:
    """
    Statistics inside an axis-aligned rectangle, corners inclusive.

    Corners may be given in either order. The reported area is that of the
    ellipse inscribed in the clamped pixel extent.
    """
    top_left, bottom_right = as_point(top_left), as_point(bottom_right)
    pixels = _scalar_values(scalar_slice)
    x0, x1, y0, y1 = _clamped_box(scalar_slice, top_left.x, bottom_right.x, top_left.y, bottom_right.y)

    values = pixels[y0:y1 + 1, x0:x1 + 1] if x1 >= x0 and y1 >= y0 else np.empty(0)

    area_mm2 = _extent_area(scalar_slice, x1 - x0, y1 - y0)
    return compute_statistics(values, area_mm2, scalar_slice.unit)


def freehand_roi(scalar_slice: ScalarSlice, points: Sequence) -> RoiStatistics:
    """
    Statistics inside a polygon (even-odd rule).

    The reported area is that of the ellipse inscribed in the polygon's
    bounding box.

    Raises:
        InvalidPolygonError: If fewer than 3 points are given
        EmptyResultError: If no pixel centre falls inside the polygon
    """
    polygon = as_polygon(points)
    pixels = _scalar_values(scalar_slice)
    x0, x1, y0, y1 = _clamped_box(
        scalar_slice,
        polygon[:, 0].min(), polygon[:, 0].max(),
        polygon[:, 1].min(), polygon[:, 1].max(),
    )

    ys, xs = np.mgrid[y0:y1 + 1, x0:x1 + 1]
    inside = points_in_polygon(xs, ys, polygon)
    values = pixels[y0:y1 + 1, x0:x1 + 1][inside]

    area_mm2 = _extent_area(
        scalar_slice,
        polygon[:, 0].max() - polygon[:, 0].min(),
        polygon[:, 1].max() - polygon[:, 1].min(),
    )
    return compute_statistics(values, area_mm2, scalar_slice.unit)


def interpret_hu(hu: float, bands=HU_INTERPRETATION) -> str:
    """Tissue label for a Hounsfield value from the banded table."""
    for upper, label in bands:
        if hu < upper:
            return label
    return HU_INTERPRETATION_DEFAULT


def measure_hounsfield(scalar_slice: ScalarSlice, x: int, y: int) -> HounsfieldResult:
    """
    Rescaled value at a single pixel.

    Raises:
        OutOfBoundsError: If (x, y) lies outside the slice
    """
    pixels = _scalar_values(scalar_slice)
    if not (0 <= x < scalar_slice.columns and 0 <= y < scalar_slice.rows):
        raise OutOfBoundsError(
            f"Point ({x}, {y}) outside slice {scalar_slice.columns}x{scalar_slice.rows}"
        )

    value = float(pixels[y, x])
    return HounsfieldResult(
        value=value,
        x=x,
        y=y,
        rescale_slope=float(scalar_slice.rescale_slope),
        rescale_intercept=float(scalar_slice.rescale_intercept),
        interpretation=interpret_hu(value),
    )


def measure_hounsfield_region(scalar_slice: ScalarSlice, center, radius: float) -> HounsfieldResult:
    """Mean of a circular region; values are already rescaled so slope/intercept report 1/0."""
    center = as_point(center)
    stats = ellipse_roi(scalar_slice, center, radius, radius)
    return HounsfieldResult(
        value=stats.mean,
        x=int(center.x),
        y=int(center.y),
        rescale_slope=1.0,
        rescale_intercept=0.0,
        interpretation=interpret_hu(stats.mean),
    )


def bone_density(
    scalar_slice: ScalarSlice,
    roi_points: Sequence,
    config: Optional[MeasurementConfig] = None
) -> BoneDensityResult:
    """
    Estimate bone mineral density from the mean HU of a freehand ROI.

    BMD = (mean HU + offset) * slope with a category bucketed on mean HU.
    This is an uncalibrated approximation and not a diagnostic measurement.
    """
    config = config or DEFAULT_MEASUREMENT
    bone = config.bone_density
    stats = freehand_roi(scalar_slice, roi_points)

    if stats.mean > bone.normal_threshold_hu:
        category = "Normal"
    elif stats.mean > bone.osteopenia_threshold_hu:
        category = "Osteopenia"
    else:
        category = "Osteoporosis"

    return BoneDensityResult(
        mean_hu=stats.mean,
        bmd_estimate_mg_cm3=(stats.mean + bone.hu_offset) * bone.bmd_per_hu,
        t_score_category=category,
        area_mm2=stats.area_mm2,
        roi_stats=stats,
    )


def landmark_distances(scalar_slice: ScalarSlice, landmarks: Sequence) -> list:
    """
    All pairwise distances among named landmarks, in input order.

    Args:
        scalar_slice: Slice providing the pixel spacing
        landmarks: LandmarkPoint records or (name, point) pairs

    Returns:
        List of DistanceMeasurement, one per unordered pair

    Raises:
        EmptyInputError: If no landmarks are given
    """
    if not landmarks:
        raise EmptyInputError("No landmarks given")

    points = [
        lm if isinstance(lm, LandmarkPoint) else LandmarkPoint(lm[0], as_point(lm[1]))
        for lm in landmarks
    ]
    sx, sy = scalar_slice.pixel_spacing_x, scalar_slice.pixel_spacing_y

    results = []
    for a, b in itertools.combinations(points, 2):
        pa, pb = as_point(a.position), as_point(b.position)
        distance_mm = math.hypot((pb.x - pa.x) * sx, (pb.y - pa.y) * sy)
        results.append(DistanceMeasurement(a.name, b.name, distance_mm, distance_mm / 10.0))
    return results


def profile_line(scalar_slice: ScalarSlice, start, end) -> ProfileLineResult:
    """
    Sample values along a Bresenham line from start to end.

    Endpoints are truncated to pixel indices; samples outside the slice
    are dropped.

    Raises:
        EmptyResultError: If the whole line lies outside the slice
    """
    start, end = as_point(start), as_point(end)
    pixels = _scalar_values(scalar_slice)

    rr, cc = line(int(start.y), int(start.x), int(end.y), int(end.x))
    keep = (rr >= 0) & (rr < scalar_slice.rows) & (cc >= 0) & (cc < scalar_slice.columns)
    rr, cc = rr[keep], cc[keep]
    if rr.size == 0:
        raise EmptyResultError("Profile line does not cross the slice")

    values = pixels[rr, cc]
    length_mm = math.hypot(
        (end.x - start.x) * scalar_slice.pixel_spacing_x,
        (end.y - start.y) * scalar_slice.pixel_spacing_y,
    )

    return ProfileLineResult(
        values=tuple(float(v) for v in values),
        points=tuple(Point2D(float(c), float(r)) for r, c in zip(rr, cc)),
        mean=float(values.mean()),
        std_dev=float(values.std()),
        min=float(values.min()),
        max=float(values.max()),
        length_mm=length_mm,
    )


def histogram(
    scalar_slice: ScalarSlice,
    roi_top_left=None,
    roi_bottom_right=None,
    config: Optional[MeasurementConfig] = None
) -> HistogramResult:
    """
    Uniform histogram over the value range of the slice or a rectangular ROI.

    Percentiles are taken from the sorted values at index int(n * p).
    When all values are equal the bin width is 0 and every value lands in
    the first bin.

    Args:
        scalar_slice: Source slice
        roi_top_left: Optional ROI corner, defaults to (0, 0)
        roi_bottom_right: Optional ROI corner, defaults to the last pixel
        config: Bin count and percentiles (uses defaults if None)

    Raises:
        EmptyResultError: If the ROI contains no pixels
    """
    config = config or DEFAULT_MEASUREMENT
    pixels = _scalar_values(scalar_slice)

    top_left = as_point(roi_top_left) if roi_top_left is not None else Point2D(0, 0)
    bottom_right = (
        as_point(roi_bottom_right) if roi_bottom_right is not None
        else Point2D(scalar_slice.columns - 1, scalar_slice.rows - 1)
    )
    x0, x1, y0, y1 = _clamped_box(scalar_slice, top_left.x, bottom_right.x, top_left.y, bottom_right.y)
    if x1 < x0 or y1 < y0:
        raise EmptyResultError("Histogram ROI contains no pixels")

    values = np.sort(pixels[y0:y1 + 1, x0:x1 + 1].ravel())
    n = values.size
    bin_count = config.histogram_bins

    min_value, max_value = float(values[0]), float(values[-1])
    bin_width = (max_value - min_value) / bin_count
    if bin_width > 0:
        indices = np.minimum(((values - min_value) / bin_width).astype(np.int64), bin_count - 1)
    else:
        indices = np.zeros(n, dtype=np.int64)
    bins = np.bincount(indices, minlength=bin_count)

    mean = float(values.mean())
    logging.debug(f"Histogram over {n} pixels, range [{min_value}, {max_value}]")

    return HistogramResult(
        bins=tuple(int(b) for b in bins),
        bin_width=bin_width,
        min_value=min_value,
        max_value=max_value,
        mean=mean,
        std_dev=float(np.sqrt(np.mean((values - mean) ** 2))),
        median=float(values[n // 2]),
        percentiles=tuple(float(values[min(n - 1, int(n * p))]) for p in config.histogram_percentiles),
    )
