"""
Planar Geometry Measurements

Length, angle and polygon area/perimeter on a single slice, plus the
polygon helpers shared with ROI statistics and volumetry.
"""

from typing import Sequence
import math
import numpy as np

from core.errors import DegenerateGeometryError, InvalidPolygonError
from loaders.slice_loader import ScalarSlice
from .types import AngleResult, AreaResult, LengthResult, Point2D


def as_point(point) -> Point2D:
    """Accept a Point2D, an (x, y) pair or anything with .x/.y attributes."""
    if isinstance(point, Point2D):
        return point
    if hasattr(point, "x") and hasattr(point, "y"):
        return Point2D(float(point.x), float(point.y))
    x, y = point
    return Point2D(float(x), float(y))


def as_polygon(points: Sequence, minimum: int = 3) -> np.ndarray:
    """
    Convert a point list to an (N, 2) float array of (x, y).

    Raises:
        InvalidPolygonError: If fewer than `minimum` points are given
    """
    polygon = np.array([as_point(p) for p in points], dtype=np.float64).reshape(-1, 2)
    if len(polygon) < minimum:
        raise InvalidPolygonError(f"Polygon needs at least {minimum} points, got {len(polygon)}")
    return polygon


def shoelace_area(polygon: np.ndarray) -> float:
    """Absolute polygon area in pixels²; independent of winding and start vertex."""
    x, y = polygon[:, 0], polygon[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    return float(abs(np.sum(x * y_next - x_next * y)) / 2.0)


def segment_lengths(polygon: np.ndarray, spacing_x: float = 1.0, spacing_y: float = 1.0) -> np.ndarray:
    """Length of every closing edge of the polygon, scaled per axis."""
    delta = np.roll(polygon, -1, axis=0) - polygon
    return np.hypot(delta[:, 0] * spacing_x, delta[:, 1] * spacing_y)


def points_in_polygon(xs: np.ndarray, ys: np.ndarray, polygon: np.ndarray) -> np.ndarray:
    """
    Even-odd ray casting test for many points at once.

    Args:
        xs: Point x coordinates (any shape)
        ys: Point y coordinates (same shape as xs)
        polygon: (N, 2) vertices

    Returns:
        Boolean mask with the shape of xs
    """
    inside = np.zeros(np.shape(xs), dtype=bool)
    px, py = polygon[:, 0], polygon[:, 1]
    j = len(polygon) - 1
    # Horizontal edges never satisfy the straddle test, so their NaN/inf is masked out
    with np.errstate(divide='ignore', invalid='ignore'):
        for i in range(len(polygon)):
            straddles = (py[i] > ys) != (py[j] > ys)
            x_cross = (px[j] - px[i]) * (ys - py[i]) / (py[j] - py[i]) + px[i]
            inside ^= straddles & (xs < x_cross)
            j = i
    return inside


def measure_length(scalar_slice: ScalarSlice, start, end) -> LengthResult:
    """
    Distance between two points.

    Physical length combines dx * spacing_x and dy * spacing_y, so
    anisotropic pixels are handled correctly.
    """
    start, end = as_point(start), as_point(end)
    sx, sy = scalar_slice.pixel_spacing_x, scalar_slice.pixel_spacing_y

    dx, dy = end.x - start.x, end.y - start.y
    length_pixels = math.hypot(dx, dy)
    length_mm = math.hypot(dx * sx, dy * sy)

    return LengthResult(
        length_pixels=length_pixels,
        length_mm=length_mm,
        length_cm=length_mm / 10.0,
        start=start,
        end=end,
        pixel_spacing_x=sx,
        pixel_spacing_y=sy,
    )


def measure_angle(vertex, point1, point2) -> AngleResult:
    """
    Angle at `vertex` between the rays towards point1 and point2.

    Raises:
        DegenerateGeometryError: If either ray has zero length
    """
    vertex, point1, point2 = as_point(vertex), as_point(point1), as_point(point2)
    v1 = np.array([point1.x - vertex.x, point1.y - vertex.y])
    v2 = np.array([point2.x - vertex.x, point2.y - vertex.y])

    magnitude = np.linalg.norm(v1) * np.linalg.norm(v2)
    if magnitude == 0:
        raise DegenerateGeometryError("Angle rays must have non-zero length")

    # Rounding can push collinear rays just outside acos's domain
    cosine = float(np.clip(np.dot(v1, v2) / magnitude, -1.0, 1.0))
    radians = math.acos(cosine)

    return AngleResult(
        angle_degrees=math.degrees(radians),
        angle_radians=radians,
        vertex=vertex,
        point1=point1,
        point2=point2,
    )


def measure_area(scalar_slice: ScalarSlice, polygon: Sequence) -> AreaResult:
    """
    Polygon area (shoelace) and perimeter (sum of closing edges).

    Args:
        scalar_slice: Slice providing the pixel spacing
        polygon: At least 3 points in pixel coordinates

    Returns:
        AreaResult in pixel and physical units

    Raises:
        InvalidPolygonError: If fewer than 3 points are given
    """
    vertices = as_polygon(polygon)
    sx, sy = scalar_slice.pixel_spacing_x, scalar_slice.pixel_spacing_y

    area_pixels = shoelace_area(vertices)
    area_mm2 = area_pixels * sx * sy

    return AreaResult(
        area_pixels=area_pixels,
        area_mm2=area_mm2,
        area_cm2=area_mm2 / 100.0,
        perimeter_pixels=float(segment_lengths(vertices).sum()),
        perimeter_mm=float(segment_lengths(vertices, sx, sy).sum()),
        polygon=tuple(Point2D(float(x), float(y)) for x, y in vertices),
    )
