"""
Measurement Result Records

Immutable records returned by the measurement engine. Distances are in
pixels and millimetres, areas in pixels² and mm², volumes in mm³ and mL.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Tuple


class Point2D(NamedTuple):
    """Image-space point in pixel coordinates (x = column, y = row)."""
    x: float
    y: float


@dataclass(frozen=True)
class LengthResult:
    length_pixels: float
    length_mm: float
    length_cm: float
    start: Point2D
    end: Point2D
    pixel_spacing_x: float
    pixel_spacing_y: float


@dataclass(frozen=True)
class AngleResult:
    angle_degrees: float
    angle_radians: float
    vertex: Point2D
    point1: Point2D
    point2: Point2D


@dataclass(frozen=True)
class AreaResult:
    area_pixels: float
    area_mm2: float
    area_cm2: float
    perimeter_pixels: float
    perimeter_mm: float
    polygon: Tuple[Point2D, ...]


@dataclass(frozen=True)
class RoiStatistics:
    """
    Descriptive statistics of the rescaled values inside a region.

    Attributes:
        mean: Arithmetic mean
        std_dev: Population standard deviation
        min: Smallest value
        max: Largest value
        median: Upper median (sorted[n // 2])
        pixel_count: Number of sampled pixels
        area_mm2: Geometric area of the region outline, not pixel_count * spacing
        sum: Sum of values
        variance: Population variance
        unit: "HU" for CT, "raw" otherwise
    """
    mean: float
    std_dev: float
    min: float
    max: float
    median: float
    pixel_count: int
    area_mm2: float
    sum: float
    variance: float
    unit: str


@dataclass(frozen=True)
class HounsfieldResult:
    value: float
    x: int
    y: int
    rescale_slope: float
    rescale_intercept: float
    interpretation: str


@dataclass(frozen=True)
class VolumeResult:
    volume_pixels: float  # Sum of contour areas in pixels², before spacing
    volume_mm3: float
    volume_ml: float
    volume_cm3: float
    slice_count: int
    slice_thickness: float


@dataclass(frozen=True)
class CardiacResult:
    """
    Left ventricular function from end-diastolic and end-systolic contours.

    cardiac_output_lpm needs a heart rate and myocardial_mass_g needs
    epicardial contours; both are None otherwise.
    """
    edv_ml: float
    esv_ml: float
    stroke_volume_ml: float
    ejection_fraction_percent: float
    cardiac_output_lpm: Optional[float] = None
    myocardial_mass_g: Optional[float] = None


@dataclass(frozen=True)
class BoneDensityResult:
    """
    Bone density estimate from a freehand ROI.

    The BMD value is a linear placeholder mapping from mean HU, not a
    phantom calibrated measurement. It must not be used for diagnosis.
    """
    mean_hu: float
    bmd_estimate_mg_cm3: float
    t_score_category: str
    area_mm2: float
    roi_stats: RoiStatistics


@dataclass(frozen=True)
class LandmarkPoint:
    name: str
    position: Point2D


@dataclass(frozen=True)
class DistanceMeasurement:
    from_landmark: str
    to_landmark: str
    distance_mm: float
    distance_cm: float


@dataclass(frozen=True)
class ProfileLineResult:
    values: Tuple[float, ...]
    points: Tuple[Point2D, ...]
    mean: float
    std_dev: float
    min: float
    max: float
    length_mm: float


@dataclass(frozen=True)
class HistogramResult:
    bins: Tuple[int, ...]
    bin_width: float
    min_value: float
    max_value: float
    mean: float
    std_dev: float
    median: float
    percentiles: Tuple[float, ...] = field(default_factory=tuple)  # 5th, 25th, 50th, 75th, 95th
