"""
Measurement Package

Contains length, angle, area, ROI, density, profile, histogram and
volumetric measurements on decoded slices.
"""

from .types import (
    Point2D,
    LengthResult,
    AngleResult,
    AreaResult,
    RoiStatistics,
    HounsfieldResult,
    VolumeResult,
    CardiacResult,
    BoneDensityResult,
    LandmarkPoint,
    DistanceMeasurement,
    ProfileLineResult,
    HistogramResult,
)
from .geometry import measure_length, measure_angle, measure_area, shoelace_area, points_in_polygon
from .roi import (
    compute_statistics,
    ellipse_roi,
    rectangle_roi,
    freehand_roi,
    interpret_hu,
    measure_hounsfield,
    measure_hounsfield_region,
    bone_density,
    landmark_distances,
    profile_line,
    histogram,
)
from .volumetric import volume_from_contours, ejection_fraction, cardiac_function

__all__ = [
    'Point2D',
    'LengthResult',
    'AngleResult',
    'AreaResult',
    'RoiStatistics',
    'HounsfieldResult',
    'VolumeResult',
    'CardiacResult',
    'BoneDensityResult',
    'LandmarkPoint',
    'DistanceMeasurement',
    'ProfileLineResult',
    'HistogramResult',
    'measure_length',
    'measure_angle',
    'measure_area',
    'shoelace_area',
    'points_in_polygon',
    'compute_statistics',
    'ellipse_roi',
    'rectangle_roi',
    'freehand_roi',
    'interpret_hu',
    'measure_hounsfield',
    'measure_hounsfield_region',
    'bone_density',
    'landmark_distances',
    'profile_line',
    'histogram',
    'volume_from_contours',
    'ejection_fraction',
    'cardiac_function',
]
