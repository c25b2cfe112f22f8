"""
Volumetric Measurements

Volume from per-slice contours and left ventricular function derived
from end-diastolic / end-systolic volumes.
"""

from typing import Optional, Sequence
import logging

from config import DEFAULT_MEASUREMENT, MeasurementConfig
from core.errors import DimensionMismatchError, EmptyInputError, EmptyResultError
from loaders.slice_loader import ScalarSlice
from .geometry import as_polygon, shoelace_area
from .types import CardiacResult, VolumeResult


def volume_from_contours(slices: Sequence[ScalarSlice], contours: Sequence[Sequence]) -> VolumeResult:
    """
    Sum of per-slice contour areas times slice thickness.

    Spacing and thickness are taken from the first slice. An empty contour
    contributes nothing, so slices without the structure can be passed
    through.

    Args:
        slices: Slices the contours were drawn on, one per contour
        contours: One polygon per slice, in pixel coordinates

    Returns:
        VolumeResult in mm³, mL and cm³

    Raises:
        EmptyInputError: If no slices are given
        DimensionMismatchError: If slice and contour counts differ
        InvalidPolygonError: If a non-empty contour has fewer than 3 points
    """
    if len(slices) == 0:
        raise EmptyInputError("No slices given for volume calculation")
    if len(slices) != len(contours):
        raise DimensionMismatchError(
            f"Number of slices ({len(slices)}) must match number of contours ({len(contours)})"
        )

    first = slices[0]
    area_pixels = sum(shoelace_area(as_polygon(c)) for c in contours if len(c) > 0)
    volume_mm3 = area_pixels * first.pixel_spacing_x * first.pixel_spacing_y * first.slice_thickness

    return VolumeResult(
        volume_pixels=area_pixels,
        volume_mm3=volume_mm3,
        volume_ml=volume_mm3 / 1000.0,
        volume_cm3=volume_mm3 / 1000.0,
        slice_count=len(slices),
        slice_thickness=first.slice_thickness,
    )


def ejection_fraction(edv_ml: float, esv_ml: float,
                      heart_rate_bpm: Optional[float] = None,
                      epicardial_ml: Optional[float] = None,
                      config: Optional[MeasurementConfig] = None) -> CardiacResult:
    """
    Stroke volume, ejection fraction and, when inputs allow, cardiac
    output and myocardial mass from ventricular volumes.

    Raises:
        EmptyResultError: If the end-diastolic volume is zero
    """
    config = config or DEFAULT_MEASUREMENT
    if edv_ml == 0:
        raise EmptyResultError("End-diastolic volume is zero; ejection fraction undefined")

    stroke_volume = edv_ml - esv_ml
    cardiac_output = stroke_volume * heart_rate_bpm / 1000.0 if heart_rate_bpm is not None else None
    mass = (
        (epicardial_ml - edv_ml) * config.myocardial_density_g_per_ml
        if epicardial_ml is not None else None
    )

    return CardiacResult(
        edv_ml=edv_ml,
        esv_ml=esv_ml,
        stroke_volume_ml=stroke_volume,
        ejection_fraction_percent=stroke_volume / edv_ml * 100.0,
        cardiac_output_lpm=cardiac_output,
        myocardial_mass_g=mass,
    )


def cardiac_function(
    ed_slices: Sequence[ScalarSlice],
    es_slices: Sequence[ScalarSlice],
    ed_contours: Sequence[Sequence],
    es_contours: Sequence[Sequence],
    heart_rate_bpm: Optional[float] = None,
    ed_epicardial_contours: Optional[Sequence[Sequence]] = None,
    config: Optional[MeasurementConfig] = None
) -> CardiacResult:
    """
    Left ventricular function from endocardial contours at end-diastole and
    end-systole.

    Args:
        ed_slices: End-diastolic slices
        es_slices: End-systolic slices
        ed_contours: Endocardial contours, one per end-diastolic slice
        es_contours: Endocardial contours, one per end-systolic slice
        heart_rate_bpm: Heart rate for cardiac output (L/min)
        ed_epicardial_contours: Epicardial contours on the end-diastolic
            slices for myocardial mass, (epicardial - endocardial) * density
        config: Measurement constants (uses defaults if None)

    Returns:
        CardiacResult
    """
    edv = volume_from_contours(ed_slices, ed_contours).volume_ml
    esv = volume_from_contours(es_slices, es_contours).volume_ml
    epicardial = (
        volume_from_contours(ed_slices, ed_epicardial_contours).volume_ml
        if ed_epicardial_contours is not None else None
    )

    result = ejection_fraction(edv, esv, heart_rate_bpm, epicardial, config)
    logging.info(
        f"Cardiac function: EDV={result.edv_ml:.1f} mL, ESV={result.esv_ml:.1f} mL, "
        f"EF={result.ejection_fraction_percent:.1f}%"
    )
    return result
