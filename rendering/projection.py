"""
Projection Engine

Maximum, minimum and average intensity projections over a sub-range of the
volume along a plane normal.
"""

from typing import Optional
import numpy as np

from reconstruction.types import Plane, ProjectionRange, ProjectionType, WindowLevel
from reconstruction.volume import ScalarVolume
from reconstruction.windowing import apply_window
from .mpr import oriented_stack


def compute_projection(
    volume: ScalarVolume,
    projection_type: ProjectionType,
    plane: Plane,
    projection_range: ProjectionRange
) -> np.ndarray:
    """
    Reduce the clamped range to one plane of physical values.

    Raises:
        InvalidRangeError: If the range is empty after clamping
    """
    clamped = projection_range.clamp(volume.axis_length(plane))
    stack = oriented_stack(volume, plane, clamped.start_index, clamped.end_index + 1)

    if projection_type == ProjectionType.MAXIMUM:
        return stack.max(axis=0)
    if projection_type == ProjectionType.MINIMUM:
        return stack.min(axis=0)
    return stack.mean(axis=0, dtype=np.float64)


def project(
    volume: ScalarVolume,
    projection_type: ProjectionType,
    plane: Plane,
    projection_range: ProjectionRange,
    window: Optional[WindowLevel] = None
) -> np.ndarray:
    """
    Render a MIP / MinIP / average projection.

    Output dimensions follow the same plane conventions as the reformatter.
    """
    window = window or volume.default_window
    projection = compute_projection(volume, projection_type, plane, projection_range)
    return apply_window(projection, window)
