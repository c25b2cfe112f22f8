"""
Planar Reformatter

Framework-agnostic extraction of axial, sagittal and coronal slices from a
ScalarVolume, using nearest-voxel sampling.
"""

import operator
from typing import Optional
import numpy as np

from reconstruction.types import Plane, WindowLevel
from reconstruction.volume import ScalarVolume
from reconstruction.windowing import apply_window


def oriented_stack(volume: ScalarVolume, plane: Plane, start: int, stop: int) -> np.ndarray:
    """
    View of the volume as a stack of output-oriented planes.

    Returns an array of shape (stop - start, out_rows, out_cols) where
    element [i] is the plane at normal index start + i:
    - Axial:    (width x height) images, fixed z
    - Sagittal: (depth x height) images, fixed x
    - Coronal:  (width x depth) images, fixed y
    """
    data = volume.data
    if plane == Plane.SAGITTAL:
        # [z, y, x] -> [x, y, z]
        return np.transpose(data[:, :, start:stop], (2, 1, 0))
    if plane == Plane.CORONAL:
        # [z, y, x] -> [y, z, x]
        return np.transpose(data[:, start:stop, :], (1, 0, 2))
    return data[start:stop]


def clamp_index(volume: ScalarVolume, plane: Plane, slice_index: int) -> int:
    """Clamp an integer slice index to the axis of the given plane."""
    index = operator.index(slice_index)
    return max(0, min(index, volume.axis_length(plane) - 1))


def extract_plane(volume: ScalarVolume, plane: Plane, slice_index: int) -> np.ndarray:
    """Physical values of one reformatted plane (no windowing)."""
    index = clamp_index(volume, plane, slice_index)
    return oriented_stack(volume, plane, index, index + 1)[0]


def reformat(
    volume: ScalarVolume,
    plane: Plane,
    slice_index: int,
    window: Optional[WindowLevel] = None
) -> np.ndarray:
    """
    Render one MPR slice.

    Args:
        volume: Source volume
        plane: Axial, sagittal or coronal
        slice_index: Integer index along the plane normal (clamped)
        window: Override window (defaults to the volume's)

    Returns:
        uint8 raster: axial (height, width), sagittal (height, depth),
        coronal (depth, width)
    """
    window = window or volume.default_window
    return apply_window(extract_plane(volume, plane, slice_index), window)
