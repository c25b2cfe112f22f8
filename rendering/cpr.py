"""
Curved Planar Reformation

Samples a ribbon that follows an arbitrary centerline through the volume
and unrolls it into a 2D image.
"""

from typing import Optional, Sequence
import numpy as np

from config import DEFAULT_CPR, CPRConfig
from core.errors import InvalidPathError
from reconstruction.types import WindowLevel
from reconstruction.volume import ScalarVolume
from reconstruction.windowing import apply_window


def _perpendicular(tangent: np.ndarray, config: CPRConfig) -> np.ndarray:
    """In-plane direction across the ribbon at one centerline position."""
    perpendicular = np.cross(tangent, config.primary_up)
    if np.linalg.norm(perpendicular) < config.degenerate_threshold:
        perpendicular = np.cross(tangent, config.fallback_up)
    return perpendicular / np.linalg.norm(perpendicular)


def curved_reformat(
    volume: ScalarVolume,
    centerline: Sequence[Sequence[float]],
    window: Optional[WindowLevel] = None,
    config: Optional[CPRConfig] = None
) -> np.ndarray:
    """
    Render a curved planar reformation.

    Output width is the integer polyline length in voxels; output height is
    max(width, height) // 2 of the volume. Column x samples the centerline
    at arc length x and walks along the perpendicular, one voxel per row,
    centered on the path. Sample points truncate toward zero to voxel
    indices; samples outside the volume stay 0.

    Args:
        volume: Source volume
        centerline: Ordered (x, y, z) points in voxel coordinates
        window: Override window (defaults to the volume's)
        config: Up-vector settings (uses defaults if None)

    Returns:
        (out_height, out_width) uint8 raster

    Raises:
        InvalidPathError: Fewer than 2 points or zero total length
    """
    config = config or DEFAULT_CPR
    window = window or volume.default_window

    points = np.asarray(centerline, dtype=np.float64)
    if points.ndim != 2 or points.shape[0] < 2 or points.shape[1] != 3:
        raise InvalidPathError("Centerline needs at least 2 points in (x, y, z)")

    segments = np.diff(points, axis=0)
    segment_lengths = np.linalg.norm(segments, axis=1)
    out_w = int(segment_lengths.sum())
    if out_w < 1:
        raise InvalidPathError("Centerline has zero length")
    out_h = max(volume.width, volume.height) // 2

    data = volume.data
    depth, height, width = data.shape
    image = np.zeros((out_h, out_w), dtype=np.uint8)
    offsets = np.arange(out_h) - out_h / 2.0

    current_length = 0.0
    segment = 0
    for x in range(out_w):
        # Advance to the segment containing arc length x
        while segment < len(segments) and (
            segment_lengths[segment] == 0
            or current_length + segment_lengths[segment] < x
        ):
            current_length += segment_lengths[segment]
            segment += 1
        if segment >= len(segments):
            break

        seg_len = segment_lengths[segment]
        t = (x - current_length) / seg_len
        position = points[segment] + segments[segment] * t
        perpendicular = _perpendicular(segments[segment] / seg_len, config)

        samples = position + offsets[:, None] * perpendicular
        vx, vy, vz = np.trunc(samples).astype(np.int64).T
        inside = (
            (vx >= 0) & (vx < width)
            & (vy >= 0) & (vy < height)
            & (vz >= 0) & (vz < depth)
        )
        if inside.any():
            values = data[vz[inside], vy[inside], vx[inside]]
            image[inside, x] = apply_window(values, window)

    return image
