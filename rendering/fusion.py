"""
Fusion Blender

Blends a functional overlay (PET, SPECT) onto an anatomical base image
through a colour map.
"""

import numpy as np

from core.errors import DimensionMismatchError
from loaders.slice_loader import ScalarSlice
from reconstruction.lookup_tables import ColorMapName, get_color_map
from reconstruction.types import FusionParams
from reconstruction.windowing import apply_window, normalize


def _resample_nearest(values: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Nearest-neighbour resample to (rows, columns) by resolution ratio."""
    src_rows, src_cols = values.shape
    ys = np.clip((np.arange(rows) * src_rows / rows).astype(np.int64), 0, src_rows - 1)
    xs = np.clip((np.arange(columns) * src_cols / columns).astype(np.int64), 0, src_cols - 1)
    return values[ys[:, None], xs[None, :]]


def fuse(base: ScalarSlice, overlay: ScalarSlice, params: FusionParams) -> np.ndarray:
    """
    Render a fused image at base resolution.

    out = base * (1 - alpha) + colour * alpha, alpha = opacity * normalized
    overlay. With thresholding enabled, pixels whose rescaled overlay value
    lies outside [threshold_min, threshold_max] show the base only.

    Args:
        base: Anatomical slice
        overlay: Functional slice (any resolution)
        params: Windows, colour map, opacity and threshold

    Returns:
        (rows, columns, 4) uint8 RGBA raster with opaque alpha
    """
    for name, s in (("base", base), ("overlay", overlay)):
        if s.is_color:
            raise DimensionMismatchError(f"Fusion {name} image must be single-channel")

    base_gray = apply_window(base.rescaled(), params.base_window).astype(np.float64)
    overlay_values = _resample_nearest(overlay.rescaled(), base.rows, base.columns)

    overlay_norm = normalize(overlay_values, params.overlay_window)
    color_map = get_color_map(params.color_map, fallback=ColorMapName.GRAYSCALE)
    colors = color_map(overlay_norm).astype(np.float64)

    alpha = (params.overlay_opacity * overlay_norm)[..., None]
    blended = base_gray[..., None] * (1.0 - alpha) + colors * alpha

    if params.enable_threshold:
        outside = (overlay_values < params.threshold_min) | (overlay_values > params.threshold_max)
        blended[outside] = base_gray[outside][:, None]

    rgba = np.empty((base.rows, base.columns, 4), dtype=np.uint8)
    rgba[..., :3] = np.clip(blended, 0, 255).astype(np.uint8)
    rgba[..., 3] = 255
    return rgba
