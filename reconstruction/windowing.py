"""
Windowing Core

Maps scalar intensities to displayable 8-bit grayscale. Every 2D raster
producer goes through these functions.
"""

from typing import Optional
import numpy as np

from config import DEFAULT_DISPLAY, DisplayConfig
from core.errors import InvalidWindowError
from .types import VOLUME_DTYPE, WindowLevel


def to_display(
    values,
    window_center: float,
    window_width: float,
    invert: bool = False
) -> np.ndarray:
    """
    Apply windowing to convert physical values to display range [0, 255].

    Values at or below the lower window edge map to 0, values at or above
    the upper edge map to 255, everything between is interpolated linearly
    and truncated.

    Args:
        values: Scalar or array of rescaled values
        window_center: Center of the window
        window_width: Width of the window (must be > 0)
        invert: Output 255 - value

    Returns:
        uint8 array (0-d for scalar input)
    """
    if not window_width > 0:
        raise InvalidWindowError(f"Window width must be positive, got {window_width}")

    values = np.asarray(values, dtype=np.float64)
    lower = window_center - window_width / 2
    upper = window_center + window_width / 2

    scaled = (values - lower) / window_width * 255.0
    display = np.where(values <= lower, 0.0, np.where(values >= upper, 255.0, scaled))
    display = np.clip(display, 0.0, 255.0).astype(np.uint8)

    if invert:
        display = 255 - display
    return display


def apply_window(values, window: WindowLevel, invert: bool = False) -> np.ndarray:
    """Window an array with a WindowLevel."""
    return to_display(values, window.center, window.width, invert)


def normalize(values, window: WindowLevel) -> np.ndarray:
    """Position of each value inside the window, clamped to [0, 1]."""
    values = np.asarray(values, dtype=np.float64)
    return np.clip((values - window.lower) / window.width, 0.0, 1.0)


def resolve_window(
    center: Optional[float],
    width: Optional[float],
    fallback_center: float,
    fallback_width: float
) -> WindowLevel:
    """Pick explicit values first, then the fallback for whatever is missing."""
    return WindowLevel(
        center=fallback_center if center is None else center,
        width=fallback_width if width is None else width,
    )


def slice_window(
    scalar_slice,
    window: Optional[WindowLevel] = None,
    display: DisplayConfig = DEFAULT_DISPLAY
) -> WindowLevel:
    """Window for a single image: override, then header, then image defaults."""
    if window is not None:
        return window
    return resolve_window(
        scalar_slice.window_center,
        scalar_slice.window_width,
        display.image_window_center,
        display.image_window_width,
    )


def window_slice(
    scalar_slice,
    window: Optional[WindowLevel] = None,
    invert: bool = False,
    dtype=VOLUME_DTYPE,
    display: DisplayConfig = DEFAULT_DISPLAY
) -> np.ndarray:
    """
    Render one slice for display.

    Colour (RGB/YBR) slices bypass windowing and are returned as a copy of
    their channels. Scalar slices are rescaled then windowed.

    Args:
        scalar_slice: ScalarSlice to render
        window: Override window (defaults to the slice header, then 128/256)
        invert: Invert the grayscale output
        dtype: Precision of the rescale step, matches volume assembly by default

    Returns:
        (rows, columns) uint8 raster, or (rows, columns, 3) for colour input
    """
    if scalar_slice.is_color:
        return np.array(scalar_slice.pixels, dtype=np.uint8, copy=True)

    window = slice_window(scalar_slice, window, display)
    return apply_window(scalar_slice.rescaled(dtype), window, invert)
