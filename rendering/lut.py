"""
Lookup Table Display

Pseudo-colour rendering of a single slice through a named colour map.
"""

from typing import Optional
import numpy as np

from config import DEFAULT_DISPLAY, DisplayConfig
from core.errors import DimensionMismatchError
from loaders.slice_loader import ScalarSlice
from reconstruction.lookup_tables import ColorMapName, get_color_map
from reconstruction.types import WindowLevel
from reconstruction.windowing import normalize, slice_window


def apply_lut(
    scalar_slice: ScalarSlice,
    lut_name: str,
    window: Optional[WindowLevel] = None,
    display: DisplayConfig = DEFAULT_DISPLAY
) -> np.ndarray:
    """
    Render a slice through a colour map.

    Unknown LUT names fall back to 'hot'.

    Returns:
        (rows, columns, 3) uint8 RGB raster
    """
    if scalar_slice.is_color:
        raise DimensionMismatchError("LUT display requires a single-channel slice")

    window = slice_window(scalar_slice, window, display)
    color_map = get_color_map(lut_name, fallback=ColorMapName.HOT)
    return color_map(normalize(scalar_slice.rescaled(), window))
