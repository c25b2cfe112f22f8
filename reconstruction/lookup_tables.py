"""
Lookup Tables

Transfer functions (intensity -> RGBA) for volume rendering and colour maps
(intensity -> RGB) for fusion and LUT display. Both registries are built
once at import time and exposed read-only.

All functions take normalized intensities in [0, 1] as numpy arrays.
"""

from enum import Enum
from types import MappingProxyType
from typing import Callable, Tuple, Union
import logging
import numpy as np


TransferFunction = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]]
ColorMap = Callable[[np.ndarray], np.ndarray]


class TransferFunctionName(Enum):
    """Volume rendering presets."""
    BONE = "bone"
    SKIN = "skin"
    MUSCLE = "muscle"
    VESSELS = "vessels"
    DEFAULT = "default"


class ColorMapName(Enum):
    """Colour map presets."""
    HOT = "hot"
    COOL = "cool"
    RAINBOW = "rainbow"
    BONE = "bone"
    CARDIAC = "cardiac"
    PET = "pet"
    GRAYSCALE = "grayscale"


# =========================================================================
# Transfer functions: return (r, g, b, a) as float arrays in [0, 1]
# =========================================================================

def _constant(v: np.ndarray, value: float) -> np.ndarray:
    return np.full_like(v, value, dtype=np.float64)


def _tf_bone(v):
    dense = v > 0.6
    return (
        np.where(dense, 1.0, v * 1.5),
        np.where(dense, 0.9, v * 1.3),
        np.where(dense, 0.7, v),
        np.where(v > 0.3, v, 0.0),
    )


def _tf_skin(v):
    alpha = np.where((v > 0.15) & (v < 0.25), 0.3, 0.0)
    return _constant(v, 1.0), _constant(v, 0.8), _constant(v, 0.6), alpha


def _tf_muscle(v):
    alpha = np.where((v > 0.2) & (v < 0.4), 0.4, 0.0)
    return _constant(v, 0.8), _constant(v, 0.3), _constant(v, 0.3), alpha


def _tf_vessels(v):
    return _constant(v, 1.0), _constant(v, 0.2), _constant(v, 0.2), np.where(v > 0.5, v, 0.0)


def _tf_default(v):
    v = np.asarray(v, dtype=np.float64)
    return v, v, v, v * 0.5


# =========================================================================
# Colour maps: return (..., 3) uint8 arrays
# =========================================================================

def _to_rgb(r, g, b) -> np.ndarray:
    """Stack channels, truncating to bytes."""
    channels = [np.clip(np.asarray(c, dtype=np.float64), 0, 255) for c in (r, g, b)]
    return np.stack(np.broadcast_arrays(*channels), axis=-1).astype(np.uint8)


def _cm_hot(v):
    return _to_rgb(v * 3 * 255, (v - 0.33) * 3 * 255, (v - 0.67) * 3 * 255)


def _cm_cool(v):
    return _to_rgb(v * 255, (1 - v) * 255, _constant(v, 255))


def _cm_rainbow(v):
    # HSL with s=1, l=0.5: chroma is 1 and the match value m is 0
    h = v * 300
    x = 1 - np.abs((h / 60) % 2 - 1)
    one = _constant(v, 1.0)
    zero = _constant(v, 0.0)
    sectors = [h < 60, h < 120, h < 180, h < 240, h < 300]
    r = np.select(sectors, [one, x, zero, zero, x], one)
    g = np.select(sectors, [x, one, one, x, zero], zero)
    b = np.select(sectors, [zero, zero, x, one, one], x)
    return _to_rgb(r * 255, g * 255, b * 255)


def _cm_bone(v):
    val = np.floor(v * 255)
    return _to_rgb(val, np.floor(val * 0.95), np.floor(val * 0.85))


def _cm_cardiac(v):
    return _to_rgb(v * 255, v * v * 255, _constant(v, 0))


def _cm_pet(v):
    bands = [v < 0.25, v < 0.5, v < 0.75]
    r = np.select(bands, [_constant(v, 0), (v - 0.25) * 4 * 255, _constant(v, 255)], 255)
    g = np.select(bands, [v * 4 * 255, _constant(v, 255), (0.75 - v) * 4 * 255], 0)
    b = np.select(bands, [v * 4 * 255, (0.5 - v) * 4 * 255, _constant(v, 0)], (v - 0.75) * 4 * 255)
    return _to_rgb(r, g, b)


def _cm_grayscale(v):
    gray = v * 255
    return _to_rgb(gray, gray, gray)


TRANSFER_FUNCTIONS = MappingProxyType({
    TransferFunctionName.BONE: _tf_bone,
    TransferFunctionName.SKIN: _tf_skin,
    TransferFunctionName.MUSCLE: _tf_muscle,
    TransferFunctionName.VESSELS: _tf_vessels,
    TransferFunctionName.DEFAULT: _tf_default,
})

COLOR_MAPS = MappingProxyType({
    ColorMapName.HOT: _cm_hot,
    ColorMapName.COOL: _cm_cool,
    ColorMapName.RAINBOW: _cm_rainbow,
    ColorMapName.BONE: _cm_bone,
    ColorMapName.CARDIAC: _cm_cardiac,
    ColorMapName.PET: _cm_pet,
    ColorMapName.GRAYSCALE: _cm_grayscale,
})


def get_transfer_function(
    name: Union[str, TransferFunctionName]
) -> TransferFunction:
    """
    Look up a transfer function by name.

    Unknown names fall back to the default ramp.
    """
    if isinstance(name, TransferFunctionName):
        return TRANSFER_FUNCTIONS[name]
    try:
        return TRANSFER_FUNCTIONS[TransferFunctionName(name.lower())]
    except ValueError:
        logging.warning(f"Unknown transfer function '{name}', using default")
        return TRANSFER_FUNCTIONS[TransferFunctionName.DEFAULT]


def get_color_map(
    name: Union[str, ColorMapName],
    fallback: ColorMapName = ColorMapName.HOT
) -> ColorMap:
    """
    Look up a colour map by name.

    Unknown names fall back to the given preset (hot by default).
    """
    if isinstance(name, ColorMapName):
        return COLOR_MAPS[name]
    try:
        return COLOR_MAPS[ColorMapName(name.lower())]
    except ValueError:
        logging.warning(f"Unknown colour map '{name}', using {fallback.value}")
        return COLOR_MAPS[fallback]
