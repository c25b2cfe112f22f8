"""
Reconstruction Types and Parameters

Enums and parameter records shared by the renderers.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from core.errors import InvalidRangeError, InvalidWindowError

# Precision of assembled volumes; single slice rendering uses the same
VOLUME_DTYPE = np.float32


class Plane(Enum):
    """Cardinal reformat planes."""
    AXIAL = "axial"
    SAGITTAL = "sagittal"
    CORONAL = "coronal"


class ProjectionType(Enum):
    """Per-ray reductions for intensity projections."""
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    AVERAGE = "average"


@dataclass(frozen=True)
class WindowLevel:
    """Linear contrast mapping of a visible intensity band onto [0, 255]."""
    center: float
    width: float

    def __post_init__(self):
        if not self.width > 0:
            raise InvalidWindowError(f"Window width must be positive, got {self.width}")

    @property
    def lower(self) -> float:
        return self.center - self.width / 2

    @property
    def upper(self) -> float:
        return self.center + self.width / 2

    @classmethod
    def from_preset(cls, name: str) -> "WindowLevel":
        """Build a window from a named preset in config.WINDOW_PRESETS."""
        from config import WINDOW_PRESETS
        preset = WINDOW_PRESETS[name.lower()]
        return cls(center=preset["center"], width=preset["width"])


@dataclass(frozen=True)
class ProjectionRange:
    """Inclusive index range along the projection axis."""
    start_index: int
    end_index: int

    def clamp(self, axis_length: int) -> "ProjectionRange":
        """
        Clamp to [0, axis_length - 1].

        Raises:
            InvalidRangeError: If the range is empty after clamping
        """
        start = max(0, int(self.start_index))
        end = min(axis_length - 1, int(self.end_index))
        if start > end:
            raise InvalidRangeError(
                f"Projection range [{self.start_index}, {self.end_index}] is empty "
                f"for axis length {axis_length}"
            )
        return ProjectionRange(start, end)

    @property
    def count(self) -> int:
        return self.end_index - self.start_index + 1


@dataclass(frozen=True)
class VolumeRenderParams:
    """
    Parameters for ray cast volume rendering.

    Attributes:
        rotation_x: Rotation about X in degrees
        rotation_y: Rotation about Y in degrees
        rotation_z: Rotation about Z in degrees
        window: Intensity band normalized to [0, 1] before the transfer function
        transfer_function: Preset name (bone, skin, muscle, vessels, default)
        opacity: Global multiplier applied to transfer function alpha
        output_width: Raster width in pixels
        output_height: Raster height in pixels
    """
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    window: WindowLevel = WindowLevel(40.0, 400.0)
    transfer_function: str = "default"
    opacity: float = 1.0
    output_width: int = 512
    output_height: int = 512


@dataclass(frozen=True)
class FusionParams:
    """
    Parameters for blending a functional overlay onto an anatomical base.

    Attributes:
        base_window: Window applied to the base image
        overlay_window: Window applied to the overlay image
        color_map: Colour map preset used for the overlay
        overlay_opacity: Maximum overlay alpha
        enable_threshold: Only blend overlay values inside [threshold_min, threshold_max]
        threshold_min: Lower rescaled overlay value
        threshold_max: Upper rescaled overlay value
    """
    base_window: WindowLevel
    overlay_window: WindowLevel
    color_map: str = "hot"
    overlay_opacity: float = 0.5
    enable_threshold: bool = False
    threshold_min: float = 0.0
    threshold_max: float = 0.0


@dataclass(frozen=True)
class EnhancementParams:
    """Toggles and strengths for the enhancement pipeline."""
    noise_reduction: bool = False
    noise_reduction_strength: float = 1.0  # Gaussian sigma
    sharpen: bool = False
    sharpen_amount: float = 1.0
    edge_enhancement: bool = False
    edge_enhancement_strength: float = 0.1
    smooth: bool = False
    smooth_amount: float = 1.0  # Gaussian sigma
    brightness: float = 0.0
    contrast: float = 0.0
    gamma: float = 1.0
    invert: bool = False
    rotation: float = 0.0  # Degrees, clockwise
    flip_horizontal: bool = False
    flip_vertical: bool = False
