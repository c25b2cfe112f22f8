"""
Volume Imaging Engine Configuration

Contains constants and default settings for reconstruction, rendering
and measurement.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


# Hounsfield Unit interpretation bands as (upper bound, label), checked in order.
# Reference: https://radiopaedia.org/articles/hounsfield-unit
HU_INTERPRETATION: Tuple[Tuple[float, str], ...] = (
    (-950.0, "Air"),
    (-50.0, "Lung/Fat"),
    (20.0, "Water/Fluid"),
    (70.0, "Soft Tissue"),
    (200.0, "Blood/Muscle"),
    (400.0, "Calcification"),
)
HU_INTERPRETATION_DEFAULT = "Bone"

# Window presets for CT viewing
WINDOW_PRESETS = {
    "bone": {"center": 500, "width": 2000},
    "soft_tissue": {"center": 40, "width": 400},
    "lung": {"center": -600, "width": 1500},
    "brain": {"center": 40, "width": 80},
    "liver": {"center": 60, "width": 160},
}


@dataclass
class DisplayConfig:
    """Fallback window/level when the source header carries none."""
    volume_window_center: float = 40.0  # Used by volume based renderers
    volume_window_width: float = 400.0
    image_window_center: float = 128.0  # Used by single image operations
    image_window_width: float = 256.0


@dataclass
class VolumeRenderConfig:
    """Configuration for the ray casting volume renderer."""
    output_width: int = 512
    output_height: int = 512
    termination_alpha: float = 0.99  # Stop marching once accumulated alpha reaches this
    max_workers: Optional[int] = None  # None lets the executor decide
    rows_per_block: int = 16


@dataclass
class EnhancementConfig:
    """Configuration for the single slice enhancement pipeline."""
    unsharp_sigma: float = 2.0  # Fixed blur sigma used by the unsharp mask
    rotation_order: int = 1  # Interpolation order for arbitrary rotations


@dataclass
class CPRConfig:
    """Configuration for curved planar reformation."""
    primary_up: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    fallback_up: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    degenerate_threshold: float = 0.1  # Switch up-vector below this cross product length


@dataclass
class BoneDensityConfig:
    """
    Placeholder HU to BMD mapping.

    Not calibrated against a phantom and not diagnostic grade.
    """
    hu_offset: float = 1000.0
    bmd_per_hu: float = 0.8  # mg/cm³ per HU
    normal_threshold_hu: float = 100.0
    osteopenia_threshold_hu: float = -100.0


@dataclass
class MeasurementConfig:
    """Configuration for the measurement engine."""
    histogram_bins: int = 256
    histogram_percentiles: Tuple[float, ...] = (0.05, 0.25, 0.50, 0.75, 0.95)
    myocardial_density_g_per_ml: float = 1.05
    bone_density: BoneDensityConfig = field(default_factory=BoneDensityConfig)


# Default configurations
DEFAULT_DISPLAY = DisplayConfig()
DEFAULT_VOLUME_RENDER = VolumeRenderConfig()
DEFAULT_ENHANCEMENT = EnhancementConfig()
DEFAULT_CPR = CPRConfig()
DEFAULT_MEASUREMENT = MeasurementConfig()
