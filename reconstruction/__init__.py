"""
Reconstruction package.

Contains the volume model and assembler, the windowing core, shared
render parameters, and the transfer function / colour map registries.
"""

from .types import (
    Plane,
    ProjectionType,
    WindowLevel,
    ProjectionRange,
    VolumeRenderParams,
    FusionParams,
    EnhancementParams,
    VOLUME_DTYPE,
)
from .windowing import to_display, apply_window, normalize, window_slice
from .volume import ScalarVolume, VolumeInfo, assemble_volume, get_volume_info
from .lookup_tables import (
    TransferFunctionName,
    ColorMapName,
    TRANSFER_FUNCTIONS,
    COLOR_MAPS,
    get_transfer_function,
    get_color_map,
)

__all__ = [
    "Plane",
    "ProjectionType",
    "WindowLevel",
    "ProjectionRange",
    "VolumeRenderParams",
    "FusionParams",
    "EnhancementParams",
    "VOLUME_DTYPE",
    "to_display",
    "apply_window",
    "normalize",
    "window_slice",
    "ScalarVolume",
    "VolumeInfo",
    "assemble_volume",
    "get_volume_info",
    "TransferFunctionName",
    "ColorMapName",
    "TRANSFER_FUNCTIONS",
    "COLOR_MAPS",
    "get_transfer_function",
    "get_color_map",
]
