"""
Render Pipeline

Request-level entry points. Each call sorts its slices, assembles a fresh
volume, renders, and lets the volume go out of scope; nothing is cached
between calls.
"""

from typing import Optional, Sequence
import logging
import time
import numpy as np

from config import VolumeRenderConfig
from loaders.slice_loader import ScalarSlice, sort_slices
from reconstruction.types import (
    EnhancementParams,
    FusionParams,
    Plane,
    ProjectionRange,
    ProjectionType,
    VolumeRenderParams,
    WindowLevel,
)
from reconstruction.volume import ScalarVolume, assemble_volume
from .cpr import curved_reformat
from .enhancement import enhance
from .fusion import fuse
from .lut import apply_lut
from .mpr import reformat
from .projection import project
from .volume_renderer import VolumeRenderer


def build_volume(slices: Sequence[ScalarSlice]) -> ScalarVolume:
    """Sort by location and assemble."""
    start = time.perf_counter()
    volume = assemble_volume(sort_slices(slices))
    logging.info(
        f"Built volume {volume.width}x{volume.height}x{volume.depth} "
        f"in {time.perf_counter() - start:.3f}s"
    )
    return volume


def render_reformat(
    slices: Sequence[ScalarSlice],
    plane: Plane,
    slice_index: int,
    window: Optional[WindowLevel] = None
) -> np.ndarray:
    """MPR slice of the stack."""
    volume = build_volume(slices)
    logging.info(f"Rendering {plane.value} reformat at index {slice_index}")
    return reformat(volume, plane, slice_index, window)


def render_projection(
    slices: Sequence[ScalarSlice],
    projection_type: ProjectionType,
    plane: Plane,
    projection_range: ProjectionRange,
    window: Optional[WindowLevel] = None
) -> np.ndarray:
    """MIP / MinIP / average projection of the stack."""
    volume = build_volume(slices)
    logging.info(
        f"Rendering {projection_type.value} projection on {plane.value} "
        f"[{projection_range.start_index}, {projection_range.end_index}]"
    )
    return project(volume, projection_type, plane, projection_range, window)


def render_volume(
    slices: Sequence[ScalarSlice],
    params: VolumeRenderParams,
    config: Optional[VolumeRenderConfig] = None
) -> np.ndarray:
    """RGBA ray cast rendering of the stack."""
    volume = build_volume(slices)
    logging.info(
        f"Rendering volume: rotation=({params.rotation_x}, {params.rotation_y}, "
        f"{params.rotation_z}), tf={params.transfer_function}, opacity={params.opacity}"
    )
    return VolumeRenderer(config).render(volume, params)


def render_cpr(
    slices: Sequence[ScalarSlice],
    centerline: Sequence[Sequence[float]],
    window: Optional[WindowLevel] = None
) -> np.ndarray:
    """Curved planar reformation of the stack along a centerline."""
    volume = build_volume(slices)
    logging.info(f"Rendering CPR along {len(centerline)} centerline points")
    return curved_reformat(volume, centerline, window)


def render_fusion(
    base: ScalarSlice,
    overlay: ScalarSlice,
    params: FusionParams
) -> np.ndarray:
    """Colour-mapped overlay blended onto a base image."""
    logging.info(
        f"Rendering fusion {base.rows}x{base.columns} with overlay "
        f"{overlay.rows}x{overlay.columns}, map={params.color_map}"
    )
    return fuse(base, overlay, params)


def render_enhanced(scalar_slice: ScalarSlice, params: EnhancementParams) -> np.ndarray:
    """Enhancement pipeline on a single slice."""
    logging.info(f"Enhancing slice {scalar_slice.rows}x{scalar_slice.columns}")
    return enhance(scalar_slice, params)


def get_pixel_values(scalar_slice: ScalarSlice) -> np.ndarray:
    """Rescaled values of a slice (HU for CT)."""
    return scalar_slice.rescaled()


def render_lut(scalar_slice: ScalarSlice, lut_name: str) -> np.ndarray:
    """Pseudo-colour display of a single slice."""
    logging.info(f"Applying LUT '{lut_name}'")
    return apply_lut(scalar_slice, lut_name)
