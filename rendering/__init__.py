"""
Rendering Package

Contains the raster producers: reformats, projections, volume rendering,
curved reformation, fusion, enhancement and LUT display.
"""

from .mpr import reformat, extract_plane
from .projection import project, compute_projection
from .volume_renderer import VolumeRenderer, rotation_matrix, render_volume_image
from .cpr import curved_reformat
from .fusion import fuse
from .enhancement import enhance, gaussian_blur, gaussian_kernel, unsharp_mask, edge_enhance
from .lut import apply_lut
from .pipeline import (
    build_volume,
    render_reformat,
    render_projection,
    render_volume,
    render_cpr,
    render_fusion,
    render_enhanced,
    render_lut,
    get_pixel_values,
)

__all__ = [
    'reformat',
    'extract_plane',
    'project',
    'compute_projection',
    'VolumeRenderer',
    'rotation_matrix',
    'render_volume_image',
    'curved_reformat',
    'fuse',
    'enhance',
    'gaussian_blur',
    'gaussian_kernel',
    'unsharp_mask',
    'edge_enhance',
    'apply_lut',
    'build_volume',
    'render_reformat',
    'render_projection',
    'render_volume',
    'render_cpr',
    'render_fusion',
    'render_enhanced',
    'render_lut',
    'get_pixel_values',
]
