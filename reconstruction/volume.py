"""
Scalar Volume Data Structure

Defines the dense 3D grid built from an ordered stack of slices, and the
assembler that builds it.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import numpy as np

from config import DEFAULT_DISPLAY, DisplayConfig
from core.errors import DimensionMismatchError, EmptyInputError
from loaders.slice_loader import ScalarSlice, sort_slices
from .types import VOLUME_DTYPE, Plane, WindowLevel
from .windowing import resolve_window


@dataclass(frozen=True, eq=False)
class ScalarVolume:
    """
    Rescaled scalar volume with metadata.

    Attributes:
        data: 3D numpy array of physical values (Z, Y, X), read-only
        voxel_spacing: (x, y, z) spacing in mm
        window_center: Default window center for renders
        window_width: Default window width for renders
    """
    data: np.ndarray  # Shape: (depth, height, width)
    voxel_spacing: Tuple[float, float, float]
    window_center: float
    window_width: float

    def __post_init__(self):
        view = np.asarray(self.data).view()
        view.setflags(write=False)
        object.__setattr__(self, "data", view)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.data.shape

    @property
    def width(self) -> int:
        return self.data.shape[2]

    @property
    def height(self) -> int:
        return self.data.shape[1]

    @property
    def depth(self) -> int:
        return self.data.shape[0]

    def axis_length(self, plane: Plane) -> int:
        """Number of slices along the normal of the given plane."""
        if plane == Plane.SAGITTAL:
            return self.width
        if plane == Plane.CORONAL:
            return self.height
        return self.depth

    @property
    def default_window(self) -> WindowLevel:
        """Window used when a render call gives no override."""
        return WindowLevel(self.window_center, self.window_width)


@dataclass(frozen=True)
class VolumeInfo:
    """Geometry summary of a slice stack."""
    width: int
    height: int
    depth: int
    pixel_spacing_x: float
    pixel_spacing_y: float
    slice_thickness: float
    volume_center: Tuple[float, float, float]
    voxel_dimensions: Tuple[float, float, float]


def _check_dimensions(slices: Sequence[ScalarSlice]) -> Tuple[int, int]:
    first = slices[0]
    for index, s in enumerate(slices):
        if s.is_color:
            raise DimensionMismatchError(
                f"Slice {index} has {s.samples_per_pixel} samples per pixel; "
                f"volumes need single-channel slices"
            )
        if (s.rows, s.columns) != (first.rows, first.columns):
            raise DimensionMismatchError(
                f"Slice {index} is {s.rows}x{s.columns}, "
                f"expected {first.rows}x{first.columns}"
            )
    return first.rows, first.columns


def assemble_volume(
    slices: Sequence[ScalarSlice],
    window_center: Optional[float] = None,
    window_width: Optional[float] = None,
    display: DisplayConfig = DEFAULT_DISPLAY
) -> ScalarVolume:
    """
    Build a ScalarVolume from slices that are already in stacking order.

    Each slice is rescaled with its own slope/intercept while copied into
    its depth layer. Spacing and default window come from the first slice.

    Args:
        slices: Ordered slices (see loaders.sort_slices)
        window_center: Override for the default window center
        window_width: Override for the default window width
        display: Fallback window when neither override nor header is set

    Returns:
        ScalarVolume of shape (len(slices), rows, columns)
    """
    slices = list(slices)
    if not slices:
        raise EmptyInputError("No slices provided")

    rows, columns = _check_dimensions(slices)
    first = slices[0]

    data = np.empty((len(slices), rows, columns), dtype=VOLUME_DTYPE)
    for z, s in enumerate(slices):
        data[z] = s.rescaled(VOLUME_DTYPE)

    window = resolve_window(
        window_center if window_center is not None else first.window_center,
        window_width if window_width is not None else first.window_width,
        display.volume_window_center,
        display.volume_window_width,
    )

    logging.debug(f"Assembled volume {data.shape} (Z, Y, X)")

    return ScalarVolume(
        data=data,
        voxel_spacing=(first.pixel_spacing_x, first.pixel_spacing_y, first.slice_thickness),
        window_center=window.center,
        window_width=window.width,
    )


def get_volume_info(slices: Sequence[ScalarSlice]) -> VolumeInfo:
    """Describe the volume a slice stack would produce, without assembling it."""
    ordered = sort_slices(slices)
    rows, columns = _check_dimensions(ordered)
    first = ordered[0]
    depth = len(ordered)
    spacing = (first.pixel_spacing_x, first.pixel_spacing_y, first.slice_thickness)

    return VolumeInfo(
        width=columns,
        height=rows,
        depth=depth,
        pixel_spacing_x=first.pixel_spacing_x,
        pixel_spacing_y=first.pixel_spacing_y,
        slice_thickness=first.slice_thickness,
        volume_center=(columns / 2.0, rows / 2.0, depth / 2.0),
        voxel_dimensions=spacing,
    )
