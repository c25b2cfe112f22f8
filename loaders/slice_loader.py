"""
Slice Loader

Defines the ScalarSlice value type and the logic for ordering slices by
spatial location before volume assembly.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence
import logging
import time
import numpy as np

from core.base import BaseSliceSource
from core.errors import EmptyInputError


@dataclass(frozen=True, eq=False)
class ScalarSlice:
    """
    One decoded cross-sectional image with its calibration metadata.

    Attributes:
        pixels: Raw stored samples, (rows, columns) or (rows, columns, 3) for colour
        rescale_slope: Multiplier applied to raw samples
        rescale_intercept: Offset applied after the slope
        slice_location: Position along the stacking axis in mm
        pixel_spacing_x: Column spacing in mm/pixel
        pixel_spacing_y: Row spacing in mm/pixel
        slice_thickness: Slice thickness in mm
        window_center: Window center stored with the image, if any
        window_width: Window width stored with the image, if any
        modality: Acquisition modality (e.g. "CT", "PT"), if known
        photometric_interpretation: Colour model of the stored samples
    """
    pixels: np.ndarray
    rescale_slope: float = 1.0
    rescale_intercept: float = 0.0
    slice_location: float = 0.0
    pixel_spacing_x: float = 1.0
    pixel_spacing_y: float = 1.0
    slice_thickness: float = 1.0
    window_center: Optional[float] = None
    window_width: Optional[float] = None
    modality: Optional[str] = None
    photometric_interpretation: str = "MONOCHROME2"

    def __post_init__(self):
        # Read-only view so nothing downstream can mutate the loaded samples
        view = np.asarray(self.pixels).view()
        view.setflags(write=False)
        object.__setattr__(self, "pixels", view)

    @property
    def rows(self) -> int:
        return self.pixels.shape[0]

    @property
    def columns(self) -> int:
        return self.pixels.shape[1]

    @property
    def samples_per_pixel(self) -> int:
        return 1 if self.pixels.ndim == 2 else self.pixels.shape[2]

    @property
    def is_color(self) -> bool:
        """RGB/YBR slices bypass windowing and cannot be stacked into a scalar volume."""
        photometric = self.photometric_interpretation.upper()
        return self.samples_per_pixel == 3 or "RGB" in photometric or "YBR" in photometric

    @property
    def unit(self) -> str:
        """Unit of rescaled values: Hounsfield Units for CT, raw otherwise."""
        if self.modality is None or self.modality.upper() == "CT":
            return "HU"
        return "raw"

    def rescaled(self, dtype=np.float64) -> np.ndarray:
        """Physical values: raw * slope + intercept, computed in the given precision."""
        scalar = np.dtype(dtype).type
        return self.pixels.astype(dtype) * scalar(self.rescale_slope) + scalar(self.rescale_intercept)


class InMemorySliceSource(BaseSliceSource):
    """
    Slice source for buffers that are already decoded.

    Accepts either ready ScalarSlice objects or mappings holding a
    'pixels' array plus any ScalarSlice metadata fields.
    """

    def can_load(self, reference: Any) -> bool:
        return isinstance(reference, ScalarSlice) or (
            isinstance(reference, Mapping) and "pixels" in reference
        )

    def load(self, reference: Any) -> ScalarSlice:
        if isinstance(reference, ScalarSlice):
            return reference
        if isinstance(reference, Mapping):
            return ScalarSlice(**reference)
        raise TypeError(f"Unsupported slice reference: {type(reference).__name__}")


def sort_slices(slices: Iterable[ScalarSlice]) -> List[ScalarSlice]:
    """
    Order slices ascending by slice location.

    Slices that share a location keep their input order (stable sort).

    Raises:
        EmptyInputError: If no slices are given
    """
    slices = list(slices)
    if not slices:
        raise EmptyInputError("No slices provided")
    return sorted(slices, key=lambda s: s.slice_location)


def load_slices(
    references: Sequence[Any],
    source: Optional[BaseSliceSource] = None,
    max_workers: Optional[int] = None
) -> List[ScalarSlice]:
    """
    Load slices concurrently and return them sorted by location.

    Reads run in a thread pool; executor.map keeps input order so the
    subsequent stable sort stays deterministic.

    Args:
        references: Handles understood by the source
        source: Slice source (defaults to InMemorySliceSource)
        max_workers: Thread pool size (None lets the executor decide)

    Returns:
        Slices sorted ascending by slice location
    """
    if not references:
        raise EmptyInputError("No slices provided")

    source = source or InMemorySliceSource()
    start = time.perf_counter()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        loaded = list(executor.map(source.load, references))

    logging.info(
        f"Loaded {len(loaded)} slices via {source.name} "
        f"in {time.perf_counter() - start:.3f}s"
    )
    return sort_slices(loaded)
