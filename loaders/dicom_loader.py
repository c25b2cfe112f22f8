"""
DICOM Slice Loader

Reads DICOM files into ScalarSlice values using pydicom. This is the only
place in the engine that knows about DICOM tags.
"""

from pathlib import Path
from typing import List, Optional
import logging

try:
    import pydicom
    from pydicom.misc import is_dicom
    from pydicom.multival import MultiValue
    HAS_PYDICOM = True
except ImportError:
    HAS_PYDICOM = False

from core.base import BaseSliceSource
from core.errors import EmptyInputError
from .slice_loader import ScalarSlice, load_slices


SUPPORTED_EXTENSIONS = {'.dcm', '.dicom', '.ima', ''}


def _first_value(value, default: Optional[float]) -> Optional[float]:
    """Unwrap multi-valued tags (e.g. several window centers) to the first entry."""
    if value is None or value == "":
        return default
    if isinstance(value, (MultiValue, list, tuple)):
        if len(value) == 0:
            return default
        value = value[0]
    return float(value)


class DicomSliceSource(BaseSliceSource):
    """
    pydicom backed slice source.

    Pixel data must be decodable by pydicom's installed handlers; this
    source does not do any transfer syntax work of its own.
    """

    def __init__(self):
        if not HAS_PYDICOM:
            raise ImportError(
                "pydicom is required for DICOM loading. "
                "Install it with: pip install pydicom"
            )

    @property
    def name(self) -> str:
        return "DICOM (pydicom)"

    def can_load(self, reference) -> bool:
        path = Path(reference)
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            return False
        return is_dicom(str(path))

    def load(self, reference) -> ScalarSlice:
        path = Path(reference)
        try:
            ds = pydicom.dcmread(str(path))
            pixels = ds.pixel_array
        except Exception as e:
            logging.error(f"Failed to read DICOM slice {path}: {e}")
            raise

        # PixelSpacing is (row spacing, column spacing): [0] is y, [1] is x
        spacing = ds.get("PixelSpacing")
        spacing_y = _first_value(spacing[0], 1.0) if spacing else 1.0
        spacing_x = _first_value(spacing[1], spacing_y) if spacing and len(spacing) > 1 else spacing_y

        return ScalarSlice(
            pixels=pixels,
            rescale_slope=_first_value(ds.get("RescaleSlope"), 1.0),
            rescale_intercept=_first_value(ds.get("RescaleIntercept"), 0.0),
            slice_location=_first_value(ds.get("SliceLocation"), 0.0),
            pixel_spacing_x=spacing_x,
            pixel_spacing_y=spacing_y,
            slice_thickness=_first_value(ds.get("SliceThickness"), 1.0),
            window_center=_first_value(ds.get("WindowCenter"), None),
            window_width=_first_value(ds.get("WindowWidth"), None),
            modality=ds.get("Modality") or None,
            photometric_interpretation=str(ds.get("PhotometricInterpretation", "MONOCHROME2")),
        )


def load_dicom_series(directory, max_workers: Optional[int] = None) -> List[ScalarSlice]:
    """
    Load every DICOM file in a directory, sorted by slice location.

    Args:
        directory: Folder holding one series
        max_workers: Thread pool size for concurrent reads

    Returns:
        Sorted list of ScalarSlice
    """
    source = DicomSliceSource()
    files = [p for p in sorted(Path(directory).iterdir()) if source.can_load(p)]
    if not files:
        raise EmptyInputError(f"No DICOM files found in {directory}")
    logging.info(f"Found {len(files)} DICOM files in {directory}")
    return load_slices(files, source=source, max_workers=max_workers)
