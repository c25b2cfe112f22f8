"""
Loaders Package

Contains slice loading strategies and the location based slice sorter.
"""

from .slice_loader import (
    ScalarSlice,
    InMemorySliceSource,
    sort_slices,
    load_slices,
)
from .dicom_loader import (
    DicomSliceSource,
    load_dicom_series,
    SUPPORTED_EXTENSIONS,
)

__all__ = [
    'ScalarSlice',
    'InMemorySliceSource',
    'sort_slices',
    'load_slices',
    'DicomSliceSource',
    'load_dicom_series',
    'SUPPORTED_EXTENSIONS',
]
