"""
Core Package

Contains the error hierarchy and abstract interfaces shared by the engine.
"""

from .base import BaseSliceSource
from .errors import (
    ImagingError,
    EmptyInputError,
    DimensionMismatchError,
    InvalidRangeError,
    InvalidPathError,
    InvalidPolygonError,
    InvalidWindowError,
    DegenerateGeometryError,
    OutOfBoundsError,
    EmptyResultError,
)

__all__ = [
    'BaseSliceSource',
    'ImagingError',
    'EmptyInputError',
    'DimensionMismatchError',
    'InvalidRangeError',
    'InvalidPathError',
    'InvalidPolygonError',
    'InvalidWindowError',
    'DegenerateGeometryError',
    'OutOfBoundsError',
    'EmptyResultError',
]
