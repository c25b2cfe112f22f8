"""
Imaging Errors

Typed failures raised by the reconstruction, rendering and measurement
engine. All of them derive from ImagingError so callers can catch the
whole family at once.
"""


class ImagingError(Exception):
    """Base class for all engine failures."""


class EmptyInputError(ImagingError, ValueError):
    """No slices, points or landmarks were given."""


class DimensionMismatchError(ImagingError, ValueError):
    """Slices (or slice/contour lists) do not share the expected shape."""


class InvalidRangeError(ImagingError, ValueError):
    """Projection range is empty after clamping to the volume bounds."""


class InvalidPathError(ImagingError, ValueError):
    """Centerline has fewer than 2 points or zero length."""


class InvalidPolygonError(ImagingError, ValueError):
    """Polygon has fewer than 3 points."""


class InvalidWindowError(ImagingError, ValueError):
    """Window width is not strictly positive."""


class DegenerateGeometryError(ImagingError, ValueError):
    """Geometry collapses to a point (e.g. a zero-length angle ray)."""


class OutOfBoundsError(ImagingError, IndexError):
    """Sample point lies outside the slice or volume extent."""


class EmptyResultError(ImagingError):
    """Region contains zero sampled pixels, statistics are undefined."""
