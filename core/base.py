"""
Core Base Classes

Abstract interfaces that decouple the reconstruction algorithms from any
concrete file format. Renderers only ever see ScalarSlice values produced
by a slice source.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from loaders.slice_loader import ScalarSlice


class BaseSliceSource(ABC):
    """Abstract capability that turns a slice reference into a ScalarSlice."""

    @abstractmethod
    def load(self, reference: Any) -> "ScalarSlice":
        """
        Load one slice.

        Args:
            reference: File path, buffer or any source-specific handle

        Returns:
            ScalarSlice with pixel data and spacing/rescale metadata
        """
        pass

    def can_load(self, reference: Any) -> bool:
        """
        Check if this source can handle the given reference.

        Args:
            reference: Handle to check

        Returns:
            True if this source can handle the reference
        """
        return True

    @property
    def name(self) -> str:
        """Source name for logging."""
        return type(self).__name__
