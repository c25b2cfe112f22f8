"""Shared fixtures: small synthetic CT slices and stacks."""

import numpy as np
import pytest

from loaders.slice_loader import ScalarSlice
from reconstruction.volume import assemble_volume


ROWS, COLUMNS, DEPTH = 6, 8, 5


@pytest.fixture
def make_slice():
    """Factory for ScalarSlice values with CT style defaults."""
    def _make(pixels, **kwargs):
        kwargs.setdefault("rescale_slope", 1.0)
        kwargs.setdefault("rescale_intercept", -1024.0)
        kwargs.setdefault("modality", "CT")
        return ScalarSlice(pixels=np.asarray(pixels), **kwargs)
    return _make


@pytest.fixture
def ct_stack(make_slice):
    """DEPTH slices of ROWS x COLUMNS stored values, in ascending location order."""
    rng = np.random.default_rng(7)
    return [
        make_slice(
            rng.integers(0, 2048, size=(ROWS, COLUMNS)).astype(np.int16),
            slice_location=float(z) * 2.5,
            pixel_spacing_x=0.5,
            pixel_spacing_y=0.75,
            slice_thickness=2.5,
        )
        for z in range(DEPTH)
    ]


@pytest.fixture
def shuffled_stack(ct_stack):
    return [ct_stack[i] for i in (3, 0, 4, 1, 2)]


@pytest.fixture
def ct_volume(ct_stack):
    return assemble_volume(ct_stack)


@pytest.fixture
def gradient_slice(make_slice):
    """10 x 10 slice whose HU value is 10 * column, spacing 0.5 x 2.0 mm."""
    pixels = np.tile(np.arange(10, dtype=np.int16) * 10, (10, 1))
    return make_slice(
        pixels,
        rescale_intercept=0.0,
        pixel_spacing_x=0.5,
        pixel_spacing_y=2.0,
    )


@pytest.fixture
def color_slice(make_slice):
    pixels = np.zeros((4, 4, 3), dtype=np.uint8)
    pixels[..., 0] = 200
    return make_slice(pixels, photometric_interpretation="RGB", modality="US")
