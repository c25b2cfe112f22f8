import numpy as np
import pytest

from core.errors import DimensionMismatchError, EmptyInputError
from reconstruction.types import Plane, WindowLevel
from reconstruction.volume import assemble_volume, get_volume_info
from tests.conftest import COLUMNS, DEPTH, ROWS


def test_assemble_shape_and_values(ct_stack, ct_volume):
    assert ct_volume.shape == (DEPTH, ROWS, COLUMNS)
    assert (ct_volume.width, ct_volume.height, ct_volume.depth) == (COLUMNS, ROWS, DEPTH)
    for z, s in enumerate(ct_stack):
        np.testing.assert_array_equal(ct_volume.data[z], s.rescaled(np.float32))


def test_voxel_spacing_from_first_slice(ct_volume):
    assert ct_volume.voxel_spacing == (0.5, 0.75, 2.5)


def test_axis_lengths(ct_volume):
    assert ct_volume.axis_length(Plane.AXIAL) == DEPTH
    assert ct_volume.axis_length(Plane.SAGITTAL) == COLUMNS
    assert ct_volume.axis_length(Plane.CORONAL) == ROWS


def test_default_window_fallback(ct_volume):
    assert ct_volume.default_window == WindowLevel(40, 400)


def test_window_from_header_and_override(make_slice):
    slices = [make_slice(np.zeros((2, 2)), window_center=500, window_width=2000)]
    assert assemble_volume(slices).default_window == WindowLevel(500, 2000)
    assert assemble_volume(slices, window_center=10, window_width=20).default_window == WindowLevel(10, 20)


def test_volume_is_read_only(ct_volume):
    with pytest.raises(ValueError):
        ct_volume.data[0, 0, 0] = 1


def test_mismatched_dimensions(make_slice):
    slices = [make_slice(np.zeros((4, 4))), make_slice(np.zeros((4, 5)))]
    with pytest.raises(DimensionMismatchError):
        assemble_volume(slices)


def test_color_slices_rejected(make_slice, color_slice):
    with pytest.raises(DimensionMismatchError):
        assemble_volume([make_slice(np.zeros((4, 4))), color_slice])


def test_empty_input():
    with pytest.raises(EmptyInputError):
        assemble_volume([])


def test_volume_info(shuffled_stack):
    info = get_volume_info(shuffled_stack)
    assert (info.width, info.height, info.depth) == (COLUMNS, ROWS, DEPTH)
    assert info.pixel_spacing_x == 0.5
    assert info.pixel_spacing_y == 0.75
    assert info.slice_thickness == 2.5
    assert info.volume_center == (COLUMNS / 2, ROWS / 2, DEPTH / 2)
    assert info.voxel_dimensions == (0.5, 0.75, 2.5)
