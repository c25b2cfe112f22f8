import numpy as np
import pytest

from core.errors import InvalidWindowError
from reconstruction.types import WindowLevel
from reconstruction.windowing import normalize, slice_window, to_display, window_slice


@pytest.mark.parametrize("center,width", [(40, 400), (-600, 1500), (0, 1), (1000, 3)])
def test_to_display_monotonic_and_bounded(center, width):
    values = np.linspace(-3000, 3000, 4001)
    display = to_display(values, center, width)
    assert display.dtype == np.uint8
    assert np.all(np.diff(display.astype(int)) >= 0)

    inverted = to_display(values, center, width, invert=True)
    assert np.all(np.diff(inverted.astype(int)) <= 0)
    np.testing.assert_array_equal(inverted, 255 - display)


def test_to_display_window_edges():
    # 40/400 -> band [-160, 240]
    display = to_display(np.array([-1000, -160, 40, 240, 3000]), 40, 400)
    assert display.tolist() == [0, 0, 127, 255, 255]


def test_to_display_truncates():
    # (0 - (-128)) / 256 * 255 = 127.5
    assert int(to_display(0.0, 0, 256)) == 127


@pytest.mark.parametrize("width", [0, -10])
def test_non_positive_width_rejected(width):
    with pytest.raises(InvalidWindowError):
        to_display([0.0], 40, width)
    with pytest.raises(InvalidWindowError):
        WindowLevel(40, width)


def test_normalize_clamps():
    window = WindowLevel(0, 100)
    np.testing.assert_allclose(normalize([-100, -50, 0, 50, 100], window), [0, 0, 0.5, 1, 1])


def test_window_preset():
    window = WindowLevel.from_preset("Lung")
    assert (window.center, window.width) == (-600, 1500)


def test_slice_window_precedence(make_slice):
    plain = make_slice(np.zeros((2, 2)))
    with_header = make_slice(np.zeros((2, 2)), window_center=300, window_width=1500)

    assert slice_window(plain) == WindowLevel(128, 256)
    assert slice_window(with_header) == WindowLevel(300, 1500)
    assert slice_window(with_header, WindowLevel(1, 2)) == WindowLevel(1, 2)


def test_window_slice_rescales_before_windowing(make_slice):
    s = make_slice(np.array([[1024, 1064]], dtype=np.int16))
    # HU 0 and 40 under 40/400
    raster = window_slice(s, WindowLevel(40, 400))
    assert raster.tolist() == [[102, 127]]


def test_window_slice_color_passthrough(color_slice):
    raster = window_slice(color_slice)
    assert raster.shape == (4, 4, 3)
    assert raster.dtype == np.uint8
    assert np.all(raster[..., 0] == 200)
    assert not np.shares_memory(raster, color_slice.pixels)
