import numpy as np
import pytest

from core.errors import DimensionMismatchError, EmptyInputError, EmptyResultError, InvalidPolygonError
from measurement.volumetric import cardiac_function, ejection_fraction, volume_from_contours


def _square(size: float, origin=(0.0, 0.0)):
    x, y = origin
    return [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]


@pytest.fixture
def slices(make_slice):
    return [
        make_slice(np.zeros((16, 16)), slice_location=float(z), pixel_spacing_x=0.5,
                   pixel_spacing_y=0.5, slice_thickness=2.0)
        for z in range(6)
    ]


def test_volume_from_contours(slices):
    result = volume_from_contours(slices[:3], [_square(4), _square(2), []])
    assert result.volume_pixels == pytest.approx(20.0)
    # 20 px * 0.25 mm² * 2 mm
    assert result.volume_mm3 == pytest.approx(10.0)
    assert result.volume_ml == pytest.approx(0.01)
    assert result.volume_cm3 == result.volume_ml
    assert result.slice_count == 3
    assert result.slice_thickness == 2.0


def test_volume_is_additive(slices):
    contours = [_square(s) for s in (2, 4, 6, 8, 3, 5)]
    whole = volume_from_contours(slices, contours).volume_mm3
    first = volume_from_contours(slices[:2], contours[:2]).volume_mm3
    rest = volume_from_contours(slices[2:], contours[2:]).volume_mm3
    assert first + rest == pytest.approx(whole)


def test_volume_errors(slices):
    with pytest.raises(EmptyInputError):
        volume_from_contours([], [])
    with pytest.raises(DimensionMismatchError):
        volume_from_contours(slices[:2], [_square(2)])
    with pytest.raises(InvalidPolygonError):
        volume_from_contours(slices[:1], [[(0, 0), (1, 1)]])


def test_ejection_fraction():
    result = ejection_fraction(120.0, 50.0)
    assert result.stroke_volume_ml == pytest.approx(70.0)
    assert result.ejection_fraction_percent == pytest.approx(58.333, abs=1e-3)
    assert result.cardiac_output_lpm is None
    assert result.myocardial_mass_g is None


def test_cardiac_output_and_mass():
    result = ejection_fraction(120.0, 50.0, heart_rate_bpm=60, epicardial_ml=220.0)
    assert result.cardiac_output_lpm == pytest.approx(4.2)
    assert result.myocardial_mass_g == pytest.approx(105.0)


def test_zero_edv_raises():
    with pytest.raises(EmptyResultError):
        ejection_fraction(0.0, 0.0)


def test_cardiac_function_from_contours(slices):
    ed = slices[:3]
    es = slices[3:]
    ed_contours = [_square(10)] * 3
    es_contours = [_square(5)] * 3
    epicardial = [_square(12)] * 3

    result = cardiac_function(ed, es, ed_contours, es_contours, heart_rate_bpm=70,
                              ed_epicardial_contours=epicardial)

    # 300 px * 0.25 * 2 = 150 mm³, 75 px * 0.25 * 2 = 37.5 mm³
    assert result.edv_ml == pytest.approx(0.15)
    assert result.esv_ml == pytest.approx(0.0375)
    assert result.ejection_fraction_percent == pytest.approx(75.0)
    assert result.cardiac_output_lpm == pytest.approx(0.1125 * 70 / 1000)
    # (432 - 300) px * 0.5 mm³ -> 0.066 mL
    assert result.myocardial_mass_g == pytest.approx(0.066 * 1.05)
